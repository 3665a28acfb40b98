'''two eventlets batting messages across channels

the rendezvous Channel hands each message over only when both sides are
present, so the players take strict turns. the AsyncChannel buffers, so the
same code lets a player talk to itself.
'''

import logging

import fiberlets


def player(name, channel, serve, rounds):
    for i in range(rounds):
        if serve:
            channel.send("%s %d" % (name, i))
            print("%s got %r" % (name, channel.receive()))
        else:
            print("%s got %r" % (name, channel.receive()))
            channel.send("%s %d" % (name, i))

def play(channel_class):
    channel = channel_class()
    ping = fiberlets.spawn(player, args=("ping", channel, True, 3))
    pong = fiberlets.spawn(player, args=("pong", channel, False, 3))

    fiberlets.get_reactor().run_for(0.1)

    # with an AsyncChannel the pinger answers itself and the ponger starves
    print("ping alive: %s, pong alive: %s" % (
        ping.is_alive(), pong.is_alive()))


if __name__ == '__main__':
    fiberlets.configure_logging(level=logging.DEBUG)
    play(fiberlets.Channel)
    play(fiberlets.AsyncChannel)
