'''one Event waking up a crowd of workers, then being reused

also shows the asyncio adapter: the same eventlets run on an asyncio loop
'''

import asyncio

import fiberlets


def worker(number, start, results):
    command = start.wait()
    results.append("worker %d: %s" % (number, command))

def main():
    loop = asyncio.new_event_loop()
    fiberlets.set_reactor(fiberlets.AsyncioReactor(loop))

    start = fiberlets.Event()
    results = []

    for number in range(5):
        fiberlets.spawn(worker, args=(number, start, results))
    fiberlets.call_after(0.05, start.send, args=("go",))

    loop.run_until_complete(asyncio.sleep(0.1))
    print("\n".join(results))

    # a sent event must be reset before it can be sent again
    start.reset()
    fiberlets.spawn(worker, args=(5, start, results))
    fiberlets.spawn(start.send, args=("go again",))

    loop.run_until_complete(asyncio.sleep(0.05))
    print(results[-1])
    loop.close()


if __name__ == '__main__':
    main()
