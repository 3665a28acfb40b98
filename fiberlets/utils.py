import collections

from fiberlets import scheduler
from fiberlets.eventlet import Eventlet


__all__ = ["Channel", "AsyncChannel", "Event", "AlreadySent", "InvalidState"]

_NOT_SENT = object()


class AlreadySent(RuntimeError):
    """Exception raised by :meth:`Event.send` when the event already holds a
    result
    """


class InvalidState(RuntimeError):
    """Exception raised by :meth:`Event.reset` when the event was never sent
    """


class Channel(object):
    """a synchronous hand-off point between eventlets

    - an eventlet calling :meth:`send` is suspended until another calls
      :meth:`receive`
    - an eventlet calling :meth:`receive` is suspended until another calls
      :meth:`send`
    - once a send has been paired with a receive, the one that was waiting is
      rescheduled

    waiting senders and waiting receivers are both paired up most recent
    first. nothing detects two eventlets each waiting on the other.
    """
    def __init__(self):
        self._senders = []
        self._receivers = []

    @property
    def balance(self):
        """blocked senders minus blocked receivers

        positive when senders are waiting, negative when receivers are
        """
        return len(self._senders) - len(self._receivers)

    def send(self, message=None):
        """hand a message to a receiver, waiting for one if necessary

        .. note:: this method can block the current eventlet

        :param message: the object to send
        """
        if self._receivers:
            receiver = self._receivers.pop()
            scheduler.schedule_now(receiver.resume, args=(message,))
        else:
            self._senders.append((Eventlet._require_current(), message))
            Eventlet.suspend()

    def receive(self):
        """take a message from a sender, waiting for one if necessary

        .. note:: this method can block the current eventlet

        :returns: the object passed to :meth:`send`
        """
        if self._senders:
            sender, message = self._senders.pop()
            scheduler.schedule_now(sender.resume)
            return message

        self._receivers.append(Eventlet._require_current())
        return Eventlet.suspend()


class AsyncChannel(object):
    """a channel whose :meth:`send` never blocks

    messages sent with nobody waiting are buffered. both buffered messages
    and waiting receivers are served oldest first.
    """
    def __init__(self):
        self._queue = collections.deque()
        self._receivers = collections.deque()

    @property
    def balance(self):
        """buffered messages minus blocked receivers"""
        return len(self._queue) - len(self._receivers)

    def send(self, message=None):
        """deliver a message to the longest-waiting receiver, or buffer it

        :param message: the object to send
        """
        if self._receivers:
            receiver = self._receivers.popleft()
            scheduler.schedule_now(receiver.resume, args=(message,))
        else:
            self._queue.append(message)

    def receive(self):
        """take the oldest buffered message, waiting for one if there is none

        .. note:: this method can block the current eventlet

        :returns: the object passed to :meth:`send`
        """
        if self._queue:
            return self._queue.popleft()

        self._receivers.append(Eventlet._require_current())
        return Eventlet.suspend()


class Event(object):
    """a one-shot broadcast from one eventlet to any number of others

    events differ from channels in two ways:

    - calling :meth:`send` never suspends the sender
    - :meth:`send` can only be called once. :meth:`reset` prepares the event
      for another

    :meth:`wait` may be called any number of times and always produces the
    value that was sent, which makes events a good way to pass return values
    between eventlets
    """
    def __init__(self):
        self._result = _NOT_SENT
        self._waiters = []

    def ready(self):
        """indicates whether :meth:`wait` would return right away

        this never blocks, so it can be used to poll a collection of events
        and only :meth:`wait` on one that is ready

        :returns: ``True`` if the event has been sent, otherwise ``False``
        """
        return self._result is not _NOT_SENT

    def wait(self):
        """wait until another eventlet calls :meth:`send`

        .. note:: this method can block the current eventlet

        :returns: the value passed to :meth:`send`
        """
        if self._result is not _NOT_SENT:
            return self._result

        self._waiters.append(Eventlet._require_current())
        return Eventlet.suspend()

    def send(self, value=None):
        """store a result and wake everything waiting on the event

        :param value: the result every waiter receives

        :raises:
            :class:`AlreadySent` if the event was sent and not :meth:`reset`
        """
        if self._result is not _NOT_SENT:
            raise AlreadySent("event has already been sent")

        self._result = value
        for waiter in self._waiters:
            scheduler.schedule_now(waiter.resume, args=(value,))

    def reset(self):
        """clear the result so the event can be sent again

        :raises: :class:`InvalidState` if the event has not been sent
        """
        if self._result is _NOT_SENT:
            raise InvalidState("cannot reset an event that was never sent")

        self._result = _NOT_SENT
        self._waiters = []
