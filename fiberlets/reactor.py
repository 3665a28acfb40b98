import asyncio
import bisect
import collections
import itertools
import logging
import time


__all__ = ["Reactor", "Mainloop", "AsyncioReactor"]

log = logging.getLogger("fiberlets.reactor")


class Reactor(object):
    """the two scheduling primitives the rest of fiberlets depends on

    any event loop can drive eventlets by implementing these two methods
    """
    def schedule_now(self, callback):
        """run a callback on a later tick of the loop

        callbacks registered during the same tick must run in the order they
        were registered, and never before the current call stack unwinds

        :param callback: a function taking no arguments
        :type callback: function
        """
        raise NotImplementedError()

    def schedule_after(self, secs, callback):
        """run a callback no earlier than a number of seconds from now

        :param secs: the delay in seconds
        :type secs: int or float
        :param callback: a function taking no arguments
        :type callback: function
        """
        raise NotImplementedError()


class Mainloop(Reactor):
    """a self-contained reactor with a ready queue and a timer list

    :param clock:
        the function used to read the current time (defaults to
        `time.monotonic`)
    :type clock: function
    """
    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self._ready = collections.deque()
        self._timers = []
        self._sequence = itertools.count()
        self._stopped = False

    def __repr__(self):
        return "<%s (%d ready, %d timers)>" % (
                type(self).__name__, len(self._ready), len(self._timers))

    def schedule_now(self, callback):
        self._ready.append(callback)

    def schedule_after(self, secs, callback):
        # the sequence number keeps equal deadlines in registration order and
        # stops the tuple comparison from ever reaching the callbacks
        bisect.insort(self._timers,
                (self.clock() + secs, next(self._sequence), callback))

    def pending(self):
        """the number of callbacks waiting to run, timed or not

        :returns: int
        """
        return len(self._ready) + len(self._timers)

    def _expired(self):
        index = bisect.bisect(self._timers, (self.clock(), float("inf")))
        expired = self._timers[:index]
        del self._timers[:index]
        return [triple[2] for triple in expired]

    def tick(self):
        """run a single iteration of the loop

        the callbacks that were ready when the tick started run first, then
        any timers that have come due. callbacks scheduled while the tick is
        running wait for the next one.

        if a callback raises, the rest of the batch goes back to the front of
        the ready queue and the exception propagates to the caller

        :returns: the number of callbacks that were run
        """
        batch = self._ready
        self._ready = collections.deque()
        batch.extend(self._expired())

        count = 0
        try:
            while batch:
                callback = batch.popleft()
                count += 1
                callback()
        finally:
            if batch:
                batch.extend(self._ready)
                self._ready = batch
        return count

    def run(self, timeout=None):
        """run ticks until stopped, out of work, or out of time

        :param timeout:
            the maximum number of seconds to run. with the default of
            ``None`` the loop returns as soon as there are no ready callbacks
            and no timers left. with a timeout it keeps waiting until the
            deadline even when idle
        :type timeout: int, float or None
        """
        deadline = None if timeout is None else self.clock() + timeout
        self._stopped = False

        while not self._stopped:
            now = self.clock()
            if deadline is not None and now >= deadline:
                break

            if not self._ready:
                if not self._timers and deadline is None:
                    break

                wake = self._timers[0][0] if self._timers else deadline
                if deadline is not None:
                    wake = min(wake, deadline)
                if wake > now:
                    time.sleep(wake - now)
                    continue

            self.tick()

    def run_for(self, secs):
        """run the loop for a set number of seconds

        :param secs: how long to run
        :type secs: int or float
        """
        self.run(timeout=secs)

    def stop(self):
        "make :meth:`run` return once the current tick completes"
        self._stopped = True


class AsyncioReactor(Reactor):
    """drive eventlets from an `asyncio` event loop

    :param loop:
        the loop to schedule onto. defaults to the running loop if there is
        one, otherwise a new loop is created
    :type loop: `asyncio.AbstractEventLoop`
    """
    def __init__(self, loop=None):
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = asyncio.new_event_loop()
                log.debug("created new event loop %r" % (loop,))
        self.loop = loop

    def __repr__(self):
        return "<%s (%r)>" % (type(self).__name__, self.loop)

    def schedule_now(self, callback):
        self.loop.call_soon(callback)

    def schedule_after(self, secs, callback):
        self.loop.call_later(secs, callback)
