import logging
import sys

import greenlet

from fiberlets import scheduler


__all__ = ["Eventlet", "DeadEventlet"]

log = logging.getLogger("fiberlets.eventlet")


class DeadEventlet(RuntimeError):
    """Exception raised when trying to :meth:`resume<Eventlet.resume>` an
    eventlet whose work has already returned or raised
    """


class _Fiber(greenlet.greenlet):
    # the owning Eventlet, so the running one can be found from getcurrent()
    eventlet = None


class Eventlet(object):
    """a cooperative thread of control

    wraps a function in a greenlet that only starts running when it is first
    :meth:`resumed<resume>`, either directly or by the reactor after
    :meth:`spawn` or :meth:`call_after`

    :param work: the function the eventlet should run
    :type work: function
    :param args: any positional arguments for the function
    :param kwargs: any keyword arguments for the function
    """
    def __init__(self, work, *args, **kwargs):
        self._work = work
        self._args = args
        self._kwargs = kwargs
        self._fiber = _Fiber(self._run)
        self._fiber.eventlet = self

        #: whatever the work function returned, once it has
        self.value = None

        #: the exception the work function raised, if it did
        self.exception = None

    def __repr__(self):
        if self._fiber.dead:
            status = "dead"
        elif greenlet.getcurrent() is self._fiber:
            status = "running"
        elif self._fiber:
            status = "suspended"
        else:
            status = "initial"
        name = getattr(self._work, "__name__", repr(self._work))
        return "<%s (%s, %s)>" % (type(self).__name__, name, status)

    def _run(self, values):
        try:
            self.value = self._work(*self._args, **self._kwargs)
        except Exception:
            klass, exc, tb = sys.exc_info()
            self.exception = exc
            scheduler.handle_exception(klass, exc, tb, coro=self)
            del klass, exc, tb
            if scheduler.state.reraise_errors:
                raise
        else:
            log.debug("%r finished" % (self,))

    @classmethod
    def spawn(cls, work, *args, **kwargs):
        """create an eventlet and have the reactor start it on its next tick

        nothing in ``work`` runs before this method returns

        :param work: the function the new eventlet should run
        :type work: function

        any further positional and keyword arguments are passed to ``work``

        :returns: the new :class:`Eventlet`
        """
        eventlet = cls(work, *args, **kwargs)
        scheduler.schedule_now(eventlet.resume)
        log.debug("spawned %r" % (eventlet,))
        return eventlet

    @classmethod
    def call_after(cls, secs, work, *args, **kwargs):
        """create an eventlet and have the reactor start it after a delay

        :param secs: the number of seconds to wait before starting it
        :type secs: int or float
        :param work: the function the new eventlet should run
        :type work: function

        any further positional and keyword arguments are passed to ``work``

        :returns: the new :class:`Eventlet`
        """
        eventlet = cls(work, *args, **kwargs)
        scheduler.schedule_after(secs, eventlet.resume)
        return eventlet

    @classmethod
    def current(cls):
        """the eventlet that is running right now

        :returns:
            an :class:`Eventlet`, or ``None`` if called outside of any eventlet
        """
        return getattr(greenlet.getcurrent(), "eventlet", None)

    @classmethod
    def _require_current(cls):
        current = cls.current()
        if current is None:
            raise RuntimeError("only an eventlet can suspend itself")
        return current

    @classmethod
    def suspend(cls):
        """suspend the current eventlet until something resumes it

        nothing is scheduled to wake it up, so some other code must hold on
        to the eventlet and call its :meth:`resume`

        :raises: `RuntimeError` if called outside of an eventlet

        :returns:
            the values passed to :meth:`resume`: ``None`` for no values, the
            value itself for one, and a tuple for more than one
        """
        return cls._require_current()._yield()

    @classmethod
    def pause_for(cls, secs):
        """suspend the current eventlet for a number of seconds

        the wake-up timer cannot be cancelled, so the eventlet must not also
        be waiting on anything else

        :param secs: the number of seconds to suspend for
        :type secs: int or float

        :raises: `RuntimeError` if called outside of an eventlet

        :returns: the values passed to :meth:`resume`, as with :meth:`suspend`
        """
        current = cls._require_current()
        scheduler.schedule_after(secs, current.resume)
        return current._yield()

    @classmethod
    def sleep(cls, duration=None):
        """suspend the current eventlet, with or without a timer to wake it

        a positive ``duration`` is the same as :meth:`pause_for`. ``None``,
        zero, or a negative number is the same as :meth:`suspend`.

        :param duration: the number of seconds to suspend for
        :type duration: int, float or None
        """
        if duration is not None and duration > 0:
            return cls.pause_for(duration)
        return cls.suspend()

    def _yield(self):
        values = self._fiber.parent.switch()
        if not values:
            return None
        if len(values) == 1:
            return values[0]
        return values

    def is_alive(self):
        """indicates whether the eventlet's work has yet to finish

        :returns:
            ``True`` from creation until the work function returns or raises,
            ``False`` from then on
        """
        return not self._fiber.dead

    def resume(self, *values):
        """switch into the eventlet right away

        control comes back to the caller when the eventlet next suspends or
        finishes

        :param values:
            delivered to the eventlet as the return value of the call that
            suspended it

        :raises:
            :class:`DeadEventlet` if the eventlet has already finished, or
            `RuntimeError` if an eventlet tries to resume itself
        """
        if self._fiber.dead:
            raise DeadEventlet("cannot resume finished eventlet %r" % (self,))

        current = greenlet.getcurrent()
        if current is self._fiber:
            raise RuntimeError("an eventlet cannot resume itself")

        self._fiber.parent = current
        self._fiber.switch(values)
