import functools
import logging
import weakref

from fiberlets import reactor


__all__ = ["get_reactor", "set_reactor", "schedule_now", "schedule_after",
        "global_exception_handler", "remove_global_exception_handler",
        "local_exception_handler", "remove_local_exception_handler",
        "handle_exception", "set_reraise_errors"]

log = logging.getLogger("fiberlets.scheduler")


state = type('FiberletsState', (), {})()

# the reactor everything gets scheduled onto, created on first use
state.reactor = None

# exception handlers, global and local
state.global_exception_handlers = []
state.local_exception_handlers = weakref.WeakKeyDictionary()

# whether exceptions in eventlet work propagate out of resume()
state.reraise_errors = False


def get_reactor():
    """the reactor that eventlets are currently being scheduled onto

    if none has been installed with :func:`set_reactor`, a
    :class:`Mainloop<fiberlets.reactor.Mainloop>` is created and installed

    :returns: a :class:`Reactor<fiberlets.reactor.Reactor>`
    """
    if state.reactor is None:
        state.reactor = reactor.Mainloop()
    return state.reactor

def set_reactor(new=None):
    """replace the reactor used for all scheduling

    callbacks already scheduled on the previous reactor stay there

    :param new:
        the reactor to install. the default of ``None`` installs a fresh
        :class:`Mainloop<fiberlets.reactor.Mainloop>`
    :type new: :class:`Reactor<fiberlets.reactor.Reactor>` or None

    :returns: the previously installed reactor, or ``None``
    """
    if new is None:
        new = reactor.Mainloop()
    if not (hasattr(new, "schedule_now") and hasattr(new, "schedule_after")):
        raise TypeError("reactors must provide schedule_now and schedule_after")
    old, state.reactor = state.reactor, new
    log.debug("installed reactor %r" % (new,))
    return old

def _bind(callback, args, kwargs):
    if args or kwargs:
        return functools.partial(callback, *args, **(kwargs or {}))
    return callback

def schedule_now(callback, args=(), kwargs=None):
    """have the reactor run a function on its next tick

    :param callback: the function to run
    :type callback: function
    :param args: positional arguments for the function
    :type args: tuple
    :param kwargs: keyword arguments for the function
    :type kwargs: dict or None
    """
    get_reactor().schedule_now(_bind(callback, args, kwargs))

def schedule_after(secs, callback, args=(), kwargs=None):
    """have the reactor run a function after a number of seconds

    :param secs: the minimum delay in seconds
    :type secs: int or float
    :param callback: the function to run
    :type callback: function
    :param args: positional arguments for the function
    :type args: tuple
    :param kwargs: keyword arguments for the function
    :type kwargs: dict or None
    """
    get_reactor().schedule_after(secs, _bind(callback, args, kwargs))


def handle_exception(klass, exc, tb, coro=None):
    """run all the registered exception handlers

    the first 3 arguments to this function match the output of
    ``sys.exc_info()``

    :param klass: the exception klass
    :type klass: type
    :param exc: the exception instance
    :type exc: Exception
    :param tb: the traceback object
    :type tb: Traceback
    :param coro:
        behave as though the exception occurred in this eventlet (defaults to
        the current eventlet)
    :type coro: :class:`Eventlet<fiberlets.eventlet.Eventlet>`

    exception handlers run would be all those added with
    :func:`global_exception_handler`, and any added for the relevant eventlet
    with :func:`local_exception_handler`. the exception is also logged to the
    ``fiberlets.scheduler`` logger.
    """
    if coro is None:
        coro = _current()

    log.error("uncaught exception in %r" % (coro,), exc_info=(klass, exc, tb))

    if coro is not None:
        replacement = []
        for weak in state.local_exception_handlers.get(coro, ()):
            func = weak()
            if func is None:
                continue

            try:
                func(klass, exc, tb)
            except Exception:
                continue

            replacement.append(weak)

        if replacement:
            state.local_exception_handlers[coro][:] = replacement
        else:
            state.local_exception_handlers.pop(coro, None)

    replacement = []
    for weak in state.global_exception_handlers:
        func = weak()
        if func is None:
            continue

        try:
            func(klass, exc, tb)
        except Exception:
            continue

        replacement.append(weak)

    state.global_exception_handlers[:] = replacement

def global_exception_handler(handler):
    """add a callback for when an exception goes uncaught in any eventlet

    :param handler:
        the callback function. must be a function taking 3 arguments:

        - ``klass`` the exception class
        - ``exc`` the exception instance
        - ``tb`` the traceback object
    :type handler: function

    Note also that the callback is only held by a weakref, so if all other refs
    to the function are lost it will stop handling eventlets' exceptions
    """
    if not callable(handler):
        raise TypeError("exception handlers must be callable")

    state.global_exception_handlers.append(weakref.ref(handler))

    return handler

def remove_global_exception_handler(handler):
    """remove a callback from the list of global exception handlers

    :param handler:
        the callback, previously added via :func:`global_exception_handler`,
        to remove
    :type handler: function

    :returns: bool, whether the handler was found (and therefore removed)
    """
    for i, cb in enumerate(state.global_exception_handlers):
        cb = cb()
        if cb is not None and cb is handler:
            state.global_exception_handlers.pop(i)
            return True
    return False

def local_exception_handler(handler=None, coro=None):
    """add a callback for when an exception occurs in a particular eventlet

    :param handler:
        the callback function, must be a function taking 3 arguments:

        - ``klass`` the exception class
        - ``exc`` the exception instance
        - ``tb`` the traceback object
    :type handler: function
    :param coro:
        the eventlet for which to apply the exception handler (defaults to the
        current eventlet)
    :type coro: :class:`Eventlet<fiberlets.eventlet.Eventlet>`

    :raises: `RuntimeError` if no eventlet was given and none is running
    """
    if handler is None:
        return lambda h: local_exception_handler(h, coro)

    if not callable(handler):
        raise TypeError("exception handlers must be callable")

    if coro is None:
        coro = _current()
        if coro is None:
            raise RuntimeError("not running inside an eventlet")

    state.local_exception_handlers.setdefault(coro, []).append(
            weakref.ref(handler))

    return handler

def remove_local_exception_handler(handler, coro=None):
    """remove a callback from the list of exception handlers for an eventlet

    :param handler: the callback to remove
    :type handler: function
    :param coro: the eventlet for which to remove the local handler
    :type coro: :class:`Eventlet<fiberlets.eventlet.Eventlet>`

    :returns: bool, whether the handler was found (and therefore removed)
    """
    if coro is None:
        coro = _current()
        if coro is None:
            return False

    for i, cb in enumerate(state.local_exception_handlers.get(coro, [])):
        cb = cb()
        if cb is not None and cb is handler:
            state.local_exception_handlers[coro].pop(i)
            return True
    return False

def set_reraise_errors(flag=True):
    """choose what happens to an exception that escapes an eventlet's work

    either way the exception is stored on the eventlet's ``exception``
    attribute and passed through :func:`handle_exception` first. by default it
    then stops there, so the reactor carries on. with this turned on it also
    propagates out of the :meth:`resume<fiberlets.eventlet.Eventlet.resume>`
    call that was running the eventlet, which for scheduled eventlets means
    out of the reactor's tick.

    :param flag: whether to re-raise (``True``) or not (``False``)
    :type flag: bool
    """
    state.reraise_errors = bool(flag)


def _current():
    from fiberlets import eventlet
    return eventlet.Eventlet.current()
