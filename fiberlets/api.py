from fiberlets.eventlet import Eventlet


__all__ = ["spawn", "call_after", "sleep", "pause_for", "suspend", "current"]


def spawn(target=None, args=(), kwargs=None):
    """run a function in a new eventlet, starting on the reactor's next tick

    :param target: the function to run
    :type target: function
    :param args: positional arguments for the function
    :type args: tuple
    :param kwargs: keyword arguments for the function
    :type kwargs: dict or None

    :returns: the new :class:`Eventlet<fiberlets.eventlet.Eventlet>`

    control returns to the caller immediately; no part of ``target`` runs
    before that. This function can also be used as a decorator, either
    preloading ``args`` and/or ``kwargs`` or not, in which case the decorated
    name is bound to the eventlet::

        @spawn
        def f():
            print('hello from f')

        @spawn(args=('world',))
        def f(name):
            print('hello %s' % name)
    """
    if target is None:
        def decorator(target):
            return spawn(target, args=args, kwargs=kwargs)
        return decorator
    return Eventlet.spawn(target, *args, **(kwargs or {}))

def call_after(secs, target=None, args=(), kwargs=None):
    """run a function in a new eventlet after a number of seconds

    :param secs: the number of seconds to wait before starting it
    :type secs: int or float
    :param target: the function to run
    :type target: function
    :param args: positional arguments for the function
    :type args: tuple
    :param kwargs: keyword arguments for the function
    :type kwargs: dict or None

    :returns: the new :class:`Eventlet<fiberlets.eventlet.Eventlet>`

    This function can also be used as a decorator::

        @call_after(30)
        def f():
            print('hello from f')
    """
    if target is None:
        def decorator(target):
            return call_after(secs, target, args=args, kwargs=kwargs)
        return decorator
    return Eventlet.call_after(secs, target, *args, **(kwargs or {}))

def sleep(duration=None):
    """suspend the current eventlet

    with a positive ``duration`` it wakes up again after that many seconds,
    otherwise it stays suspended until something resumes it

    :param duration: the number of seconds to sleep
    :type duration: int, float or None

    :returns: the values the eventlet was resumed with
    """
    return Eventlet.sleep(duration)

def pause_for(secs):
    """suspend the current eventlet for a number of seconds

    :param secs: the number of seconds to suspend for
    :type secs: int or float
    """
    return Eventlet.pause_for(secs)

def suspend():
    "suspend the current eventlet until something explicitly resumes it"
    return Eventlet.suspend()

def current():
    "the running :class:`Eventlet<fiberlets.eventlet.Eventlet>`, or ``None``"
    return Eventlet.current()
