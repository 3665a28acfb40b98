import io
import logging
import unittest

import fiberlets
from fiberlets import Eventlet

from test_base import TESTING_TIMEOUT, StateClearingTestCase


class EventletTestCase(StateClearingTestCase):
    def test_alive_before_starting(self):
        eventlet = Eventlet(lambda: None)
        assert eventlet.is_alive()

    def test_not_alive_after_finishing(self):
        eventlet = Eventlet.spawn(lambda: None)
        assert eventlet.is_alive()

        self.reactor.tick()

        assert not eventlet.is_alive()

    def test_spawn_runs_later(self):
        l = []
        l.append("outer")
        Eventlet.spawn(l.append, "inner")
        l.append("outer")

        self.assertEqual(l, ["outer", "outer"])

        self.reactor.tick()

        self.assertEqual(l, ["outer", "outer", "inner"])

    def test_spawn_passes_arguments(self):
        l = []

        def f(a, b=None):
            l.append((a, b))

        Eventlet.spawn(f, 1, b=2)
        self.reactor.tick()

        self.assertEqual(l, [(1, 2)])

    def test_call_after(self):
        l = []
        eventlet = Eventlet.call_after(TESTING_TIMEOUT, l.append, 1)

        self.reactor.tick()
        assert not l
        assert eventlet.is_alive()

        self.reactor.run_for(TESTING_TIMEOUT * 2)

        self.assertEqual(l, [1])
        assert not eventlet.is_alive()

    def test_sleep_with_duration(self):
        eventlet = Eventlet.spawn(Eventlet.sleep, TESTING_TIMEOUT * 2)

        self.reactor.run_for(TESTING_TIMEOUT)
        assert eventlet.is_alive()

        self.reactor.run_for(TESTING_TIMEOUT * 3)
        assert not eventlet.is_alive()

    def test_sleep_without_duration_never_wakes(self):
        eventlet = Eventlet.spawn(Eventlet.sleep)

        self.reactor.run_for(TESTING_TIMEOUT)

        assert eventlet.is_alive()
        self.assertEqual(self.reactor.pending(), 0)

    def test_nonpositive_sleeps_never_wake(self):
        zero = Eventlet.spawn(Eventlet.sleep, 0)
        negative = Eventlet.spawn(Eventlet.sleep, -1)

        self.reactor.run_for(TESTING_TIMEOUT)

        assert zero.is_alive()
        assert negative.is_alive()

    def test_pause_for(self):
        l = []

        @Eventlet.spawn
        def eventlet():
            Eventlet.pause_for(TESTING_TIMEOUT)
            l.append(1)

        self.reactor.tick()
        assert not l

        self.reactor.run()

        self.assertEqual(l, [1])
        assert not eventlet.is_alive()

    def test_suspend_returns_resume_values(self):
        l = []

        def f():
            for i in range(3):
                l.append(Eventlet.suspend())

        eventlet = Eventlet(f)
        eventlet.resume()
        eventlet.resume()
        eventlet.resume(1)
        assert eventlet.is_alive()
        eventlet.resume(1, 2)

        self.assertEqual(l, [None, 1, (1, 2)])
        assert not eventlet.is_alive()

    def test_resume_with_tuple(self):
        l = []

        eventlet = Eventlet(lambda: l.append(Eventlet.suspend()))
        eventlet.resume()
        eventlet.resume(())

        self.assertEqual(l, [()])

    def test_resume_returns_to_resumer(self):
        l = []

        def inner():
            l.append("inner 1")
            Eventlet.suspend()
            l.append("inner 2")

        inner_eventlet = Eventlet(inner)

        def outer():
            l.append("outer 1")
            inner_eventlet.resume()
            l.append("outer 2")
            inner_eventlet.resume()
            l.append("outer 3")

        Eventlet(outer).resume()

        self.assertEqual(l, ["outer 1", "inner 1", "outer 2", "inner 2",
            "outer 3"])

    def test_resume_dead_raises(self):
        eventlet = Eventlet(lambda: None)
        eventlet.resume()

        self.assertRaises(fiberlets.DeadEventlet, eventlet.resume)

    def test_resume_self_raises(self):
        l = []

        def f():
            try:
                Eventlet.current().resume()
            except RuntimeError as exc:
                l.append(exc)

        Eventlet(f).resume()

        self.assertEqual(len(l), 1)

    def test_current(self):
        l = []
        eventlet = Eventlet.spawn(lambda: l.append(Eventlet.current()))

        self.reactor.tick()

        self.assertEqual(l, [eventlet])
        assert Eventlet.current() is None

    def test_suspend_outside_eventlet_raises(self):
        self.assertRaises(RuntimeError, Eventlet.suspend)
        self.assertRaises(RuntimeError, Eventlet.sleep, TESTING_TIMEOUT)

    def test_records_return_value(self):
        eventlet = Eventlet(lambda: 5)
        eventlet.resume()

        self.assertEqual(eventlet.value, 5)
        assert eventlet.exception is None

    def test_repr_status(self):
        eventlet = Eventlet(Eventlet.suspend)
        assert "initial" in repr(eventlet)

        eventlet.resume()
        assert "suspended" in repr(eventlet)

        eventlet.resume()
        assert "dead" in repr(eventlet)


class ExceptionHandlingTestCase(StateClearingTestCase):
    def raiser(self):
        raise ValueError("from the work")

    def test_exception_is_recorded(self):
        eventlet = Eventlet.spawn(self.raiser)

        self.reactor.tick()

        assert not eventlet.is_alive()
        assert isinstance(eventlet.exception, ValueError)

    def test_exception_is_logged(self):
        stream = io.StringIO()
        fiberlets.configure_logging(stream=stream, fmt="%(name)s %(message)s")
        log = logging.getLogger("fiberlets")
        try:
            Eventlet.spawn(self.raiser)
            self.reactor.tick()
        finally:
            for handler in log.handlers[:]:
                log.removeHandler(handler)
            log.setLevel(logging.NOTSET)

        output = stream.getvalue()
        assert "fiberlets.scheduler uncaught exception" in output, output
        assert "ValueError: from the work" in output, output

    def test_reactor_keeps_running(self):
        l = []
        Eventlet.spawn(self.raiser)
        Eventlet.spawn(l.append, 1)

        self.reactor.run()

        self.assertEqual(l, [1])

    def test_global_handler(self):
        l = []

        def handler(klass, exc, tb):
            l.append((klass, exc))

        fiberlets.global_exception_handler(handler)
        eventlet = Eventlet.spawn(self.raiser)
        self.reactor.tick()

        self.assertEqual(l, [(ValueError, eventlet.exception)])

    def test_local_handler(self):
        l = []

        def handler(klass, exc, tb):
            l.append(klass)

        failing = Eventlet.spawn(self.raiser)
        other = Eventlet.spawn(self.raiser)
        fiberlets.local_exception_handler(handler, coro=failing)

        self.reactor.tick()

        self.assertEqual(l, [ValueError])

    def test_local_handler_decorator_inside_eventlet(self):
        l = []

        def f():
            @fiberlets.local_exception_handler
            def handler(klass, exc, tb):
                l.append(klass)
            l.append(handler)
            raise ValueError()

        Eventlet.spawn(f)
        self.reactor.tick()

        self.assertEqual(l[1:], [ValueError])

    def test_remove_global_handler(self):
        l = []

        def handler(klass, exc, tb):
            l.append(klass)

        fiberlets.global_exception_handler(handler)
        assert fiberlets.remove_global_exception_handler(handler)
        assert not fiberlets.remove_global_exception_handler(handler)

        Eventlet.spawn(self.raiser)
        self.reactor.tick()

        assert not l

    def test_remove_local_handler(self):
        l = []

        def handler(klass, exc, tb):
            l.append(klass)

        eventlet = Eventlet.spawn(self.raiser)
        fiberlets.local_exception_handler(handler, coro=eventlet)
        assert fiberlets.remove_local_exception_handler(handler, eventlet)
        assert not fiberlets.remove_local_exception_handler(handler)

        self.reactor.tick()

        assert not l

    def test_failing_handler_is_dropped(self):
        l = []

        def bad_handler(klass, exc, tb):
            l.append("bad")
            raise RuntimeError()

        def good_handler(klass, exc, tb):
            l.append("good")

        fiberlets.global_exception_handler(bad_handler)
        fiberlets.global_exception_handler(good_handler)

        Eventlet.spawn(self.raiser)
        Eventlet.spawn(self.raiser)
        self.reactor.tick()

        self.assertEqual(l, ["bad", "good", "good"])

    def test_handlers_must_be_callable(self):
        self.assertRaises(TypeError, fiberlets.global_exception_handler, 1)
        self.assertRaises(TypeError, fiberlets.local_exception_handler, 1,
                Eventlet(lambda: None))

    def test_local_handler_outside_eventlet_raises(self):
        self.assertRaises(RuntimeError, fiberlets.local_exception_handler,
                lambda klass, exc, tb: None)

    def test_reraise_errors(self):
        fiberlets.set_reraise_errors()
        l = []
        eventlet = Eventlet.spawn(self.raiser)
        Eventlet.spawn(l.append, 1)

        self.assertRaises(ValueError, self.reactor.tick)
        assert not eventlet.is_alive()
        assert isinstance(eventlet.exception, ValueError)

        # the rest of the tick's callbacks are still waiting
        self.reactor.tick()
        self.assertEqual(l, [1])

    def test_reraise_from_direct_resume(self):
        fiberlets.set_reraise_errors(True)
        eventlet = Eventlet(self.raiser)

        self.assertRaises(ValueError, eventlet.resume)

        fiberlets.set_reraise_errors(False)
        eventlet = Eventlet(self.raiser)
        eventlet.resume()


if __name__ == '__main__':
    unittest.main()
