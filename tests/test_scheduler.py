"""Tests for timers — manual clock, cancellation, step chains."""

import threading

import pytest


def test_manual_scheduler_fires_in_due_order():
    """advance should run callbacks in due-time order."""
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler()
    fired = []
    s.schedule(300, lambda: fired.append("b"))
    s.schedule(100, lambda: fired.append("a"))
    s.schedule(900, lambda: fired.append("c"))

    assert s.advance(500) == 2
    assert fired == ["a", "b"]
    assert s.now_ms() == 500


def test_manual_scheduler_clock_at_due_time_inside_callback():
    """A callback should see the clock at its own due time."""
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler(start_ms=1000)
    seen = []
    s.schedule(250, lambda: seen.append(s.now_ms()))
    s.advance(1000)
    assert seen == [1250]
    assert s.now_ms() == 2000


def test_cancelled_handle_never_fires():
    """A cancelled token's callback must not run."""
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler()
    fired = []
    h = s.schedule(100, lambda: fired.append(1))
    s.cancel(h)
    assert s.advance(1000) == 0
    assert fired == []
    assert h.cancelled and not h.live


def test_cancel_is_noop_for_none_and_fired():
    """cancel(None) and cancel of a fired handle should be harmless."""
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler()
    h = s.schedule(10, lambda: None)
    s.advance(10)
    s.cancel(None)
    s.cancel(h)
    assert h.fired and not h.cancelled


def test_timers_scheduled_by_callbacks_fire_within_window():
    """A timer scheduled inside advance() fires if it falls due in the window."""
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler()
    fired = []
    s.schedule(100, lambda: s.schedule(100, lambda: fired.append(s.now_ms())))
    s.advance(250)
    assert fired == [200]


def test_pending_and_run_until_idle():
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler()
    s.schedule(50, lambda: None)
    dead = s.schedule(20, lambda: None)
    s.cancel(dead)
    assert len(s.pending()) == 1
    assert s.run_until_idle() == 1
    assert s.pending() == []


def test_step_chain_runs_steps_then_done():
    """StepChain should run each action after its delay, then on_done."""
    from reactivity.scheduler import ManualScheduler, StepChain

    s = ManualScheduler()
    log = []
    chain = StepChain(
        s,
        [(100, lambda: log.append(("a", s.now_ms()))), (50, lambda: log.append(("b", s.now_ms())))],
        on_done=lambda: log.append(("done", s.now_ms())),
    ).start()

    s.advance(1000)
    assert log == [("a", 100), ("b", 150), ("done", 150)]
    assert chain.finished
    assert chain.pending_handle is None


def test_step_chain_cancel_between_steps():
    """No action runs after cancel(), and on_done is never called."""
    from reactivity.scheduler import ManualScheduler, StepChain

    s = ManualScheduler()
    log = []
    chain = StepChain(s, [(100, lambda: log.append("a")), (100, lambda: log.append("b"))],
                      on_done=lambda: log.append("done")).start()
    s.advance(150)
    chain.cancel()
    s.advance(1000)
    assert log == ["a"]
    assert not chain.finished


def test_step_chain_cancelled_by_its_own_action():
    """An action that cancels the chain stops it right there."""
    from reactivity.scheduler import ManualScheduler, StepChain

    s = ManualScheduler()
    log = []
    chain = None

    def stop():
        log.append("stop")
        chain.cancel()

    chain = StepChain(s, [(10, stop), (10, lambda: log.append("after"))]).start()
    s.advance(100)
    assert log == ["stop"]
    assert s.pending() == []


def test_thread_scheduler_fires_and_cancels():
    """ThreadScheduler runs real timers; cancelled ones stay silent."""
    from reactivity.scheduler import ThreadScheduler

    s = ThreadScheduler()
    done = threading.Event()
    fired = []
    cancelled = s.schedule(10, lambda: fired.append("cancelled"))
    s.cancel(cancelled)
    s.schedule(20, lambda: (fired.append("ok"), done.set()))

    assert done.wait(2.0)
    assert fired == ["ok"]


def test_every_repeats_until_cancelled():
    """every() fires once per interval and stays silent after cancel()."""
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler()
    seen = []
    ticker = s.every(50, lambda: seen.append(s.now_ms()))
    s.advance(175)
    assert seen == [50, 100, 150]
    assert ticker.ticks == 3
    assert len(s.pending()) == 1

    ticker.cancel()
    s.advance(1000)
    assert seen == [50, 100, 150]
    assert s.pending() == []
    assert not ticker.live


def test_every_cancelled_by_its_own_callback():
    from reactivity.scheduler import ManualScheduler

    s = ManualScheduler()
    ticker = None

    def tick():
        if ticker.ticks == 2:
            ticker.cancel()

    ticker = s.every(10, tick)
    s.advance(100)
    assert ticker.ticks == 2
    assert s.pending() == []


@pytest.mark.parametrize("interval", [0, -5])
def test_every_rejects_non_positive_interval(interval):
    from reactivity.scheduler import ManualScheduler

    with pytest.raises(ValueError):
        ManualScheduler().every(interval, lambda: None)
