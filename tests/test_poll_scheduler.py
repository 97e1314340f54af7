"""Tests for PollScheduler: fixed-interval ticks and synchronous cancellation."""

import pytest

from stream_viewer.app.poll_scheduler import PollScheduler
from stream_viewer.app.session_state import PollState, SessionStore
from tests.fakes import FakeTimerFactory


def _scheduler(interval_ms=5000):
    timers = FakeTimerFactory()
    store = SessionStore()
    ticks: list[int] = []
    scheduler = PollScheduler(timers, lambda: ticks.append(1), store, interval_ms)
    return scheduler, timers, store, ticks


def test_starts_idle():
    scheduler, timers, store, _ = _scheduler()
    assert scheduler.state is PollState.IDLE
    assert store.state.poll_state is PollState.IDLE
    assert timers.timers == []


def test_start_arms_timer_at_interval():
    scheduler, timers, store, ticks = _scheduler(2500)
    scheduler.start()
    assert scheduler.state is PollState.POLLING
    assert store.state.poll_state is PollState.POLLING
    assert store.state.interval_ms == 2500
    [timer] = timers.timers
    assert timer.interval_s == 2.5
    timer.fire()
    timer.fire()
    assert len(ticks) == 2


def test_stop_cancels_and_late_ticks_are_ignored():
    scheduler, timers, store, ticks = _scheduler()
    scheduler.start()
    [timer] = timers.timers
    scheduler.stop()
    assert timer.stopped
    assert store.state.poll_state is PollState.IDLE
    timer.fire()
    assert ticks == []


def test_restart_replaces_timer():
    scheduler, timers, _, ticks = _scheduler()
    scheduler.start()
    scheduler.start()
    old, new = timers.timers
    assert old.stopped and not new.stopped
    old.fire()
    assert ticks == []
    new.fire()
    assert ticks == [1]


def test_stop_when_idle_is_harmless():
    scheduler, timers, _, _ = _scheduler()
    scheduler.stop()
    assert timers.timers == []


@pytest.mark.parametrize("interval", [0, -100])
def test_non_positive_interval_rejected(interval):
    with pytest.raises(ValueError):
        _scheduler(interval)
