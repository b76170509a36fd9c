# tests/test_core/test_scheduler.py
"""Unit tests for the cooperative `TimerScheduler`."""

import logging

import pytest

from bufcycle.core.Scheduler import TimerScheduler
from tests.stubs import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> TimerScheduler:
    return TimerScheduler(clock)


def test_call_later_runs_once_when_due(scheduler: TimerScheduler, clock: FakeClock) -> None:
    calls: list[float] = []
    scheduler.call_later(2.0, lambda: calls.append(clock()))

    clock.advance(1.9)
    assert scheduler.run_due() == 0
    clock.advance(0.1)
    assert scheduler.run_due() == 1
    clock.advance(5)
    assert scheduler.run_due() == 0
    assert calls == [2.0]


def test_call_every_repeats_without_drift(scheduler: TimerScheduler, clock: FakeClock) -> None:
    calls: list[float] = []
    scheduler.call_every(1.0, lambda: calls.append(clock()))

    for _ in range(3):
        clock.advance(1.0)
        scheduler.run_due()

    assert calls == [1.0, 2.0, 3.0]


def test_late_repeating_timer_runs_once(scheduler: TimerScheduler, clock: FakeClock) -> None:
    calls: list[float] = []
    scheduler.call_every(1.0, lambda: calls.append(clock()))
    clock.advance(3.5)
    assert scheduler.run_due() == 1
    assert scheduler.next_due_in() == pytest.approx(1.0)


def test_cancelled_timers_do_not_run(scheduler: TimerScheduler, clock: FakeClock) -> None:
    calls: list[str] = []
    later = scheduler.call_later(1.0, lambda: calls.append("later"))
    every = scheduler.call_every(1.0, lambda: calls.append("every"))
    idle = scheduler.call_when_idle(lambda: calls.append("idle"))

    for handle in (later, every, idle):
        handle.cancel()
        handle.cancel()

    clock.advance(2.0)
    assert scheduler.run_due() == 0
    assert scheduler.run_idle() == 0
    assert calls == []
    assert scheduler.pending() == 0


@pytest.mark.parametrize("interval", [0, -1.0])
def test_call_every_rejects_non_positive_interval(scheduler: TimerScheduler, interval: float) -> None:
    with pytest.raises(ValueError):
        scheduler.call_every(interval, lambda: None)


def test_idle_callbacks_run_once_in_order(scheduler: TimerScheduler) -> None:
    calls: list[int] = []
    first = scheduler.call_when_idle(lambda: calls.append(1))
    scheduler.call_when_idle(lambda: calls.append(2))

    assert scheduler.run_idle() == 2
    assert scheduler.run_idle() == 0
    assert calls == [1, 2]
    assert first.cancelled


def test_idle_callback_scheduled_while_idle_waits_for_next_period(scheduler: TimerScheduler) -> None:
    calls: list[str] = []

    def rearm() -> None:
        calls.append("ran")
        scheduler.call_when_idle(rearm)

    scheduler.call_when_idle(rearm)
    scheduler.run_idle()
    assert calls == ["ran"]
    assert scheduler.pending() == 1
    scheduler.run_idle()
    assert calls == ["ran", "ran"]


def test_failing_callback_is_logged_and_others_still_run(
    scheduler: TimerScheduler, caplog: pytest.LogCaptureFixture
) -> None:
    calls: list[str] = []

    def boom() -> None:
        raise RuntimeError("boom")

    scheduler.call_when_idle(boom)
    scheduler.call_when_idle(lambda: calls.append("after"))

    with caplog.at_level(logging.ERROR):
        assert scheduler.run_idle() == 2

    assert calls == ["after"]
    assert "failed" in caplog.text


def test_next_due_in(scheduler: TimerScheduler, clock: FakeClock) -> None:
    assert scheduler.next_due_in() is None
    scheduler.call_later(5.0, lambda: None)
    scheduler.call_later(2.0, lambda: None)
    clock.advance(0.5)
    assert scheduler.next_due_in() == pytest.approx(1.5)
