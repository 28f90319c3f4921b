"""Tests for the single-threaded timer facility."""

from __future__ import annotations

import threading

import pytest

from errors import TimerArmFailure
from timer_executor import TimerExecutor


@pytest.fixture()
def timers():
    ex = TimerExecutor(name="test-timer")
    yield ex
    ex.shutdown(wait=True)


def test_runs_callback_on_worker_thread(timers) -> None:
    ran = threading.Event()
    seen = []

    def cb() -> None:
        seen.append(threading.current_thread().name)
        ran.set()

    handle = timers.schedule(0, cb)
    assert ran.wait(5)
    assert seen == ["test-timer"]
    assert not handle.cancelled


def test_callbacks_run_in_deadline_order(timers) -> None:
    order = []
    done = threading.Event()
    timers.schedule(0.2, lambda: (order.append("late"), done.set()))
    timers.schedule(0.05, lambda: order.append("early"))
    assert done.wait(5)
    assert order == ["early", "late"]


def test_cancel_prevents_run(timers) -> None:
    ran = threading.Event()
    handle = timers.schedule(0.2, ran.set)
    assert handle.cancel() is True
    assert handle.cancelled and handle.done and not handle.active
    assert handle.cancel() is False
    assert not ran.wait(0.5)
    assert timers.pending_count == 0


def test_cancel_after_fire_is_tolerated(timers) -> None:
    ran = threading.Event()
    handle = timers.schedule(0, ran.set)
    assert ran.wait(5)
    assert handle.cancel() is False
    assert not handle.cancelled


def test_failing_callback_does_not_kill_worker(timers, caplog) -> None:
    ran = threading.Event()

    def boom() -> None:
        raise RuntimeError("boom")

    timers.schedule(0, boom)
    timers.schedule(0.05, ran.set)
    assert ran.wait(5)
    assert "Timer callback" in caplog.text


def test_schedule_after_shutdown_fails(timers) -> None:
    handle = timers.schedule(60, lambda: None)
    timers.shutdown(wait=True)
    assert handle.cancelled
    assert timers.is_shutdown
    with pytest.raises(TimerArmFailure):
        timers.schedule(0, lambda: None)


def test_negative_delay_rejected(timers) -> None:
    with pytest.raises(TimerArmFailure):
        timers.schedule(-1, lambda: None)


def test_earlier_timer_wakes_blocked_worker(timers) -> None:
    ran = threading.Event()
    timers.schedule(3600, lambda: None)
    timers.schedule(0.05, ran.set)
    assert ran.wait(5)
    assert timers.pending_count == 1
