"""Shared fakes: a settable clock and a manually driven timer facility."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from errors import TimerArmFailure


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now
        self.fail: Exception | None = None

    def __call__(self) -> datetime:
        if self.fail is not None:
            raise self.fail
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeHandle:
    def __init__(self, delay: float, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        if not self.active:
            return False
        self.cancelled = True
        return True

    def fire(self) -> None:
        """Run the callback as the timer thread would, even if cancelled."""
        self.fired = True
        self.callback()


class ManualExecutor:
    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []
        self.is_shutdown = False

    def schedule(self, delay: float, callback) -> FakeHandle:
        if self.is_shutdown:
            raise TimerArmFailure("timer executor has been shut down")
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def shutdown(self, wait: bool = False) -> None:
        self.is_shutdown = True
        for h in self.handles:
            h.cancel()

    @property
    def active(self) -> list[FakeHandle]:
        return [h for h in self.handles if h.active]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 14, 10, 0, 0))


@pytest.fixture()
def executor() -> ManualExecutor:
    return ManualExecutor()
