"""Date-crossover scheduler: keeps "today" correct across midnight and sleep."""

from __future__ import annotations

import enum
import logging
import math
import threading
from datetime import date, datetime, time, timedelta
from typing import Callable

from errors import ClockUnavailable, TimerArmFailure
from timer_executor import TimerExecutor, TimerHandle

logger = logging.getLogger(__name__)

# Upper bound for any single wait. Bounds staleness when a wake event is missed.
MAX_CHECK_INTERVAL = 3600

Clock = Callable[[], datetime]
Poster = Callable[..., None]


def seconds_until_next_midnight(now: datetime) -> int:
    """Whole seconds (rounded up, at least 1) until the next local midnight."""
    midnight = datetime.combine(now.date() + timedelta(days=1), time.min,
                                tzinfo=now.tzinfo)
    return max(1, math.ceil((midnight - now).total_seconds()))


def next_check_delay(now: datetime, cap: int = MAX_CHECK_INTERVAL) -> int:
    return min(seconds_until_next_midnight(now), cap)


def _call_now(callback: Callable[..., None], *args) -> None:
    callback(*args)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"


class CrossoverScheduler:
    """Owns the displayed date and the single pending re-check timer.

    ``on_crossover(new_date)`` is handed to *post*, which must deliver it
    to the UI thread. The timer callback never touches UI state itself.
    """

    def __init__(
        self,
        on_crossover: Callable[[date], None],
        clock: Clock = datetime.now,
        post: Poster | None = None,
        executor: TimerExecutor | None = None,
        max_interval: int = MAX_CHECK_INTERVAL,
    ) -> None:
        if max_interval <= 0:
            raise ValueError(f"max_interval must be positive, got {max_interval!r}")
        self._on_crossover = on_crossover
        self._clock = clock
        self._post = post or _call_now
        self._max_interval = max_interval
        self._lock = threading.RLock()
        self._pending: TimerHandle | None = None
        self._closed = False
        self._displayed = self._read_clock().date()
        self._executor = executor or TimerExecutor(name="crossover-timer")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def displayed_date(self) -> date:
        with self._lock:
            return self._displayed

    @property
    def pending(self) -> TimerHandle | None:
        with self._lock:
            return self._pending

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            if self._pending is not None and self._pending.active:
                return SchedulerState.ARMED
            return SchedulerState.IDLE

    @property
    def max_interval(self) -> int:
        return self._max_interval

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        logger.info("Crossover scheduler started, today is %s", self._displayed)
        self.evaluate_and_reschedule()

    def shutdown(self) -> None:
        """Cancel the pending timer and release the timer thread. Safe to repeat."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._cancel_pending()
        self._executor.shutdown()
        logger.info("Crossover scheduler shut down")

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def evaluate_and_reschedule(self) -> None:
        """Advance the displayed date if the day changed, then re-arm the timer."""
        with self._lock:
            if self._closed:
                logger.debug("Evaluation after shutdown ignored")
                return
            try:
                now = self._read_clock()
            except ClockUnavailable as exc:
                logger.warning("Clock unavailable, keeping %s: %s", self._displayed, exc)
                delay = self._max_interval
            else:
                today = now.date()
                if today > self._displayed:
                    logger.info("Date crossover %s -> %s", self._displayed, today)
                    self._displayed = today
                    self._post(self._on_crossover, today)
                delay = next_check_delay(now, self._max_interval)
            self._arm(delay)

    def reevaluate_now(self) -> None:
        """Drop the pending timer and evaluate immediately, as one step."""
        with self._lock:
            self._cancel_pending()
            self.evaluate_and_reschedule()

    def cancel(self) -> bool:
        with self._lock:
            return self._cancel_pending()

    # ------------------------------------------------------------------
    # Internals (caller holds self._lock)
    # ------------------------------------------------------------------
    def _read_clock(self) -> datetime:
        try:
            return self._clock()
        except ClockUnavailable:
            raise
        except (OSError, OverflowError, ValueError) as exc:
            raise ClockUnavailable(str(exc)) from exc

    def _cancel_pending(self) -> bool:
        handle, self._pending = self._pending, None
        if handle is None:
            return False
        return handle.cancel()

    def _arm(self, delay: int) -> None:
        self._cancel_pending()
        try:
            self._pending = self._executor.schedule(delay, self._fire)
        except TimerArmFailure as exc:
            logger.error("Cannot arm crossover timer: %s", exc)
            return
        logger.debug("Reset crossover schedule after %d seconds", delay)

    def _fire(self) -> None:
        # May run after a cancel lost the race; evaluation is idempotent.
        self.evaluate_and_reschedule()
