"""Single-threaded timer facility: one worker thread, callbacks ordered by deadline."""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable

from errors import TimerArmFailure

logger = logging.getLogger(__name__)

_PENDING = "pending"
_RUNNING = "running"
_DONE = "done"
_CANCELLED = "cancelled"


class TimerHandle:
    """Opaque handle to one scheduled callback."""

    __slots__ = ("_executor", "deadline", "callback", "_state")

    def __init__(self, executor: "TimerExecutor", deadline: float,
                 callback: Callable[[], None]) -> None:
        self._executor = executor
        self.deadline = deadline
        self.callback = callback
        self._state = _PENDING

    def cancel(self) -> bool:
        """Cancel if still pending. Returns False once the callback has started."""
        with self._executor._cond:
            if self._state != _PENDING:
                return False
            self._state = _CANCELLED
            self._executor._cond.notify()
            return True

    @property
    def active(self) -> bool:
        return self._state == _PENDING

    @property
    def cancelled(self) -> bool:
        return self._state == _CANCELLED

    @property
    def done(self) -> bool:
        return self._state in (_DONE, _CANCELLED)

    def __repr__(self) -> str:
        return f"<TimerHandle {self._state} deadline={self.deadline:.3f}>"


class TimerExecutor:
    """Runs scheduled callbacks on one daemon thread.

    The worker blocks on a condition variable until the earliest deadline
    or until a new callback / cancellation / shutdown wakes it up.
    """

    def __init__(self, name: str = "timer",
                 clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._cond = threading.Condition()
        self._heap: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._shutdown = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* on the worker thread after *delay* seconds."""
        if delay < 0:
            raise TimerArmFailure(f"negative delay: {delay!r}")
        with self._cond:
            if self._shutdown:
                raise TimerArmFailure("timer executor has been shut down")
            handle = TimerHandle(self, self._clock() + delay, callback)
            heapq.heappush(self._heap, (handle.deadline, next(self._seq), handle))
            self._cond.notify()
        return handle

    def shutdown(self, wait: bool = False) -> None:
        """Cancel everything still pending and stop the worker. Idempotent."""
        with self._cond:
            self._shutdown = True
            for _deadline, _seq, handle in self._heap:
                if handle._state == _PENDING:
                    handle._state = _CANCELLED
            self._heap.clear()
            self._cond.notify_all()
        if wait and threading.current_thread() is not self._thread:
            self._thread.join()

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @property
    def pending_count(self) -> int:
        with self._cond:
            return sum(1 for _d, _s, h in self._heap if h._state == _PENDING)

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------
    def _next_due(self) -> TimerHandle | None:
        with self._cond:
            while True:
                if self._shutdown:
                    return None
                if not self._heap:
                    self._cond.wait()
                    continue
                deadline, _seq, handle = self._heap[0]
                if handle._state != _PENDING:
                    heapq.heappop(self._heap)
                    continue
                remaining = deadline - self._clock()
                if remaining > 0:
                    self._cond.wait(remaining)
                    continue
                heapq.heappop(self._heap)
                handle._state = _RUNNING
                return handle

    def _run(self) -> None:
        while True:
            handle = self._next_due()
            if handle is None:
                return
            try:
                handle.callback()
            except Exception:
                logger.exception("Timer callback %r failed", handle.callback)
            finally:
                with self._cond:
                    handle._state = _DONE
