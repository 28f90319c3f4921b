"""Thread-safe hand-off of callbacks onto the tkinter main thread."""

from __future__ import annotations

import logging
import queue
from typing import Any, Callable

logger = logging.getLogger(__name__)


class UiQueue:
    """Any thread may ``post``; only the UI thread ``drain``s.

    ``attach`` drives the drain from the Tk event loop, so callbacks run
    on the thread that owns the widgets.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._root = None
        self._after_id: str | None = None
        self._interval_ms = 50

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.put((callback, args))

    def drain(self) -> int:
        """Run everything queued so far; returns the number of callbacks run."""
        count = 0
        while True:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                return count
            count += 1
            try:
                callback(*args)
            except Exception:
                logger.exception("UI callback %r failed", callback)

    def attach(self, root, interval_ms: int = 50) -> None:
        self._root = root
        self._interval_ms = interval_ms
        self._pump()

    def detach(self) -> None:
        if self._root is not None and self._after_id is not None:
            self._root.after_cancel(self._after_id)
        self._after_id = None
        self._root = None

    def _pump(self) -> None:
        if self._root is None:
            return
        self.drain()
        self._after_id = self._root.after(self._interval_ms, self._pump)
