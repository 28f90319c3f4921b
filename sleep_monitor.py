"""Host sleep/wake detection and recovery of the crossover schedule."""

from __future__ import annotations

import logging
import sys
import threading
import time
from typing import Callable

from crossover import MAX_CHECK_INTERVAL, CrossoverScheduler
from errors import TimerArmFailure
from timer_executor import TimerExecutor

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class SleepNotifier:
    """Capability interface over an OS sleep/wake notification mechanism."""

    def subscribe(self, on_sleep: Callback, on_wake: Callback) -> None:
        raise NotImplementedError

    def unsubscribe(self) -> None:
        raise NotImplementedError


# ----------------------------------------------------------------------
# Portable fallback: detect wall-clock jumps between polls
# ----------------------------------------------------------------------
class ClockJumpNotifier(SleepNotifier):
    """Reports a wake when the wall clock moved much further than the poll interval.

    A suspended host runs no timers, so the first poll after resume sees a
    large gap. It cannot see a sleep coming, so ``on_sleep`` is never called.
    """

    def __init__(self, interval: float = 60, tolerance: float = 30,
                 wall_clock: Callable[[], float] = time.time) -> None:
        self.interval = max(1.0, min(float(interval), MAX_CHECK_INTERVAL))
        self.tolerance = max(0.0, float(tolerance))
        self._wall_clock = wall_clock
        self._executor: TimerExecutor | None = None
        self._on_wake: Callback | None = None
        self._last: float | None = None

    def subscribe(self, on_sleep: Callback, on_wake: Callback) -> None:
        if self._executor is not None:
            raise RuntimeError("ClockJumpNotifier is already subscribed")
        self._on_wake = on_wake
        self._last = self._wall_clock()
        self._executor = TimerExecutor(name="wake-poll")
        self._arm()
        logger.info("Polling for clock jumps every %.0f s", self.interval)

    def unsubscribe(self) -> None:
        if self._executor is not None:
            self._executor.shutdown()
            self._executor = None

    def poll(self) -> bool:
        """Compare the wall clock with the last poll; returns True if a wake was reported."""
        now = self._wall_clock()
        last, self._last = self._last, now
        if last is None:
            return False
        gap = now - last
        if gap > self.interval + self.tolerance or gap < -self.tolerance:
            logger.info("Wall clock jumped by %.0f s, assuming resume", gap)
            if self._on_wake is not None:
                self._on_wake()
            return True
        return False

    def _tick(self) -> None:
        try:
            self.poll()
        finally:
            self._arm()

    def _arm(self) -> None:
        executor = self._executor
        if executor is None:
            return
        try:
            executor.schedule(self.interval, self._tick)
        except TimerArmFailure:
            logger.debug("Wake poll stopped")


# ----------------------------------------------------------------------
# Windows: WM_POWERBROADCAST on a hidden top-level window
# ----------------------------------------------------------------------
WM_DESTROY = 0x0002
WM_CLOSE = 0x0010
WM_POWERBROADCAST = 0x0218
PBT_APMSUSPEND = 0x0004
PBT_APMRESUMEAUTOMATIC = 0x0012


class Win32PowerNotifier(SleepNotifier):
    """Receives suspend/resume broadcasts through a hidden window on its own thread."""

    _CLASS_NAME = "CrossoverCalendarPowerSink"

    def __init__(self) -> None:
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._hwnd = None
        self._wndproc = None  # keep the ctypes callback alive
        self._on_sleep: Callback | None = None
        self._on_wake: Callback | None = None

    def subscribe(self, on_sleep: Callback, on_wake: Callback) -> None:
        if self._thread is not None:
            raise RuntimeError("Win32PowerNotifier is already subscribed")
        self._on_sleep = on_sleep
        self._on_wake = on_wake
        self._ready.clear()
        self._thread = threading.Thread(target=self._pump, name="power-events",
                                        daemon=True)
        self._thread.start()
        self._ready.wait(5)

    def unsubscribe(self) -> None:
        if self._thread is None:
            return
        if self._hwnd:
            import ctypes
            ctypes.windll.user32.PostMessageW(self._hwnd, WM_CLOSE, 0, 0)
        self._thread.join(5)
        self._thread = None

    def _dispatch(self, event: int) -> None:
        try:
            if event == PBT_APMSUSPEND and self._on_sleep:
                self._on_sleep()
            elif event == PBT_APMRESUMEAUTOMATIC and self._on_wake:
                self._on_wake()
        except Exception:
            logger.exception("Power event handler failed")

    def _pump(self) -> None:
        import ctypes
        import ctypes.wintypes as wt

        lresult = ctypes.c_ssize_t
        wndproc_t = ctypes.WINFUNCTYPE(lresult, wt.HWND, wt.UINT, wt.WPARAM, wt.LPARAM)

        class WNDCLASSW(ctypes.Structure):
            _fields_ = [
                ("style", wt.UINT), ("lpfnWndProc", wndproc_t),
                ("cbClsExtra", ctypes.c_int), ("cbWndExtra", ctypes.c_int),
                ("hInstance", wt.HINSTANCE), ("hIcon", wt.HICON),
                ("hCursor", wt.HANDLE), ("hbrBackground", wt.HBRUSH),
                ("lpszMenuName", wt.LPCWSTR), ("lpszClassName", wt.LPCWSTR),
            ]

        user32 = ctypes.windll.user32
        kernel32 = ctypes.windll.kernel32
        user32.DefWindowProcW.argtypes = [wt.HWND, wt.UINT, wt.WPARAM, wt.LPARAM]
        user32.DefWindowProcW.restype = lresult
        user32.CreateWindowExW.argtypes = [
            wt.DWORD, wt.LPCWSTR, wt.LPCWSTR, wt.DWORD,
            ctypes.c_int, ctypes.c_int, ctypes.c_int, ctypes.c_int,
            wt.HWND, wt.HMENU, wt.HINSTANCE, wt.LPVOID,
        ]
        user32.CreateWindowExW.restype = wt.HWND
        kernel32.GetModuleHandleW.restype = wt.HMODULE

        def wndproc(hwnd, msg, wparam, lparam):
            if msg == WM_POWERBROADCAST:
                self._dispatch(wparam)
                return 1
            if msg == WM_DESTROY:
                user32.PostQuitMessage(0)
                return 0
            return user32.DefWindowProcW(hwnd, msg, wparam, lparam)

        self._wndproc = wndproc_t(wndproc)
        hinst = kernel32.GetModuleHandleW(None)
        wc = WNDCLASSW()
        wc.lpfnWndProc = self._wndproc
        wc.hInstance = hinst
        wc.lpszClassName = self._CLASS_NAME
        user32.RegisterClassW(ctypes.byref(wc))

        self._hwnd = user32.CreateWindowExW(
            0, self._CLASS_NAME, self._CLASS_NAME, 0, 0, 0, 0, 0,
            None, None, hinst, None,
        )
        self._ready.set()
        if not self._hwnd:
            logger.warning("Could not create power notification window")
            return

        msg = wt.MSG()
        while user32.GetMessageW(ctypes.byref(msg), None, 0, 0) > 0:
            user32.TranslateMessage(ctypes.byref(msg))
            user32.DispatchMessageW(ctypes.byref(msg))
        user32.UnregisterClassW(self._CLASS_NAME, hinst)
        self._hwnd = None


def default_notifier(poll_interval: float = 60) -> SleepNotifier:
    if sys.platform == "win32":
        return Win32PowerNotifier()
    return ClockJumpNotifier(interval=poll_interval)


# ----------------------------------------------------------------------
# Recovery
# ----------------------------------------------------------------------
class SleepRecoveryMonitor:
    """Forces an immediate crossover check whenever the host resumes."""

    def __init__(self, scheduler: CrossoverScheduler,
                 notifier: SleepNotifier | None = None,
                 wall_clock: Callable[[], float] = time.time) -> None:
        self._scheduler = scheduler
        self._notifier = notifier if notifier is not None else default_notifier()
        self._wall_clock = wall_clock
        self._subscribed = False
        self.sleep_count = 0
        self.wake_count = 0
        self.last_sleep: float | None = None
        self.last_wake: float | None = None

    def start(self) -> None:
        if self._subscribed:
            return
        self._notifier.subscribe(self.on_system_sleep, self.on_system_wake)
        self._subscribed = True

    def stop(self) -> None:
        if not self._subscribed:
            return
        self._notifier.unsubscribe()
        self._subscribed = False

    def on_system_sleep(self) -> None:
        self.sleep_count += 1
        self.last_sleep = self._wall_clock()
        logger.info("Detect system about to sleep.")

    def on_system_wake(self) -> None:
        self.wake_count += 1
        self.last_wake = self._wall_clock()
        logger.info("Detect system awake.")
        self._scheduler.reevaluate_now()
