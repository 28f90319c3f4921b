"""Entry point: glues the crossover scheduler, pystray (daemon thread) and tkinter (main thread)."""

import ctypes
import logging
import threading
from datetime import date

from calendar_window import CalendarWindow
from crossover import CrossoverScheduler
from holiday_oracle import HolidayOracle
from settings import load_settings
from sleep_monitor import SleepRecoveryMonitor, default_notifier
from tray_icon import create_tray, refresh_tray
from ui_queue import UiQueue

logger = logging.getLogger("calendar")


def verbosity_level(verbose: str) -> int:
    """Map the length of a "vvv"-style string to a logging level."""
    if len(verbose) < 1:
        return logging.WARNING
    if len(verbose) == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbose: str, log_file: str | None = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    logging.basicConfig(
        level=verbosity_level(verbose),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def main() -> None:
    # DPI awareness so fonts are crisp on Hi-DPI monitors
    try:
        ctypes.windll.shcore.SetProcessDpiAwareness(1)
    except (AttributeError, OSError):
        pass

    settings = load_settings()
    configure_logging(settings["verbose"], settings["log_file"])
    logger.info("Calendar program start")

    ui = UiQueue()
    tray = None

    def on_crossover(day: date) -> None:
        cal_win.rebuild(day)
        if tray is not None:
            refresh_tray(tray, day)

    scheduler = CrossoverScheduler(
        on_crossover, post=ui.post, max_interval=settings["max_check_interval"],
    )
    monitor = SleepRecoveryMonitor(
        scheduler, default_notifier(settings["wake_poll_interval"]),
    )

    def shutdown() -> None:
        monitor.stop()
        scheduler.shutdown()
        if tray is not None:
            tray.stop()
        ui.detach()
        cal_win.root.destroy()

    def reload_holidays() -> None:
        cal_win.set_oracle(HolidayOracle.load(settings["holiday_file"]))

    cal_win = CalendarWindow(
        HolidayOracle.load(settings["holiday_file"]),
        scheduler.displayed_date,
        on_close=shutdown,
    )
    ui.attach(cal_win.root)

    # Tray callbacks arrive on the pystray thread; hand them to tkinter
    tray = create_tray(
        scheduler.displayed_date,
        on_show=lambda: ui.post(cal_win.bring_to_front),
        on_reload=lambda: ui.post(reload_holidays),
        on_exit=lambda: ui.post(shutdown),
    )
    tray_thread = threading.Thread(target=tray.run, daemon=True)
    tray_thread.start()

    scheduler.start()
    monitor.start()

    cal_win.root.mainloop()
    logger.info("Calendar program end")


if __name__ == "__main__":
    main()
