"""System-tray icon setup via pystray."""

from datetime import date
from typing import Callable

import pystray
from pystray import Menu, MenuItem

from icon_gen import create_icon_image


def tray_title(day: date) -> str:
    return f"Calendar – CW {day.isocalendar()[1]}"


def create_tray(
    day: date,
    on_show: Callable[[], None],
    on_reload: Callable[[], None],
    on_exit: Callable[[], None],
) -> pystray.Icon:
    """Build and return a pystray Icon (not yet started)."""
    menu = Menu(
        MenuItem("Show Calendar", lambda _icon, _item: on_show(), default=True),
        MenuItem("Reload Holidays", lambda _icon, _item: on_reload()),
        Menu.SEPARATOR,
        MenuItem("Exit", lambda _icon, _item: on_exit()),
    )
    return pystray.Icon("crossover-calendar", create_icon_image(day), tray_title(day), menu)


def refresh_tray(icon: pystray.Icon, day: date) -> None:
    """Redraw the week number after the date moved on."""
    icon.icon = create_icon_image(day)
    icon.title = tray_title(day)
