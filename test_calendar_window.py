"""Tests for the Tk month view; skipped when no display is available."""

from datetime import date

import pytest

from holiday_oracle import HolidayOracle

tk = pytest.importorskip("tkinter")


@pytest.fixture()
def window():
    from calendar_window import CalendarWindow

    oracle = HolidayOracle.from_lines(["2026-03-20 Shunbun no Hi", "04-29 Showa no Hi"])
    try:
        win = CalendarWindow(oracle, date(2026, 3, 14))
    except tk.TclError as exc:
        pytest.skip(f"no display: {exc}")
    yield win
    win.root.destroy()


def marked(win) -> list[date]:
    return [c.day for row in win.cells for c in row if c is not None and c.is_holiday]


def test_initial_grid_marks_holidays(window) -> None:
    assert (window.view_year, window.view_month) == (2026, 3)
    assert marked(window) == [date(2026, 3, 20)]
    assert window.root.title() == "Calendar  Day: 73"


def test_rebuild_reanchors_on_new_month(window) -> None:
    window.rebuild(date(2026, 4, 1))
    assert window.today == date(2026, 4, 1)
    assert (window.view_year, window.view_month) == (2026, 4)
    assert marked(window) == [date(2026, 4, 29)]
    today_cells = [c.day for row in window.cells for c in row if c and c.is_today]
    assert today_cells == [date(2026, 4, 1)]


def test_navigation_and_today(window) -> None:
    window._navigate(1)
    assert (window.view_year, window.view_month) == (2026, 4)
    window._go_today()
    assert (window.view_year, window.view_month) == (2026, 3)


def test_set_oracle_redraws(window) -> None:
    window.set_oracle(HolidayOracle())
    assert marked(window) == []
