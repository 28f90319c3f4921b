"""Pure calendar calculations, no UI dependencies."""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Callable

DAY_ABBR = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass(frozen=True)
class DayCell:
    day: date
    is_today: bool
    is_weekend: bool
    is_holiday: bool


def month_grid(year: int, month: int) -> list[list[int | None]]:
    """Return a 6×7 grid of day numbers (None for empty slots), weeks start Monday.

    Always 6 rows so the calendar height stays constant.
    """
    weeks = calendar.Calendar(firstweekday=0).monthdayscalendar(year, month)
    grid = [[d or None for d in week] for week in weeks]
    while len(grid) < 6:
        grid.append([None] * 7)
    return grid


def month_cells(
    year: int, month: int, today: date, is_holiday: Callable[[date], bool],
) -> list[list[DayCell | None]]:
    """Return the month grid with per-day marking applied."""
    cells: list[list[DayCell | None]] = []
    for row in month_grid(year, month):
        out: list[DayCell | None] = []
        for col, day in enumerate(row):
            if day is None:
                out.append(None)
                continue
            d = date(year, month, day)
            out.append(DayCell(d, d == today, col >= 5, is_holiday(d)))
        cells.append(out)
    return cells


def iso_week_numbers(year: int, month: int) -> list[str]:
    """ISO week number per grid row, or "" for an empty row."""
    weeks: list[str] = []
    for row in month_grid(year, month):
        day = next((d for d in row if d is not None), None)
        weeks.append("" if day is None else str(date(year, month, day).isocalendar()[1]))
    return weeks


def day_of_year(d: date) -> int:
    return d.timetuple().tm_yday


def prev_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)
