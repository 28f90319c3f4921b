"""Always-on-top single-month calendar window (tkinter)."""

from __future__ import annotations

import calendar as _cal
import sys
import tkinter as tk
from datetime import date
from tkinter import font as tkfont
from typing import Callable

from calendar_logic import (
    DAY_ABBR,
    DayCell,
    day_of_year,
    iso_week_numbers,
    month_cells,
    next_month,
    prev_month,
)
from holiday_oracle import HolidayOracle

# Colours
ACCENT = "#0078D4"
HEADER_BG = "#F3F3F3"
GRID_BG = "white"
WN_FG = "#888888"
WEEKEND_FG = "#CC0000"
HOLIDAY_BG = "#FFE0E0"


class _ToolTip:
    """Lightweight shared tooltip for holiday names."""

    __slots__ = ("_root", "_tw")

    def __init__(self, root: tk.Tk) -> None:
        self._root = root
        self._tw: tk.Toplevel | None = None

    def show(self, widget: tk.Widget, text: str) -> None:
        self.hide()
        tw = tk.Toplevel(self._root)
        tw.wm_overrideredirect(True)
        tw.wm_attributes("-topmost", True)
        tk.Label(
            tw, text=text, bg="#FFFFE0", fg="black",
            relief="solid", borderwidth=1, padx=6, pady=3, justify="left",
        ).pack()
        x = widget.winfo_rootx() + widget.winfo_width() // 2
        y = widget.winfo_rooty() + widget.winfo_height() + 2
        tw.wm_geometry(f"+{x}+{y}")
        self._tw = tw

    def hide(self) -> None:
        if self._tw:
            self._tw.destroy()
            self._tw = None


class _MonthPanel:
    """Pre-allocated labels for one month: header, weekday row, 6 weeks."""

    __slots__ = ("frame", "header", "week_nums", "day_cells")

    def __init__(self, parent: tk.Frame, fonts: dict,
                 on_enter: Callable, on_leave: Callable) -> None:
        self.frame = tk.Frame(parent, bg=GRID_BG)

        self.header = tk.Label(self.frame, font=fonts["header"], bg=HEADER_BG, fg="#333333")
        self.header.grid(row=0, column=0, columnspan=8, sticky="we", pady=(0, 2))

        tk.Label(self.frame, text="Wk", font=fonts["bold"], bg=GRID_BG,
                 fg=WN_FG, width=3).grid(row=1, column=0)
        for col, abbr in enumerate(DAY_ABBR):
            fg = WEEKEND_FG if col >= 5 else "#333333"
            tk.Label(self.frame, text=abbr, font=fonts["bold"], bg=GRID_BG,
                     fg=fg, width=3).grid(row=1, column=col + 1)

        self.week_nums: list[tk.Label] = []
        self.day_cells: list[list[tk.Label]] = []
        for r in range(6):
            wn = tk.Label(self.frame, font=fonts["wn"], bg=GRID_BG, fg=WN_FG, width=3)
            wn.grid(row=r + 2, column=0)
            self.week_nums.append(wn)
            row_cells: list[tk.Label] = []
            for c in range(7):
                cell = tk.Label(self.frame, font=fonts["normal"], bg=GRID_BG, width=3)
                cell.grid(row=r + 2, column=c + 1)
                cell.bind("<Enter>", on_enter)
                cell.bind("<Leave>", on_leave)
                row_cells.append(cell)
            self.day_cells.append(row_cells)


class CalendarWindow:
    """Month view anchored on the scheduler's "today".

    ``rebuild`` must only be called on the Tk main thread.
    """

    def __init__(self, oracle: HolidayOracle, today: date,
                 on_close: Callable[[], None] | None = None) -> None:
        self.root = tk.Tk()
        self.root.resizable(False, False)
        self.root.configure(bg=GRID_BG)
        if sys.platform == "win32":
            self.root.attributes("-toolwindow", True)
        self.root.attributes("-topmost", True)

        self._oracle = oracle
        self._today = today
        self.view_year = today.year
        self.view_month = today.month
        self.cells: list[list[DayCell | None]] = []
        self._widget_dates: dict[int, date] = {}

        self._setup_fonts()
        self._build_shell()
        self._tooltip = _ToolTip(self.root)
        self.rebuild(today)

        self.root.protocol("WM_DELETE_WINDOW", on_close or self.root.destroy)

    # ------------------------------------------------------------------
    # Fonts
    # ------------------------------------------------------------------
    def _setup_fonts(self) -> None:
        families = tkfont.families(self.root)
        base = "Segoe UI" if "Segoe UI" in families else "TkDefaultFont"
        self.font_normal = tkfont.Font(family=base, size=9)
        self.font_bold = tkfont.Font(family=base, size=9, weight="bold")
        self.font_header = tkfont.Font(family=base, size=10, weight="bold")
        self.font_nav = tkfont.Font(family=base, size=12, weight="bold")
        self.font_wn = tkfont.Font(family=base, size=8)

    # ------------------------------------------------------------------
    # Build shell (once): nav bar, month panel, footer
    # ------------------------------------------------------------------
    def _build_shell(self) -> None:
        outer = tk.Frame(self.root, bg=GRID_BG)
        outer.pack(padx=6, pady=4)

        nav = tk.Frame(outer, bg=GRID_BG)
        nav.pack(fill="x", pady=(0, 2))
        btn_prev = tk.Label(nav, text="◀", font=self.font_nav, bg=GRID_BG, cursor="hand2")
        btn_prev.pack(side="left", padx=6)
        btn_prev.bind("<Button-1>", lambda _e: self._navigate(-1))
        btn_next = tk.Label(nav, text="▶", font=self.font_nav, bg=GRID_BG, cursor="hand2")
        btn_next.pack(side="right", padx=6)
        btn_next.bind("<Button-1>", lambda _e: self._navigate(1))
        btn_today = tk.Label(nav, text="Today", font=self.font_bold, bg=GRID_BG,
                             fg=ACCENT, cursor="hand2")
        btn_today.pack(side="top")
        btn_today.bind("<Button-1>", lambda _e: self._go_today())

        fonts = {"header": self.font_header, "bold": self.font_bold,
                 "normal": self.font_normal, "wn": self.font_wn}
        self._panel = _MonthPanel(outer, fonts, self._on_cell_enter, self._on_cell_leave)
        self._panel.frame.pack()

        self._footer = tk.Label(outer, font=self.font_normal, bg=GRID_BG, fg="#555555")
        self._footer.pack(pady=(4, 0))

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------
    def rebuild(self, today: date) -> None:
        """Re-anchor on *today*'s month and redraw every cell."""
        self._today = today
        self.view_year, self.view_month = today.year, today.month
        self._fill()

    def set_oracle(self, oracle: HolidayOracle) -> None:
        self._oracle = oracle
        self._fill()

    @property
    def today(self) -> date:
        return self._today

    def _fill(self) -> None:
        year, month = self.view_year, self.view_month
        panel = self._panel
        panel.header.configure(text=f"{_cal.month_name[month]} {year}")
        self.cells = month_cells(year, month, self._today, self._oracle.contains)
        self._widget_dates.clear()

        for r, (row, week) in enumerate(zip(self.cells, iso_week_numbers(year, month))):
            panel.week_nums[r].configure(text=week)
            for c, cell in enumerate(row):
                label = panel.day_cells[r][c]
                if cell is None:
                    label.configure(text="", bg=GRID_BG, font=self.font_normal)
                    continue
                bg, fg = self._day_colors(cell)
                label.configure(
                    text=str(cell.day.day), bg=bg, fg=fg,
                    font=self.font_bold if cell.is_today else self.font_normal,
                )
                self._widget_dates[id(label)] = cell.day

        self.root.title(f"Calendar  Day: {day_of_year(self._today)}")
        self._footer.configure(text=f"Today: {self._today.strftime('%d.%m.%Y')}")

    @staticmethod
    def _day_colors(cell: DayCell) -> tuple[str, str]:
        if cell.is_today:
            return ACCENT, "white"
        if cell.is_holiday:
            return HOLIDAY_BG, WEEKEND_FG
        if cell.is_weekend:
            return GRID_BG, WEEKEND_FG
        return GRID_BG, "black"

    # ------------------------------------------------------------------
    # Tooltip on hover
    # ------------------------------------------------------------------
    def _on_cell_enter(self, event: tk.Event) -> None:
        d = self._widget_dates.get(id(event.widget))
        if d is None:
            return
        names = self._oracle.names(d)
        if names:
            self._tooltip.show(event.widget, "\n".join(names))

    def _on_cell_leave(self, _event: tk.Event) -> None:
        self._tooltip.hide()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def _navigate(self, direction: int) -> None:
        step = next_month if direction > 0 else prev_month
        self.view_year, self.view_month = step(self.view_year, self.view_month)
        self._fill()

    def _go_today(self) -> None:
        self.rebuild(self._today)

    def bring_to_front(self) -> None:
        self.root.deiconify()
        self.root.lift()
        self.root.focus_force()
