"""Holiday lookup backed by a line-based configuration file."""

from __future__ import annotations

import calendar
import logging
import re
import threading
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Iterable

from errors import HolidayLookupFailure

logger = logging.getLogger(__name__)

DatesFn = Callable[[int], list[date]]

# Larger offsets from Easter Sunday are rejected when parsing
MAX_EASTER_OFFSET = 250

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _easter(year: int) -> date:
    """Compute Easter Sunday (Anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    el = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * el) // 451
    month, day = divmod(h + el - 7 * m + 114, 31)
    return date(year, month, day + 1)


# --- date generators --------------------------------------------------------

def _exact(d: date) -> DatesFn:
    return lambda year: [d] if d.year == year else []


def _fixed(m: int, d: int) -> DatesFn:
    def fn(year: int) -> list[date]:
        if m == 2 and d == 29 and not _is_leap(year):
            return []
        return [date(year, m, d)]
    return fn


def _easter_rel(offset: int) -> DatesFn:
    return lambda year: [_easter(year) + timedelta(days=offset)]


def _nth_weekday(m: int, weekday: int, n: int) -> DatesFn:
    """n-th (1-based) weekday of a month; n == -1 is the last one."""
    def fn(year: int) -> list[date]:
        if n > 0:
            first = date(year, m, 1)
            d = first + timedelta(days=(weekday - first.weekday()) % 7 + 7 * (n - 1))
        else:
            last = date(year, m, calendar.monthrange(year, m)[1])
            d = last - timedelta(days=(last.weekday() - weekday) % 7)
        return [d] if d.month == m else []
    return fn


def _equinox(m: int, base: float) -> DatesFn:
    """Japanese equinox day approximation, valid 1980-2099."""
    def fn(year: int) -> list[date]:
        if not 1980 <= year <= 2099:
            return []
        day = int(base + 0.242194 * (year - 1980) - (year - 1980) // 4)
        return [date(year, m, day)]
    return fn


def _is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# --- Built-in registry: (key, name, country, dates_fn) ----------------------

HOLIDAYS: list[tuple[str, str, str, DatesFn]] = [
    # Switzerland
    ("ch_neujahr",        "Neujahr",        "CH", _fixed(1, 1)),
    ("ch_berchtoldstag",  "Berchtoldstag",  "CH", _fixed(1, 2)),
    ("ch_karfreitag",     "Karfreitag",     "CH", _easter_rel(-2)),
    ("ch_ostermontag",    "Ostermontag",    "CH", _easter_rel(1)),
    ("ch_auffahrt",       "Auffahrt",       "CH", _easter_rel(39)),
    ("ch_pfingstmontag",  "Pfingstmontag",  "CH", _easter_rel(50)),
    ("ch_bundesfeier",    "Bundesfeier",    "CH", _fixed(8, 1)),
    ("ch_weihnachten",    "Weihnachten",    "CH", _fixed(12, 25)),
    ("ch_stephanstag",    "Stephanstag",    "CH", _fixed(12, 26)),
    # Germany
    ("de_neujahr",             "Neujahr",                   "DE", _fixed(1, 1)),
    ("de_karfreitag",          "Karfreitag",                "DE", _easter_rel(-2)),
    ("de_ostermontag",         "Ostermontag",               "DE", _easter_rel(1)),
    ("de_tag_der_arbeit",      "Tag der Arbeit",            "DE", _fixed(5, 1)),
    ("de_christi_himmelfahrt", "Christi Himmelfahrt",       "DE", _easter_rel(39)),
    ("de_pfingstmontag",       "Pfingstmontag",             "DE", _easter_rel(50)),
    ("de_tag_dt_einheit",      "Tag der Deutschen Einheit", "DE", _fixed(10, 3)),
    ("de_weihnachten1",        "1. Weihnachtstag",          "DE", _fixed(12, 25)),
    ("de_weihnachten2",        "2. Weihnachtstag",          "DE", _fixed(12, 26)),
    # Japan
    ("jp_ganjitsu",         "Ganjitsu",               "JP", _fixed(1, 1)),
    ("jp_seijin",           "Seijin no Hi",           "JP", _nth_weekday(1, 0, 2)),
    ("jp_kenkoku",          "Kenkoku Kinen no Hi",    "JP", _fixed(2, 11)),
    ("jp_tenno_tanjobi",    "Tenno Tanjobi",          "JP", _fixed(2, 23)),
    ("jp_shunbun",          "Shunbun no Hi",          "JP", _equinox(3, 20.8431)),
    ("jp_showa",            "Showa no Hi",            "JP", _fixed(4, 29)),
    ("jp_kenpo",            "Kenpo Kinenbi",          "JP", _fixed(5, 3)),
    ("jp_midori",           "Midori no Hi",           "JP", _fixed(5, 4)),
    ("jp_kodomo",           "Kodomo no Hi",           "JP", _fixed(5, 5)),
    ("jp_umi",              "Umi no Hi",              "JP", _nth_weekday(7, 0, 3)),
    ("jp_yama",             "Yama no Hi",             "JP", _fixed(8, 11)),
    ("jp_keiro",            "Keiro no Hi",            "JP", _nth_weekday(9, 0, 3)),
    ("jp_shubun",           "Shubun no Hi",           "JP", _equinox(9, 23.2488)),
    ("jp_sports",           "Sports no Hi",           "JP", _nth_weekday(10, 0, 2)),
    ("jp_bunka",            "Bunka no Hi",            "JP", _fixed(11, 3)),
    ("jp_kinro_kansha",     "Kinro Kansha no Hi",     "JP", _fixed(11, 23)),
]

_BY_KEY = {h[0]: h for h in HOLIDAYS}

COUNTRIES: list[tuple[str, str]] = [
    ("CH", "Switzerland"),
    ("DE", "Germany"),
    ("JP", "Japan"),
]
_COUNTRY_CODES = {code for code, _name in COUNTRIES}


def holidays_by_country(country: str) -> list[tuple[str, str]]:
    """Return [(key, name), ...] for the given country code."""
    return [(h[0], h[1]) for h in HOLIDAYS if h[2] == country]


# --- Line parser ------------------------------------------------------------

_RE_EXACT = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_RE_FIXED = re.compile(r"^(\d{2})-(\d{2})$")
_RE_EASTER = re.compile(r"^easter([+-]\d+)?$", re.IGNORECASE)
_RE_NTH = re.compile(r"^(\d{2})-([A-Za-z]{3})#(-1|[1-5])$")


def parse_rule(token: str, name: str) -> list[tuple[str, DatesFn]]:
    """Turn one config token into [(name, dates_fn), ...]. Raises ValueError."""
    if m := _RE_EXACT.match(token):
        d = date(int(m[1]), int(m[2]), int(m[3]))
        return [(name or d.isoformat(), _exact(d))]
    if m := _RE_FIXED.match(token):
        month, day = int(m[1]), int(m[2])
        date(2000, month, day)  # validates, 2000 is a leap year
        return [(name or token, _fixed(month, day))]
    if m := _RE_EASTER.match(token):
        offset = int(m[1]) if m[1] else 0
        if abs(offset) > MAX_EASTER_OFFSET:
            raise ValueError(f"easter offset out of range: {offset}")
        return [(name or token, _easter_rel(offset))]
    if m := _RE_NTH.match(token):
        month = int(m[1])
        if not 1 <= month <= 12:
            raise ValueError(f"month out of range: {month}")
        weekday = WEEKDAYS.index(m[2].capitalize())
        return [(name or token, _nth_weekday(month, weekday, int(m[3])))]
    if token.lower() == "vernal-equinox":
        return [(name or "Vernal Equinox", _equinox(3, 20.8431))]
    if token.lower() == "autumnal-equinox":
        return [(name or "Autumnal Equinox", _equinox(9, 23.2488))]
    if token in _COUNTRY_CODES:
        return [(label, _BY_KEY[key][3]) for key, label in holidays_by_country(token)]
    if token in _BY_KEY:
        entry = _BY_KEY[token]
        return [(name or entry[1], entry[3])]
    raise ValueError(f"unrecognised holiday rule {token!r}")


class HolidayOracle:
    """Answers "is this date a holiday?" from a preloaded, read-only rule set."""

    def __init__(self, rules: Iterable[tuple[str, DatesFn]] = (),
                 source: str = "<memory>") -> None:
        self._rules: tuple[tuple[str, DatesFn], ...] = tuple(rules)
        self.source = source
        self._years: dict[int, dict[date, list[str]]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_lines(cls, lines: Iterable[str], source: str = "<memory>") -> "HolidayOracle":
        rules: list[tuple[str, DatesFn]] = []
        for lineno, raw in enumerate(lines, 1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            token, *rest = line.split(None, 1)
            try:
                rules.extend(parse_rule(token, rest[0].strip() if rest else ""))
            except ValueError as exc:
                logger.warning("%s:%d: skipped: %s", source, lineno, exc)
        return cls(rules, source)

    @classmethod
    def load(cls, path: str | Path) -> "HolidayOracle":
        """Read a holiday file; a missing or unreadable file yields an empty oracle."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Holiday file %s not found, no holidays marked", path)
            return cls(source=str(path))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read holiday file %s: %s", path, exc)
            return cls(source=str(path))
        oracle = cls.from_lines(text.splitlines(), str(path))
        logger.info("Loaded %d holiday rules from %s", len(oracle), path)
        return oracle

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, d: date) -> bool:
        return self.contains(d)

    def contains(self, d: date) -> bool:
        """True if *d* is a holiday. Rules that fail for d.year count as no holiday."""
        return d in self._for_year(d.year)

    def names(self, d: date) -> list[str]:
        return list(self._for_year(d.year).get(d, []))

    def _for_year(self, year: int) -> dict[date, list[str]]:
        with self._lock:
            cached = self._years.get(year)
        if cached is not None:
            return cached
        result: dict[date, list[str]] = {}
        for name, dates_fn in self._rules:
            try:
                dates = _expand(name, dates_fn, year)
            except HolidayLookupFailure as exc:
                logger.warning("Holiday lookup skipped: %s", exc)
                continue
            for d in dates:
                names = result.setdefault(d, [])
                if name not in names:
                    names.append(name)
        with self._lock:
            self._years[year] = result
        return result


def _expand(name: str, dates_fn: DatesFn, year: int) -> list[date]:
    try:
        return dates_fn(year)
    except (ValueError, OverflowError, LookupError) as exc:
        raise HolidayLookupFailure(f"rule {name!r} for {year}: {exc}") from exc
