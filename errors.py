"""Error conditions raised by the date-crossover core."""


class CalendarError(Exception):
    """Base class for calendar widget errors."""


class ClockUnavailable(CalendarError):
    """The current date/time could not be read; retried at the capped interval."""


class TimerArmFailure(CalendarError):
    """The timer facility refused a new callback (usually: already shut down)."""


class HolidayLookupFailure(CalendarError):
    """A holiday rule could not be expanded; callers treat the date as a workday."""
