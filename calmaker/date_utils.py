"""Calendar arithmetic helpers shared by the expander and the encoder.

Dates travel through the system as ``YYYY-MM-DD`` strings on templates and as
``datetime.date`` values inside the cores. Weekday indices follow the
Sunday-first convention (0=Sunday .. 6=Saturday).
"""

import calendar
from datetime import date, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from .exceptions import DateParseError

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

DateLike = Union[date, str]


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date.

    Args:
        value: Date string

    Returns:
        Parsed date

    Raises:
        DateParseError: If the string is not a valid calendar date
    """
    if not isinstance(value, str):
        raise DateParseError(f"Expected date string, got {type(value).__name__}")

    parts = value.strip().split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise DateParseError(f"Unable to parse date: {value!r}")

    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except ValueError as e:
        raise DateParseError(f"Unable to parse date: {value!r}") from e


def coerce_date(value: DateLike) -> date:
    """Accept either a date or a ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    return parse_date(value)


def format_date(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_time(value: str) -> tuple[int, int]:
    """Parse an ``HH:MM`` time-of-day into (hour, minute).

    Raises:
        DateParseError: If the value is malformed or out of range
    """
    parts = value.strip().split(":") if isinstance(value, str) else []
    if len(parts) < 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise DateParseError(f"Unable to parse time: {value!r}")

    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise DateParseError(f"Time out of range: {value!r}")
    return hour, minute


def format_time_12h(value: Optional[str]) -> str:
    """Format an ``HH:MM`` time for display, e.g. ``"13:05"`` -> ``"1:05 PM"``.

    Empty input gives an empty string; unparsable input is returned unchanged.
    """
    if not value:
        return ""
    try:
        hour, minute = parse_time(value)
    except DateParseError:
        return value
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping to the last day of the target month.

    Jan 31 + 1 month is Feb 29 (or 28), never Mar 2.
    """
    return value + relativedelta(months=months)


def add_years(value: date, years: int) -> date:
    """Shift by whole years; Feb 29 falls back to Feb 28 in non-leap years."""
    return value + relativedelta(years=years)


def weekday_index(value: date) -> int:
    """Sunday-first weekday index (0=Sunday .. 6=Saturday)."""
    # date.weekday() is Monday-first
    return (value.weekday() + 1) % 7


def week_start(value: date) -> date:
    """Return the Sunday that begins the calendar week containing ``value``."""
    return value - timedelta(days=weekday_index(value))


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month (``month`` is 1-based)."""
    return calendar.monthrange(year, month)[1]


def next_day(value: date) -> date:
    return value + timedelta(days=1)

