"""Calendar helpers shared by the statistics and reminder services.

Months are zero-based throughout (0 = January) to match the stored key and
export formats. Date strings are always zero padded ``YYYY-MM-DD`` so that
lexical order equals chronological order.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in a zero-based month."""

    return monthrange(year, month + 1)[1]


def date_string(year: int, month: int, day: int) -> str:
    """Format a zero-based month day as ``YYYY-MM-DD``."""

    return f"{year:04d}-{month + 1:02d}-{day:02d}"


def weekday_short(year: int, month: int, day: int) -> str:
    return _WEEKDAYS[date(year, month + 1, day).weekday()]


def parse_date_string(text: str) -> date:
    """Parse a ``YYYY-MM-DD`` string; raises ValueError on anything else."""

    return datetime.strptime(text, "%Y-%m-%d").date()


def to_date_string(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def month_of(date_str: str) -> tuple[int, int]:
    """Return ``(year, zero_based_month)`` for a date string."""

    parsed = parse_date_string(date_str)
    return parsed.year, parsed.month - 1


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 0:
        return year - 1, 11
    return year, month - 1


def is_same_month(value: date, year: int, month: int) -> bool:
    return value.year == year and value.month - 1 == month


def parse_hhmm(text: str) -> time:
    """Parse ``HH:MM`` into a time; raises ValueError when malformed."""

    return datetime.strptime(text.strip(), "%H:%M").time()


def combine(date_str: str, hhmm: str) -> datetime:
    """Return the naive local datetime for a day and an ``HH:MM`` time."""

    return datetime.combine(parse_date_string(date_str), parse_hhmm(hhmm))


def yesterday(today: date) -> date:
    return today - timedelta(days=1)
