"""Calendar helpers — canonical date identifiers and day arithmetic.

Every boundary (entries, schedules, HTTP) identifies a day as ``YYYY-MM-DD``
and a month as ``YYYY-MM``. Day-of-week indexes are 0=Sunday..6=Saturday.
"""

from __future__ import annotations

import calendar
import re
from datetime import date

DATE_ID_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_date_id(value: object) -> bool:
    """True for strings shaped like YYYY-MM-DD (shape only, not calendar validity)."""
    return isinstance(value, str) and DATE_ID_RE.match(value) is not None


def to_date_id(year: int, month: int, day: int) -> str:
    """Format a date as YYYY-MM-DD (zero-padded)."""
    return f"{year}-{month:02d}-{day:02d}"


def to_month_id(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def parse_date_id(date_id: str) -> tuple[int, int, int]:
    """Parse YYYY-MM-DD into (year, month, day).

    Raises ValueError if the string is not a real calendar date.
    """
    if not is_date_id(date_id):
        raise ValueError(f"Expected YYYY-MM-DD, got {date_id!r}")
    parsed = date.fromisoformat(date_id)
    return parsed.year, parsed.month, parsed.day


def day_of_week(year: int, month: int, day: int) -> int:
    """0=Sunday .. 6=Saturday (Python's weekday() is 0=Monday)."""
    return (date(year, month, day).weekday() + 1) % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def is_weekend(year: int, month: int, day: int) -> bool:
    return day_of_week(year, month, day) in (0, 6)
