"""Field schedules — which calendar dates a field is active on.

Schedule kinds:
  - "everyday" or absent: active every day (default)
  - "weekdays": specific days of the week (0=Sun..6=Sat)
  - "interval": every N days counting from a start date
  - "dates": explicit YYYY-MM-DD dates

Malformed descriptors fail open (active) with one exception: a weekdays
schedule without a usable ``days`` list is never active.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Literal, Mapping, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

from habitkernel.kernel.dates import day_of_week, is_date_id, to_date_id

logger = structlog.get_logger()

DAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


class EverydaySchedule(BaseModel):
    type: Literal["everyday"] = "everyday"


class WeekdaysSchedule(BaseModel):
    type: Literal["weekdays"] = "weekdays"
    days: list[int] | None = None  # None = malformed, never active


class IntervalSchedule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["interval"] = "interval"
    start_date: date | None = Field(default=None, alias="startDate")
    every: int | None = None


class DatesSchedule(BaseModel):
    type: Literal["dates"] = "dates"
    dates: list[str] | None = None


Schedule = Annotated[
    Union[EverydaySchedule, WeekdaysSchedule, IntervalSchedule, DatesSchedule],
    Field(discriminator="type"),
]

_SCHEDULE_MODELS = (EverydaySchedule, WeekdaysSchedule, IntervalSchedule, DatesSchedule)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _parse_days(raw: Any) -> list[int] | None:
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return None
    days = [_as_int(d) for d in raw]
    return [d for d in days if d is not None and 0 <= d <= 6]


def _parse_start_date(raw: Any) -> date | None:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not is_date_id(raw):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def _parse_dates(raw: Any) -> list[str] | None:
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return None
    return [d for d in raw if isinstance(d, str)]


def parse_schedule(raw: Any) -> EverydaySchedule | WeekdaysSchedule | IntervalSchedule | DatesSchedule:
    """Normalize a loose schedule mapping into one of the four variants.

    Never raises. Unknown or missing ``type`` becomes EverydaySchedule;
    payload fields of the wrong shape are kept as None on the variant.
    """
    if isinstance(raw, _SCHEDULE_MODELS):
        return raw
    if not isinstance(raw, Mapping):
        return EverydaySchedule()

    kind = raw.get("type")
    if kind == "weekdays":
        return WeekdaysSchedule(days=_parse_days(raw.get("days")))
    if kind == "interval":
        start = raw.get("startDate", raw.get("start_date"))
        return IntervalSchedule(start_date=_parse_start_date(start), every=_as_int(raw.get("every")))
    if kind == "dates":
        return DatesSchedule(dates=_parse_dates(raw.get("dates")))
    return EverydaySchedule()


def is_field_scheduled_for_date(schedule: Any, year: int, month: int, day: int) -> bool:
    """Is a field with this schedule active on year-month-day (month 1-12)?"""
    sched = parse_schedule(schedule)
    if isinstance(sched, EverydaySchedule):
        return True

    try:
        target = date(year, month, day)
    except (TypeError, ValueError):
        logger.warning("schedule_invalid_date", year=year, month=month, day=day)
        return True

    if isinstance(sched, WeekdaysSchedule):
        if sched.days is None:
            return False
        return day_of_week(year, month, day) in sched.days

    if isinstance(sched, IntervalSchedule):
        if sched.start_date is None or sched.every is None or sched.every < 1:
            return True
        diff_days = (target - sched.start_date).days
        return diff_days >= 0 and diff_days % sched.every == 0

    if isinstance(sched, DatesSchedule):
        if sched.dates is None:
            return True
        return to_date_id(year, month, day) in sched.dates

    return True


def describe_schedule(schedule: Any) -> str:
    """Human-readable summary, e.g. "Mon, Wed, Fri" or "Every 3 days"."""
    sched = parse_schedule(schedule)

    if isinstance(sched, WeekdaysSchedule) and sched.days is not None:
        days = sorted(set(sched.days))
        if not days:
            return "No days selected"
        if len(days) == 7:
            return "Every day"
        return ", ".join(DAY_ABBREVIATIONS[d] for d in days)

    if isinstance(sched, IntervalSchedule):
        if sched.every is None or sched.every <= 1:
            return "Every day"
        return f"Every {sched.every} days"

    if isinstance(sched, DatesSchedule):
        count = len(sched.dates or [])
        if count == 0:
            return "No dates"
        return f"{count} specific date{'s' if count > 1 else ''}"

    return "Every day"
