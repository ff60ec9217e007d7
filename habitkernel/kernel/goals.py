"""Goal completion — pure stateless ratios that drive heatmaps, charts, streaks.

Daily goals are schedule-aware: a goal not scheduled for the day counts
neither as done nor as expected. Monthly goals have no schedule.
A period with nothing to count has ratio 0.0, never NaN.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

from habitkernel.config import settings
from habitkernel.kernel.schedule import is_field_scheduled_for_date
from habitkernel.kernel.schema import FieldDescriptor, get_custom_sections


@dataclass(frozen=True, slots=True)
class Completion:
    ratio: float  # 0–1
    checked: int
    considered: int
    skipped: list[str] = field(default_factory=list)  # not scheduled for the date


def _goal_schedules(descriptors: Any) -> Iterator[tuple[str, Any]]:
    """Yield (name, schedule) from descriptors, raw mappings, or a schema section."""
    if isinstance(descriptors, Mapping):
        for name, definition in descriptors.items():
            schedule = definition.get("schedule") if isinstance(definition, Mapping) else None
            yield name, schedule
        return
    for desc in descriptors or ():
        if isinstance(desc, FieldDescriptor):
            yield desc.name, desc.schedule
        elif isinstance(desc, Mapping) and "name" in desc:
            yield desc["name"], desc.get("schedule")


def daily_completion(
    daily_goal_states: Mapping[str, Any] | None,
    daily_goal_descriptors: Iterable[Any] | Mapping[str, Any] | None,
    year: int,
    month: int,
    day: int,
) -> Completion:
    """Checked / scheduled daily goals for one date, with counts."""
    states = daily_goal_states or {}
    checked = 0
    considered = 0
    skipped: list[str] = []
    for name, schedule in _goal_schedules(daily_goal_descriptors):
        if not is_field_scheduled_for_date(schedule, year, month, day):
            skipped.append(name)
            continue
        considered += 1
        if states.get(name) is True:
            checked += 1
    ratio = checked / considered if considered else 0.0
    return Completion(ratio=ratio, checked=checked, considered=considered, skipped=skipped)


def monthly_completion(monthly_goal_states: Mapping[str, Any] | None) -> Completion:
    """Checked / all monthly goals present in the state map."""
    states = monthly_goal_states or {}
    checked = sum(1 for v in states.values() if v is True)
    considered = len(states)
    ratio = checked / considered if considered else 0.0
    return Completion(ratio=ratio, checked=checked, considered=considered)


def compute_daily_completion(
    daily_goal_states: Mapping[str, Any] | None,
    daily_goal_descriptors: Iterable[Any] | Mapping[str, Any] | None,
    year: int,
    month: int,
    day: int,
) -> float:
    """Daily completion ratio (0–1). Goals not scheduled for the date are excluded."""
    return daily_completion(daily_goal_states, daily_goal_descriptors, year, month, day).ratio


def compute_monthly_completion(monthly_goal_states: Mapping[str, Any] | None) -> float:
    """Monthly completion ratio (0–1), unweighted."""
    return monthly_completion(monthly_goal_states).ratio


# ---------------------------------------------------------------------------
# Empty state builders
# ---------------------------------------------------------------------------

def create_empty_daily_goals(schema: Mapping[str, Any]) -> dict[str, bool]:
    section = schema.get(settings.daily_goals_section) or {}
    return {name: False for name in section}


def create_empty_monthly_goals(schema: Mapping[str, Any]) -> dict[str, bool]:
    section = schema.get(settings.monthly_goals_section) or {}
    return {name: False for name in section}


def create_empty_fields(schema: Mapping[str, Any]) -> dict[str, dict[str, None]]:
    """Every custom section -> every field name -> None."""
    return {
        section_name: {field_name: None for field_name in (schema.get(section_name) or {})}
        for section_name in get_custom_sections(schema)
    }
