"""Tracking schema — field descriptors, section queries, validation.

The schema is a JSON object with section names as keys. Reserved sections
("Daily Goals", "Monthly Goals" by default) hold checkbox goals; every
other section is a custom data section. The kernel reads the schema as
configuration and never mutates it.
"""

from __future__ import annotations

import copy
import json
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from habitkernel.config import settings
from habitkernel.kernel.dates import is_date_id
from habitkernel.kernel.default_schema import DEFAULT_SCHEMA
from habitkernel.kernel.schedule import Schedule, parse_schedule

logger = structlog.get_logger()

TrackingSchema = dict[str, dict[str, dict[str, Any]]]

SCHEDULE_TYPES = ("everyday", "weekdays", "interval", "dates")


class FieldType(str, Enum):
    time = "time"
    number = "number"
    checkbox = "checkbox"
    velocity = "velocity"
    text = "text"


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    type: FieldType
    unit: str | None = None
    calculation: str | None = None  # required when type == velocity
    schedule: Schedule | None = None  # None = every day
    chart_group: str | None = Field(default=None, alias="chartGroup")
    chart_type: str | None = Field(default=None, alias="chartType")

    @field_validator("schedule", mode="before")
    @classmethod
    def _normalize_schedule(cls, value: Any) -> Any:
        if value is None:
            return None
        # Loose input -> well-formed variant payload; never a validation error
        return parse_schedule(value).model_dump(by_alias=True)


class SchemaValidation(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class FieldRef(BaseModel):
    section: str
    field: str


class TypeChange(FieldRef):
    old_type: str | None = None
    new_type: str | None = None


class SchemaConflicts(BaseModel):
    removed_sections: list[str] = Field(default_factory=list)
    removed_fields: list[FieldRef] = Field(default_factory=list)
    changed_types: list[TypeChange] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.removed_sections or self.removed_fields or self.changed_types)


# ---------------------------------------------------------------------------
# Section / field queries
# ---------------------------------------------------------------------------

def _reserved() -> tuple[str, str]:
    return settings.daily_goals_section, settings.monthly_goals_section


def get_sections(schema: Mapping[str, Any]) -> list[str]:
    """Section names in display order: daily goals, custom sections, monthly goals."""
    daily, monthly = _reserved()
    sections: list[str] = []
    if daily in schema:
        sections.append(daily)
    sections.extend(k for k in schema if k not in (daily, monthly))
    if monthly in schema:
        sections.append(monthly)
    return sections


def get_custom_sections(schema: Mapping[str, Any]) -> list[str]:
    daily, monthly = _reserved()
    return [k for k in schema if k not in (daily, monthly)]


def get_fields(schema: Mapping[str, Any], section_name: str) -> list[FieldDescriptor]:
    """Descriptors for every field in a section, in schema order.

    Definitions that don't validate are logged and skipped.
    """
    section = schema.get(section_name)
    if not isinstance(section, Mapping):
        return []
    fields: list[FieldDescriptor] = []
    for name, definition in section.items():
        if not isinstance(definition, Mapping):
            logger.warning("schema_field_skipped", section=section_name, field=name)
            continue
        try:
            fields.append(FieldDescriptor.model_validate({**definition, "name": name}))
        except ValidationError as e:
            logger.warning("schema_field_skipped", section=section_name, field=name, error=str(e))
    return fields


def get_daily_goals(schema: Mapping[str, Any]) -> list[FieldDescriptor]:
    return get_fields(schema, settings.daily_goals_section)


def get_monthly_goals(schema: Mapping[str, Any]) -> list[FieldDescriptor]:
    return get_fields(schema, settings.monthly_goals_section)


def count_daily_goals(schema: Mapping[str, Any]) -> int:
    goals = schema.get(settings.daily_goals_section)
    return len(goals) if isinstance(goals, Mapping) else 0


def count_monthly_goals(schema: Mapping[str, Any]) -> int:
    goals = schema.get(settings.monthly_goals_section)
    return len(goals) if isinstance(goals, Mapping) else 0


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate_schedule(label: str, schedule: Any, errors: list[str]) -> None:
    if not isinstance(schedule, Mapping):
        errors.append(f'Field "{label}" schedule must be an object')
        return
    kind = schedule.get("type")
    if not kind or kind == "everyday":
        return
    if kind not in SCHEDULE_TYPES:
        errors.append(f'Field "{label}" has invalid schedule type "{kind}"')
        return

    if kind == "weekdays":
        days = schedule.get("days")
        if not isinstance(days, list):
            errors.append(f'Field "{label}" weekdays schedule missing "days" array')
        elif any(isinstance(d, bool) or not isinstance(d, int) or d < 0 or d > 6 for d in days):
            errors.append(f'Field "{label}" weekdays schedule has invalid day values')

    elif kind == "interval":
        every = schedule.get("every")
        if isinstance(every, bool) or not isinstance(every, int) or every < 1:
            errors.append(f'Field "{label}" interval schedule needs "every" >= 1')
        if not is_date_id(schedule.get("startDate")):
            errors.append(f'Field "{label}" interval schedule needs a valid "startDate" (YYYY-MM-DD)')

    elif kind == "dates":
        dates = schedule.get("dates")
        if not isinstance(dates, list):
            errors.append(f'Field "{label}" dates schedule missing "dates" array')
        elif not all(is_date_id(d) for d in dates):
            errors.append(f'Field "{label}" dates schedule has invalid date values (expected YYYY-MM-DD)')


def validate_schema(schema: Any) -> SchemaValidation:
    """Check a schema's structure. Collects every problem instead of stopping at the first."""
    if not isinstance(schema, Mapping):
        return SchemaValidation(valid=False, errors=["Schema must be an object"])

    valid_types = [t.value for t in FieldType]
    errors: list[str] = []

    for section_name, section in schema.items():
        if not isinstance(section, Mapping):
            errors.append(f'Section "{section_name}" must be an object')
            continue

        for field_name, field_def in section.items():
            label = f"{section_name}.{field_name}"
            if not isinstance(field_def, Mapping):
                errors.append(f'Field "{label}" must be an object')
                continue

            field_type = field_def.get("type")
            if not field_type:
                errors.append(f'Field "{label}" is missing a "type" property')
            elif field_type not in valid_types:
                errors.append(
                    f'Field "{label}" has invalid type "{field_type}". Valid: {", ".join(valid_types)}'
                )

            if field_type == FieldType.velocity.value and not field_def.get("calculation"):
                errors.append(f'Calculated field "{label}" is missing a "calculation" property')

            if field_def.get("schedule") is not None:
                _validate_schedule(label, field_def["schedule"], errors)

    return SchemaValidation(valid=not errors, errors=errors)


def find_schema_conflicts(old_schema: Mapping[str, Any], new_schema: Mapping[str, Any]) -> SchemaConflicts:
    """Sections/fields that disappear or change type between two schemas.

    Stored data under those keys no longer fits the new schema.
    """
    conflicts = SchemaConflicts()
    for section_name, old_section in old_schema.items():
        new_section = new_schema.get(section_name)
        if not new_section:
            conflicts.removed_sections.append(section_name)
            continue

        for field_name, old_field in (old_section or {}).items():
            new_field = new_section.get(field_name)
            if not new_field:
                conflicts.removed_fields.append(FieldRef(section=section_name, field=field_name))
                continue

            old_type = (old_field or {}).get("type")
            new_type = new_field.get("type")
            if old_type != new_type:
                conflicts.changed_types.append(
                    TypeChange(section=section_name, field=field_name, old_type=old_type, new_type=new_type)
                )
    return conflicts


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class SchemaRegistry:
    """Holds the active schema. Loaded explicitly, reloadable.

    Reads a JSON file when ``path`` is set; falls back to DEFAULT_SCHEMA when
    there is no file, or the file is unreadable or fails validation.
    """

    def __init__(self, path: str | None = None):
        self.path = path
        self._schema: TrackingSchema | None = None

    def load(self) -> TrackingSchema:
        self._schema = self._read()
        return self._schema

    def reload(self) -> TrackingSchema:
        logger.info("schema_reload", path=self.path)
        return self.load()

    def get(self) -> TrackingSchema:
        if self._schema is None:
            return self.load()
        return self._schema

    def _read(self) -> TrackingSchema:
        if not self.path:
            return copy.deepcopy(DEFAULT_SCHEMA)

        try:
            data = json.loads(Path(self.path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("schema_load_failed", path=self.path, error=str(e))
            return copy.deepcopy(DEFAULT_SCHEMA)

        validation = validate_schema(data)
        if not validation.valid:
            logger.error("schema_invalid", path=self.path, errors=validation.errors)
            return copy.deepcopy(DEFAULT_SCHEMA)
        return data
