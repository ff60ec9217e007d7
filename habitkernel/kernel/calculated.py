"""Calculated (velocity) fields — raw section values in, formula results out.

Builds the evaluator's numeric snapshot from stored entry values: time
fields become minutes since midnight, everything else goes through float().
Values that are empty or unconvertible are left out, so any formula that
references them evaluates to None.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from habitkernel.kernel.calc_engine import evaluate
from habitkernel.kernel.schema import FieldDescriptor, FieldType, get_fields

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def time_to_minutes(value: Any) -> int | None:
    """'HH:MM' -> minutes since midnight. None for anything else."""
    if not isinstance(value, str):
        return None
    m = _TIME_RE.match(value.strip())
    if not m:
        return None
    return int(m.group(1)) * 60 + int(m.group(2))


def _number(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def numeric_snapshot(
    section_values: Mapping[str, Any] | None,
    field_defs: Mapping[str, FieldDescriptor],
) -> dict[str, float]:
    snapshot: dict[str, float] = {}
    for name, raw in (section_values or {}).items():
        desc = field_defs.get(name)
        if desc is not None and desc.type is FieldType.time:
            value = time_to_minutes(raw)
        else:
            value = _number(raw)
        if value is not None:
            snapshot[name] = float(value)
    return snapshot


def compute_calculated_fields(
    schema: Mapping[str, Any],
    section_name: str,
    section_values: Mapping[str, Any] | None,
) -> dict[str, float | None]:
    """Evaluate every velocity field of a section against one day's values."""
    fields = get_fields(schema, section_name)
    field_defs = {f.name: f for f in fields}
    snapshot = numeric_snapshot(section_values, field_defs)
    return {
        f.name: evaluate(f.calculation, snapshot)
        for f in fields
        if f.type is FieldType.velocity
    }
