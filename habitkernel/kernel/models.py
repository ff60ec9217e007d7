"""Request/response contracts for the kernel HTTP surface — Pydantic v2 models.

Schedules and field values arrive as loose JSON and are handed to the
kernel unvalidated: malformed schedules are a defined input (fail-open /
fail-closed), not a 422. Dates travel as YYYY-MM-DD strings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class EvaluateRequest(BaseModel):
    expression: str | None = None
    field_values: dict[str, Any] = Field(default_factory=dict)


class EvaluateResponse(BaseModel):
    value: float | None = None  # null = no displayable value
    dependencies: list[str] = Field(default_factory=list)


class ScheduleCheckRequest(BaseModel):
    schedule: dict[str, Any] | None = None
    date: str  # YYYY-MM-DD


class ScheduleCheckResponse(BaseModel):
    date_id: str
    active: bool
    description: str


class ScheduleDescribeRequest(BaseModel):
    schedule: dict[str, Any] | None = None


class ScheduleDescribeResponse(BaseModel):
    description: str


class DailyCompletionRequest(BaseModel):
    date: str  # YYYY-MM-DD
    goals: dict[str, Any] = Field(default_factory=dict)
    # Goal descriptors ({"name": ..., "schedule": ...}); omitted = the active schema's daily goals
    descriptors: list[dict[str, Any]] | None = None


class MonthlyCompletionRequest(BaseModel):
    goals: dict[str, Any] = Field(default_factory=dict)


class CompletionResponse(BaseModel):
    ratio: float = 0.0  # 0–1
    checked: int = 0
    considered: int = 0
    skipped: list[str] = Field(default_factory=list)


class CalculatedFieldsRequest(BaseModel):
    date: str | None = None  # YYYY-MM-DD, echoed back
    values: dict[str, Any] = Field(default_factory=dict)


class CalculatedFieldsResponse(BaseModel):
    section: str
    date_id: str | None = None
    values: dict[str, float | None] = Field(default_factory=dict)
