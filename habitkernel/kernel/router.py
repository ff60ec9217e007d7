"""Kernel HTTP router — evaluation, schedules, completion, schema."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from habitkernel.auth import verify_api_key
from habitkernel.config import settings
from habitkernel.deps import get_schema_registry
from habitkernel.kernel import calc_engine, calculated, goals, schedule
from habitkernel.kernel.dates import parse_date_id, to_date_id
from habitkernel.kernel.models import (
    CalculatedFieldsRequest,
    CalculatedFieldsResponse,
    CompletionResponse,
    DailyCompletionRequest,
    EvaluateRequest,
    EvaluateResponse,
    MonthlyCompletionRequest,
    ScheduleCheckRequest,
    ScheduleCheckResponse,
    ScheduleDescribeRequest,
    ScheduleDescribeResponse,
)
from habitkernel.kernel.schema import (
    SchemaRegistry,
    SchemaValidation,
    validate_schema,
)

router = APIRouter(prefix="/kernel", tags=["kernel"])


def _parse_date(value: str, name: str = "date") -> tuple[int, int, int]:
    try:
        return parse_date_id(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date for '{name}': {value}")


def _completion_response(result: goals.Completion) -> CompletionResponse:
    return CompletionResponse(
        ratio=result.ratio,
        checked=result.checked,
        considered=result.considered,
        skipped=list(result.skipped),
    )


# ---------------------------------------------------------------------------
# /kernel/evaluate
# ---------------------------------------------------------------------------


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_expression(
    body: EvaluateRequest,
    _: str = Depends(verify_api_key),
) -> EvaluateResponse:
    return EvaluateResponse(
        value=calc_engine.evaluate(body.expression, body.field_values),
        dependencies=calc_engine.get_dependencies(body.expression, list(body.field_values)),
    )


# ---------------------------------------------------------------------------
# /kernel/schedule
# ---------------------------------------------------------------------------


@router.post("/schedule/check", response_model=ScheduleCheckResponse)
async def schedule_check(
    body: ScheduleCheckRequest,
    _: str = Depends(verify_api_key),
) -> ScheduleCheckResponse:
    year, month, day = _parse_date(body.date)
    return ScheduleCheckResponse(
        date_id=to_date_id(year, month, day),
        active=schedule.is_field_scheduled_for_date(body.schedule, year, month, day),
        description=schedule.describe_schedule(body.schedule),
    )


@router.post("/schedule/describe", response_model=ScheduleDescribeResponse)
async def schedule_describe(
    body: ScheduleDescribeRequest,
    _: str = Depends(verify_api_key),
) -> ScheduleDescribeResponse:
    return ScheduleDescribeResponse(description=schedule.describe_schedule(body.schedule))


# ---------------------------------------------------------------------------
# /kernel/completion
# ---------------------------------------------------------------------------


@router.post("/completion/daily", response_model=CompletionResponse)
async def completion_daily(
    body: DailyCompletionRequest,
    registry: SchemaRegistry = Depends(get_schema_registry),
    _: str = Depends(verify_api_key),
) -> CompletionResponse:
    year, month, day = _parse_date(body.date)
    descriptors: Any = body.descriptors
    if descriptors is None:
        # Raw section: a goal with an odd unit or chart option still counts
        descriptors = registry.get().get(settings.daily_goals_section) or {}
    return _completion_response(goals.daily_completion(body.goals, descriptors, year, month, day))


@router.post("/completion/monthly", response_model=CompletionResponse)
async def completion_monthly(
    body: MonthlyCompletionRequest,
    _: str = Depends(verify_api_key),
) -> CompletionResponse:
    return _completion_response(goals.monthly_completion(body.goals))


# ---------------------------------------------------------------------------
# /kernel/calculated/{section}
# ---------------------------------------------------------------------------


@router.post("/calculated/{section}", response_model=CalculatedFieldsResponse)
async def calculated_fields(
    section: str,
    body: CalculatedFieldsRequest,
    registry: SchemaRegistry = Depends(get_schema_registry),
    _: str = Depends(verify_api_key),
) -> CalculatedFieldsResponse:
    schema_doc = registry.get()
    if section not in schema_doc:
        raise HTTPException(status_code=404, detail=f"Unknown section: {section}")

    date_id = None
    if body.date is not None:
        date_id = to_date_id(*_parse_date(body.date))

    return CalculatedFieldsResponse(
        section=section,
        date_id=date_id,
        values=calculated.compute_calculated_fields(schema_doc, section, body.values),
    )


# ---------------------------------------------------------------------------
# /kernel/schema
# ---------------------------------------------------------------------------


@router.get("/schema")
async def schema_get(
    registry: SchemaRegistry = Depends(get_schema_registry),
    _: str = Depends(verify_api_key),
) -> dict[str, Any]:
    return registry.get()


@router.post("/schema/validate", response_model=SchemaValidation)
async def schema_validate(
    payload: Any = Body(...),
    _: str = Depends(verify_api_key),
) -> SchemaValidation:
    return validate_schema(payload)
