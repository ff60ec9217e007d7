"""Endpoint tests — FastAPI app via httpx."""

from __future__ import annotations

import pytest

from habitkernel.config import settings


class TestEvaluateEndpoint:
    @pytest.mark.asyncio
    async def test_evaluate_with_fields(self, client):
        resp = await client.post(
            "/kernel/evaluate",
            json={
                "expression": "Running Distance / (Running Time / 60)",
                "field_values": {"Running Distance": 5, "Running Time": 30, "Calories": 400},
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["value"] == 10
        assert body["dependencies"] == ["Running Distance", "Running Time"]

    @pytest.mark.asyncio
    async def test_evaluate_failure_is_null(self, client):
        resp = await client.post("/kernel/evaluate", json={"expression": "10 / 0"})
        assert resp.status_code == 200
        assert resp.json()["value"] is None

    @pytest.mark.asyncio
    async def test_evaluate_deep_nesting_is_null(self, client):
        resp = await client.post("/kernel/evaluate", json={"expression": "(" * 1000 + "1" + ")" * 1000})
        assert resp.status_code == 200
        assert resp.json()["value"] is None

    @pytest.mark.asyncio
    async def test_evaluate_missing_expression(self, client):
        resp = await client.post("/kernel/evaluate", json={})
        assert resp.status_code == 200
        assert resp.json() == {"value": None, "dependencies": []}


class TestScheduleEndpoints:
    @pytest.mark.asyncio
    async def test_check_weekdays(self, client):
        resp = await client.post(
            "/kernel/schedule/check",
            json={"schedule": {"type": "weekdays", "days": [1, 3, 5]}, "date": "2026-02-15"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"date_id": "2026-02-15", "active": False, "description": "Mon, Wed, Fri"}

    @pytest.mark.asyncio
    async def test_check_malformed_interval_fails_open(self, client):
        resp = await client.post(
            "/kernel/schedule/check",
            json={"schedule": {"type": "interval"}, "date": "2026-02-02"},
        )
        assert resp.status_code == 200
        assert resp.json()["active"] is True

    @pytest.mark.asyncio
    async def test_check_invalid_date_422(self, client):
        resp = await client.post("/kernel/schedule/check", json={"schedule": None, "date": "2026-02-30"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_check_missing_date_422(self, client):
        resp = await client.post("/kernel/schedule/check", json={"schedule": None})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_describe(self, client):
        resp = await client.post(
            "/kernel/schedule/describe",
            json={"schedule": {"type": "dates", "dates": ["2026-02-10"]}},
        )
        assert resp.status_code == 200
        assert resp.json() == {"description": "1 specific date"}


class TestCompletionEndpoints:
    @pytest.mark.asyncio
    async def test_daily_uses_schema_goals(self, client):
        goals = {
            "Workout at least 10 minutes": True,
            "Drink 2L of water": True,
            "Read for 30 minutes": False,
            "No junk food": False,
            "Gym session": True,
        }
        resp = await client.post("/kernel/completion/daily", json={"date": "2026-02-15", "goals": goals})
        assert resp.status_code == 200
        body = resp.json()
        assert body["ratio"] == 0.5
        assert body["considered"] == 4
        assert body["skipped"] == ["Gym session"]

    @pytest.mark.asyncio
    async def test_daily_with_explicit_descriptors(self, client):
        resp = await client.post(
            "/kernel/completion/daily",
            json={
                "date": "2026-02-16",
                "goals": {"A": True},
                "descriptors": [{"name": "A"}, {"name": "B", "schedule": {"type": "weekdays", "days": [1]}}],
            },
        )
        assert resp.status_code == 200
        assert resp.json()["ratio"] == 0.5

    @pytest.mark.asyncio
    async def test_daily_empty_schema(self, client, override_registry):
        override_registry._static = {}
        override_registry.reload()
        resp = await client.post("/kernel/completion/daily", json={"date": "2026-02-15", "goals": {"A": True}})
        assert resp.status_code == 200
        assert resp.json()["ratio"] == 0.0

    @pytest.mark.asyncio
    async def test_daily_counts_goal_with_odd_definition(self, client, override_registry):
        override_registry._static = {
            "Daily Goals": {
                "Stretch": {"type": "checkbox", "unit": 5},
                "Walk": {"type": "checkbox", "chartGroup": ["x"]},
                "Meditate": {"type": "checkbox"},
            }
        }
        override_registry.reload()
        resp = await client.post(
            "/kernel/completion/daily",
            json={"date": "2026-02-15", "goals": {"Meditate": True}},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["considered"] == 3
        assert body["checked"] == 1

    @pytest.mark.asyncio
    async def test_monthly(self, client):
        resp = await client.post(
            "/kernel/completion/monthly",
            json={"goals": {"a": True, "b": False, "c": False, "d": True}},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["ratio"] == 0.5
        assert body["checked"] == 2
        assert body["considered"] == 4

    @pytest.mark.asyncio
    async def test_monthly_empty(self, client):
        resp = await client.post("/kernel/completion/monthly", json={})
        assert resp.json()["ratio"] == 0.0


class TestCalculatedEndpoint:
    @pytest.mark.asyncio
    async def test_calculated_values(self, client):
        resp = await client.post(
            "/kernel/calculated/Daily Log",
            json={"date": "2026-02-16", "values": {"Running Time": 30, "Running Distance": 5}},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "section": "Daily Log",
            "date_id": "2026-02-16",
            "values": {"Running Pace": 10.0},
        }

    @pytest.mark.asyncio
    async def test_calculated_missing_dependency(self, client):
        resp = await client.post("/kernel/calculated/Daily Log", json={"values": {"Running Time": 30}})
        assert resp.status_code == 200
        assert resp.json()["values"] == {"Running Pace": None}
        assert resp.json()["date_id"] is None

    @pytest.mark.asyncio
    async def test_unknown_section_404(self, client):
        resp = await client.post("/kernel/calculated/Nope", json={"values": {}})
        assert resp.status_code == 404


class TestSchemaEndpoints:
    @pytest.mark.asyncio
    async def test_get_schema(self, client):
        resp = await client.get("/kernel/schema")
        assert resp.status_code == 200
        assert "Daily Goals" in resp.json()

    @pytest.mark.asyncio
    async def test_validate_invalid(self, client):
        resp = await client.post("/kernel/schema/validate", json={"S": {"Pace": {"type": "velocity"}}})
        assert resp.status_code == 200
        body = resp.json()
        assert body["valid"] is False
        assert len(body["errors"]) == 1

    @pytest.mark.asyncio
    async def test_validate_valid(self, client, schema):
        resp = await client.post("/kernel/schema/validate", json=schema)
        assert resp.json() == {"valid": True, "errors": []}


class TestApiKey:
    @pytest.mark.asyncio
    async def test_rejects_missing_key(self, client, monkeypatch):
        monkeypatch.setattr(settings, "kernel_api_key", "secret")
        resp = await client.post("/kernel/completion/monthly", json={})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_accepts_header_key(self, client, monkeypatch):
        monkeypatch.setattr(settings, "kernel_api_key", "secret")
        resp = await client.post("/kernel/completion/monthly", json={}, headers={"X-API-Key": "secret"})
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_accepts_bearer(self, client, monkeypatch):
        monkeypatch.setattr(settings, "kernel_api_key", "secret")
        resp = await client.post(
            "/kernel/completion/monthly", json={}, headers={"Authorization": "Bearer secret"}
        )
        assert resp.status_code == 200


class TestAppEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_root_lists_routes(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["kernel"]["evaluate"] == "/kernel/evaluate"
