"""Shared fixtures for the test suite."""

from __future__ import annotations

import copy
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from habitkernel.deps import get_schema_registry
from habitkernel.kernel.default_schema import DEFAULT_SCHEMA
from habitkernel.kernel.schema import SchemaRegistry
from habitkernel.main import app


# ---------------------------------------------------------------------------
# In-memory schema registry (no schema file needed)
# ---------------------------------------------------------------------------

class StaticSchemaRegistry(SchemaRegistry):
    """Registry that serves a fixed schema instead of reading a file."""

    def __init__(self, schema: dict[str, Any]):
        super().__init__(path=None)
        self._static = schema

    def _read(self) -> dict[str, Any]:
        return copy.deepcopy(self._static)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def schema() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_SCHEMA)


@pytest.fixture()
def override_registry(schema):
    """Override the FastAPI dependency with the fixture schema."""
    registry = StaticSchemaRegistry(schema)
    app.dependency_overrides[get_schema_registry] = lambda: registry
    yield registry
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_registry):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def goal(name: str, schedule: dict[str, Any] | None = None) -> dict[str, Any]:
    """Helper to build a goal descriptor mapping."""
    desc: dict[str, Any] = {"name": name, "type": "checkbox"}
    if schedule is not None:
        desc["schedule"] = schedule
    return desc
