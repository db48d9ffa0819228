"""End-to-end tests for the health endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from tree_service.features.health.providers import DatabaseHealthProvider, HealthStatus

if TYPE_CHECKING:
    from fastapi import FastAPI
    from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def test_health_reports_database_ok(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert body["service"]
    assert body["timestamp"]


async def test_health_stays_ok_when_database_is_down(app: FastAPI, client: AsyncClient, tmp_path):
    broken = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/missing/dir/db.sqlite")
    app.state.engine = broken
    try:
        response = await client.get("/api/health")
    finally:
        await broken.dispose()

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "unavailable"


async def test_database_provider_result(db_engine):
    result = await DatabaseHealthProvider(db_engine, timeout=2.0).check_health()

    assert result.status is HealthStatus.HEALTHY
    assert result.is_healthy
    assert result.latency_ms >= 0
