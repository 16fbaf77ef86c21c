"""Tests for authentication, meta routes and error rendering."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.models.api_key import ApiKey


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_root_redirects_to_docs(client: AsyncClient):
    resp = await client.get("/")
    assert resp.status_code in (302, 307)
    assert resp.headers["location"] == "/docs"


@pytest.mark.asyncio
async def test_unknown_route(client: AsyncClient):
    resp = await client.get("/api/v1/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Route not found"}


@pytest.mark.asyncio
async def test_missing_authorization(client: AsyncClient):
    resp = await client.get("/api/v1/alerts")
    assert resp.status_code == 401
    assert "Bearer" in resp.json()["message"]


@pytest.mark.asyncio
async def test_malformed_key(client: AsyncClient):
    resp = await client.get("/api/v1/alerts", headers={"Authorization": "Bearer sk_nope"})
    assert resp.status_code == 401
    assert "rl_" in resp.json()["message"]


@pytest.mark.asyncio
async def test_unknown_key(client: AsyncClient):
    resp = await client.get("/api/v1/alerts", headers={"Authorization": "Bearer rl_unknown"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_inactive_key(client: AsyncClient, auth, db_session: AsyncSession):
    await db_session.execute(update(ApiKey).where(ApiKey.user_id == 2).values(is_active=False))

    resp = await client.get("/api/v1/alerts", headers=auth("dispatcher"))
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid or inactive API key."}


@pytest.mark.asyncio
async def test_non_integer_id_is_bad_request(client: AsyncClient, auth):
    resp = await client.get("/api/v1/alerts/abc", headers=auth("admin"))
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Invalid request")


@pytest.mark.asyncio
async def test_non_integer_vehicle_id_is_bad_request(client: AsyncClient, auth, make_alert):
    alert_id = await make_alert()
    resp = await client.patch(
        f"/api/v1/alerts/{alert_id}/assign",
        json={"vehicle_id": "ambulance"},
        headers=auth("dispatcher"),
    )
    assert resp.status_code == 400


def test_engine_echoes_sql_only_in_dev():
    from rescuelink.config import settings
    from rescuelink.database import engine

    assert engine.echo == (settings.environment == "dev")
