"""Shared test fixtures for RescueLink tests.

Uses SQLite + aiosqlite for a fast, self-contained test database.
"""

from __future__ import annotations

import os

# Keep the app's own engine off Postgres during tests
os.environ.setdefault("RL_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rescuelink.config import settings
from rescuelink.models.alert import Alert
from rescuelink.models.api_key import ApiKey
from rescuelink.models.base import Base
from rescuelink.models.user import User
from rescuelink.models.vehicle import Vehicle

# Import all models so Base.metadata has them
import rescuelink.models  # noqa: F401


# ---------------------------------------------------------------------------
# Test database (SQLite in-memory via aiosqlite, one per test)
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# name -> (id, role, raw api key)
TEST_USERS: dict[str, tuple[int, str, str]] = {
    "admin": (1, "admin", "rl_test_admin_key"),
    "dispatcher": (2, "dispatcher", "rl_test_dispatcher_key"),
    "rescuer": (3, "rescuer", "rl_test_rescuer_key"),
    "user": (4, "user", "rl_test_user_key"),
    "other_user": (5, "user", "rl_test_other_user_key"),
}

AMBULANCE_ID = 10
FIRE_TRUCK_ID = 20


@pytest_asyncio.fixture
async def db_session():
    """Create tables and yield a fresh async session for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def users(db_session: AsyncSession) -> dict[str, int]:
    """Create one user per role (plus a second citizen) with API keys.

    Returns a mapping of fixture name to user id.
    """
    ids: dict[str, int] = {}
    for name, (user_id, role, raw_key) in TEST_USERS.items():
        db_session.add(
            User(
                id=user_id,
                first_name=name.replace("_", " ").title(),
                last_name="Tester",
                email=f"{name}@rescuelink.test",
                phone_number=f"+63 900 000 000{user_id}",
                role=role,
            )
        )
        db_session.add(
            ApiKey(
                user_id=user_id,
                key_hash=ApiKey.hash_key(raw_key, settings.api_key_salt),
                name=f"{name}-key",
                is_active=True,
            )
        )
        ids[name] = user_id
    await db_session.flush()
    return ids


@pytest_asyncio.fixture
async def vehicles(db_session: AsyncSession) -> dict[str, int]:
    """An ambulance already out on assignment and an available fire truck."""
    db_session.add_all(
        [
            Vehicle(
                id=AMBULANCE_ID,
                license_plate="AMB-0010",
                vehicle_type="ambulance",
                model="Toyota Hiace",
                status="assigned",
            ),
            Vehicle(
                id=FIRE_TRUCK_ID,
                license_plate="FTR-0020",
                vehicle_type="fire_truck",
                model="Isuzu FVR",
                status="available",
            ),
        ]
    )
    await db_session.flush()
    return {"ambulance": AMBULANCE_ID, "fire_truck": FIRE_TRUCK_ID}


@pytest_asyncio.fixture
async def make_alert(
    db_session: AsyncSession,
    users: dict[str, int],
) -> Callable[..., Awaitable[int]]:
    """Factory that inserts an alert and returns its id."""

    async def _make(**overrides: Any) -> int:
        fields: dict[str, Any] = {
            "user_id": users["user"],
            "alert_type": "accident",
            "severity": "high",
            "title": "Car accident on EDSA",
            "description": "Two vehicles collided",
            "location": "EDSA Guadalupe, Makati City",
            "latitude": 14.5547,
            "longitude": 121.0244,
            "status": "pending",
            "reported_at": datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
            "updated_at": datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        alert = Alert(**fields)
        db_session.add(alert)
        await db_session.flush()
        return alert.id

    return _make


@pytest_asyncio.fixture
async def vehicle_status(db_session: AsyncSession) -> Callable[[int], Awaitable[str]]:
    """Read a vehicle's status straight from the database."""

    async def _status(vehicle_id: int) -> str:
        result = await db_session.execute(
            select(Vehicle.status).where(Vehicle.id == vehicle_id)
        )
        return result.scalar_one()

    return _status


@pytest.fixture
def auth() -> Callable[[str], dict[str, str]]:
    """Build the Authorization header for one of the ``TEST_USERS``."""

    def _headers(name: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {TEST_USERS[name][2]}"}

    return _headers


# ---------------------------------------------------------------------------
# Override FastAPI dependencies for tests
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    users: dict[str, int],
    vehicles: dict[str, int],
) -> AsyncClient:
    """Create an httpx AsyncClient wired to the FastAPI app with test DB overrides."""
    from rescuelink.database import get_db
    from rescuelink.main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()
