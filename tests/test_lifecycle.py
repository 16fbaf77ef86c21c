"""Tests for alert validation, transitions and store-failure handling."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.dispatch import lifecycle
from rescuelink.dispatch.policy import Caller
from rescuelink.enums import Role
from rescuelink.errors import BadRequest, Forbidden, StoreFailure
from rescuelink.schemas import AlertCreate

ADMIN = Caller(id=1, role=Role.ADMIN)
CITIZEN = Caller(id=4, role=Role.USER)


def _create_payload(**overrides) -> AlertCreate:
    fields = {
        "alert_type": "fire",
        "severity": "critical",
        "title": "Warehouse fire",
        "location": "Pier 4, Manila",
    }
    fields.update(overrides)
    return AlertCreate(**fields)


class _BrokenSession:
    """Stand-in session whose every query fails at the driver level."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT alerts", {}, Exception("connection refused"))


class TestValidateNewAlert:
    def test_cleans_fields(self) -> None:
        fields = lifecycle.validate_new_alert(
            _create_payload(title="  Warehouse fire ", description=" ", latitude="", longitude="120.98")
        )
        assert fields["title"] == "Warehouse fire"
        assert fields["description"] is None
        assert fields["latitude"] is None
        assert fields["longitude"] == pytest.approx(120.98)
        assert fields["image_url"] is None

    def test_zero_is_a_valid_coordinate(self) -> None:
        fields = lifecycle.validate_new_alert(_create_payload(latitude=0, longitude=0))
        assert fields["latitude"] == 0.0
        assert fields["longitude"] == 0.0

    @pytest.mark.parametrize("value", ["abc", "nan", "91", "-90.5"])
    def test_bad_latitude(self, value: str) -> None:
        with pytest.raises(BadRequest, match="Invalid latitude"):
            lifecycle.validate_new_alert(_create_payload(latitude=value))

    def test_empty_enum_is_missing(self) -> None:
        with pytest.raises(BadRequest, match="Missing required fields"):
            lifecycle.validate_new_alert(_create_payload(severity=""))


class TestValidateChanges:
    def test_only_present_keys_are_returned(self) -> None:
        assert lifecycle.validate_changes({"severity": "low"}) == {"severity": "low"}

    def test_assignment_fields_pass_through(self) -> None:
        cleaned = lifecycle.validate_changes({"assigned_vehicle_id": 20, "image_url": ""})
        assert cleaned == {"assigned_vehicle_id": 20, "image_url": None}

    def test_blank_location_rejected(self) -> None:
        with pytest.raises(BadRequest, match="Location must not be empty"):
            lifecycle.validate_changes({"location": "   "})

    @pytest.mark.parametrize("value", [True, False])
    def test_boolean_coordinate_rejected(self, value: bool) -> None:
        with pytest.raises(BadRequest, match="Invalid longitude"):
            lifecycle.validate_changes({"longitude": value})


class TestCheckTransition:
    def test_lenient_allows_anything(self) -> None:
        lifecycle.check_transition("resolved", "responding", strict=False)

    @pytest.mark.parametrize(
        ("current", "new"),
        [
            ("pending", "responding"),
            ("pending", "cancelled"),
            ("responding", "resolved"),
            ("responding", "pending"),
            ("cancelled", "pending"),
            ("resolved", "resolved"),
        ],
    )
    def test_strict_allowed(self, current: str, new: str) -> None:
        lifecycle.check_transition(current, new, strict=True)

    @pytest.mark.parametrize(
        ("current", "new"),
        [
            ("pending", "resolved"),
            ("resolved", "pending"),
            ("resolved", "responding"),
            ("cancelled", "resolved"),
        ],
    )
    def test_strict_rejected(self, current: str, new: str) -> None:
        with pytest.raises(BadRequest, match="Invalid status transition"):
            lifecycle.check_transition(current, new, strict=True)


@pytest.mark.asyncio
async def test_list_store_failure_is_reported():
    with pytest.raises(StoreFailure) as excinfo:
        await lifecycle.list_alerts(_BrokenSession(), ADMIN)
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "connection refused"


@pytest.mark.asyncio
async def test_denied_caller_never_reaches_store():
    with pytest.raises(Forbidden):
        await lifecycle.delete_alert(_BrokenSession(), CITIZEN, 1)
    with pytest.raises(Forbidden):
        await lifecycle.update_alert(_BrokenSession(), CITIZEN, 1, {"title": "x"})


@pytest.mark.asyncio
async def test_strict_set_status_keeps_alert_unchanged(
    db_session: AsyncSession, make_alert, vehicles: dict[str, int], vehicle_status
):
    alert_id = await make_alert(status="resolved", assigned_vehicle_id=10)

    with pytest.raises(BadRequest):
        await lifecycle.set_status(db_session, ADMIN, alert_id, "responding", strict=True)

    detail = await lifecycle.get_alert(db_session, ADMIN, alert_id)
    assert detail.status == "resolved"
    assert await vehicle_status(10) == "assigned"


@pytest.mark.asyncio
async def test_store_failure_renders_as_server_error(
    client: AsyncClient,
    auth,
    make_alert,
    monkeypatch: pytest.MonkeyPatch,
):
    alert_id = await make_alert()

    async def failing_load(db, alert_id):
        raise OperationalError("SELECT alerts", {}, Exception("disk I/O error"))

    monkeypatch.setattr(lifecycle, "load_alert", failing_load)

    resp = await client.get(f"/api/v1/alerts/{alert_id}", headers=auth("admin"))
    assert resp.status_code == 500
    assert resp.json() == {"message": "disk I/O error"}
