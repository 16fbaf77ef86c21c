"""Alert lifecycle: listing, reporting, editing, status changes and deletion.

Each operation authorizes the caller against the policy table before it
touches the store. Status changes commit first and then hand the assigned
vehicle to the coordinator for reconciliation.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.config import settings
from rescuelink.dispatch import coordinator
from rescuelink.dispatch.policy import (
    Caller,
    Operation,
    authorize,
    check_ownership,
    is_owner_scoped,
)
from rescuelink.dispatch.records import load_alert, store_guard
from rescuelink.enums import AlertStatus, AlertType, Severity, values
from rescuelink.errors import BadRequest
from rescuelink.models.alert import Alert
from rescuelink.models.base import utcnow
from rescuelink.schemas import AlertCreate, AlertDetail, AlertRecord, MessageResponse

logger = logging.getLogger(__name__)

# Used only when strict transitions are enabled. Same-state moves are always allowed.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    AlertStatus.PENDING.value: frozenset(
        {AlertStatus.RESPONDING.value, AlertStatus.CANCELLED.value}
    ),
    AlertStatus.RESPONDING.value: frozenset(
        {AlertStatus.PENDING.value, AlertStatus.RESOLVED.value, AlertStatus.CANCELLED.value}
    ),
    AlertStatus.RESOLVED.value: frozenset(),
    AlertStatus.CANCELLED.value: frozenset({AlertStatus.PENDING.value}),
}

_ENUM_FIELDS: dict[str, tuple[type, str]] = {
    "alert_type": (AlertType, "Invalid alert type"),
    "severity": (Severity, "Invalid severity level"),
    "status": (AlertStatus, "Invalid status"),
}

_COORDINATE_LIMITS = {"latitude": 90.0, "longitude": 180.0}


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _check_enum(field: str, value: Any) -> str:
    enum_cls, message = _ENUM_FIELDS[field]
    if value not in values(enum_cls):
        raise BadRequest(message)
    return value


def _parse_coordinate(field: str, value: Any) -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise BadRequest(f"Invalid {field}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"Invalid {field}") from None
    if not math.isfinite(number) or abs(number) > _COORDINATE_LIMITS[field]:
        raise BadRequest(f"Invalid {field}")
    return number


def validate_new_alert(payload: AlertCreate) -> dict[str, Any]:
    """Check a creation payload and return the cleaned column values."""
    title = _clean_text(payload.title)
    location = _clean_text(payload.location)
    if not payload.alert_type or not payload.severity or not title or not location:
        raise BadRequest("Missing required fields")

    return {
        "alert_type": _check_enum("alert_type", payload.alert_type),
        "severity": _check_enum("severity", payload.severity),
        "title": title,
        "description": _clean_text(payload.description),
        "location": location,
        "latitude": _parse_coordinate("latitude", payload.latitude),
        "longitude": _parse_coordinate("longitude", payload.longitude),
        "image_url": payload.image_url or None,
    }


def validate_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Check the keys present in a partial update and return cleaned values."""
    cleaned: dict[str, Any] = {}
    for field, value in changes.items():
        if field in _ENUM_FIELDS:
            cleaned[field] = _check_enum(field, value)
        elif field in ("title", "location"):
            text = _clean_text(value)
            if text is None:
                raise BadRequest(f"{field.capitalize()} must not be empty")
            cleaned[field] = text
        elif field == "description":
            cleaned[field] = _clean_text(value)
        elif field in _COORDINATE_LIMITS:
            cleaned[field] = _parse_coordinate(field, value)
        elif field == "image_url":
            cleaned[field] = value or None
        elif field in ("assigned_vehicle_id", "assigned_responder_id"):
            cleaned[field] = value
    return cleaned


def check_transition(current: str, new: str, *, strict: bool) -> None:
    """Reject a status move that the strict transition table forbids.

    Without ``strict`` every move is accepted, including same-state and
    backward ones.
    """
    if not strict or current == new:
        return
    allowed = ALLOWED_TRANSITIONS.get(current, frozenset())
    if new not in allowed:
        raise BadRequest(
            f"Invalid status transition: {current} -> {new}. "
            f"Allowed from {current}: {sorted(allowed)}"
        )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def list_alerts(
    db: AsyncSession,
    caller: Caller,
    *,
    status: str | None = None,
    alert_type: str | None = None,
    user_id: int | None = None,
) -> list[AlertDetail]:
    """Alerts visible to ``caller``, newest first.

    Owner-scoped callers always get only their own alerts, whatever
    ``user_id`` they asked for.
    """
    authorize(caller, Operation.LIST)

    query = select(Alert)
    if status:
        query = query.where(Alert.status == status)
    if alert_type:
        query = query.where(Alert.alert_type == alert_type)
    if is_owner_scoped(caller):
        query = query.where(Alert.user_id == caller.id)
    elif user_id is not None:
        query = query.where(Alert.user_id == user_id)

    query = query.order_by(Alert.reported_at.desc(), Alert.id.desc())

    async with store_guard("list alerts"):
        result = await db.execute(query.execution_options(populate_existing=True))
        alerts = result.scalars().all()

    return [AlertDetail.joined(a) for a in alerts]


async def get_alert(db: AsyncSession, caller: Caller, alert_id: int) -> AlertDetail:
    authorize(caller, Operation.GET)
    async with store_guard("get alert"):
        alert = await load_alert(db, alert_id)
    check_ownership(caller, alert.user_id)
    return AlertDetail.joined(alert)


async def create_alert(db: AsyncSession, caller: Caller, payload: AlertCreate) -> AlertDetail:
    """Report a new alert owned by ``caller``. No vehicle is touched."""
    authorize(caller, Operation.CREATE)
    fields = validate_new_alert(payload)

    alert = Alert(user_id=caller.id, status=AlertStatus.PENDING.value, **fields)
    async with store_guard("create alert"):
        db.add(alert)
        await db.flush()
        await db.refresh(alert, attribute_names=["user"])

    logger.info(
        "Alert %s reported (type=%s severity=%s user=%s)",
        alert.id,
        alert.alert_type,
        alert.severity,
        caller.id,
    )
    return AlertDetail.with_reporter(alert)


async def update_alert(
    db: AsyncSession,
    caller: Caller,
    alert_id: int,
    changes: dict[str, Any],
) -> AlertRecord:
    """Merge ``changes`` into the alert. Keys not present are left untouched."""
    authorize(caller, Operation.UPDATE)
    cleaned = validate_changes(changes)

    async with store_guard("update alert"):
        alert = await load_alert(db, alert_id)
        if "status" in cleaned:
            check_transition(
                alert.status, cleaned["status"], strict=settings.strict_status_transitions
            )
        for field, value in cleaned.items():
            setattr(alert, field, value)
        alert.updated_at = utcnow()
        await db.flush()

    logger.info("Alert %s updated (fields=%s by=%s)", alert_id, sorted(cleaned), caller.id)
    return AlertRecord.from_model(alert)


async def set_status(
    db: AsyncSession,
    caller: Caller,
    alert_id: int,
    status: str | None,
    *,
    strict: bool | None = None,
) -> AlertRecord:
    """Move an alert to ``status`` and reconcile its assigned vehicle.

    The returned record does not reflect the reconciliation outcome.
    """
    if status not in values(AlertStatus):
        raise BadRequest("Invalid status")
    authorize(caller, Operation.SET_STATUS)
    if strict is None:
        strict = settings.strict_status_transitions

    async with store_guard("update alert status"):
        alert = await load_alert(db, alert_id)
        previous_status = alert.status
        check_transition(previous_status, status, strict=strict)

        alert.status = status
        alert.updated_at = utcnow()
        vehicle_id = alert.assigned_vehicle_id
        await db.commit()
        record = AlertRecord.from_model(alert)

    logger.info(
        "Alert %s status %s -> %s (vehicle=%s by=%s)",
        alert_id,
        previous_status,
        status,
        vehicle_id,
        caller.id,
    )

    await coordinator.reconcile_vehicle_on_status_change(
        db,
        alert_id=alert_id,
        vehicle_id=vehicle_id,
        new_status=AlertStatus(status),
    )
    return record


async def delete_alert(db: AsyncSession, caller: Caller, alert_id: int) -> MessageResponse:
    """Delete an alert. The assigned vehicle, if any, is left as it is."""
    authorize(caller, Operation.DELETE)
    async with store_guard("delete alert"):
        result = await db.execute(delete(Alert).where(Alert.id == alert_id))
        await db.flush()

    logger.info("Alert %s deleted (rows=%s by=%s)", alert_id, result.rowcount, caller.id)
    return MessageResponse(message="Alert deleted successfully")
