"""Assignment coordinator: keeps vehicle availability in step with alerts.

Vehicle writes are secondary effects of an alert mutation that has already
been committed. Each write runs in its own transaction; a failure is rolled
back, logged and reported in the returned outcomes, and never reaches the
caller of the primary operation. There is no retry and no compensation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.dispatch.policy import Caller, Operation, authorize
from rescuelink.dispatch.records import load_alert, store_error_message, store_guard
from rescuelink.enums import AlertStatus, VehicleStatus
from rescuelink.models.base import utcnow
from rescuelink.models.vehicle import Vehicle
from rescuelink.schemas import AlertDetail

logger = logging.getLogger(__name__)

# Vehicle status implied by an alert entering a given status.
STATUS_EFFECTS: dict[AlertStatus, VehicleStatus] = {
    AlertStatus.RESPONDING: VehicleStatus.RESPONDING,
    AlertStatus.RESOLVED: VehicleStatus.AVAILABLE,
}


@dataclass(frozen=True)
class VehicleChange:
    vehicle_id: int
    status: VehicleStatus
    reason: str


@dataclass(frozen=True)
class VehicleChangeOutcome:
    change: VehicleChange
    applied: bool
    error: str | None = None


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def plan_assignment(
    previous_vehicle_id: int | None,
    new_vehicle_id: int | None,
) -> list[VehicleChange]:
    """Vehicle writes needed when an alert's vehicle goes from previous to new.

    The released vehicle (if any) comes first, then the newly assigned one.
    """
    changes: list[VehicleChange] = []
    if previous_vehicle_id and previous_vehicle_id != new_vehicle_id:
        changes.append(VehicleChange(previous_vehicle_id, VehicleStatus.AVAILABLE, "released"))
    if new_vehicle_id:
        changes.append(VehicleChange(new_vehicle_id, VehicleStatus.ASSIGNED, "assigned"))
    return changes


def plan_status_change(
    vehicle_id: int | None,
    new_status: AlertStatus,
) -> list[VehicleChange]:
    target = STATUS_EFFECTS.get(new_status)
    if not vehicle_id or target is None:
        return []
    return [VehicleChange(vehicle_id, target, f"alert {new_status.value}")]


# ---------------------------------------------------------------------------
# Applying
# ---------------------------------------------------------------------------


async def _write_vehicle_status(
    db: AsyncSession,
    vehicle_id: int,
    status: VehicleStatus,
) -> int:
    """Set one vehicle's status in its own transaction. Returns rows matched."""
    result = await db.execute(
        update(Vehicle).where(Vehicle.id == vehicle_id).values(status=status.value)
    )
    await db.commit()
    return result.rowcount


async def apply_vehicle_changes(
    db: AsyncSession,
    alert_id: int,
    changes: list[VehicleChange],
) -> list[VehicleChangeOutcome]:
    """Apply planned vehicle writes in order, isolating each failure."""
    outcomes: list[VehicleChangeOutcome] = []
    for change in changes:
        try:
            matched = await _write_vehicle_status(db, change.vehicle_id, change.status)
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning(
                "Vehicle reconciliation failed (alert=%s vehicle=%s status=%s reason=%s): %s",
                alert_id,
                change.vehicle_id,
                change.status.value,
                change.reason,
                exc,
            )
            outcomes.append(
                VehicleChangeOutcome(change, applied=False, error=store_error_message(exc))
            )
            continue

        if not matched:
            logger.warning(
                "Vehicle reconciliation skipped (alert=%s vehicle=%s status=%s): vehicle not found",
                alert_id,
                change.vehicle_id,
                change.status.value,
            )
            outcomes.append(VehicleChangeOutcome(change, applied=False, error="Vehicle not found"))
            continue

        logger.info(
            "Vehicle %s set to %s (alert=%s reason=%s)",
            change.vehicle_id,
            change.status.value,
            alert_id,
            change.reason,
        )
        outcomes.append(VehicleChangeOutcome(change, applied=True))
    return outcomes


async def reconcile_vehicle_on_status_change(
    db: AsyncSession,
    *,
    alert_id: int,
    vehicle_id: int | None,
    new_status: AlertStatus,
) -> list[VehicleChangeOutcome]:
    return await apply_vehicle_changes(db, alert_id, plan_status_change(vehicle_id, new_status))


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------


async def assign(
    db: AsyncSession,
    caller: Caller,
    alert_id: int,
    *,
    vehicle_id: int | None = None,
    responder_id: int | None = None,
) -> AlertDetail:
    """Assign (or clear) the vehicle and responder of an alert.

    Both fields are replaced: passing ``None`` clears the assignment. The
    returned detail reflects the requested assignment as committed, before
    any vehicle status side effect.
    """
    authorize(caller, Operation.ASSIGN)
    vehicle_id = vehicle_id or None
    responder_id = responder_id or None

    async with store_guard("assign alert"):
        alert = await load_alert(db, alert_id)
        previous_vehicle_id = alert.assigned_vehicle_id

        alert.assigned_vehicle_id = vehicle_id
        alert.assigned_responder_id = responder_id
        alert.updated_at = utcnow()
        await db.commit()

        await db.refresh(alert, attribute_names=["vehicle", "responder"])
        detail = AlertDetail.with_assignment(alert)

    logger.info(
        "Alert %s assigned (vehicle=%s previous_vehicle=%s responder=%s by=%s)",
        alert_id,
        vehicle_id,
        previous_vehicle_id,
        responder_id,
        caller.id,
    )

    await apply_vehicle_changes(db, alert_id, plan_assignment(previous_vehicle_id, vehicle_id))
    return detail
