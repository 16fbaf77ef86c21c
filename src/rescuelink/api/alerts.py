"""Alert endpoints: list, get, report, update, status, assign, delete."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.api.deps import get_current_caller
from rescuelink.database import get_db
from rescuelink.dispatch import coordinator, lifecycle
from rescuelink.dispatch.policy import Caller
from rescuelink.schemas import (
    AlertCreate,
    AlertDetail,
    AlertRecord,
    AlertUpdate,
    AssignmentRequest,
    MessageResponse,
    StatusChange,
)

router = APIRouter(prefix="/api/v1/alerts", tags=["alerts"])


@router.get("", response_model=list[AlertDetail])
async def list_alerts(
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
    alert_status: str | None = Query(None, alias="status"),
    alert_type: str | None = Query(None),
    user_id: int | None = Query(None),
) -> list[AlertDetail]:
    return await lifecycle.list_alerts(
        db, caller, status=alert_status, alert_type=alert_type, user_id=user_id
    )


@router.get("/{alert_id}", response_model=AlertDetail)
async def get_alert(
    alert_id: int,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> AlertDetail:
    return await lifecycle.get_alert(db, caller, alert_id)


@router.post("", response_model=AlertDetail, status_code=status.HTTP_201_CREATED)
async def create_alert(
    body: AlertCreate,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> AlertDetail:
    return await lifecycle.create_alert(db, caller, body)


@router.put("/{alert_id}", response_model=AlertRecord)
async def update_alert(
    alert_id: int,
    body: AlertUpdate,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> AlertRecord:
    return await lifecycle.update_alert(
        db, caller, alert_id, body.model_dump(exclude_unset=True)
    )


@router.patch("/{alert_id}/status", response_model=AlertRecord)
async def set_alert_status(
    alert_id: int,
    body: StatusChange | None = None,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> AlertRecord:
    return await lifecycle.set_status(db, caller, alert_id, (body or StatusChange()).status)


@router.patch("/{alert_id}/assign", response_model=AlertDetail)
async def assign_alert(
    alert_id: int,
    body: AssignmentRequest | None = None,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> AlertDetail:
    body = body or AssignmentRequest()
    return await coordinator.assign(
        db,
        caller,
        alert_id,
        vehicle_id=body.vehicle_id,
        responder_id=body.responder_id,
    )


@router.delete("/{alert_id}", response_model=MessageResponse)
async def delete_alert(
    alert_id: int,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    return await lifecycle.delete_alert(db, caller, alert_id)
