"""Request and response models for the alert API.

Inbound models are deliberately permissive: every field is optional and
unknown keys are dropped, so that required-field and enum checks happen in
the dispatch layer and surface as 400 ``BadRequest`` rather than framework
validation errors.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, StrictFloat

from rescuelink.models.alert import Alert
from rescuelink.models.user import User
from rescuelink.models.vehicle import Vehicle

# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


class AlertCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    alert_type: str | None = None
    severity: str | None = None
    title: str | None = None
    description: str | None = None
    location: str | None = None
    latitude: StrictFloat | str | None = None
    longitude: StrictFloat | str | None = None
    image_url: str | None = None


class AlertUpdate(BaseModel):
    """Partial update. Only keys present in the request are applied."""

    model_config = ConfigDict(extra="ignore")

    alert_type: str | None = None
    severity: str | None = None
    title: str | None = None
    description: str | None = None
    location: str | None = None
    latitude: StrictFloat | str | None = None
    longitude: StrictFloat | str | None = None
    image_url: str | None = None
    status: str | None = None
    assigned_vehicle_id: int | None = None
    assigned_responder_id: int | None = None


class StatusChange(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str | None = None


class AssignmentRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    vehicle_id: int | None = None
    responder_id: int | None = None


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


class UserSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str | None = None
    phone_number: str | None = None

    @classmethod
    def contact(cls, user: User) -> UserSummary:
        """Summary used on list/detail reads."""
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            phone_number=user.phone_number,
        )

    @classmethod
    def reporter(cls, user: User) -> UserSummary:
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )

    @classmethod
    def responder(cls, user: User) -> UserSummary:
        return cls(id=user.id, first_name=user.first_name, last_name=user.last_name)


class VehicleSummary(BaseModel):
    id: int
    license_plate: str
    vehicle_type: str
    model: str | None = None
    status: str | None = None

    @classmethod
    def listing(cls, vehicle: Vehicle) -> VehicleSummary:
        return cls(
            id=vehicle.id,
            license_plate=vehicle.license_plate,
            vehicle_type=vehicle.vehicle_type,
            model=vehicle.model,
        )

    @classmethod
    def dispatch(cls, vehicle: Vehicle) -> VehicleSummary:
        """Summary returned by assignment, including the vehicle's status."""
        return cls(
            id=vehicle.id,
            license_plate=vehicle.license_plate,
            vehicle_type=vehicle.vehicle_type,
            status=vehicle.status,
        )


class AlertRecord(BaseModel):
    id: int
    user_id: int
    alert_type: str
    severity: str
    title: str
    description: str | None = None
    location: str
    latitude: float | None = None
    longitude: float | None = None
    image_url: str | None = None
    status: str
    assigned_vehicle_id: int | None = None
    assigned_responder_id: int | None = None
    reported_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, alert: Alert) -> AlertRecord:
        return cls(**_alert_fields(alert))


class AlertDetail(AlertRecord):
    """Alert joined with summaries of its related records."""

    user: UserSummary | None = None
    vehicle: VehicleSummary | None = None
    responder: UserSummary | None = None

    @classmethod
    def joined(cls, alert: Alert) -> AlertDetail:
        """Reporter, vehicle and responder summaries as shown on reads."""
        return cls(
            **_alert_fields(alert),
            user=UserSummary.contact(alert.user) if alert.user else None,
            vehicle=VehicleSummary.listing(alert.vehicle) if alert.vehicle else None,
            responder=UserSummary.contact(alert.responder) if alert.responder else None,
        )

    @classmethod
    def with_reporter(cls, alert: Alert) -> AlertDetail:
        """Newly created alert with the reporting user's summary."""
        return cls(
            **_alert_fields(alert),
            user=UserSummary.reporter(alert.user) if alert.user else None,
        )

    @classmethod
    def with_assignment(cls, alert: Alert) -> AlertDetail:
        """Alert with the assigned vehicle and responder summaries."""
        return cls(
            **_alert_fields(alert),
            vehicle=VehicleSummary.dispatch(alert.vehicle) if alert.vehicle else None,
            responder=UserSummary.responder(alert.responder) if alert.responder else None,
        )


class MessageResponse(BaseModel):
    message: str


def _alert_fields(alert: Alert) -> dict:
    return {
        "id": alert.id,
        "user_id": alert.user_id,
        "alert_type": alert.alert_type,
        "severity": alert.severity,
        "title": alert.title,
        "description": alert.description,
        "location": alert.location,
        "latitude": alert.latitude,
        "longitude": alert.longitude,
        "image_url": alert.image_url,
        "status": alert.status,
        "assigned_vehicle_id": alert.assigned_vehicle_id,
        "assigned_responder_id": alert.assigned_responder_id,
        "reported_at": alert.reported_at,
        "updated_at": alert.updated_at,
    }
