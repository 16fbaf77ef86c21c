"""Vehicle model: response units whose availability follows dispatch."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from rescuelink.enums import VehicleStatus
from rescuelink.models.base import Base, IntegerPrimaryKeyMixin


class Vehicle(IntegerPrimaryKeyMixin, Base):
    __tablename__ = "vehicles"

    license_plate: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    vehicle_type: Mapped[str] = mapped_column(String, nullable=False)
    model: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=VehicleStatus.AVAILABLE.value
    )
