"""Fixed string enumerations shared by models, schemas and dispatch logic."""

from __future__ import annotations

from enum import Enum


class AlertType(str, Enum):
    MEDICAL = "medical"
    FIRE = "fire"
    ACCIDENT = "accident"
    CRIME = "crime"
    NATURAL_DISASTER = "natural_disaster"
    OTHER = "other"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    """Alert lifecycle. New alerts start as PENDING."""

    PENDING = "pending"
    RESPONDING = "responding"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    RESPONDING = "responding"
    MAINTENANCE = "maintenance"
    OFFLINE = "offline"


class Role(str, Enum):
    USER = "user"
    RESCUER = "rescuer"
    DISPATCHER = "dispatcher"
    ADMIN = "admin"


def values(enum_cls: type[Enum]) -> list[str]:
    """Return the string values of ``enum_cls`` in declaration order."""
    return [member.value for member in enum_cls]
