"""SQLAlchemy ORM models for RescueLink."""

from rescuelink.models.alert import Alert
from rescuelink.models.api_key import ApiKey
from rescuelink.models.base import Base
from rescuelink.models.user import User
from rescuelink.models.vehicle import Vehicle

__all__ = [
    "Alert",
    "ApiKey",
    "Base",
    "User",
    "Vehicle",
]
