"""User model: citizens, rescuers, dispatchers and admins."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rescuelink.enums import Role
from rescuelink.models.base import Base, IntegerPrimaryKeyMixin

if TYPE_CHECKING:
    from rescuelink.models.api_key import ApiKey


class User(IntegerPrimaryKeyMixin, Base):
    __tablename__ = "users"

    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default=Role.USER.value)

    # Relationships
    api_keys: Mapped[list[ApiKey]] = relationship("ApiKey", back_populates="user", lazy="selectin")
