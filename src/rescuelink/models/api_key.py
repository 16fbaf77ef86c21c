"""API key model: hashed keys that identify a calling user."""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rescuelink.models.base import Base, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from rescuelink.models.user import User

KEY_PREFIX = "rl_"


class ApiKey(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "api_keys"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    key_hash: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="default")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="api_keys")

    @staticmethod
    def generate_key() -> str:
        """Generate a new API key in the format ``rl_<hex>``."""
        return f"{KEY_PREFIX}{secrets.token_hex(24)}"

    @staticmethod
    def hash_key(raw_key: str, salt: str) -> str:
        """Produce a SHA-256 hash of the raw key with the given salt."""
        return hashlib.sha256(f"{salt}:{raw_key}".encode()).hexdigest()
