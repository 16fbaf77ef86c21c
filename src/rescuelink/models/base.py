"""SQLAlchemy declarative base with common columns."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all RescueLink ORM models."""

    pass


class TimestampMixin:
    """Mixin that adds a ``created_at`` column with UTC default."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


class IntegerPrimaryKeyMixin(TimestampMixin):
    """Mixin that adds a store-assigned integer primary key and ``created_at``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class UUIDPrimaryKeyMixin(TimestampMixin):
    """Mixin that adds a UUID primary key and ``created_at`` timestamp."""

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
