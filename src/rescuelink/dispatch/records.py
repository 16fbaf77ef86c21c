"""Shared record-store helpers for the dispatch layer."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.errors import NotFound, StoreFailure
from rescuelink.models.alert import Alert

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_guard(operation: str) -> AsyncIterator[None]:
    """Convert store errors raised by a primary operation into ``StoreFailure``."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store failure during %s: %s", operation, exc)
        raise StoreFailure(store_error_message(exc)) from exc


def store_error_message(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig) or "Server error"
    return str(exc) or "Server error"


async def load_alert(db: AsyncSession, alert_id: int) -> Alert:
    """Re-read an alert by id, refreshing any copy held by the session.

    Raises :class:`NotFound` when no alert has that id.
    """
    result = await db.execute(
        select(Alert)
        .where(Alert.id == alert_id)
        .execution_options(populate_existing=True)
    )
    alert = result.scalar_one_or_none()
    if alert is None:
        raise NotFound("Alert not found")
    return alert
