"""Shared FastAPI dependencies: caller authentication."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.config import settings
from rescuelink.database import get_db
from rescuelink.dispatch.policy import Caller
from rescuelink.enums import Role
from rescuelink.models.api_key import KEY_PREFIX, ApiKey
from rescuelink.models.user import User


async def get_current_caller(
    authorization: str | None = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> Caller:
    """Validate the ``Authorization: Bearer rl_...`` header and return the caller.

    Raises 401 if the key is missing, malformed, inactive, or its user has
    no recognised role.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must start with 'Bearer '.",
        )

    raw_key = authorization.removeprefix("Bearer ").strip()
    if not raw_key.startswith(KEY_PREFIX):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid API key format. Keys must start with '{KEY_PREFIX}'.",
        )

    key_hash = ApiKey.hash_key(raw_key, settings.api_key_salt)

    result = await db.execute(
        select(ApiKey).where(ApiKey.key_hash == key_hash, ApiKey.is_active.is_(True))
    )
    api_key = result.scalar_one_or_none()

    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or inactive API key.",
        )

    await db.execute(
        update(ApiKey)
        .where(ApiKey.id == api_key.id)
        .values(last_used_at=datetime.now(timezone.utc))
    )

    result = await db.execute(select(User).where(User.id == api_key.user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found for this API key.",
        )

    try:
        role = Role(user.role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User has no recognised role.",
        ) from None

    return Caller(id=user.id, role=role)
