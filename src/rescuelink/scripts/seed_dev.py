"""Seed development database with users, their API keys, and vehicles.

Usage:
    python -m rescuelink.scripts.seed_dev
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import yaml
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rescuelink.config import settings
from rescuelink.enums import Role, VehicleStatus
from rescuelink.models.api_key import ApiKey
from rescuelink.models.user import User
from rescuelink.models.vehicle import Vehicle


def load_seed_file(path: str | Path) -> dict[str, Any]:
    with open(path) as f:
        doc = yaml.safe_load(f) or {}
    return {"users": doc.get("users") or [], "vehicles": doc.get("vehicles") or []}


async def seed(db: AsyncSession, seed_file: str | Path) -> None:
    doc = load_seed_file(seed_file)
    for entry in doc["users"]:
        await _seed_user(db, entry)
    for entry in doc["vehicles"]:
        await _seed_vehicle(db, entry)
    await db.flush()


async def _seed_user(db: AsyncSession, entry: dict[str, Any]) -> None:
    role = Role(entry.get("role", Role.USER.value))

    result = await db.execute(select(User).where(User.email == entry["email"]))
    user = result.scalar_one_or_none()
    created = user is None
    if created:
        user = User(
            email=entry["email"],
            first_name=entry["first_name"],
            last_name=entry["last_name"],
            phone_number=entry.get("phone_number"),
            role=role.value,
        )
        db.add(user)
        await db.flush()
        print(f"  user  {user.email} created ({role.value})")
    else:
        print(f"  user  {user.email} already exists, skipping")

    raw_key = entry.get("api_key")
    if not raw_key:
        if not created:
            return
        # Printed once; only the hash is stored
        raw_key = ApiKey.generate_key()
        print(f"  key   {raw_key} generated for {user.email}")

    key_hash = ApiKey.hash_key(raw_key, settings.api_key_salt)
    result = await db.execute(select(ApiKey).where(ApiKey.key_hash == key_hash))
    if result.scalar_one_or_none():
        print(f"  key   {raw_key[:16]}... already exists, skipping")
        return

    db.add(ApiKey(user_id=user.id, key_hash=key_hash, name="dev-seed", is_active=True))
    await db.flush()
    print(f"  key   {raw_key[:16]}... created")


async def _seed_vehicle(db: AsyncSession, entry: dict[str, Any]) -> None:
    result = await db.execute(
        select(Vehicle).where(Vehicle.license_plate == entry["license_plate"])
    )
    if result.scalar_one_or_none():
        print(f"  unit  {entry['license_plate']} already exists, skipping")
        return

    status = VehicleStatus(entry.get("status", VehicleStatus.AVAILABLE.value))
    db.add(
        Vehicle(
            license_plate=entry["license_plate"],
            vehicle_type=entry["vehicle_type"],
            model=entry.get("model"),
            status=status.value,
        )
    )
    print(f"  unit  {entry['license_plate']} ({entry['vehicle_type']})")


async def main() -> None:
    from rescuelink.database import async_session_factory, init_db

    await init_db()
    async with async_session_factory() as db:
        await seed(db, settings.seed_file)
        await db.commit()
    print("\nSeed complete.")


if __name__ == "__main__":
    print("Seeding RescueLink dev database...")
    print(f"  DB: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'configured'}")
    asyncio.run(main())
