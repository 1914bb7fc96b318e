"""
Seed the admin user.

Upserts an ACTIVE admin account from the ADMIN_EMAIL, ADMIN_USER_NAME and
ADMIN_PASSWORD settings. Running it again updates the existing row
(matched by email) instead of creating a duplicate.

Usage:
    python scripts/seed_users.py

Security:
    Set ADMIN_PASSWORD in the environment; the default is publicly known.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy.ext.asyncio import AsyncSession

from userauth.core.config import Settings, settings
from userauth.core.database import async_session_maker
from userauth.core.logging_config import setup_logging
from userauth.core.security import hash_password
from userauth.models.user import User, UserRole, UserStatus
from userauth.repositories.user import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedUser:
    email: str
    user_name: str
    password: str
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE


def default_seed_users(config: Settings = settings) -> List[SeedUser]:
    return [
        SeedUser(
            email=config.admin_email.strip().lower(),
            user_name=config.admin_user_name.strip(),
            password=config.admin_password,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
    ]


def validate_seed_users(users: Iterable[SeedUser]) -> None:
    """
    Reject seed data that would violate constraints.

    Raises:
        ValueError: Duplicate email or user name, email without "@", or
            empty password
    """
    emails = set()
    user_names = set()
    for user in users:
        if user.email in emails:
            raise ValueError(f"Duplicate email found: {user.email}")
        emails.add(user.email)

        if user.user_name in user_names:
            raise ValueError(f"Duplicate userName found: {user.user_name}")
        user_names.add(user.user_name)

        if "@" not in user.email:
            raise ValueError(f"Invalid email format: {user.email}")

        if not user.password or not user.password.strip():
            raise ValueError(f"Empty password for user: {user.email}")


async def seed_users(session: AsyncSession, users: List[SeedUser]) -> Tuple[int, int]:
    """
    Upsert users by email.

    Returns:
        (created, updated) counts
    """
    validate_seed_users(users)
    repository = UserRepository(session)
    created = updated = 0

    for seed in users:
        existing = await repository.find_by_email(seed.email)
        if existing is None:
            await repository.create(
                User(
                    email=seed.email,
                    user_name=seed.user_name,
                    password=hash_password(seed.password),
                    role=seed.role,
                    status=seed.status,
                )
            )
            created += 1
            logger.info("Seed user created", extra={"email": seed.email})
        else:
            await repository.update(
                existing,
                {
                    "user_name": seed.user_name,
                    "password": hash_password(seed.password),
                    "role": seed.role,
                    "status": seed.status,
                },
            )
            updated += 1
            logger.info("Seed user updated", extra={"email": seed.email})

    return created, updated


async def main() -> None:
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    async with async_session_maker() as session:
        try:
            created, updated = await seed_users(session, default_seed_users())
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("User seeding failed")
            raise

    print(f"Users seeded: {created} created, {updated} updated")


if __name__ == "__main__":
    asyncio.run(main())
