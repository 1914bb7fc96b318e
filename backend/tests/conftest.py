"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Database setup/teardown on the in-memory SQLite engine
- HTTP client, user and token fixtures
"""

import os
import sys
from pathlib import Path

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test_jwt_secret_at_least_32_characters_long"
os.environ["JWT_EXPIRES_IN"] = "15m"
os.environ["JWT_REFRESH_EXPIRES_IN"] = "7d"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_JSON"] = "false"
os.environ["DISABLE_RATE_LIMIT"] = "true"  # Disable rate limiting for tests

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from httpx import ASGITransport, AsyncClient  # noqa: E402


DEFAULT_PASSWORD = "Secret.123"


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Lower the bcrypt work factor so tests don't spend seconds hashing."""
    monkeypatch.setattr("userauth.core.security.SALT_ROUNDS", 4)


@pytest.fixture(scope="function")
async def db_session():
    """
    Provide a database session for tests.

    Creates tables before the test and drops them after.
    """
    from userauth.core.database import async_session_maker, engine
    from userauth.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session):
    """HTTP client bound to the application, with tables in place."""
    from userauth.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db_session):
    """
    Factory that inserts a committed user.

    Example:
        user = await make_user(user_name="bob", status=UserStatus.BANNED)
    """
    from userauth.core.security import hash_password
    from userauth.models.user import User, UserRole, UserStatus

    async def _make_user(
        email: str = "jane@example.com",
        user_name: str = "jane",
        password: str = DEFAULT_PASSWORD,
        status: UserStatus = UserStatus.ACTIVE,
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(
            email=email,
            user_name=user_name,
            password=hash_password(password),
            status=status,
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    """Build an Authorization header carrying a valid access token for a user."""
    from userauth.core.security import token_service
    from userauth.services.auth import user_claims

    def _auth_headers(user) -> dict:
        token = token_service.generate_access_token(user_claims(user))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
async def active_user(make_user):
    return await make_user()


@pytest.fixture
async def admin_user(make_user):
    from userauth.models.user import UserRole

    return await make_user(email="admin@example.com", user_name="admin", role=UserRole.ADMIN)
