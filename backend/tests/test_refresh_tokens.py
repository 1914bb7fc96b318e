"""
Tests for refresh token persistence and lifecycle.
"""

from datetime import timedelta

import pytest

from userauth.core.errors import InvalidRefreshTokenError, TokenExpiredError
from userauth.core.security import hash_token
from userauth.models.base import utc_now
from userauth.repositories.refresh_token import RefreshTokenRepository
from userauth.services.refresh_tokens import RefreshTokenService


@pytest.fixture
def repository(db_session):
    return RefreshTokenRepository(db_session)


@pytest.fixture
def service(repository):
    return RefreshTokenService(repository)


class TestRefreshTokenService:
    async def test_create_stores_only_the_hash(self, service, active_user):
        # Act
        token, record = await service.create_for_user(active_user.id)

        # Assert
        assert record.token_hash == hash_token(token)
        assert record.token_hash != token
        assert record.user_id == active_user.id
        assert record.revoked_at is None

    async def test_expiry_uses_refresh_lifetime(self, service, active_user):
        now = utc_now()

        _, record = await service.create_for_user(active_user.id, now=now)

        assert record.expires_at == now + timedelta(days=7)

    async def test_validate_returns_record(self, service, active_user):
        token, record = await service.create_for_user(active_user.id)

        assert (await service.validate(token)).id == record.id

    @pytest.mark.parametrize("token", ["", "unknown-token"])
    async def test_validate_unknown_token(self, service, token):
        with pytest.raises(InvalidRefreshTokenError):
            await service.validate(token)

    async def test_validate_revoked_token(self, service, active_user):
        token, _ = await service.create_for_user(active_user.id)
        await service.revoke(token)

        with pytest.raises(InvalidRefreshTokenError):
            await service.validate(token)

    async def test_validate_expired_token(self, service, active_user):
        # Arrange
        token, _ = await service.create_for_user(active_user.id, now=utc_now() - timedelta(days=8))

        # Act / Assert
        with pytest.raises(TokenExpiredError) as exc_info:
            await service.validate(token)
        assert exc_info.value.message == "Refresh token has expired"

    async def test_revoke_is_idempotent(self, service, active_user):
        token, _ = await service.create_for_user(active_user.id)

        assert await service.revoke(token) is True
        assert await service.revoke(token) is False
        assert await service.revoke("never-issued") is False

    async def test_is_valid(self, service, active_user):
        token, _ = await service.create_for_user(active_user.id)

        assert await service.is_valid(token) is True
        await service.revoke(token)
        assert await service.is_valid(token) is False

    async def test_revoke_all_for_user(self, service, active_user, make_user):
        # Arrange
        other = await make_user(email="other@example.com", user_name="other")
        for _ in range(3):
            await service.create_for_user(active_user.id)
        other_token, _ = await service.create_for_user(other.id)

        # Act
        count = await service.revoke_all_for_user(active_user.id)

        # Assert
        assert count == 3
        assert await service.find_active_for_user(active_user.id) == []
        assert await service.is_valid(other_token) is True
        assert await service.revoke_all_for_user(active_user.id) == 0

    async def test_find_active_excludes_expired(self, service, active_user):
        await service.create_for_user(active_user.id, now=utc_now() - timedelta(days=8))
        _, fresh = await service.create_for_user(active_user.id)

        active = await service.find_active_for_user(active_user.id)

        assert [r.id for r in active] == [fresh.id]

    async def test_delete_expired(self, service, active_user):
        await service.create_for_user(active_user.id, now=utc_now() - timedelta(days=8))
        token, _ = await service.create_for_user(active_user.id)

        assert await service.delete_expired() == 1
        assert await service.is_valid(token) is True


class TestRefreshTokenRepository:
    async def test_revoke_sets_timestamp(self, repository, active_user):
        record = await repository.create(active_user.id, "a" * 64, utc_now() + timedelta(days=1))
        revoked_at = utc_now()

        assert await repository.revoke(record.id, now=revoked_at) == 1
        assert await repository.revoke(record.id) == 0

        stored = await repository.find_by_token_hash("a" * 64)
        assert stored.revoked_at == revoked_at
        assert stored.is_valid() is False

    async def test_tokens_removed_with_user(self, repository, active_user, db_session):
        await repository.create(active_user.id, "b" * 64, utc_now() + timedelta(days=1))
        await db_session.commit()

        await db_session.delete(active_user)
        await db_session.commit()

        assert await repository.find_by_token_hash("b" * 64) is None
