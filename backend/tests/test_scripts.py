"""
Tests for the maintenance scripts (user seeding, token cleanup).
"""

from datetime import timedelta

import pytest

from scripts.cleanup_refresh_tokens import cleanup_refresh_tokens
from scripts.seed_users import SeedUser, default_seed_users, seed_users, validate_seed_users
from userauth.core.config import Settings
from userauth.core.security import verify_password
from userauth.models.base import utc_now
from userauth.models.user import UserRole, UserStatus
from userauth.repositories.refresh_token import RefreshTokenRepository
from userauth.repositories.user import UserRepository


class TestValidateSeedUsers:
    @pytest.mark.parametrize(
        "users,message",
        [
            (
                [SeedUser("a@example.com", "a", "Secret.123"), SeedUser("a@example.com", "b", "Secret.123")],
                "Duplicate email found: a@example.com",
            ),
            (
                [SeedUser("a@example.com", "same", "Secret.123"), SeedUser("b@example.com", "same", "Secret.123")],
                "Duplicate userName found: same",
            ),
            ([SeedUser("no-at-sign", "a", "Secret.123")], "Invalid email format: no-at-sign"),
            ([SeedUser("a@example.com", "a", "  ")], "Empty password for user: a@example.com"),
        ],
    )
    def test_rejects_bad_seed_data(self, users, message):
        with pytest.raises(ValueError) as exc_info:
            validate_seed_users(users)

        assert str(exc_info.value) == message

    def test_default_seed_is_active_admin(self):
        config = Settings(admin_email=" Root@Example.com ", admin_user_name="root", admin_password="Root.1234")

        [admin] = default_seed_users(config)

        assert admin.email == "root@example.com"
        assert admin.role == UserRole.ADMIN
        assert admin.status == UserStatus.ACTIVE


class TestSeedUsers:
    async def test_creates_then_updates(self, db_session):
        # Arrange
        seeds = [SeedUser("root@example.com", "root", "Root.1234", role=UserRole.ADMIN)]

        # Act
        first = await seed_users(db_session, seeds)
        second = await seed_users(
            db_session, [SeedUser("root@example.com", "root2", "Other.1234", role=UserRole.ADMIN)]
        )

        # Assert
        assert first == (1, 0)
        assert second == (0, 1)
        user = await UserRepository(db_session).find_by_email("root@example.com")
        assert user.user_name == "root2"
        assert user.role == UserRole.ADMIN
        assert user.status == UserStatus.ACTIVE
        assert verify_password("Other.1234", user.password)


class TestCleanupRefreshTokens:
    async def test_deletes_only_expired(self, db_session, active_user):
        # Arrange
        repository = RefreshTokenRepository(db_session)
        await repository.create(active_user.id, "e" * 64, utc_now() - timedelta(minutes=1))
        await repository.create(active_user.id, "f" * 64, utc_now() + timedelta(days=1))

        # Act
        deleted = await cleanup_refresh_tokens(db_session)

        # Assert
        assert deleted == 1
        assert await repository.find_by_token_hash("e" * 64) is None
        assert await repository.find_by_token_hash("f" * 64) is not None


class TestExportOpenapi:
    def test_writes_contract_files(self, tmp_path):
        from scripts.export_openapi import export_openapi

        document = export_openapi(tmp_path)

        assert "/api/v1/auth/sign-in" in document["paths"]
        assert "/api/v1/users/{user_id}" in document["paths"]
        assert (tmp_path / "openapi.json").exists()
        assert (tmp_path / "openapi.yaml").exists()
        assert "signIn(input: SignInInput!): AuthResponse!" in (tmp_path / "schema.graphql").read_text()
