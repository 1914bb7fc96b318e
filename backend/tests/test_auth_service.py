"""
Tests for the authentication use cases.

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import asyncio

import pytest

from userauth.api.dependencies import build_auth_service
from userauth.core.database import async_session_maker
from userauth.core.errors import (
    AccountBannedError,
    AccountInactiveError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    NotFoundError,
)
from userauth.core.security import dummy_password_hash, token_service
from userauth.models.user import UserStatus
from userauth.repositories.refresh_token import RefreshTokenRepository
from userauth.repositories.user import UserRepository
from userauth.schemas.user import UserCreateRequest
from userauth.services.auth import AuthService, ensure_can_authenticate, user_claims
from userauth.services.events import EventBus
from userauth.services.refresh_tokens import RefreshTokenService
from userauth.services.users import UserService

DEFAULT_PASSWORD = "Secret.123"


@pytest.fixture
def auth_service(db_session):
    users = UserService(UserRepository(db_session), events=EventBus())
    refresh_tokens = RefreshTokenService(RefreshTokenRepository(db_session))
    return AuthService(users, refresh_tokens)


class TestSignUp:
    async def test_sign_up_registers_user(self, auth_service):
        user = await auth_service.sign_up(
            UserCreateRequest(email="new@example.com", user_name="newbie", password="Secret.123")
        )

        assert user.status == UserStatus.REGISTERED
        assert user.email == "new@example.com"


class TestSignIn:
    async def test_sign_in_with_email(self, auth_service, active_user):
        # Act
        result = await auth_service.sign_in("JANE@example.com", DEFAULT_PASSWORD)

        # Assert
        assert result.user.id == active_user.id
        claims = token_service.validate_access_token(result.tokens.access_token)
        assert claims["sub"] == active_user.id
        assert claims["user"]["userName"] == "jane"
        assert "password" not in claims["user"]
        assert result.tokens.expires_at > result.tokens.created_at

    async def test_sign_in_with_user_name(self, auth_service, active_user):
        result = await auth_service.sign_in("  jane ", DEFAULT_PASSWORD)

        assert result.user.id == active_user.id
        assert len(result.tokens.refresh_token) == 64

    async def test_wrong_password(self, auth_service, active_user):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await auth_service.sign_in("jane", "Wrong.123")

        assert exc_info.value.status_code == 401

    async def test_unknown_user(self, auth_service):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.sign_in("ghost@example.com", DEFAULT_PASSWORD)

    async def test_unknown_user_still_checks_a_password(self, auth_service, monkeypatch):
        # Arrange
        checked = []

        def fake_verify(password, hashed):
            checked.append((password, hashed))
            return False

        monkeypatch.setattr("userauth.services.auth.verify_password", fake_verify)

        # Act
        with pytest.raises(InvalidCredentialsError):
            await auth_service.sign_in("ghost", DEFAULT_PASSWORD)

        # Assert
        assert checked == [(DEFAULT_PASSWORD, dummy_password_hash())]

    async def test_banned_user(self, auth_service, make_user):
        await make_user(status=UserStatus.BANNED)

        with pytest.raises(AccountBannedError) as exc_info:
            await auth_service.sign_in("jane", DEFAULT_PASSWORD)

        assert exc_info.value.status_code == 403

    @pytest.mark.parametrize("status", [UserStatus.INACTIVE, UserStatus.REGISTERED])
    async def test_inactive_user(self, auth_service, make_user, status):
        await make_user(status=status)

        with pytest.raises(AccountInactiveError):
            await auth_service.sign_in("jane", DEFAULT_PASSWORD)

    async def test_status_not_revealed_without_password(self, auth_service, make_user):
        await make_user(status=UserStatus.BANNED)

        with pytest.raises(InvalidCredentialsError):
            await auth_service.sign_in("jane", "Wrong.123")


class TestRefresh:
    async def test_refresh_rotates_token(self, auth_service, active_user):
        # Arrange
        signed_in = await auth_service.sign_in("jane", DEFAULT_PASSWORD)

        # Act
        refreshed = await auth_service.refresh(signed_in.tokens.refresh_token)

        # Assert
        assert refreshed.user.id == active_user.id
        assert refreshed.tokens.refresh_token != signed_in.tokens.refresh_token
        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh(signed_in.tokens.refresh_token)

    async def test_concurrent_refresh_redeems_token_once(self, auth_service, active_user, db_session):
        # Arrange
        signed_in = await auth_service.sign_in("jane", DEFAULT_PASSWORD)
        await db_session.commit()

        async def refresh_in_own_session(token):
            async with async_session_maker() as session:
                result = await build_auth_service(session).refresh(token)
                await session.commit()
                return result

        # Act
        outcomes = await asyncio.gather(
            refresh_in_own_session(signed_in.tokens.refresh_token),
            refresh_in_own_session(signed_in.tokens.refresh_token),
            return_exceptions=True,
        )

        # Assert
        failures = [o for o in outcomes if isinstance(o, Exception)]
        successes = [o for o in outcomes if not isinstance(o, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], InvalidRefreshTokenError)

    async def test_refresh_unknown_token(self, auth_service):
        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh("not-a-real-token")

    async def test_refresh_rejected_after_ban(self, auth_service, active_user, db_session):
        signed_in = await auth_service.sign_in("jane", DEFAULT_PASSWORD)
        active_user.status = UserStatus.BANNED
        await db_session.flush()

        with pytest.raises(AccountBannedError):
            await auth_service.refresh(signed_in.tokens.refresh_token)


class TestSignOut:
    async def test_sign_out_revokes_token(self, auth_service, active_user):
        signed_in = await auth_service.sign_in("jane", DEFAULT_PASSWORD)

        assert await auth_service.sign_out(signed_in.tokens.refresh_token) == 1
        assert await auth_service.sign_out(signed_in.tokens.refresh_token) == 0

        with pytest.raises(InvalidRefreshTokenError):
            await auth_service.refresh(signed_in.tokens.refresh_token)

    async def test_sign_out_all(self, auth_service, active_user):
        for _ in range(2):
            await auth_service.sign_in("jane", DEFAULT_PASSWORD)

        assert await auth_service.sign_out_all(active_user.id) == 2


class TestHelpers:
    def test_user_claims_are_camel_case(self, active_user):
        claims = user_claims(active_user)

        assert set(claims) == {"id", "email", "userName", "status", "role", "createdAt", "updatedAt"}
        assert claims["status"] == "ACTIVE"

    async def test_ensure_can_authenticate(self, make_user):
        active = await make_user()
        registered = await make_user(email="r@example.com", user_name="r", status=UserStatus.REGISTERED)

        ensure_can_authenticate(active)
        with pytest.raises(AccountInactiveError) as exc_info:
            ensure_can_authenticate(registered)
        assert exc_info.value.message == "Account has not been activated"

    async def test_missing_user_on_refresh(self, auth_service, active_user, db_session):
        signed_in = await auth_service.sign_in("jane", DEFAULT_PASSWORD)
        auth_service.users.repository.find_by_id = _find_nothing

        with pytest.raises(NotFoundError):
            await auth_service.refresh(signed_in.tokens.refresh_token)


async def _find_nothing(user_id):
    return None
