"""
Authentication use cases.

Sign-up, sign-in with email or user name, refresh token rotation and
sign-out. Access tokens are stateless JWTs; refresh tokens are stored
hashed and revoked when used or on sign-out.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from userauth.core.errors import (
    AccountBannedError,
    AccountInactiveError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from userauth.core.security import (
    TokenPair,
    TokenService,
    dummy_password_hash,
    token_service as default_token_service,
    verify_password,
)
from userauth.models.base import utc_now
from userauth.models.user import User, UserStatus
from userauth.schemas.user import UserCreateRequest, UserResponse
from userauth.services.refresh_tokens import RefreshTokenService
from userauth.services.users import UserService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """Token pair together with the user it was issued for."""
    tokens: TokenPair
    user: User


def user_claims(user: User) -> Dict[str, Any]:
    """Public user payload embedded in the access token."""
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)


def ensure_can_authenticate(user: User) -> None:
    """
    Reject users whose status forbids authentication.

    Raises:
        AccountBannedError: BANNED users
        AccountInactiveError: INACTIVE or REGISTERED users
    """
    if user.can_authenticate:
        return
    if user.is_banned:
        raise AccountBannedError()
    if user.status == UserStatus.REGISTERED:
        raise AccountInactiveError("Account has not been activated")
    raise AccountInactiveError()


class AuthService:
    """
    Authentication flows.

    Attributes:
        users: User use cases (lookups and registration)
        refresh_tokens: Refresh token lifecycle
        tokens: Access token issuing
    """

    def __init__(
        self,
        users: UserService,
        refresh_tokens: RefreshTokenService,
        tokens: Optional[TokenService] = None,
    ):
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.tokens = tokens or default_token_service

    async def sign_up(self, data: UserCreateRequest) -> User:
        return await self.users.create(data)

    async def sign_in(self, credential: str, password: str) -> AuthResult:
        """
        Authenticate with email or user name and password.

        A credential containing "@" is looked up as an email, anything
        else as a user name.

        Raises:
            InvalidCredentialsError: Unknown user or wrong password
            AccountBannedError / AccountInactiveError: Status forbids sign-in
        """
        credential = credential.strip()
        if "@" in credential:
            user = await self.users.repository.find_by_email(credential)
        else:
            user = await self.users.repository.find_by_user_name(credential)

        if user is None:
            # Unknown users pay the same bcrypt cost as a wrong password
            verify_password(password, dummy_password_hash())
            logger.info("Sign-in failed", extra={"credential": credential})
            raise InvalidCredentialsError()

        if not verify_password(password, user.password):
            logger.info("Sign-in failed", extra={"credential": credential})
            raise InvalidCredentialsError()

        ensure_can_authenticate(user)

        result = await self._issue(user)
        logger.info("User signed in", extra={"user_id": user.id})
        return result

    async def refresh(self, refresh_token: str) -> AuthResult:
        """
        Exchange a refresh token for a new token pair.

        The presented token is revoked, so each refresh token works once.

        Raises:
            InvalidRefreshTokenError: Unknown or revoked token
            TokenExpiredError: Token past its expiry
            AccountBannedError / AccountInactiveError: User can no longer sign in
        """
        record = await self.refresh_tokens.validate(refresh_token)
        # Only the caller whose update revoked the token may redeem it
        if not await self.refresh_tokens.revoke(refresh_token):
            raise InvalidRefreshTokenError()

        user = await self.users.find_by_id(record.user_id)
        ensure_can_authenticate(user)

        result = await self._issue(user)
        logger.info("Tokens refreshed", extra={"user_id": user.id})
        return result

    async def sign_out(self, refresh_token: str) -> int:
        """
        Revoke one refresh token.

        Returns:
            1 if a token was revoked, 0 if it was unknown or already revoked
        """
        revoked = await self.refresh_tokens.revoke(refresh_token)
        return 1 if revoked else 0

    async def sign_out_all(self, user_id: str) -> int:
        return await self.refresh_tokens.revoke_all_for_user(user_id)

    async def _issue(self, user: User, now: Optional[datetime] = None) -> AuthResult:
        issued_at = now or utc_now()
        access_token = self.tokens.generate_access_token(user_claims(user), now=issued_at)
        refresh_token, _ = await self.refresh_tokens.create_for_user(user.id, now=issued_at)
        tokens = TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=self.tokens.access_token_expiry(issued_at),
            created_at=issued_at,
        )
        return AuthResult(tokens=tokens, user=user)
