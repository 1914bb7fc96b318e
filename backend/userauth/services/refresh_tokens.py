"""
Refresh token use cases.

Issues opaque refresh tokens, persists only their hash, and validates or
revokes them on request.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from userauth.core.errors import InvalidRefreshTokenError, TokenExpiredError
from userauth.core.security import TokenService, token_service as default_token_service
from userauth.models.base import utc_now
from userauth.models.refresh_token import RefreshToken
from userauth.services.interfaces.repositories import IRefreshTokenRepository

logger = logging.getLogger(__name__)


class RefreshTokenService:
    """
    Refresh token lifecycle.

    Attributes:
        repository: Refresh token persistence port
        tokens: Token generation and hashing
    """

    def __init__(
        self,
        repository: IRefreshTokenRepository,
        tokens: Optional[TokenService] = None,
    ):
        self.repository = repository
        self.tokens = tokens or default_token_service

    async def create_for_user(
        self, user_id: str, now: Optional[datetime] = None
    ) -> Tuple[str, RefreshToken]:
        """
        Issue a refresh token.

        Returns:
            (plain token for the client, stored record)
        """
        token = self.tokens.generate_refresh_token()
        record = await self.repository.create(
            user_id=user_id,
            token_hash=self.tokens.hash_token(token),
            expires_at=self.tokens.refresh_token_expiry(now),
        )
        logger.debug("Refresh token issued", extra={"user_id": user_id, "record_id": record.id})
        return token, record

    async def validate(self, token: str, now: Optional[datetime] = None) -> RefreshToken:
        """
        Look up a refresh token and check it is usable.

        Raises:
            InvalidRefreshTokenError: Unknown or revoked token
            TokenExpiredError: Token past its expiry
        """
        if not token:
            raise InvalidRefreshTokenError()

        record = await self.repository.find_by_token_hash(self.tokens.hash_token(token))
        if record is None:
            logger.warning("Unknown refresh token presented")
            raise InvalidRefreshTokenError()

        if record.is_revoked():
            logger.warning(
                "Revoked refresh token presented",
                extra={"user_id": record.user_id, "record_id": record.id}
            )
            raise InvalidRefreshTokenError()

        if record.is_expired(now or utc_now()):
            raise TokenExpiredError("Refresh token has expired")

        return record

    async def revoke(self, token: str) -> bool:
        """
        Revoke a token.

        Returns:
            True when this call revoked the token, False when it was
            unknown or already revoked (including by a concurrent caller)
        """
        record = await self.repository.find_by_token_hash(self.tokens.hash_token(token))
        if record is None or record.is_revoked():
            return False

        if not await self.repository.revoke(record.id):
            return False
        logger.info("Refresh token revoked", extra={"user_id": record.user_id, "record_id": record.id})
        return True

    async def revoke_all_for_user(self, user_id: str) -> int:
        count = await self.repository.revoke_all_for_user(user_id)
        logger.info("Refresh tokens revoked for user", extra={"user_id": user_id, "count": count})
        return count

    async def find_active_for_user(self, user_id: str) -> List[RefreshToken]:
        return await self.repository.find_active_by_user_id(user_id)

    async def is_valid(self, token: str) -> bool:
        try:
            await self.validate(token)
        except (InvalidRefreshTokenError, TokenExpiredError):
            return False
        return True

    async def delete_expired(self) -> int:
        count = await self.repository.delete_expired()
        logger.info("Expired refresh tokens deleted", extra={"count": count})
        return count
