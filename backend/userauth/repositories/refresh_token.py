"""
Refresh token repository.

Stores and revokes refresh token records. Tokens are always looked up by
their SHA-256 hash.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from userauth.core.db_errors import handle_db_error
from userauth.models.base import utc_now
from userauth.models.refresh_token import RefreshToken
from userauth.services.interfaces.repositories import IRefreshTokenRepository


TOKEN_DB_MESSAGES = {
    "unique_constraint": "Refresh token already exists",
    "not_found": "Refresh token not found",
    "foreign_key_constraint": "Refresh token references an unknown user",
}


class RefreshTokenRepository(IRefreshTokenRepository):
    """
    Repository for refresh token persistence.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: str, token_hash: str, expires_at: datetime) -> RefreshToken:
        """
        Store a new refresh token hash.

        Raises:
            ConflictError: If the hash already exists or the user is unknown
        """
        record = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        try:
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record)
        except SQLAlchemyError as e:
            handle_db_error(e, "RefreshTokenRepository.create", TOKEN_DB_MESSAGES)
        return record

    async def find_by_token_hash(self, token_hash: str) -> Optional[RefreshToken]:
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            handle_db_error(e, "RefreshTokenRepository.find_by_token_hash", TOKEN_DB_MESSAGES)
        return result.scalar_one_or_none()

    async def find_active_by_user_id(
        self, user_id: str, now: Optional[datetime] = None
    ) -> List[RefreshToken]:
        """Unrevoked, unexpired tokens of a user, newest first."""
        now = now or utc_now()
        stmt = (
            select(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .order_by(RefreshToken.created_at.desc())
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            handle_db_error(e, "RefreshTokenRepository.find_active_by_user_id", TOKEN_DB_MESSAGES)
        return list(result.scalars().all())

    async def revoke(self, token_id: str, now: Optional[datetime] = None) -> int:
        """
        Revoke a token unless it is already revoked.

        Returns:
            1 if this call revoked the token, 0 otherwise
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now or utc_now())
            .execution_options(synchronize_session="evaluate")
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            handle_db_error(e, "RefreshTokenRepository.revoke", TOKEN_DB_MESSAGES)
        return result.rowcount or 0

    async def revoke_all_for_user(self, user_id: str, now: Optional[datetime] = None) -> int:
        """
        Revoke every unrevoked token of a user.

        Returns:
            Number of tokens revoked by this call
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now or utc_now())
            .execution_options(synchronize_session="evaluate")
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            handle_db_error(e, "RefreshTokenRepository.revoke_all_for_user", TOKEN_DB_MESSAGES)
        return result.rowcount or 0

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        """
        Delete tokens whose expiry has passed.

        Returns:
            Number of rows deleted
        """
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= (now or utc_now()))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            handle_db_error(e, "RefreshTokenRepository.delete_expired", TOKEN_DB_MESSAGES)
        return result.rowcount or 0
