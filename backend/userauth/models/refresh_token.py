"""
Refresh token model.

Only the SHA-256 hash of a refresh token is persisted; the plain value is
handed to the client once and never stored.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from userauth.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin, utc_now


TOKEN_HASH_LENGTH = 64


class RefreshToken(Base, UUIDMixin, TimestampMixin):
    """
    Issued refresh token.

    A token is valid while it is neither revoked nor expired.

    Attributes:
        user_id: Owner; rows are deleted with the user
        token_hash: Hex SHA-256 of the token handed to the client
        expires_at: Absolute expiry (UTC)
        revoked_at: When the token was revoked, None while usable
    """

    __tablename__ = "refresh_tokens"
    __table_args__ = (
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
        Index("ix_refresh_tokens_revoked_at", "revoked_at"),
    )

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="Owning user"
    )

    token_hash = Column(
        String(TOKEN_HASH_LENGTH),
        nullable=False,
        unique=True,
        doc="SHA-256 hex digest of the refresh token"
    )

    expires_at = Column(
        UTCDateTime(),
        nullable=False,
        doc="UTC expiry timestamp"
    )

    revoked_at = Column(
        UTCDateTime(),
        nullable=True,
        doc="UTC revocation timestamp"
    )

    user = relationship("User", back_populates="refresh_tokens", lazy="raise")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or utc_now())

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return not self.is_revoked() and not self.is_expired(now)

    def __repr__(self) -> str:
        return (
            f"RefreshToken(id={self.id!r}, user_id={self.user_id!r}, "
            f"expires_at={self.expires_at!r}, revoked_at={self.revoked_at!r})"
        )
