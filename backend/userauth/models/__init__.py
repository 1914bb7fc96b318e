"""
SQLAlchemy ORM models.

This module exports all database models and the declarative base.
Import models from this module to ensure they're registered with SQLAlchemy.
"""

from userauth.models.base import Base, TimestampMixin, UUIDMixin, ModelMixin, UTCDateTime
from userauth.models.user import User, UserStatus, UserRole
from userauth.models.refresh_token import RefreshToken

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "ModelMixin",
    "UTCDateTime",
    # Models
    "User",
    "UserStatus",
    "UserRole",
    "RefreshToken",
]
