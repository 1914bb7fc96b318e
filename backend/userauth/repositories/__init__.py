"""
Repository layer for data access.

Isolates SQLAlchemy queries from the use cases in the services package.
"""

from userauth.repositories.refresh_token import RefreshTokenRepository
from userauth.repositories.user import UserRepository

__all__ = ["RefreshTokenRepository", "UserRepository"]
