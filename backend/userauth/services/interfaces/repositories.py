"""
Repository Interface Contracts.

Ports the use cases depend on. The SQLAlchemy repositories in
userauth.repositories implement them; tests may substitute in-memory
fakes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from userauth.models.refresh_token import RefreshToken
from userauth.models.user import User
from userauth.schemas.user import UserFilter, UserSort


class IUserRepository(ABC):
    """
    Persistence contract for users.

    Lookups return None when nothing matches; raising NotFoundError is
    left to the use cases.
    """

    @abstractmethod
    async def create(self, user: User) -> User:
        """
        Persist a new user.

        Raises:
            ConflictError: If email or user name already exists
        """
        pass

    @abstractmethod
    async def update(self, user: User, changes: Dict[str, Any]) -> User:
        """Apply non-None changes to a persistent user."""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """
        Find a user by email.

        Note:
            Matching is case-insensitive.
        """
        pass

    @abstractmethod
    async def find_by_user_name(self, user_name: str) -> Optional[User]:
        pass

    @abstractmethod
    async def find_all(self, user_filter: Optional[UserFilter] = None) -> List[User]:
        pass

    @abstractmethod
    async def find_all_paginated(
        self,
        skip: int,
        take: int,
        user_filter: Optional[UserFilter] = None,
        sort: Optional[UserSort] = None,
    ) -> Tuple[List[User], int]:
        """
        Fetch one page of users.

        Returns:
            (users on the page, total matching users)
        """
        pass


class IRefreshTokenRepository(ABC):
    """Persistence contract for refresh token hashes."""

    @abstractmethod
    async def create(self, user_id: str, token_hash: str, expires_at: datetime) -> RefreshToken:
        pass

    @abstractmethod
    async def find_by_token_hash(self, token_hash: str) -> Optional[RefreshToken]:
        pass

    @abstractmethod
    async def find_active_by_user_id(
        self, user_id: str, now: Optional[datetime] = None
    ) -> List[RefreshToken]:
        pass

    @abstractmethod
    async def revoke(self, token_id: str, now: Optional[datetime] = None) -> int:
        """
        Mark a token revoked; already revoked tokens keep their timestamp.

        Returns:
            1 if this call revoked the token, 0 if it was already revoked
        """
        pass

    @abstractmethod
    async def revoke_all_for_user(self, user_id: str, now: Optional[datetime] = None) -> int:
        """
        Revoke all unrevoked tokens of a user.

        Returns:
            Number of tokens revoked
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        pass
