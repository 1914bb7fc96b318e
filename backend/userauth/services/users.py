"""
User use cases.

Sits between the transports (REST routes, GraphQL resolvers) and the
user repository. Uniqueness checks, password hashing, pagination and
not-found handling live here.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from userauth.core.errors import (
    EmailAlreadyExistsError,
    NotFoundError,
    UsernameAlreadyExistsError,
)
from userauth.core.security import hash_password
from userauth.models.user import User, UserRole, UserStatus
from userauth.schemas.pagination import PaginationInfo, build_pagination_info, normalize_page_params
from userauth.schemas.user import UserCreateRequest, UserFilter, UserSort, UserUpdateRequest
from userauth.services.events import EventBus, UserCreatedEvent, event_bus as default_event_bus
from userauth.services.interfaces.repositories import IUserRepository

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "USER_NOT_FOUND"


@dataclass
class UserPage:
    """One page of users plus its navigation metadata."""
    data: List[User]
    pagination_info: PaginationInfo


class UserService:
    """
    User management use cases.

    Attributes:
        repository: User persistence port
        events: Event bus receiving user.created
    """

    def __init__(self, repository: IUserRepository, events: Optional[EventBus] = None):
        self.repository = repository
        self.events = events or default_event_bus

    async def create(
        self,
        data: UserCreateRequest,
        status: Optional[UserStatus] = None,
        role: Optional[UserRole] = None,
    ) -> User:
        """
        Register a new user.

        Args:
            data: Validated email, user name and plain password
            status: Initial status, REGISTERED when omitted
            role: Initial role, USER when omitted

        Returns:
            The persisted user

        Raises:
            EmailAlreadyExistsError: If the email is taken
            UsernameAlreadyExistsError: If the user name is taken
        """
        if await self.repository.find_by_email(data.email):
            logger.info("Sign-up rejected: email taken", extra={"email": data.email})
            raise EmailAlreadyExistsError(data.email)

        if await self.repository.find_by_user_name(data.user_name):
            logger.info("Sign-up rejected: user name taken", extra={"user_name": data.user_name})
            raise UsernameAlreadyExistsError(data.user_name)

        user = User(
            email=data.email,
            user_name=data.user_name,
            password=hash_password(data.password),
            status=status or UserStatus.REGISTERED,
            role=role or UserRole.USER,
        )
        user = await self.repository.create(user)

        await self.events.publish(
            UserCreatedEvent(user_id=user.id, email=user.email, user_name=user.user_name)
        )
        return user

    async def find_by_id(self, user_id: str) -> User:
        user = await self.repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with id '{user_id}' not found", code=USER_NOT_FOUND)
        return user

    async def find_by_email(self, email: str) -> User:
        user = await self.repository.find_by_email(email)
        if user is None:
            raise NotFoundError(f"User with email '{email}' not found", code=USER_NOT_FOUND)
        return user

    async def find_by_user_name(self, user_name: str) -> User:
        user = await self.repository.find_by_user_name(user_name)
        if user is None:
            raise NotFoundError(f"User with username '{user_name}' not found", code=USER_NOT_FOUND)
        return user

    async def find_all(self, user_filter: Optional[UserFilter] = None) -> List[User]:
        return await self.repository.find_all(user_filter)

    async def find_paginated(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        user_filter: Optional[UserFilter] = None,
        sort: Optional[UserSort] = None,
    ) -> UserPage:
        """
        List users one page at a time.

        Page defaults to 1 and limit to 10; limit is capped at 100.

        Example:
            >>> page = await service.find_paginated(page=2, limit=5)
            >>> page.pagination_info.start
            5
        """
        page, limit = normalize_page_params(page, limit)
        skip = (page - 1) * limit
        users, total_docs = await self.repository.find_all_paginated(skip, limit, user_filter, sort)
        return UserPage(data=users, pagination_info=build_pagination_info(total_docs, page, limit))

    async def update(self, user_id: str, data: UserUpdateRequest) -> User:
        """
        Change a user's status and/or role.

        Raises:
            NotFoundError: If no user has this id
        """
        user = await self.find_by_id(user_id)
        changes = data.model_dump(include={"status", "role"}, exclude_none=True)
        if not changes:
            return user

        user = await self.repository.update(user, changes)
        logger.info("User updated", extra={"user_id": user.id, "changes": changes})
        return user
