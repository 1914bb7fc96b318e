"""
User repository for user CRUD operations.

Provides the data access layer for the User model: lookups, filtered
listing with sorting and offset pagination, and persistence of new and
updated users.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from userauth.core.db_errors import handle_db_error
from userauth.models.user import User
from userauth.schemas.user import SortOrder, UserFilter, UserSort, UserSortBy
from userauth.services.interfaces.repositories import IUserRepository


USER_DB_MESSAGES = {
    "unique_constraint": "User with this email or username already exists",
    "not_found": "User not found",
    "foreign_key_constraint": "Invalid user reference",
    "validation": "Invalid user data",
}
USER_DB_CODES = {"not_found": "USER_NOT_FOUND"}

SORT_COLUMNS = {
    UserSortBy.CREATED_AT: User.created_at,
    UserSortBy.UPDATED_AT: User.updated_at,
    UserSortBy.EMAIL: User.email,
    UserSortBy.USER_NAME: User.user_name,
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def apply_user_filter(stmt: Select, user_filter: Optional[UserFilter]) -> Select:
    """
    Add WHERE clauses for a UserFilter.

    Email and user name match case-insensitive substrings; status and
    role match exactly; the created_at bounds are inclusive.
    """
    if user_filter is None:
        return stmt

    if user_filter.email:
        pattern = f"%{_escape_like(user_filter.email.lower())}%"
        stmt = stmt.where(func.lower(User.email).like(pattern, escape="\\"))
    if user_filter.user_name:
        pattern = f"%{_escape_like(user_filter.user_name.lower())}%"
        stmt = stmt.where(func.lower(User.user_name).like(pattern, escape="\\"))
    if user_filter.status is not None:
        stmt = stmt.where(User.status == user_filter.status)
    if user_filter.role is not None:
        stmt = stmt.where(User.role == user_filter.role)
    if user_filter.created_at_from is not None:
        stmt = stmt.where(User.created_at >= user_filter.created_at_from)
    if user_filter.created_at_to is not None:
        stmt = stmt.where(User.created_at <= user_filter.created_at_to)
    return stmt


def apply_user_sort(stmt: Select, sort: Optional[UserSort]) -> Select:
    """Order by the requested column, newest first when no sort is given."""
    if sort is None:
        return stmt.order_by(User.created_at.desc(), User.id)

    column = SORT_COLUMNS[sort.by]
    ordered = column.desc() if sort.order == SortOrder.DESC else column.asc()
    return stmt.order_by(ordered, User.id)


class UserRepository(IUserRepository):
    """
    Repository for user data access.

    Every SQLAlchemy failure is translated by handle_db_error(), so
    callers only deal with application errors.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        """
        Persist a new user.

        Args:
            user: Transient User with a hashed password

        Returns:
            The same instance with id and timestamps populated

        Raises:
            ConflictError: If email or user name is already taken
        """
        try:
            self.session.add(user)
            await self.session.flush()
            await self.session.refresh(user)
        except SQLAlchemyError as e:
            handle_db_error(e, "UserRepository.create", USER_DB_MESSAGES, USER_DB_CODES)
        return user

    async def update(self, user: User, changes: Dict[str, Any]) -> User:
        """
        Apply attribute changes to a loaded user and flush them.

        Args:
            user: Persistent User instance
            changes: Attribute name -> new value; None values are skipped
        """
        for field, value in changes.items():
            if value is not None:
                setattr(user, field, value)

        try:
            await self.session.flush()
            await self.session.refresh(user)
        except SQLAlchemyError as e:
            handle_db_error(e, "UserRepository.update", USER_DB_MESSAGES, USER_DB_CODES)
        return user

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self._scalar(select(User).where(User.id == user_id), "find_by_id")

    async def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup by email."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return await self._scalar(stmt, "find_by_email")

    async def find_by_user_name(self, user_name: str) -> Optional[User]:
        stmt = select(User).where(User.user_name == user_name.strip())
        return await self._scalar(stmt, "find_by_user_name")

    async def find_all(self, user_filter: Optional[UserFilter] = None) -> List[User]:
        stmt = apply_user_sort(apply_user_filter(select(User), user_filter), None)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            handle_db_error(e, "UserRepository.find_all", USER_DB_MESSAGES, USER_DB_CODES)
        return list(result.scalars().all())

    async def find_all_paginated(
        self,
        skip: int,
        take: int,
        user_filter: Optional[UserFilter] = None,
        sort: Optional[UserSort] = None,
    ) -> Tuple[List[User], int]:
        """
        Fetch one page of users.

        Args:
            skip: Number of rows to skip
            take: Page size
            user_filter: Optional filter
            sort: Optional sort; defaults to created_at descending

        Returns:
            (users on the page, total number of matching users)
        """
        filtered = apply_user_filter(select(User), user_filter)
        count_stmt = select(func.count()).select_from(filtered.subquery())
        page_stmt = apply_user_sort(filtered, sort).offset(skip).limit(take)

        try:
            total_docs = (await self.session.execute(count_stmt)).scalar_one()
            result = await self.session.execute(page_stmt)
        except SQLAlchemyError as e:
            handle_db_error(
                e, "UserRepository.find_all_paginated", USER_DB_MESSAGES, USER_DB_CODES
            )
        return list(result.scalars().all()), total_docs

    async def _scalar(self, stmt: Select, operation: str) -> Optional[User]:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            handle_db_error(e, f"UserRepository.{operation}", USER_DB_MESSAGES, USER_DB_CODES)
        return result.scalar_one_or_none()
