"""
User endpoints.

Provides user creation, lookup by id or email, filtered and paginated
listing, and status/role updates for administrators.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, status
from pydantic import EmailStr

from userauth.api.dependencies import AdminUser, UserServiceDep
from userauth.models.user import UserRole, UserStatus
from userauth.schemas.pagination import MAX_LIMIT
from userauth.schemas.user import (
    SortOrder,
    UserCreateRequest,
    UserFilter,
    UserPaginatedResponse,
    UserResponse,
    UserSort,
    UserSortBy,
    UserUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Registers a user. Email and user name must be unique.",
)
async def create_user(request: UserCreateRequest, users: UserServiceDep) -> UserResponse:
    """
    Create a user.

    Raises:
        409: Email or user name already taken
        400: Invalid email, user name or password
    """
    user = await users.create(request)
    return UserResponse.model_validate(user)


@router.get(
    "",
    response_model=UserPaginatedResponse,
    summary="List users",
    description="Paginated user list with optional filters and sorting.",
)
async def list_users(
    users: UserServiceDep,
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=MAX_LIMIT),
    email: Optional[str] = Query(default=None),
    user_name: Optional[str] = Query(default=None, alias="userName"),
    user_status: Optional[UserStatus] = Query(default=None, alias="status"),
    role: Optional[UserRole] = Query(default=None),
    created_at_from: Optional[datetime] = Query(default=None, alias="createdAtFrom"),
    created_at_to: Optional[datetime] = Query(default=None, alias="createdAtTo"),
    sort_by: Optional[UserSortBy] = Query(default=None, alias="sortBy"),
    sort_order: SortOrder = Query(default=SortOrder.ASC, alias="sortOrder"),
) -> UserPaginatedResponse:
    user_filter = UserFilter(
        email=email,
        user_name=user_name,
        status=user_status,
        role=role,
        created_at_from=created_at_from,
        created_at_to=created_at_to,
    )
    sort = UserSort(by=sort_by, order=sort_order) if sort_by else None

    result = await users.find_paginated(page, limit, user_filter, sort)
    return UserPaginatedResponse(
        pagination_info=result.pagination_info,
        data=[UserResponse.model_validate(user) for user in result.data],
    )


@router.get(
    "/by-email",
    response_model=UserResponse,
    summary="Find user by email",
)
async def get_user_by_email(
    users: UserServiceDep,
    email: EmailStr = Query(),
) -> UserResponse:
    user = await users.find_by_email(email)
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Find user by id",
)
async def get_user(user_id: str, users: UserServiceDep) -> UserResponse:
    """
    Raises:
        404: No user has this id (code USER_NOT_FOUND)
    """
    user = await users.find_by_id(user_id)
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user status or role",
    description="Admin only. Fields left out of the body are unchanged.",
)
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    users: UserServiceDep,
    admin: AdminUser,
) -> UserResponse:
    user = await users.update(user_id, request)
    logger.info("User updated by admin", extra={"user_id": user_id, "admin_id": admin.id})
    return UserResponse.model_validate(user)
