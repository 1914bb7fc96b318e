"""
Pydantic schemas for user endpoints.

Defines request/response models for user creation, lookup, filtering,
sorting and status/role updates.
"""

import re
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from userauth.models.user import (
    EMAIL_MAX_LENGTH,
    USER_NAME_MAX_LENGTH,
    UserRole,
    UserStatus,
)
from userauth.schemas.base import CamelModel
from userauth.schemas.pagination import PaginationInfo


USER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+$")
PASSWORD_ALLOWED_PATTERN = re.compile(r"^[a-zA-Z0-9.\-_@!#$]+$")
PASSWORD_SPECIAL_CHARACTERS = ".-_@!#$"
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 16


def normalize_email(value: str) -> str:
    return value.strip().lower() if isinstance(value, str) else value


def validate_user_name(value: str) -> str:
    """
    Trim and check a user name.

    Raises:
        ValueError: If the name is empty or uses characters outside
            letters, digits and . - _
    """
    value = value.strip()
    if not value:
        raise ValueError("Username cannot be empty")
    if not USER_NAME_PATTERN.match(value):
        raise ValueError(
            "Username can only contain alphanumeric characters and the special characters: . - _"
        )
    return value


def validate_password_strength(value: str) -> str:
    """
    Enforce the password policy.

    Rules:
        - 6 to 16 characters
        - at least one uppercase letter, one digit and one of . - _ @ ! # $
        - only letters, digits and those special characters
    """
    value = value.strip()
    if not value:
        raise ValueError("Password cannot be empty")
    if not PASSWORD_MIN_LENGTH <= len(value) <= PASSWORD_MAX_LENGTH:
        raise ValueError(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters long"
        )
    if not any(char.isupper() for char in value):
        raise ValueError("Password must contain at least one uppercase letter (A-Z)")
    if not any(char.isdigit() for char in value):
        raise ValueError("Password must contain at least one number (0-9)")
    if not any(char in PASSWORD_SPECIAL_CHARACTERS for char in value):
        raise ValueError("Password must contain at least one special character (.-_@!#$)")
    if not PASSWORD_ALLOWED_PATTERN.match(value):
        raise ValueError(
            "Password can only contain alphanumeric characters and these special characters: .-_@!#$"
        )
    return value


class UserSortBy(str, Enum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    EMAIL = "email"
    USER_NAME = "userName"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class UserCreateRequest(CamelModel):
    """
    Request body for creating (or signing up) a user.

    Attributes:
        email: Email address, trimmed and lowercased
        user_name: Unique handle (letters, digits, . - _)
        password: Plain password checked against the password policy
    """
    email: EmailStr = Field(
        description="User email address"
    )
    user_name: str = Field(
        max_length=USER_NAME_MAX_LENGTH,
        description="Unique user name"
    )
    password: str = Field(
        description="Password (6-16 chars, one uppercase, one digit, one of .-_@!#$)"
    )

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        if len(v) > EMAIL_MAX_LENGTH:
            raise ValueError(f"Email must be at most {EMAIL_MAX_LENGTH} characters long")
        return v

    @field_validator("user_name")
    @classmethod
    def validate_user_name_field(cls, v: str) -> str:
        return validate_user_name(v)

    @field_validator("password")
    @classmethod
    def validate_password_field(cls, v: str) -> str:
        return validate_password_strength(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@example.com",
                "userName": "jane.doe",
                "password": "Secret.123",
            }
        }
    }


class UserUpdateRequest(CamelModel):
    """
    Request body for updating a user.

    Only status and role can change; omitted fields are left untouched.
    """
    status: Optional[UserStatus] = Field(default=None, description="New account status")
    role: Optional[UserRole] = Field(default=None, description="New role")


class UserFilter(CamelModel):
    email: Optional[str] = Field(default=None, description="Case-insensitive substring of the email")
    user_name: Optional[str] = Field(default=None, description="Case-insensitive substring of the user name")
    status: Optional[UserStatus] = None
    role: Optional[UserRole] = None
    created_at_from: Optional[datetime] = Field(default=None, description="Inclusive lower bound on createdAt")
    created_at_to: Optional[datetime] = Field(default=None, description="Inclusive upper bound on createdAt")


class UserSort(CamelModel):
    by: UserSortBy = Field(description="Field to sort by")
    order: SortOrder = Field(default=SortOrder.ASC, description="Sort direction")


class UserResponse(CamelModel):
    """
    Public user representation. Never includes the password hash.
    """
    id: str
    email: str
    user_name: str
    status: UserStatus
    role: UserRole
    created_at: datetime
    updated_at: datetime


class UserPaginatedResponse(CamelModel):
    pagination_info: PaginationInfo = Field(description="Pagination metadata")
    data: List[UserResponse] = Field(description="Users on the requested page")
