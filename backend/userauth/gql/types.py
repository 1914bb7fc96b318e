"""
GraphQL object, input and enum types.

Field names are converted to camelCase by strawberry, so ``user_name``
is exposed as ``userName``.
"""

from datetime import datetime
from typing import List, Optional

import strawberry

from userauth.models.user import User, UserRole, UserStatus
from userauth.schemas.health import AppInfoResponse, HealthResponse
from userauth.schemas.pagination import PaginationInfo
from userauth.schemas.user import SortOrder, UserFilter, UserSort, UserSortBy
from userauth.services.auth import AuthResult


UserStatusEnum = strawberry.enum(UserStatus, name="UserStatus")
UserRoleEnum = strawberry.enum(UserRole, name="UserRole")
UserSortByEnum = strawberry.enum(UserSortBy, name="UserSortBy")
SortOrderEnum = strawberry.enum(SortOrder, name="SortOrder")


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID
    email: str
    user_name: str
    status: UserStatusEnum
    role: UserRoleEnum
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(
            id=strawberry.ID(user.id),
            email=user.email,
            user_name=user.user_name,
            status=user.status,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@strawberry.type(name="PaginationInfo")
class PaginationInfoType:
    total_docs: int
    start: int
    end: int
    total_pages: int
    page: int
    next: Optional[int]
    previous: Optional[int]

    @classmethod
    def from_schema(cls, info: PaginationInfo) -> "PaginationInfoType":
        return cls(**info.model_dump())


@strawberry.type
class UserPaginated:
    pagination_info: PaginationInfoType
    data: List[UserType]


@strawberry.type(name="AppInfo")
class AppInfoType:
    message: str
    name: str
    version: str
    correlation_id: Optional[str]

    @classmethod
    def from_schema(cls, info: AppInfoResponse) -> "AppInfoType":
        return cls(**info.model_dump())


@strawberry.type
class DatabaseStatus:
    status: str


@strawberry.type(name="Health")
class HealthType:
    status: str
    timestamp: datetime
    database: DatabaseStatus
    name: str
    version: str
    correlation_id: Optional[str]

    @classmethod
    def from_schema(cls, health: HealthResponse) -> "HealthType":
        return cls(
            status=health.status,
            timestamp=health.timestamp,
            database=DatabaseStatus(status=health.database.status),
            name=health.name,
            version=health.version,
            correlation_id=health.correlation_id,
        )


@strawberry.type
class AuthResponse:
    token: str
    refresh_token: str
    expires_at: datetime
    created_at: datetime
    user: UserType

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
            expires_at=result.tokens.expires_at,
            created_at=result.tokens.created_at,
            user=UserType.from_model(result.user),
        )


@strawberry.input
class CreateUserInput:
    email: str
    user_name: str
    password: str


@strawberry.input
class UpdateUserInput:
    status: Optional[UserStatusEnum] = None
    role: Optional[UserRoleEnum] = None


@strawberry.input
class SignInInput:
    credential: str
    password: str


@strawberry.input
class UserFilterInput:
    email: Optional[str] = None
    user_name: Optional[str] = None
    status: Optional[UserStatusEnum] = None
    role: Optional[UserRoleEnum] = None
    created_at_from: Optional[datetime] = None
    created_at_to: Optional[datetime] = None

    def to_schema(self) -> UserFilter:
        return UserFilter(
            email=self.email,
            user_name=self.user_name,
            status=self.status,
            role=self.role,
            created_at_from=self.created_at_from,
            created_at_to=self.created_at_to,
        )


@strawberry.input
class UserSortInput:
    by: UserSortByEnum
    order: SortOrderEnum = SortOrder.ASC

    def to_schema(self) -> UserSort:
        return UserSort(by=self.by, order=self.order)
