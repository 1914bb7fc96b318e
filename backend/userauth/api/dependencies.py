"""
FastAPI dependency functions.

Provides reusable dependency injection functions for FastAPI routes and
GraphQL resolvers: database sessions, repositories, use-case services and
the authenticated user.
"""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from userauth.core.database import get_db
from userauth.core.errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from userauth.core.security import token_service
from userauth.models.user import User
from userauth.repositories.refresh_token import RefreshTokenRepository
from userauth.repositories.user import UserRepository
from userauth.services.app_info import AppService, app_service
from userauth.services.auth import AuthService, ensure_can_authenticate
from userauth.services.refresh_tokens import RefreshTokenService
from userauth.services.users import UserService


# HTTP Bearer token scheme; missing headers are reported as UnauthorizedError
security = HTTPBearer(auto_error=False)


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def build_user_service(session: AsyncSession) -> UserService:
    return UserService(UserRepository(session))


def build_auth_service(session: AsyncSession) -> AuthService:
    """Wire the auth use case and its collaborators onto one session."""
    users = build_user_service(session)
    refresh_tokens = RefreshTokenService(RefreshTokenRepository(session), token_service)
    return AuthService(users, refresh_tokens, token_service)


def get_user_service(db: DatabaseSession) -> UserService:
    return build_user_service(db)


def get_auth_service(db: DatabaseSession) -> AuthService:
    return build_auth_service(db)


def get_app_service() -> AppService:
    return app_service


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
AppServiceDep = Annotated[AppService, Depends(get_app_service)]


async def resolve_user_from_token(token: Optional[str], users: UserService) -> User:
    """
    Turn a bearer token into the user it was issued for.

    Shared by the REST dependency below and the GraphQL context.

    Raises:
        UnauthorizedError: No token supplied
        TokenExpiredError / InvalidTokenError: Token rejected
        AccountBannedError / AccountInactiveError: User may no longer sign in
    """
    if not token:
        raise UnauthorizedError("Authentication required")

    claims = token_service.validate_access_token(token)
    user = await users.repository.find_by_id(claims["sub"])
    if user is None:
        raise InvalidTokenError("Token subject no longer exists")

    ensure_can_authenticate(user)
    return user


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    users: UserServiceDep,
) -> User:
    """
    Dependency to get the current authenticated user from the JWT.

    Example:
        @router.get("/protected")
        async def protected_route(current_user: CurrentUser):
            return {"message": f"Hello {current_user.user_name}"}

    Note:
        The token must be sent as ``Authorization: Bearer <token>``.
    """
    token = credentials.credentials if credentials else None
    return await resolve_user_from_token(token, users)


def ensure_admin(user: User) -> User:
    if not user.is_admin:
        raise ForbiddenError("Admin role required")
    return user


async def get_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that only lets ADMIN users through."""
    return ensure_admin(current_user)


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(get_admin_user)]
