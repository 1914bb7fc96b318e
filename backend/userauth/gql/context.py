"""
GraphQL request context.

The context getter runs as a FastAPI dependency, so resolvers share the
request's database session with the rest of the dependency graph.
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.types import Info

from userauth.api.dependencies import (
    build_auth_service,
    build_user_service,
    ensure_admin,
    get_app_service,
    resolve_user_from_token,
)
from userauth.core.database import get_db
from userauth.models.user import User
from userauth.services.app_info import AppService
from userauth.services.auth import AuthService
from userauth.services.users import UserService


async def get_context(
    request: Request,
    session: AsyncSession = Depends(get_db),
    app_service: AppService = Depends(get_app_service),
) -> Dict[str, Any]:
    return {
        "session": session,
        "users": build_user_service(session),
        "auth": build_auth_service(session),
        "app_service": app_service,
    }


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def user_service(info: Info) -> UserService:
    return info.context["users"]


def auth_service(info: Info) -> AuthService:
    return info.context["auth"]


async def current_user(info: Info) -> User:
    """
    Authenticated user of a GraphQL request.

    Raises:
        UnauthorizedError / InvalidTokenError / TokenExpiredError: No usable token
    """
    cached = info.context.get("current_user")
    if cached is not None:
        return cached

    user = await resolve_user_from_token(bearer_token(info.context["request"]), user_service(info))
    info.context["current_user"] = user
    return user


async def admin_user(info: Info) -> User:
    return ensure_admin(await current_user(info))
