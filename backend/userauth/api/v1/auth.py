"""
Authentication endpoints.

Sign-up, sign-in, refresh token rotation, sign-out and the current user
profile. Sign-in and refresh also set the refresh token as an http-only
cookie; refresh and sign-out accept the token from the body or that
cookie.
"""

from typing import Optional

from fastapi import APIRouter, Request, Response, status

from userauth.api.dependencies import AuthServiceDep, CurrentUser
from userauth.core.config import settings
from userauth.core.errors import InvalidRefreshTokenError
from userauth.schemas.auth import (
    RefreshTokenRequest,
    SignInRequest,
    SignOutResponse,
    SignUpRequest,
    TokenResponse,
)
from userauth.schemas.user import UserResponse
from userauth.services.auth import AuthResult


REFRESH_TOKEN_COOKIE = "refresh_token"

router = APIRouter()


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=token,
        max_age=int(settings.refresh_token_lifetime.total_seconds()),
        httponly=settings.cookie_http_only,
        secure=settings.is_production,
        samesite=settings.cookie_samesite_value,
        domain=settings.cookie_domain,
        path=f"{settings.api_prefix}/auth",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=REFRESH_TOKEN_COOKIE,
        domain=settings.cookie_domain,
        path=f"{settings.api_prefix}/auth",
    )


def resolve_refresh_token(request: Request, body: Optional[RefreshTokenRequest]) -> str:
    """Body token first, cookie second."""
    token = (body.refresh_token if body else None) or request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not token:
        raise InvalidRefreshTokenError("Refresh token is required")
    return token


def token_response(result: AuthResult) -> TokenResponse:
    return TokenResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        token_type=result.tokens.token_type,
        expires_at=result.tokens.expires_at,
        created_at=result.tokens.created_at,
        user=UserResponse.model_validate(result.user),
    )


@router.post(
    "/sign-up",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
)
async def sign_up(request: SignUpRequest, auth: AuthServiceDep) -> UserResponse:
    """
    Register a new account.

    The account starts as REGISTERED and cannot sign in until an
    administrator activates it.
    """
    user = await auth.sign_up(request)
    return UserResponse.model_validate(user)


@router.post(
    "/sign-in",
    response_model=TokenResponse,
    summary="Sign in",
    description="Authenticate with email or user name and password.",
)
async def sign_in(request: SignInRequest, response: Response, auth: AuthServiceDep) -> TokenResponse:
    """
    Example:
        POST /api/v1/auth/sign-in
        {"credential": "jane@example.com", "password": "Secret.123"}

    Security:
        - Unknown users and wrong passwords get the same 401
        - BANNED and INACTIVE accounts get 403
    """
    result = await auth.sign_in(request.credential, request.password)
    set_refresh_cookie(response, result.tokens.refresh_token)
    return token_response(result)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Rotate tokens",
    description="Exchange a refresh token for a new token pair. The old refresh token is revoked.",
)
async def refresh(
    request: Request,
    response: Response,
    auth: AuthServiceDep,
    body: Optional[RefreshTokenRequest] = None,
) -> TokenResponse:
    result = await auth.refresh(resolve_refresh_token(request, body))
    set_refresh_cookie(response, result.tokens.refresh_token)
    return token_response(result)


@router.post(
    "/sign-out",
    response_model=SignOutResponse,
    summary="Sign out",
)
async def sign_out(
    request: Request,
    response: Response,
    auth: AuthServiceDep,
    body: Optional[RefreshTokenRequest] = None,
) -> SignOutResponse:
    revoked = await auth.sign_out(resolve_refresh_token(request, body))
    clear_refresh_cookie(response)
    return SignOutResponse(revoked=revoked)


@router.post(
    "/sign-out-all",
    response_model=SignOutResponse,
    summary="Sign out everywhere",
)
async def sign_out_all(response: Response, current_user: CurrentUser, auth: AuthServiceDep) -> SignOutResponse:
    revoked = await auth.sign_out_all(current_user.id)
    clear_refresh_cookie(response)
    return SignOutResponse(revoked=revoked)


@router.get("/me", response_model=UserResponse, summary="Current user")
async def read_users_me(current_user: CurrentUser) -> UserResponse:
    """
    Requires ``Authorization: Bearer <access token>``.
    """
    return UserResponse.model_validate(current_user)
