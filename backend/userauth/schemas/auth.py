"""
Pydantic schemas for authentication endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from userauth.schemas.base import CamelModel
from userauth.schemas.user import UserCreateRequest, UserResponse


class SignUpRequest(UserCreateRequest):
    """Registration payload; same rules as creating a user."""


class SignInRequest(CamelModel):
    """
    Sign-in payload.

    Attributes:
        credential: Email address or user name
        password: Plain password
    """
    credential: str = Field(min_length=1, description="Email or user name")
    password: str = Field(min_length=1, description="Account password")

    @field_validator("credential")
    @classmethod
    def strip_credential(cls, v: str) -> str:
        return v.strip()


class RefreshTokenRequest(CamelModel):
    """
    Body for refresh and sign-out.

    The token may be omitted when it is sent in the refresh_token cookie.
    """
    refresh_token: Optional[str] = Field(default=None, description="Refresh token")


class TokenResponse(CamelModel):
    """
    Access token response model.

    Returned by sign-in and refresh.
    """
    access_token: str = Field(description="JWT access token")
    refresh_token: str = Field(description="Opaque refresh token")
    token_type: str = Field(default="bearer", description="Token type (always 'bearer')")
    expires_at: datetime = Field(description="Access token expiry (UTC)")
    created_at: datetime = Field(description="Issue time (UTC)")
    user: UserResponse = Field(description="Authenticated user")


class SignOutResponse(CamelModel):
    revoked: int = Field(description="Number of refresh tokens revoked")
