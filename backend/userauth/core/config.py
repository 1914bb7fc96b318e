"""
Centralized configuration management using Pydantic Settings.

This module provides type-safe configuration management with validation,
loading settings from environment variables and .env files.
"""

import json
import re
from datetime import timedelta
from typing import Annotated, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_CORS_ALLOWED_HEADERS = [
    "Content-Type",
    "Authorization",
    "Accept",
    "Origin",
    "X-Requested-With",
    "X-Correlation-Id",
]

_DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")
_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def parse_duration(value: str) -> timedelta:
    """
    Parse a compact duration string into a timedelta.

    Accepts "<int><unit>" where unit is one of s, m, h, d. A bare integer
    is interpreted as seconds.

    Args:
        value: Duration string such as "15m" or "7d"

    Returns:
        Equivalent timedelta

    Raises:
        ValueError: If the string is not a recognised duration

    Example:
        >>> parse_duration("15m")
        datetime.timedelta(seconds=900)
    """
    text = value.strip()
    if text.isdigit():
        return timedelta(seconds=int(text))

    match = _DURATION_PATTERN.match(text)
    if not match:
        raise ValueError(
            f"Invalid duration '{value}'. Use <number><s|m|h|d>, e.g. 15m or 7d"
        )

    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def _split_list(v: str | List[str]) -> List[str]:
    # Accepts a JSON array or a comma separated string
    if isinstance(v, str):
        try:
            parsed = json.loads(v)
        except json.JSONDecodeError:
            return [s.strip() for s in v.split(",") if s.strip()]
        if isinstance(parsed, str):
            return [s.strip() for s in parsed.split(",") if s.strip()]
        return parsed
    return v


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Secrets should never be committed to code - use .env file (gitignored).
    """

    # Application
    project_name: str = Field(
        default="userauth",
        description="Application name shown in docs and app info"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version reported by /app endpoints"
    )
    environment: str = Field(
        default="development",
        description="Deployment environment (development, test, production)"
    )
    port: int = Field(
        default=4200,
        description="Port used when running the server directly"
    )
    api_prefix: str = Field(
        default="/api/v1",
        description="Prefix for all REST endpoints"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_json: bool = Field(
        default=True,
        description="Emit logs as single-line JSON"
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./userauth.db",
        description="Async database URL (SQLite or PostgreSQL)"
    )
    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement (debug only)"
    )

    # JWT
    jwt_secret: str = Field(
        ...,
        description="Secret key for JWT signing (generate with: openssl rand -hex 32)"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    jwt_expires_in: str = Field(
        default="15m",
        description="Access token lifetime, e.g. 15m or 1h"
    )
    jwt_refresh_expires_in: str = Field(
        default="7d",
        description="Refresh token lifetime, e.g. 7d or 30d"
    )
    jwt_issuer: str = Field(
        default="userauth-api",
        description="JWT issuer claim"
    )
    jwt_audience: str = Field(
        default="userauth-client",
        description="JWT audience claim"
    )

    # CORS
    cors_origin_whitelist: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Allowed CORS origins; empty allows all outside production"
    )
    cors_methods: Annotated[List[str], NoDecode] = Field(
        default=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
        description="HTTP methods allowed for cross-origin requests"
    )
    cors_allowed_headers: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Extra request headers merged with the default allow list"
    )
    cors_exposed_headers: Annotated[List[str], NoDecode] = Field(
        default=["X-Total-Count", "X-Correlation-Id"],
        description="Response headers readable by browsers"
    )

    # Cookies
    cookie_http_only: bool = Field(
        default=True,
        description="Set the HttpOnly flag on the refresh token cookie"
    )
    cookie_same_site: Optional[Literal["lax", "none", "strict"]] = Field(
        default=None,
        description="SameSite attribute; defaults to none in production, lax otherwise"
    )
    cookie_domain: Optional[str] = Field(
        default=None,
        description="Cookie domain (optional)"
    )

    # Throttling
    throttle_ttl_seconds: int = Field(
        default=60,
        description="Rate limit window in seconds"
    )
    throttle_limit: int = Field(
        default=10,
        description="Requests per window for /auth endpoints"
    )
    throttle_default_limit: int = Field(
        default=60,
        description="Requests per window for all other endpoints"
    )
    disable_rate_limit: bool = Field(
        default=False,
        description="Disable rate limiting entirely (tests)"
    )

    # Seeding
    admin_email: str = Field(
        default="admin@example.com",
        description="Email of the seeded admin user"
    )
    admin_user_name: str = Field(
        default="admin",
        description="User name of the seeded admin user"
    )
    admin_password: str = Field(
        default="Admin.123",
        description="Password of the seeded admin user"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "cors_origin_whitelist",
        "cors_methods",
        "cors_allowed_headers",
        "cors_exposed_headers",
        mode="before",
    )
    @classmethod
    def parse_list(cls, v: str | List[str]) -> List[str]:
        """
        Parse list settings from a JSON array or a comma-separated string.
        """
        return _split_list(v)

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """
        Validate that jwt_secret is properly configured.

        Raises ValueError if still using placeholder value or too short.
        """
        if not v or v.strip() == "":
            raise ValueError(
                "JWT_SECRET is required and cannot be empty. "
                "Generate one with: openssl rand -hex 32"
            )
        if v in [
            "your-super-secret-jwt-key-change-this-in-production",
            "CHANGE_ME_32_CHARS_MIN",
            "your-secret-key-here",
        ]:
            raise ValueError(
                "JWT_SECRET must be set to a secure random value (not placeholder). "
                "Generate one with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError(
                f"JWT_SECRET must be at least 32 characters long. "
                f"Current length: {len(v)}. Generate with: openssl rand -hex 32"
            )
        return v

    @field_validator("jwt_expires_in", "jwt_refresh_expires_in")
    @classmethod
    def validate_durations(cls, v: str) -> str:
        """Reject lifetimes that parse_duration cannot read."""
        parse_duration(v)
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate database URL format.

        Supports SQLite (development, tests) and PostgreSQL (production).
        """
        if not v or v.strip() == "":
            raise ValueError("DATABASE_URL is required and cannot be empty")

        valid_schemes = ["sqlite", "sqlite+aiosqlite", "postgresql", "postgresql+asyncpg"]
        if not any(v.startswith(scheme + "://") for scheme in valid_schemes):
            raise ValueError(
                f"DATABASE_URL must start with one of: {', '.join(valid_schemes)}. "
                f"Got: {v[:20]}..."
            )
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def access_token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_expires_in)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_refresh_expires_in)

    @property
    def cors_origins(self) -> List[str]:
        """Configured origins, or every origin outside production when none are set."""
        if self.cors_origin_whitelist:
            return self.cors_origin_whitelist
        return [] if self.is_production else ["*"]

    @property
    def cors_headers(self) -> List[str]:
        """Default allowed headers merged with configured extras, order kept."""
        return list(dict.fromkeys(DEFAULT_CORS_ALLOWED_HEADERS + self.cors_allowed_headers))

    @property
    def cookie_samesite_value(self) -> str:
        if self.cookie_same_site:
            return self.cookie_same_site
        # SameSite=None is only honoured on Secure cookies, which production sets
        return "none" if self.is_production else "lax"

    def validate_production_settings(self) -> None:
        """
        Check settings that only have safe defaults outside production.

        Called once at startup.

        Raises:
            ValueError: Production without an explicit CORS origin whitelist
        """
        if not self.is_production:
            return
        if not self.cors_origin_whitelist:
            raise ValueError(
                "CORS_ORIGIN_WHITELIST must list the allowed origins in production"
            )


# Global settings instance
# Import this instance throughout the application
settings = Settings()
