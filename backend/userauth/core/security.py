"""
Security primitives: password hashing and token handling.

Passwords are hashed with bcrypt. Access tokens are signed JWTs
(python-jose) carrying the public user profile; refresh tokens are
opaque random strings whose SHA-256 hash is what gets persisted.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from userauth.core.config import Settings, settings as default_settings
from userauth.core.errors import InvalidTokenError, TokenExpiredError
from userauth.models.base import utc_now

logger = logging.getLogger(__name__)

# Bcrypt work factor
SALT_ROUNDS = 12

# Bytes of entropy in a refresh token (hex encoded: 64 characters)
REFRESH_TOKEN_BYTES = 32


def _password_bytes(password: str) -> bytes:
    # Bcrypt only looks at the first 72 bytes
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
    return password_bytes


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password string

    Note:
        Bcrypt has a 72-byte password limit. Passwords are automatically
        truncated if necessary.
    """
    salt = bcrypt.gensalt(rounds=SALT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a bcrypt hash.

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked against when the user does not exist."""
    return hash_password(secrets.token_hex(16))


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh tokens issued together."""

    access_token: str
    refresh_token: str
    expires_at: datetime
    created_at: datetime
    token_type: str = "bearer"


class TokenService:
    """
    Issues and validates tokens.

    Access tokens carry the claims sub, user, iat, exp, iss and aud.
    Validation checks signature, expiry, issuer and audience.

    Example:
        service = TokenService()
        token = service.generate_access_token({"id": "...", "email": "..."})
        claims = service.validate_access_token(token)
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    @property
    def access_token_lifetime(self) -> timedelta:
        return self.config.access_token_lifetime

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return self.config.refresh_token_lifetime

    def access_token_expiry(self, now: Optional[datetime] = None) -> datetime:
        return (now or utc_now()) + self.access_token_lifetime

    def refresh_token_expiry(self, now: Optional[datetime] = None) -> datetime:
        return (now or utc_now()) + self.refresh_token_lifetime

    def generate_access_token(
        self,
        user: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> str:
        """
        Create a signed access token for a user.

        Args:
            user: Public user payload; must contain "id"
            now: Issue time (defaults to current UTC time)

        Returns:
            Encoded JWT string
        """
        issued_at = now or utc_now()
        claims = {
            "sub": str(user["id"]),
            "user": user,
            "iat": issued_at,
            "exp": self.access_token_expiry(issued_at),
            "iss": self.config.jwt_issuer,
            "aud": self.config.jwt_audience,
        }
        token = jwt.encode(claims, self.config.jwt_secret, algorithm=self.config.jwt_algorithm)
        logger.info("Access token generated", extra={"user_id": claims["sub"]})
        return token

    def validate_access_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and verify an access token.

        Returns:
            The token claims

        Raises:
            TokenExpiredError: If the token is past its exp claim
            InvalidTokenError: For any other failure (signature, issuer,
                audience, malformed token, missing subject)
        """
        try:
            claims = jwt.decode(
                token,
                self.config.jwt_secret,
                algorithms=[self.config.jwt_algorithm],
                audience=self.config.jwt_audience,
                issuer=self.config.jwt_issuer,
            )
        except ExpiredSignatureError:
            logger.warning("Token has expired")
            raise TokenExpiredError()
        except JWTError as exc:
            logger.warning("Invalid token", extra={"error": str(exc)})
            raise InvalidTokenError()

        if not claims.get("sub"):
            logger.warning("Token has no subject")
            raise InvalidTokenError()

        return claims

    def generate_refresh_token(self) -> str:
        """Random opaque refresh token (hex)."""
        return secrets.token_hex(REFRESH_TOKEN_BYTES)

    def hash_token(self, token: str) -> str:
        return hash_token(token)


token_service = TokenService()
