"""
Error hierarchy shared by REST and GraphQL.

Every error carries a machine-readable ``code`` and the HTTP
``status_code`` it maps to. Errors are split by layer:

- DomainError: business rule violations (not found, conflict, auth...)
- ApplicationError: use case orchestration failures
- InfrastructureError: database and external system failures

Only non-domain errors are logged as errors by the exception handlers;
domain errors are expected outcomes.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for all errors raised on purpose by the application."""

    code: str = "INTERNAL_SERVER_ERROR"
    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        self.extensions: Dict[str, Any] = dict(extensions or {})
        super().__init__(self.message)

    def to_extensions(self) -> Dict[str, Any]:
        """GraphQL/REST error metadata."""
        return {
            **self.extensions,
            "code": self.code,
            "statusCode": self.status_code,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# Domain errors

class DomainError(AppError):
    pass


class BadRequestError(DomainError):
    code = "BAD_REQUEST"
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(DomainError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(DomainError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class ConflictError(DomainError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource already exists"


class UnprocessableEntityError(DomainError):
    code = "UNPROCESSABLE_ENTITY"
    status_code = 422
    default_message = "Business rule violated"


class InternalServerError(DomainError):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500


class ServiceUnavailableError(DomainError):
    code = "SERVICE_UNAVAILABLE"
    status_code = 503
    default_message = "Service unavailable"


class ValidationError(DomainError):
    """
    Input failed validation.

    Attributes:
        errors: One entry per offending field, e.g.
            {"field": "email", "message": "value is not a valid email address"}
    """

    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    def to_extensions(self) -> Dict[str, Any]:
        return {**super().to_extensions(), "errors": self.errors}


# Application errors

class ApplicationError(AppError):
    pass


class UseCaseError(ApplicationError):
    code = "USE_CASE_ERROR"
    default_message = "Use case execution failed"


class TransformationError(ApplicationError):
    code = "TRANSFORMATION_ERROR"
    default_message = "Data transformation failed"


# Infrastructure errors

class InfrastructureError(AppError):
    pass


class DatabaseError(InfrastructureError):
    code = "DATABASE_ERROR"
    default_message = "Database operation failed"


class ExternalServiceError(InfrastructureError):
    code = "EXTERNAL_SERVICE_ERROR"
    default_message = "External service failed"


class NetworkError(InfrastructureError):
    code = "NETWORK_ERROR"
    default_message = "Network error"


class CacheError(InfrastructureError):
    code = "CACHE_ERROR"
    default_message = "Cache operation failed"


# Auth errors

class AuthErrorCode(str, Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    ACCOUNT_BANNED = "ACCOUNT_BANNED"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    USERNAME_ALREADY_EXISTS = "USERNAME_ALREADY_EXISTS"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"


class InvalidCredentialsError(UnauthorizedError):
    code = AuthErrorCode.INVALID_CREDENTIALS.value
    default_message = "Invalid credentials provided"


class AccountInactiveError(ForbiddenError):
    code = AuthErrorCode.ACCOUNT_INACTIVE.value
    default_message = "Account is inactive"


class AccountBannedError(ForbiddenError):
    code = AuthErrorCode.ACCOUNT_BANNED.value
    default_message = "Account has been banned"


class EmailAlreadyExistsError(ConflictError):
    code = AuthErrorCode.EMAIL_ALREADY_EXISTS.value

    def __init__(self, email: str):
        super().__init__(f"Email '{email}' is already registered")


class UsernameAlreadyExistsError(ConflictError):
    code = AuthErrorCode.USERNAME_ALREADY_EXISTS.value

    def __init__(self, user_name: str):
        super().__init__(f"Username '{user_name}' is already taken")


class InvalidRefreshTokenError(UnauthorizedError):
    code = AuthErrorCode.INVALID_REFRESH_TOKEN.value
    default_message = "Invalid or expired refresh token"


class TokenExpiredError(UnauthorizedError):
    code = AuthErrorCode.TOKEN_EXPIRED.value
    default_message = "Token has expired"


class InvalidTokenError(UnauthorizedError):
    code = AuthErrorCode.INVALID_TOKEN.value
    default_message = "Invalid token provided"
