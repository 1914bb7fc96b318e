"""
Translation of SQLAlchemy exceptions into application errors.

Repositories call handle_db_error() from their except blocks so that
routes and resolvers only ever see AppError subclasses. Messages can be
overridden per call to give entity-specific wording.
"""

import logging
from typing import Dict, NoReturn, Optional

from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    InterfaceError,
    NoResultFound,
    OperationalError,
    StatementError,
)

from userauth.core.errors import ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)


DEFAULT_MESSAGES: Dict[str, str] = {
    "unique_constraint": "Resource with these values already exists",
    "not_found": "Resource not found",
    "foreign_key_constraint": "Invalid reference in data",
    "validation": "Invalid data provided",
    "connection": "Database unavailable",
    "unknown": "An unexpected error occurred",
}

# Driver messages differ between SQLite and PostgreSQL
_UNIQUE_MARKERS = ("unique constraint", "duplicate key", "unique violation")
_FOREIGN_KEY_MARKERS = ("foreign key",)


def classify_db_error(error: BaseException) -> str:
    """
    Map an exception to one of the DEFAULT_MESSAGES keys.

    Example:
        >>> classify_db_error(NoResultFound())
        'not_found'
    """
    if isinstance(error, IntegrityError):
        detail = str(error.orig).lower()
        if any(marker in detail for marker in _FOREIGN_KEY_MARKERS):
            return "foreign_key_constraint"
        if any(marker in detail for marker in _UNIQUE_MARKERS):
            return "unique_constraint"
        return "validation"
    if isinstance(error, NoResultFound):
        return "not_found"
    # OperationalError and InterfaceError are StatementError subclasses
    if isinstance(error, (OperationalError, InterfaceError)):
        return "connection"
    if isinstance(error, (DataError, StatementError)):
        return "validation"
    return "unknown"


def handle_db_error(
    error: BaseException,
    context: str,
    messages: Optional[Dict[str, str]] = None,
    codes: Optional[Dict[str, str]] = None,
) -> NoReturn:
    """
    Raise the application error matching a database exception.

    Args:
        error: Exception raised by SQLAlchemy
        context: Caller name, included in the log record
        messages: Overrides for DEFAULT_MESSAGES
        codes: Optional code overrides; only "not_found" is used

    Raises:
        ConflictError: unique or foreign key violations
        NotFoundError: missing rows
        DatabaseError: validation, connection and unknown failures
    """
    merged = {**DEFAULT_MESSAGES, **(messages or {})}
    kind = classify_db_error(error)
    message = merged[kind]
    log_extra = {"context": context, "db_error": kind, "original_error": str(error)}

    if kind in ("unique_constraint", "foreign_key_constraint"):
        logger.debug(message, extra=log_extra)
        raise ConflictError(message) from error

    if kind == "not_found":
        logger.debug(message, extra=log_extra)
        code = (codes or {}).get("not_found", "RESOURCE_NOT_FOUND")
        raise NotFoundError(message, code=code) from error

    if kind == "validation":
        logger.debug(message, extra=log_extra)
        raise DatabaseError(message) from error

    logger.error(message, extra=log_extra, exc_info=error)
    raise DatabaseError(message) from error
