"""
Request-scoped correlation id.

The id lives in a ContextVar so that anything running inside the request
task (services, repositories, log formatters) can read it without having
the request object passed down.
"""

from contextvars import ContextVar, Token
from typing import Optional

CORRELATION_ID_HEADER = "X-Correlation-Id"

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Return the correlation id of the current request, if any."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> Token:
    """
    Bind a correlation id to the current context.

    Returns:
        Token to pass to reset_correlation_id() when the request ends
    """
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    _correlation_id.reset(token)
