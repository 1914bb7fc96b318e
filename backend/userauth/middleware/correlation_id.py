"""
Correlation id middleware.

Every request gets a correlation id:
- Taken from the X-Correlation-Id request header when the client sends one
- Generated as a UUID4 otherwise
- Bound to a ContextVar for services and log records
- Stored in request.state and echoed in the response header
"""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from userauth.core.correlation import (
    CORRELATION_ID_HEADER,
    reset_correlation_id,
    set_correlation_id,
)

# Upper bound on client-supplied ids; longer values are replaced
MAX_CORRELATION_ID_LENGTH = 128


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation id to each request.

    Register it last so it runs first and the id is available to every
    other middleware.

    Example:
        app.add_middleware(LoggingMiddleware)
        app.add_middleware(CorrelationIdMiddleware)

    Usage in code running inside a request:
        from userauth.core.correlation import get_correlation_id
        logger.info("Processing", extra={"correlation_id": get_correlation_id()})
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_ID_HEADER, "").strip()
        if not correlation_id or len(correlation_id) > MAX_CORRELATION_ID_LENGTH:
            correlation_id = str(uuid.uuid4())

        request.state.correlation_id = correlation_id
        token = set_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            reset_correlation_id(token)

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
