"""
Logging middleware for request/response tracking.

Logs one record when a request starts and one when it completes, with
method, path, status code and latency. Failures are logged with their
traceback and re-raised.

Must be registered before CorrelationIdMiddleware (so it runs after it)
to have the correlation id on its records.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from userauth.core.logging_config import get_logger


logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses.

    Log output (JSON):
        {
            "timestamp": "2025-11-24T10:30:00.123456+00:00",
            "level": "INFO",
            "message": "Request completed",
            "method": "GET",
            "path": "/api/v1/app/health",
            "status_code": 200,
            "latency_ms": 12.5,
            "correlation_id": "abc-123"
        }
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        method = request.method
        path = request.url.path

        logger.info(
            "Request started",
            extra={
                "method": method,
                "path": path,
                "query_params": str(request.query_params) if request.query_params else None,
                "client_ip": request.client.host if request.client else None,
            }
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request failed: {exc}",
                extra={
                    "method": method,
                    "path": path,
                    "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    "exception_type": type(exc).__name__,
                },
                exc_info=True
            )
            raise

        logger.info(
            "Request completed",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
            }
        )
        return response
