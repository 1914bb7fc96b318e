"""
Exception handlers translating errors into JSON error responses.

Every error body has the same shape:

    {
        "statusCode": 404,
        "code": "USER_NOT_FOUND",
        "message": "User with id '...' not found",
        "correlationId": "...",
        "timestamp": "2025-01-01T00:00:00+00:00",
        "path": "/api/v1/users/..."
    }
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from userauth.core.correlation import CORRELATION_ID_HEADER, get_correlation_id
from userauth.core.errors import AppError, UnauthorizedError
from userauth.models.base import utc_now

logger = logging.getLogger(__name__)


def _correlation_id(request: Request) -> Optional[str]:
    return get_correlation_id() or getattr(request.state, "correlation_id", None)


def error_body(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    **extra: Any,
) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "code": code,
        "message": message,
        "correlationId": _correlation_id(request),
        "timestamp": utc_now().isoformat(),
        "path": request.url.path,
        **extra,
    }


def _response(request: Request, status_code: int, body: Dict[str, Any], headers=None) -> JSONResponse:
    headers = dict(headers or {})
    correlation_id = body.get("correlationId")
    if correlation_id:
        headers[CORRELATION_ID_HEADER] = correlation_id
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    extensions = exc.to_extensions()
    extra = {k: v for k, v in extensions.items() if k not in ("code", "statusCode")}
    body = error_body(request, exc.status_code, exc.code, exc.message, **extra)

    if exc.status_code >= 500:
        logger.error("Request failed", extra={"code": exc.code, "path": request.url.path}, exc_info=exc)
    else:
        logger.info(
            "Request rejected",
            extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path}
        )

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return _response(request, exc.status_code, body, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    body = error_body(
        request,
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Validation failed",
        errors=errors,
    )
    return _response(request, status.HTTP_400_BAD_REQUEST, body)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = {
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
    }.get(exc.status_code, "HTTP_ERROR")
    body = error_body(request, exc.status_code, code, str(exc.detail))
    return _response(request, exc.status_code, body, getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
        exc_info=exc
    )
    body = error_body(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "Internal server error",
    )
    return _response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
