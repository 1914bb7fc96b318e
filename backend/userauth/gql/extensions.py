"""
GraphQL error formatting.

Rewrites every error of an operation so that clients always get
``extensions.code``, ``extensions.statusCode`` and
``extensions.correlationId``:

- AppError: its own code, status and message
- pydantic ValidationError from input conversion: VALIDATION_ERROR (400)
  with per-field errors
- errors raised by graphql-core itself (syntax, unknown fields):
  GRAPHQL_VALIDATION_FAILED (400)
- anything else: masked as INTERNAL_SERVER_ERROR (500) and logged
"""

import logging
from typing import Any, Dict

from graphql import GraphQLError
from pydantic import ValidationError as PydanticValidationError
from strawberry.extensions import SchemaExtension

from userauth.core.correlation import get_correlation_id
from userauth.core.errors import AppError

logger = logging.getLogger(__name__)


def _pydantic_errors(exc: PydanticValidationError) -> list:
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]


def format_error(error: GraphQLError) -> GraphQLError:
    original = error.original_error
    message = error.message
    extensions: Dict[str, Any]

    if isinstance(original, AppError):
        message = original.message
        extensions = original.to_extensions()
        if original.status_code >= 500:
            logger.error("GraphQL resolver failed", extra={"code": original.code}, exc_info=original)
    elif isinstance(original, PydanticValidationError):
        message = "Validation failed"
        extensions = {
            "code": "VALIDATION_ERROR",
            "statusCode": 400,
            "errors": _pydantic_errors(original),
        }
    elif original is None:
        extensions = {
            **(error.extensions or {}),
            "code": "GRAPHQL_VALIDATION_FAILED",
            "statusCode": 400,
        }
    else:
        logger.error(
            "Unhandled exception in GraphQL resolver",
            extra={"error_type": type(original).__name__, "path": error.path},
            exc_info=original
        )
        message = "Internal server error"
        extensions = {"code": "INTERNAL_SERVER_ERROR", "statusCode": 500}

    extensions["correlationId"] = get_correlation_id()
    return GraphQLError(
        message,
        nodes=error.nodes,
        source=error.source,
        positions=error.positions,
        path=error.path,
        original_error=original,
        extensions=extensions,
    )


class ErrorFormattingExtension(SchemaExtension):
    def on_operation(self):
        yield
        result = self.execution_context.result
        if result and result.errors:
            result.errors = [format_error(error) for error in result.errors]
