"""
Structured JSON logging configuration.

This module sets up application-wide JSON logging with:
- Consistent field names across all logs
- Request correlation IDs read from the request context
- Redaction of credentials (passwords, tokens, secrets)

Logs are output to stdout in JSON format for easy parsing by
log aggregation systems.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from userauth.core.correlation import get_correlation_id


REDACTED = "[REDACTED]"

# Any key containing one of these (case-insensitive) is redacted
SENSITIVE_KEYS = (
    "password",
    "currentpassword",
    "newpassword",
    "token",
    "accesstoken",
    "refreshtoken",
    "secret",
    "apikey",
)

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "asctime",
}


def _is_sensitive(key: str) -> bool:
    normalized = key.lower().replace("_", "").replace("-", "")
    return any(sensitive in normalized for sensitive in SENSITIVE_KEYS)


def redact(value: Any, _seen: set | None = None) -> Any:
    """
    Recursively replace sensitive values in dicts and lists.

    Args:
        value: Arbitrary log payload

    Returns:
        Copy of the payload with sensitive keys masked. Circular
        references are cut short with an empty container.

    Example:
        >>> redact({"email": "a@b.c", "password": "x"})
        {'email': 'a@b.c', 'password': '[REDACTED]'}
    """
    if _seen is None:
        _seen = set()

    if isinstance(value, dict):
        if id(value) in _seen:
            return {}
        _seen.add(id(value))
        result = {
            key: REDACTED if isinstance(key, str) and _is_sensitive(key) else redact(item, _seen)
            for key, item in value.items()
        }
        _seen.discard(id(value))
        return result

    if isinstance(value, (list, tuple)):
        if id(value) in _seen:
            return []
        _seen.add(id(value))
        result = [redact(item, _seen) for item in value]
        _seen.discard(id(value))
        return result

    return value


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.

    Outputs log records as single-line JSON objects with consistent fields:
    - timestamp: ISO 8601 format with microseconds (UTC)
    - level: Log level
    - message: Log message
    - logger: Logger name (module path)
    - correlation_id: Request correlation id (if inside a request)
    - path, method, status_code, latency_ms: Request fields (if available)
    - exception: Exception details (if exception occurred)
    - any other field passed via ``extra``, redacted

    Example output:
        {"timestamp": "2025-11-24T10:30:00.123456+00:00", "level": "INFO",
         "message": "Request completed", "path": "/api/v1/users",
         "status_code": 200, "latency_ms": 12.5, "correlation_id": "abc-123"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and key not in log_data
        }
        log_data.update(redact(extra))

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True
) -> None:
    """
    Configure application logging.

    Sets up:
    - Root logger with specified level
    - JSON formatter (if json_format=True)
    - StreamHandler to stdout
    - Removes default handlers

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatter (True) or simple formatter (False)

    Note:
        Call this once at application startup, before any logging occurs.
    """
    root_logger = logging.getLogger()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance with given name.

    Example:
        logger = get_logger(__name__)
        logger.info("User created", extra={"user_id": "abc-123"})
    """
    return logging.getLogger(name)
