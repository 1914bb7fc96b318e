"""
Rate limiting middleware using a token bucket per client.

Each client IP has one bucket per scope: "auth" for paths containing
/auth, "default" for everything else. A bucket holds ``limit`` tokens
and refills at ``limit / window_seconds`` tokens per second, so a client
can burst up to the limit and then sustain limit requests per window.

Rejected requests get 429 with a Retry-After header and the standard
error body.

Note: in-memory buckets are per process; multiple workers each keep
their own counts.
"""

import logging
import time
from typing import Callable, Dict, Tuple

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from userauth.core.correlation import get_correlation_id
from userauth.models.base import utc_now

logger = logging.getLogger(__name__)

# Buckets idle for longer than this are dropped
BUCKET_IDLE_TIMEOUT_SECONDS = 600


class TokenBucket:
    """
    Token bucket for rate limiting.

    Attributes:
        capacity: Maximum number of tokens in the bucket
        refill_rate: Number of tokens added per second
        tokens: Current number of available tokens
        last_refill: Monotonic timestamp of last refill
    """

    def __init__(self, capacity: int, refill_rate: float):
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self.last_refill = time.monotonic()

    def _refill(self, now: float) -> None:
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def consume(self, tokens: int = 1) -> bool:
        """
        Take tokens if available.

        Returns:
            True if the tokens were consumed, False if the bucket is short
        """
        self._refill(time.monotonic())
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def get_wait_time(self) -> float:
        """Seconds until one token is available."""
        if self.tokens >= 1:
            return 0.0
        return (1 - self.tokens) / self.refill_rate


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-IP rate limiting with a stricter limit on authentication paths.

    Example:
        app.add_middleware(
            RateLimitMiddleware,
            auth_limit=10,
            default_limit=60,
            window_seconds=60,
        )
    """

    def __init__(
        self,
        app,
        auth_limit: int = 10,
        default_limit: int = 60,
        window_seconds: int = 60,
        enabled: bool = True,
        cleanup_interval: int = 300,
    ):
        super().__init__(app)
        self.auth_limit = auth_limit
        self.default_limit = default_limit
        self.window_seconds = window_seconds
        self.enabled = enabled
        self.cleanup_interval = cleanup_interval

        # {(ip, scope): (bucket, last_access)}
        self.buckets: Dict[Tuple[str, str], Tuple[TokenBucket, float]] = {}
        self.last_cleanup = time.monotonic()

        logger.info(
            "Rate limiting initialized",
            extra={
                "enabled": enabled,
                "auth_limit": auth_limit,
                "default_limit": default_limit,
                "window_seconds": window_seconds,
            }
        )

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _get_scope(self, path: str) -> Tuple[str, int]:
        if "/auth" in path:
            return "auth", self.auth_limit
        return "default", self.default_limit

    def _get_or_create_bucket(self, key: Tuple[str, str], limit: int) -> TokenBucket:
        now = time.monotonic()
        if now - self.last_cleanup > self.cleanup_interval:
            self._cleanup_old_buckets(now)

        if key in self.buckets:
            bucket, _ = self.buckets[key]
        else:
            bucket = TokenBucket(capacity=limit, refill_rate=limit / float(self.window_seconds))
        self.buckets[key] = (bucket, now)
        return bucket

    def _cleanup_old_buckets(self, now: float) -> None:
        stale = [
            key for key, (_, last_access) in self.buckets.items()
            if now - last_access > BUCKET_IDLE_TIMEOUT_SECONDS
        ]
        for key in stale:
            del self.buckets[key]
        if stale:
            logger.debug("Cleaned up old rate limit buckets", extra={"count": len(stale)})
        self.last_cleanup = now

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        if not self.enabled or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        path = request.url.path
        scope, limit = self._get_scope(path)
        bucket = self._get_or_create_bucket((client_ip, scope), limit)

        if not bucket.consume():
            retry_after = int(bucket.get_wait_time()) + 1
            logger.warning(
                "Rate limit exceeded",
                extra={"client_ip": client_ip, "path": path, "scope": scope, "limit": limit}
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "statusCode": status.HTTP_429_TOO_MANY_REQUESTS,
                    "code": "TOO_MANY_REQUESTS",
                    "message": "Rate limit exceeded",
                    "correlationId": get_correlation_id(),
                    "timestamp": utc_now().isoformat(),
                    "path": path,
                },
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                }
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(int(bucket.tokens))
        return response
