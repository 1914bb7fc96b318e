"""
Security headers middleware.

Adds the OWASP recommended response headers:
- X-Content-Type-Options: nosniff
- X-Frame-Options: DENY
- X-XSS-Protection: 1; mode=block
- Content-Security-Policy
- Referrer-Policy
- Permissions-Policy

The interactive pages (GraphiQL at /graphql, Swagger UI at /docs and
ReDoc at /redoc) load scripts and styles from a CDN, so they get a
relaxed CSP. Every other path gets the strict one.

References:
- OWASP Secure Headers Project: https://owasp.org/www-project-secure-headers/
- CSP Cheat Sheet: https://cheatsheetseries.owasp.org/cheatsheets/Content_Security_Policy_Cheat_Sheet.html
"""

import logging
from typing import Callable, Sequence

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


STRICT_CSP = (
    "default-src 'self'; "
    "script-src 'self'; "
    "style-src 'self'; "
    "img-src 'self' data:; "
    "font-src 'self' data:; "
    "connect-src 'self'; "
    "frame-ancestors 'none'; "
    "form-action 'self'; "
    "base-uri 'self'; "
    "object-src 'none'"
)

# GraphiQL and Swagger UI need inline scripts and CDN assets
RELAXED_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' 'unsafe-eval' https://cdn.jsdelivr.net https://unpkg.com; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net https://unpkg.com https://fonts.googleapis.com; "
    "img-src 'self' data: https:; "
    "font-src 'self' data: https://fonts.gstatic.com; "
    "connect-src 'self'; "
    "frame-ancestors 'none'; "
    "base-uri 'self'; "
    "object-src 'none'"
)

PERMISSIONS_POLICY = (
    "geolocation=(), "
    "microphone=(), "
    "camera=(), "
    "payment=(), "
    "usb=(), "
    "magnetometer=(), "
    "gyroscope=(), "
    "accelerometer=()"
)

DEFAULT_RELAXED_PREFIXES = ("/graphql", "/docs", "/redoc")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all HTTP responses.

    Example:
        app.add_middleware(SecurityHeadersMiddleware)
        app.add_middleware(SecurityHeadersMiddleware, relaxed_prefixes=("/graphql",))
    """

    def __init__(
        self,
        app,
        enable_csp: bool = True,
        csp_policy: str = STRICT_CSP,
        relaxed_csp_policy: str = RELAXED_CSP,
        relaxed_prefixes: Sequence[str] = DEFAULT_RELAXED_PREFIXES,
    ):
        super().__init__(app)
        self.enable_csp = enable_csp
        self.csp_policy = csp_policy
        self.relaxed_csp_policy = relaxed_csp_policy
        self.relaxed_prefixes = tuple(relaxed_prefixes)

        logger.debug(
            "Security headers middleware initialized",
            extra={"enable_csp": enable_csp, "relaxed_prefixes": list(self.relaxed_prefixes)}
        )

    def csp_for(self, path: str) -> str:
        if path.startswith(self.relaxed_prefixes):
            return self.relaxed_csp_policy
        return self.csp_policy

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        if self.enable_csp:
            response.headers["Content-Security-Policy"] = self.csp_for(request.url.path)
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = PERMISSIONS_POLICY

        return response
