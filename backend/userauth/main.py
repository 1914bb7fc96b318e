"""
userauth - FastAPI Application Entry Point

This module initializes the FastAPI application with all middleware,
REST routes, the GraphQL endpoint, exception handlers and lifecycle
event handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from userauth.api.exception_handlers import register_exception_handlers
from userauth.api.v1 import app as app_router, auth, hello, users
from userauth.core.config import settings
from userauth.core.database import close_db, init_db
from userauth.core.logging_config import get_logger, setup_logging
from userauth.gql.schema import create_graphql_router
from userauth.middleware.correlation_id import CorrelationIdMiddleware
from userauth.middleware.logging import LoggingMiddleware
from userauth.middleware.rate_limit import RateLimitMiddleware
from userauth.middleware.security_headers import SecurityHeadersMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
        - Set up logging from settings
        - Reject unsafe production settings
        - Initialize database

    Shutdown:
        - Close database connections
    """
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    settings.validate_production_settings()
    await init_db()
    logger.info(
        "Application started",
        extra={"environment": settings.environment, "version": settings.app_version}
    )

    yield

    await close_db()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.project_name,
    version=settings.app_version,
    description="User registration, JWT authentication and user management over REST and GraphQL",
    openapi_url=f"{settings.api_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

register_exception_handlers(app)


# Configure middleware
# Note: Middleware is executed in reverse order of registration
# (last registered = first executed)

# Security headers middleware (runs last, adds headers to response)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    RateLimitMiddleware,
    auth_limit=settings.throttle_limit,
    default_limit=settings.throttle_default_limit,
    window_seconds=settings.throttle_ttl_seconds,
    enabled=not settings.disable_rate_limit,
)

# Logging middleware (runs after CorrelationId to log the id)
app.add_middleware(LoggingMiddleware)

# Correlation id middleware (sets the id for everything below)
app.add_middleware(CorrelationIdMiddleware)

# CORS middleware (outermost, answers preflight requests)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
    expose_headers=settings.cors_exposed_headers,
)


app.include_router(app_router.router, prefix=f"{settings.api_prefix}/app", tags=["app"])
app.include_router(hello.router, prefix=f"{settings.api_prefix}/hello", tags=["hello"])
app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["users"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(create_graphql_router(), prefix="/graphql", tags=["graphql"])


@app.get("/", include_in_schema=False)
async def root():
    """
    Root endpoint.

    Returns basic API information.
    """
    return {
        "message": f"Welcome to {settings.project_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "graphql": "/graphql",
    }


if __name__ == "__main__":
    uvicorn.run("userauth.main:app", host="0.0.0.0", port=settings.port)
