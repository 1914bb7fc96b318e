"""
Application information and health endpoints.

- /app, /app/info: name, version and welcome message
- /app/health: liveness with a database connectivity check
- /app/settings: non-secret runtime settings
"""

from fastapi import APIRouter, status

from userauth.api.dependencies import AppServiceDep
from userauth.schemas.health import AppInfoResponse, AppSettingsResponse, HealthResponse


router = APIRouter()


@router.get(
    "",
    response_model=AppInfoResponse,
    summary="Application info",
)
async def get_app(service: AppServiceDep) -> AppInfoResponse:
    return service.get_app_info()


@router.get(
    "/info",
    response_model=AppInfoResponse,
    summary="Application info",
    description="Returns the application name, version and a welcome message",
)
async def get_app_info(service: AppServiceDep) -> AppInfoResponse:
    """
    Example response:
        {
            "message": "Welcome to userauth API",
            "name": "userauth",
            "version": "1.0.0",
            "correlationId": "5b6c..."
        }
    """
    return service.get_app_info()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Always 200 while the process runs; database status is reported in the body",
)
async def get_health(service: AppServiceDep) -> HealthResponse:
    """
    Basic liveness probe with a database check.

    Example response:
        {
            "status": "ok",
            "timestamp": "2025-11-24T10:30:00.123456+00:00",
            "database": {"status": "up"},
            "name": "userauth",
            "version": "1.0.0",
            "correlationId": "5b6c..."
        }
    """
    return await service.get_health()


@router.get(
    "/settings",
    response_model=AppSettingsResponse,
    summary="Runtime settings",
)
async def get_app_settings(service: AppServiceDep) -> AppSettingsResponse:
    return service.get_settings()
