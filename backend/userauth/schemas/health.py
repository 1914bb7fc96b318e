"""
Pydantic schemas for application info and health check endpoints.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from userauth.schemas.base import CamelModel


class AppInfoResponse(CamelModel):
    """
    Basic application information.

    Attributes:
        message: Welcome message
        name: Application name
        version: Application version
        correlation_id: Correlation id of the current request
    """
    message: str = Field(description="Welcome message")
    name: str = Field(description="Application name")
    version: str = Field(description="Application version")
    correlation_id: Optional[str] = Field(
        default=None,
        description="Correlation id of the request that produced this response"
    )


class DatabaseHealth(CamelModel):
    status: Literal["up", "down"] = Field(description="Database connectivity")


class HealthResponse(CamelModel):
    """
    Health check result.

    The endpoint answers 200 while the process is alive; dependency
    problems are reported in the nested checks.
    """
    status: Literal["ok"] = Field(description="Health status indicator")
    timestamp: datetime = Field(description="Current UTC timestamp")
    database: DatabaseHealth = Field(description="Database check result")
    name: str = Field(description="Application name")
    version: str = Field(description="Application version")
    correlation_id: Optional[str] = Field(default=None, description="Request correlation id")


class AppSettingsResponse(CamelModel):
    name: str
    version: str
    environment: str
