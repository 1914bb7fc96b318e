"""
Application information and health reporting.
"""

import logging
from typing import Awaitable, Callable, Optional

from userauth.core.config import Settings, settings as default_settings
from userauth.core.correlation import get_correlation_id
from userauth.core.probes import check_database
from userauth.models.base import utc_now
from userauth.schemas.health import (
    AppInfoResponse,
    AppSettingsResponse,
    DatabaseHealth,
    HealthResponse,
)

logger = logging.getLogger(__name__)

DatabaseProbe = Callable[[], Awaitable[bool]]


class AppService:
    """
    Builds the /app responses.

    Attributes:
        config: Application settings
        database_probe: Async callable returning True when the database answers
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        database_probe: Optional[DatabaseProbe] = None,
    ):
        self.config = config or default_settings
        self.database_probe = database_probe or check_database

    def get_app_info(self) -> AppInfoResponse:
        return AppInfoResponse(
            message=f"Welcome to {self.config.project_name} API",
            name=self.config.project_name,
            version=self.config.app_version,
            correlation_id=get_correlation_id(),
        )

    async def get_health(self) -> HealthResponse:
        """
        Report liveness with a database connectivity check.

        The overall status stays "ok"; a failed probe only marks the
        database as down.
        """
        database_up = await self.database_probe()
        if not database_up:
            logger.warning("Health check: database is down")

        return HealthResponse(
            status="ok",
            timestamp=utc_now(),
            database=DatabaseHealth(status="up" if database_up else "down"),
            name=self.config.project_name,
            version=self.config.app_version,
            correlation_id=get_correlation_id(),
        )

    def get_settings(self) -> AppSettingsResponse:
        return AppSettingsResponse(
            name=self.config.project_name,
            version=self.config.app_version,
            environment=self.config.environment,
        )


app_service = AppService()
