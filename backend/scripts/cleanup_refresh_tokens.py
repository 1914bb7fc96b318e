"""
Delete expired refresh tokens.

Meant to run periodically (cron, scheduled job). Revoked tokens that have
not expired yet are kept so reuse can still be detected.

Usage:
    python scripts/cleanup_refresh_tokens.py
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy.ext.asyncio import AsyncSession

from userauth.core.config import settings
from userauth.core.database import async_session_maker
from userauth.core.logging_config import setup_logging
from userauth.repositories.refresh_token import RefreshTokenRepository
from userauth.services.refresh_tokens import RefreshTokenService

logger = logging.getLogger(__name__)


async def cleanup_refresh_tokens(session: AsyncSession) -> int:
    service = RefreshTokenService(RefreshTokenRepository(session))
    return await service.delete_expired()


async def main() -> None:
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    async with async_session_maker() as session:
        try:
            deleted = await cleanup_refresh_tokens(session)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Refresh token cleanup failed")
            raise

    print(f"Expired refresh tokens deleted: {deleted}")


if __name__ == "__main__":
    asyncio.run(main())
