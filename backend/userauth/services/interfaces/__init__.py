"""Service interface contracts (ABCs)"""

from userauth.services.interfaces.repositories import (
    IRefreshTokenRepository,
    IUserRepository,
)

__all__ = [
    'IRefreshTokenRepository',
    'IUserRepository',
]
