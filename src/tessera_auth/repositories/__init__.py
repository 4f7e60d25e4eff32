"""Repository interfaces for tessera_auth.

This package defines abstract repository interfaces for token storage
that can be implemented by different persistence technologies.

The SQLAlchemy implementations live in tessera_auth.persistence.sqlalchemy.
"""

from tessera_auth.repositories.refresh_token_repository import (
    RefreshTokenData,
    RefreshTokenRepository,
)
from tessera_auth.repositories.token_blacklist_repository import (
    BlacklistEntryData,
    TokenBlacklistRepository,
)

__all__ = [
    "BlacklistEntryData",
    "RefreshTokenData",
    "RefreshTokenRepository",
    "TokenBlacklistRepository",
]
