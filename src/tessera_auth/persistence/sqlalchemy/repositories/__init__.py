from tessera_auth.persistence.sqlalchemy.repositories.refresh_token_repository import (
    RefreshTokenRepositorySQLAlchemy,
)
from tessera_auth.persistence.sqlalchemy.repositories.token_blacklist_repository import (
    TokenBlacklistRepositorySQLAlchemy,
)

__all__ = ["RefreshTokenRepositorySQLAlchemy", "TokenBlacklistRepositorySQLAlchemy"]
