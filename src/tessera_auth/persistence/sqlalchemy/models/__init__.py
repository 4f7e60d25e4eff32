from tessera_auth.persistence.sqlalchemy.models.refresh_token_model import (
    RefreshTokenModel,
)
from tessera_auth.persistence.sqlalchemy.models.token_blacklist_model import (
    TokenBlacklistModel,
)

__all__ = ["RefreshTokenModel", "TokenBlacklistModel"]
