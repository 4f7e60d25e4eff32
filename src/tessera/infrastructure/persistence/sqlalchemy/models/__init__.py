"""SQLAlchemy models.

Importing this package registers every table, including the token
tables from tessera_auth, on the shared metadata.
"""

from tessera.infrastructure.persistence.sqlalchemy.models.audit_log_model import (
    AuditLogModel,
)
from tessera.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)
from tessera.infrastructure.persistence.sqlalchemy.models.user_model import UserModel
from tessera_auth.persistence.sqlalchemy.models import (
    RefreshTokenModel,
    TokenBlacklistModel,
)

__all__ = [
    "AuditLogModel",
    "Base",
    "RefreshTokenModel",
    "TimestampMixin",
    "TokenBlacklistModel",
    "UserModel",
]
