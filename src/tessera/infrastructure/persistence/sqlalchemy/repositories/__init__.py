from tessera.infrastructure.persistence.sqlalchemy.repositories.audit_log_repository import (
    AuditLogRepositorySQLAlchemy,
)
from tessera.infrastructure.persistence.sqlalchemy.repositories.user_repository import (
    UserRepositorySQLAlchemy,
)

__all__ = ["AuditLogRepositorySQLAlchemy", "UserRepositorySQLAlchemy"]
