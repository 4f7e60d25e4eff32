"""SQLAlchemy persistence for the tessera application.

Provides the user and audit repositories, engine construction and
schema management. Token repositories live in
tessera_auth.persistence.sqlalchemy.
"""

from tessera.infrastructure.persistence.sqlalchemy.database import (
    create_engine,
    create_session_maker,
)
from tessera.infrastructure.persistence.sqlalchemy.init_db import (
    create_tables,
    drop_tables,
)
from tessera.infrastructure.persistence.sqlalchemy.repositories import (
    AuditLogRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)

__all__ = [
    "AuditLogRepositorySQLAlchemy",
    "UserRepositorySQLAlchemy",
    "create_engine",
    "create_session_maker",
    "create_tables",
    "drop_tables",
]
