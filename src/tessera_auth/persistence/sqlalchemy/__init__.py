"""SQLAlchemy implementation for tessera_auth persistence.

Provides:
- AuthBase: Declarative base shared by every tessera model
- RefreshTokenModel, TokenBlacklistModel: SQLAlchemy models for tokens
- RefreshTokenRepositorySQLAlchemy, TokenBlacklistRepositorySQLAlchemy:
  Repository implementations
"""

from tessera_auth.persistence.sqlalchemy.base import AuthBase
from tessera_auth.persistence.sqlalchemy.models import (
    RefreshTokenModel,
    TokenBlacklistModel,
)
from tessera_auth.persistence.sqlalchemy.repositories import (
    RefreshTokenRepositorySQLAlchemy,
    TokenBlacklistRepositorySQLAlchemy,
)

__all__ = [
    "AuthBase",
    "RefreshTokenModel",
    "RefreshTokenRepositorySQLAlchemy",
    "TokenBlacklistModel",
    "TokenBlacklistRepositorySQLAlchemy",
]
