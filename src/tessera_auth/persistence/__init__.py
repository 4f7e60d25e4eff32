"""Persistence implementations for tessera_auth.

This package contains database-specific implementations of the
repository interfaces defined in tessera_auth.repositories.

Structure:
    persistence/
    └── sqlalchemy/     # SQLAlchemy/SQL database implementation

Usage:
    from tessera_auth.persistence.sqlalchemy import (
        RefreshTokenRepositorySQLAlchemy,
        TokenBlacklistRepositorySQLAlchemy,
        AuthBase,
    )
"""
