"""Tessera Auth - Generic authentication infrastructure.

This package provides authentication infrastructure that is independent
of the user domain. It handles:
- Password hashing and strength policy (bcrypt)
- JWT access tokens (HMAC or RSA) and opaque refresh tokens
- Refresh token and blacklist storage (with pluggable persistence)
- Trusted gateway assertions

Architecture:
    tessera_auth/
    ├── services/           # Pure logic (password hashing, JWT, gateway)
    ├── repositories/       # Abstract interfaces
    ├── persistence/        # Implementations by technology
    │   └── sqlalchemy/     # SQLAlchemy implementation
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    # Import core services and interfaces
    from tessera_auth import PasswordHashingService, JWTService, SigningKey

    # Import SQLAlchemy implementation
    from tessera_auth.persistence.sqlalchemy import (
        RefreshTokenRepositorySQLAlchemy,
        TokenBlacklistRepositorySQLAlchemy,
        AuthBase,
    )
"""

from tessera_auth.exceptions import (
    AccountInactiveError,
    AccountLockedError,
    AuthError,
    DatabaseError,
    ErrorCode,
    InternalServerError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidPasswordError,
    InvalidTokenError,
    MissingTokenError,
    TokenExpiredError,
    TokenRevokedError,
    UserAlreadyExistsError,
    UserNotFoundError,
    WeakPasswordError,
)
from tessera_auth.repositories import (
    BlacklistEntryData,
    RefreshTokenData,
    RefreshTokenRepository,
    TokenBlacklistRepository,
)
from tessera_auth.schemas import TokenClaims
from tessera_auth.services import (
    JWTService,
    PasswordHashingService,
    SigningKey,
    TrustedGatewayAssertion,
)

__all__ = [
    # Services
    "PasswordHashingService",
    "JWTService",
    "SigningKey",
    "TrustedGatewayAssertion",
    # Repositories (interfaces)
    "BlacklistEntryData",
    "RefreshTokenData",
    "RefreshTokenRepository",
    "TokenBlacklistRepository",
    # Schemas
    "TokenClaims",
    # Exceptions
    "AuthError",
    "ErrorCode",
    "AccountInactiveError",
    "AccountLockedError",
    "DatabaseError",
    "InternalServerError",
    "InvalidCredentialsError",
    "InvalidInputError",
    "InvalidPasswordError",
    "InvalidTokenError",
    "MissingTokenError",
    "TokenExpiredError",
    "TokenRevokedError",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    "WeakPasswordError",
]
