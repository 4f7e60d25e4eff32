"""FastAPI dependency injection for the Tessera API.

Provides dependencies for:
- Database sessions
- Token signing and password hashing services
- The authentication service
- Client metadata and the authenticated principal
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tessera.application.context import ClientInfo, Principal
from tessera.application.services import AuthenticationService
from tessera.domain.user import LockoutPolicy
from tessera.infrastructure.persistence.sqlalchemy import (
    AuditLogRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)
from tessera.presentation.api.config import get_api_settings
from tessera_auth import (
    JWTService,
    MissingTokenError,
    PasswordHashingService,
    SigningKey,
    TrustedGatewayAssertion,
)
from tessera_auth.persistence.sqlalchemy import (
    RefreshTokenRepositorySQLAlchemy,
    TokenBlacklistRepositorySQLAlchemy,
)
from tessera_config.settings import Settings

logger = logging.getLogger(__name__)

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)

CONSUMER_ID_HEADER = "X-Consumer-ID"
GATEWAY_SECRET_HEADER = "X-Gateway-Secret"  # NOQA: S105

SettingsDep = Annotated[Settings, Depends(get_api_settings)]


# -----------------------------------------------------------------------------
# Database Session
# -----------------------------------------------------------------------------


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.

    Sessions come from the session maker that ``create_app`` built for
    the application's own settings. One session, and one transaction,
    per request. Routers commit or roll back explicitly.

    Yields
    ------
    AsyncSession for database operations
    """
    session_maker: async_sessionmaker[AsyncSession] = (
        request.app.state.session_maker
    )
    async with session_maker() as session:
        yield session


# Type alias for injected session
DBSession = Annotated[AsyncSession, Depends(get_db_session)]


# -----------------------------------------------------------------------------
# Authentication Services
# -----------------------------------------------------------------------------


@lru_cache(maxsize=4)
def _load_signing_key(
    algorithm: str,
    secret: str | None,
    private_key_path: Path | None,
    public_key_path: Path | None,
) -> SigningKey:
    if algorithm == "HS256":
        return SigningKey.hmac(secret or "")
    if private_key_path is None or public_key_path is None:
        msg = "RSA signing requires both key paths"
        raise ValueError(msg)
    logger.info("Loading RSA signing key from %s", private_key_path)
    return SigningKey.rsa_from_files(private_key_path, public_key_path, algorithm)


def get_signing_key(settings: SettingsDep) -> SigningKey:
    """Get the configured signing key (parsed once per configuration)."""
    secret = (
        settings.jwt_secret_key.get_secret_value() if settings.jwt_secret_key else None
    )
    return _load_signing_key(
        settings.jwt_algorithm,
        secret,
        settings.jwt_private_key_path,
        settings.jwt_public_key_path,
    )


def get_jwt_service(
    settings: SettingsDep,
    key: SigningKey = Depends(get_signing_key),
) -> JWTService:
    """Get JWT service configured with API settings."""
    return JWTService(
        key,
        access_token_expire=settings.access_token_ttl,
        refresh_token_expire=settings.refresh_token_ttl,
        issuer=settings.jwt_issuer,
    )


def get_password_service(settings: SettingsDep) -> PasswordHashingService:
    """Get password hashing service."""
    return PasswordHashingService(rounds=settings.security_bcrypt_rounds)


def get_lockout_policy(settings: SettingsDep) -> LockoutPolicy:
    return LockoutPolicy(
        max_attempts=settings.security_max_login_attempts,
        lock_duration=settings.account_lock_duration,
    )


async def get_authentication_service(
    session: DBSession,
    jwt_service: JWTService = Depends(get_jwt_service),
    password_service: PasswordHashingService = Depends(get_password_service),
    lockout_policy: LockoutPolicy = Depends(get_lockout_policy),
) -> AuthenticationService:
    """
    Get authentication service with all dependencies.

    All repositories share the request's session.
    """
    return AuthenticationService(
        user_repository=UserRepositorySQLAlchemy(session),
        refresh_token_repository=RefreshTokenRepositorySQLAlchemy(session),
        token_blacklist_repository=TokenBlacklistRepositorySQLAlchemy(session),
        audit_log_repository=AuditLogRepositorySQLAlchemy(session),
        password_service=password_service,
        jwt_service=jwt_service,
        lockout_policy=lockout_policy,
    )


# Type alias for injected auth service
AuthService = Annotated[AuthenticationService, Depends(get_authentication_service)]


# -----------------------------------------------------------------------------
# Request context
# -----------------------------------------------------------------------------


def get_client_info(request: Request, settings: SettingsDep) -> ClientInfo:
    """Extract client IP and user agent for the audit log.

    Forwarding headers are only honoured when the service runs behind a
    trusted proxy (API_TRUST_PROXY_HEADERS).
    """
    ip_address = request.client.host if request.client else None

    if settings.api_trust_proxy_headers:
        forwarded_for = request.headers.get("X-Forwarded-For")
        real_ip = request.headers.get("X-Real-IP")
        if forwarded_for:
            ip_address = forwarded_for.split(",")[0].strip()
        elif real_ip:
            ip_address = real_ip.strip()

    return ClientInfo(
        ip_address=ip_address,
        user_agent=request.headers.get("User-Agent"),
    )


Client = Annotated[ClientInfo, Depends(get_client_info)]


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    return credentials.credentials if credentials else None


BearerToken = Annotated[str | None, Depends(get_bearer_token)]


def get_gateway_assertion(
    request: Request,
    settings: SettingsDep,
) -> TrustedGatewayAssertion | None:
    """
    Verify the upstream gateway headers, if gateway trust is enabled.

    Returns None unless trust is enabled and both headers are present.
    A wrong secret is rejected rather than silently ignored.
    """
    if not settings.gateway_trust_enabled:
        return None

    consumer_id = request.headers.get(CONSUMER_ID_HEADER)
    presented_secret = request.headers.get(GATEWAY_SECRET_HEADER)
    if not consumer_id or not presented_secret:
        return None

    expected = (
        settings.gateway_shared_secret.get_secret_value()
        if settings.gateway_shared_secret
        else None
    )
    return TrustedGatewayAssertion.verify(consumer_id, presented_secret, expected)


async def get_current_principal(
    auth_service: AuthService,
    token: BearerToken,
    assertion: TrustedGatewayAssertion | None = Depends(get_gateway_assertion),
) -> Principal:
    """
    FastAPI dependency resolving the authenticated caller.

    Validates the bearer token (or, for gateway-verified requests, only
    decodes it) and rejects blacklisted tokens.

    Raises
    ------
    MissingTokenError
        401 if no bearer token was sent
    InvalidTokenError
        401 if the token is invalid or expired
    TokenRevokedError
        401 if the token was revoked by logout or refresh
    """
    if not token:
        raise MissingTokenError
    return await auth_service.authenticate(token, assertion=assertion)


# Type alias for injected principal
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
