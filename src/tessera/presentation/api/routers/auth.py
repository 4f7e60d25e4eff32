"""Authentication router for registration, login and token management.

Routes are registered from ``AUTH_OPERATIONS``: the handler for each
operation is looked up by name, and the principal dependency is attached
to every operation that requires authentication.
"""

import logging
from typing import Annotated, Any, Callable

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Request,
    Response,
    status,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tessera.presentation.api.dependencies import (
    AuthService,
    BearerToken,
    Client,
    CurrentPrincipal,
    DBSession,
    SettingsDep,
    get_current_principal,
    get_jwt_service,
)
from tessera.presentation.api.operations import AUTH_OPERATIONS, Operation
from tessera.presentation.api.schemas.auth import (
    AuditEntryResponse,
    AuditListResponse,
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    PublicKeyResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from tessera_auth import (
    AccountLockedError,
    DatabaseError,
    InvalidCredentialsError,
    JWTService,
)
from tessera_config.settings import Settings

logger = logging.getLogger(__name__)

JWTServiceDep = Annotated[JWTService, Depends(get_jwt_service)]

# Refresh cookie is only sent to the auth endpoints
REFRESH_COOKIE_PATH = "/api/v1/auth"

_HANDLERS: dict[str, tuple[Callable[..., Any], dict[str, Any]]] = {}


def _handles(name: str, **route_kwargs: Any) -> Callable:
    """Bind a handler to the operation of the same name."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        _HANDLERS[name] = (func, route_kwargs)
        return func

    return decorator


def _set_refresh_token_cookie(
    response: Response,
    token: str,
    settings: Settings,
) -> None:
    """Set the refresh token as an HttpOnly cookie.

    This cookie is:
    - HttpOnly: Not accessible to JavaScript
    - Secure: Only sent over HTTPS (when api_cookie_secure=True)
    - Path restricted: Only sent to the auth endpoints
    """
    response.set_cookie(
        key=settings.api_refresh_cookie_name,
        value=token,
        httponly=True,
        secure=settings.api_cookie_secure,
        samesite=settings.api_cookie_samesite,
        max_age=int(settings.refresh_token_ttl.total_seconds()),
        path=REFRESH_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )


def _clear_refresh_token_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.api_refresh_cookie_name,
        path=REFRESH_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )


def _presented_refresh_token(
    body_token: str | None,
    http_request: Request,
    settings: Settings,
) -> str | None:
    """Refresh token from the request body, falling back to the cookie."""
    if body_token:
        return body_token
    return http_request.cookies.get(settings.api_refresh_cookie_name)


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except SQLAlchemyError as e:
        logger.error("Commit failed: %s", e)
        await session.rollback()
        raise DatabaseError("Failed to save changes") from e


# -----------------------------------------------------------------------------
# Public operations
# -----------------------------------------------------------------------------


@_handles(
    "register",
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User registered successfully"},
        400: {"description": "Invalid email or weak password"},
        409: {"description": "Email already registered"},
    },
)
async def register(
    request: RegisterRequest,
    auth_service: AuthService,
    session: DBSession,
    client: Client,
) -> UserResponse:
    """
    Create a new account.

    No tokens are issued; log in afterwards.
    """
    try:
        profile = await auth_service.register(
            email=request.email,
            password=request.password,
            client=client,
        )
    except Exception:
        await session.rollback()
        raise
    await _commit(session)

    return UserResponse.from_profile(profile)


@_handles(
    "login",
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid credentials"},
        403: {"description": "Account locked or inactive"},
    },
)
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    client: Client,
) -> AuthResponse:
    """
    Authenticate with email and password.

    Returns an access token and a refresh token. The refresh token is
    also set as an HttpOnly cookie.

    The account is locked after repeated failed attempts.
    """
    try:
        result = await auth_service.login(
            email=request.email,
            password=request.password,
            client=client,
        )
    except (InvalidCredentialsError, AccountLockedError):
        # Keep the failed attempt count and the audit entry
        await _commit(session)
        raise
    except Exception:
        await session.rollback()
        raise
    await _commit(session)

    _set_refresh_token_cookie(response, result.tokens.refresh_token, settings)

    return AuthResponse(
        **TokenResponse.from_pair(result.tokens).model_dump(),
        user=UserResponse.from_profile(result.user),
    )


@_handles(
    "refresh",
    responses={
        200: {"description": "Tokens rotated"},
        401: {"description": "Invalid, expired or reused refresh token"},
    },
)
async def refresh_token(
    http_request: Request,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    client: Client,
    access_token: BearerToken,
    request: RefreshRequest | None = None,
) -> TokenResponse:
    """
    Exchange a refresh token for a new token pair.

    The refresh token can be sent in the body or as the HttpOnly cookie.
    It is consumed by this call. An access token sent as bearer is
    revoked along with it.
    """
    token = _presented_refresh_token(
        request.refresh_token if request else None,
        http_request,
        settings,
    )

    try:
        tokens = await auth_service.refresh_token(
            refresh_token=token,
            access_token=access_token,
            client=client,
        )
    except Exception:
        await session.rollback()
        raise
    await _commit(session)

    _set_refresh_token_cookie(response, tokens.refresh_token, settings)

    return TokenResponse.from_pair(tokens)


@_handles(
    "public_key",
    responses={
        200: {"description": "PEM encoded public key"},
        404: {"description": "Tokens are signed with a shared secret"},
    },
)
async def public_key(jwt_service: JWTServiceDep) -> PublicKeyResponse:
    """
    Get the public key for verifying access tokens.

    Only available when tokens are signed with an RSA key.
    """
    if jwt_service.public_key is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tokens are signed with a shared secret",
        )
    return PublicKeyResponse(
        algorithm=jwt_service.algorithm,
        public_key=jwt_service.public_key,
    )


# -----------------------------------------------------------------------------
# Authenticated operations
# -----------------------------------------------------------------------------


@_handles(
    "logout",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={204: {"description": "Logged out successfully"}},
)
async def logout(
    principal: CurrentPrincipal,
    http_request: Request,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    client: Client,
    request: LogoutRequest | None = None,
) -> None:
    """End the current session and revoke its tokens."""
    token = _presented_refresh_token(
        request.refresh_token if request else None,
        http_request,
        settings,
    )

    try:
        await auth_service.logout(principal, refresh_token=token, client=client)
    except Exception:
        await session.rollback()
        raise
    await _commit(session)

    _clear_refresh_token_cookie(response, settings)


@_handles(
    "logout_all",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={204: {"description": "All sessions revoked"}},
)
async def logout_all(
    principal: CurrentPrincipal,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    client: Client,
) -> None:
    """Revoke every refresh token of the current user."""
    try:
        await auth_service.logout_all(principal, client=client)
    except Exception:
        await session.rollback()
        raise
    await _commit(session)

    _clear_refresh_token_cookie(response, settings)


@_handles("me", responses={200: {"description": "Current user data"}})
async def get_me(
    principal: CurrentPrincipal,
    auth_service: AuthService,
) -> UserResponse:
    """
    Get the current authenticated user's information.

    Requires a valid access token in the Authorization header.
    """
    profile = await auth_service.get_me(principal)
    return UserResponse.from_profile(profile)


@_handles(
    "change_password",
    responses={
        200: {"description": "Password changed, all sessions revoked"},
        400: {"description": "Current password incorrect or new password too weak"},
    },
)
async def change_password(
    request: ChangePasswordRequest,
    principal: CurrentPrincipal,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    client: Client,
) -> MessageResponse:
    """
    Change the current user's password.

    Every refresh token of the user is revoked; log in again on other
    devices.
    """
    try:
        await auth_service.change_password(
            principal,
            old_password=request.old_password,
            new_password=request.new_password,
            client=client,
        )
    except Exception:
        await session.rollback()
        raise
    await _commit(session)

    _clear_refresh_token_cookie(response, settings)
    return MessageResponse(message="Password changed successfully")


@_handles("audit", responses={200: {"description": "Security events"}})
async def list_audit(
    principal: CurrentPrincipal,
    auth_service: AuthService,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> AuditListResponse:
    """List the current user's security events, newest first."""
    entries = await auth_service.get_audit_history(principal, limit, offset)
    return AuditListResponse(
        entries=[AuditEntryResponse.from_entry(e) for e in entries],
        limit=limit,
        offset=offset,
    )


# -----------------------------------------------------------------------------
# Route registration
# -----------------------------------------------------------------------------


def _add_route(target: APIRouter, operation: Operation) -> None:
    try:
        endpoint, route_kwargs = _HANDLERS[operation.name]
    except KeyError:
        msg = f"No handler bound to operation '{operation.name}'"
        raise RuntimeError(msg) from None

    dependencies = [Depends(get_current_principal)] if operation.requires_auth else []
    target.add_api_route(
        operation.path,
        endpoint,
        methods=[operation.method],
        name=operation.name,
        summary=operation.summary,
        dependencies=dependencies,
        **route_kwargs,
    )


def create_auth_router() -> APIRouter:
    """Create the auth router with one route per registered operation."""
    auth_router = APIRouter()
    for operation in AUTH_OPERATIONS.values():
        _add_route(auth_router, operation)
    return auth_router


router = create_auth_router()
