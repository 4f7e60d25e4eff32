"""Authentication service: registration, login and the token lifecycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from tessera.application.context import ClientInfo, Principal
from tessera.application.dtos import AuthResult, TokenPair, UserProfile
from tessera.application.services.audit_trail import AuditTrail
from tessera.domain.audit import AuditAction, AuditLog
from tessera.domain.shared.time import utc_now
from tessera.domain.user import Email, InvalidEmailError, LockoutPolicy, User
from tessera_auth.exceptions import (
    AccountInactiveError,
    AccountLockedError,
    DatabaseError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidPasswordError,
    InvalidTokenError,
    MissingTokenError,
    TokenRevokedError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from tessera_auth.repositories import BlacklistEntryData, RefreshTokenData
from tessera_auth.schemas import TokenClaims

if TYPE_CHECKING:
    from tessera.domain.audit import AuditLogRepository
    from tessera.domain.user import UserRepository
    from tessera_auth.repositories import (
        RefreshTokenRepository,
        TokenBlacklistRepository,
    )
    from tessera_auth.services import (
        JWTService,
        PasswordHashingService,
        TrustedGatewayAssertion,
    )

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Application service for user authentication.

    Orchestrates tessera_auth infrastructure (password hashing, JWT and
    refresh tokens, blacklist) with the User aggregate to provide:
    - User registration
    - Login with lockout
    - Refresh token rotation
    - Logout (single session and everywhere)
    - Password change

    Audit writes and the blacklist/revoke side effects of logout are
    best effort: a failure there is logged and never changes the result.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        refresh_token_repository: RefreshTokenRepository,
        token_blacklist_repository: TokenBlacklistRepository,
        audit_log_repository: AuditLogRepository,
        password_service: PasswordHashingService,
        jwt_service: JWTService,
        lockout_policy: LockoutPolicy | None = None,
    ):
        self._user_repo = user_repository
        self._refresh_repo = refresh_token_repository
        self._blacklist_repo = token_blacklist_repository
        self._audit_repo = audit_log_repository
        self._password_service = password_service
        self._jwt_service = jwt_service
        self._lockout_policy = lockout_policy or LockoutPolicy()
        self._audit = AuditTrail(audit_log_repository)

    async def register(
        self,
        email: str,
        password: str,
        client: ClientInfo | None = None,
    ) -> UserProfile:
        """Create a new account. No tokens are issued.

        Raises
        ------
        InvalidInputError
            If the email address is malformed
        UserAlreadyExistsError
            If the email is already registered
        WeakPasswordError
            If the password fails the strength policy
        """
        email_obj = self._parse_email(email)

        if await self._user_repo.exists_by_email(email_obj):
            raise UserAlreadyExistsError(email_obj.value)

        self._password_service.validate_strength(password)
        password_hash = self._password_service.hash(password)

        user = User.create(email_obj, password_hash)
        await self._user_repo.create(user)

        await self._audit.record(AuditAction.REGISTER, user.id, client)

        logger.info("User registered: %s", user.id)
        return UserProfile.from_user(user)

    async def login(
        self,
        email: str,
        password: str,
        client: ClientInfo | None = None,
    ) -> AuthResult:
        """Verify credentials and issue a new token pair in a new family.

        Raises
        ------
        InvalidCredentialsError
            If the email is unknown or the password is wrong
        AccountInactiveError
            If the account has been deactivated
        AccountLockedError
            If the account is inside a lock window
        """
        client = client or ClientInfo.unknown()

        user = await self._find_user_for_login(email)
        if user is None:
            await self._audit.record(
                AuditAction.LOGIN_FAILED,
                None,
                client,
                email=email,
            )
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError

        if not user.is_active:
            raise AccountInactiveError

        if user.is_locked():
            await self._audit.record(AuditAction.ACCOUNT_LOCKED, user.id, client)
            logger.warning("Login attempt on locked account: %s", user.id)
            locked_until = user.locked_until.isoformat() if user.locked_until else None
            raise AccountLockedError(locked_until=locked_until)

        try:
            self._password_service.verify(password, user.password_hash)
        except InvalidPasswordError:
            await self._register_failed_login(user, client)
            raise InvalidCredentialsError from None

        if self._password_service.needs_rehash(user.password_hash):
            # Work factor changed since this hash was made
            user.change_password_hash(self._password_service.hash(password))
            logger.info("Password hash upgraded for user: %s", user.id)

        user.reset_failed_logins()
        user.record_login(client.ip_address)
        await self._user_repo.update(user)

        tokens = await self._issue_tokens(user)

        await self._audit.record(AuditAction.LOGIN, user.id, client)

        logger.info("User logged in: %s", user.id)
        return AuthResult(tokens=tokens, user=UserProfile.from_user(user))

    async def refresh_token(
        self,
        refresh_token: str | None,
        access_token: str | None = None,
        client: ClientInfo | None = None,
    ) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        The presented refresh token is consumed: a second exchange of the
        same token fails. The new refresh token stays in the same family.

        Raises
        ------
        MissingTokenError
            If no refresh token is given
        InvalidTokenError
            If the token is unknown, revoked, expired or was consumed
            concurrently
        UserNotFoundError
            If the owning user no longer exists
        """
        if not refresh_token:
            raise MissingTokenError

        token_hash = self._jwt_service.hash_token(refresh_token)
        stored = await self._refresh_repo.find_by_hash(token_hash)
        if stored is None or not stored.is_valid(utc_now()):
            raise InvalidTokenError

        user = await self._user_repo.find_by_id(stored.user_id)
        if user is None:
            raise UserNotFoundError

        if not await self._refresh_repo.revoke_by_hash(token_hash):
            logger.warning(
                "Refresh token of family %s was already consumed",
                stored.family_id,
            )
            raise InvalidTokenError

        if access_token:
            await self._blacklist_access_token(access_token)

        tokens = await self._issue_tokens(user, family_id=stored.family_id)

        await self._audit.record(AuditAction.TOKEN_REFRESH, user.id, client)

        logger.debug("Tokens refreshed for user: %s", user.id)
        return tokens

    async def logout(
        self,
        principal: Principal,
        refresh_token: str | None = None,
        client: ClientInfo | None = None,
    ) -> None:
        """End the current session.

        Revoking the refresh token and blacklisting the access token are
        best effort; only a malformed principal raises.

        Raises
        ------
        InvalidInputError
            If the principal's user id is not a valid UUID
        """
        user_id = self._parse_user_id(principal.user_id)

        if refresh_token:
            try:
                await self._refresh_repo.revoke_by_hash(
                    self._jwt_service.hash_token(refresh_token),
                )
            except Exception as e:
                logger.warning("Failed to revoke refresh token on logout: %s", e)

        if principal.access_token:
            await self._blacklist_access_token(principal.access_token)

        await self._audit.record(AuditAction.LOGOUT, user_id, client)
        logger.info("User logged out: %s", user_id)

    async def logout_all(
        self,
        principal: Principal,
        client: ClientInfo | None = None,
    ) -> int:
        """Revoke every refresh token of the user.

        Returns
        -------
        The number of refresh tokens revoked

        Raises
        ------
        InvalidInputError
            If the principal's user id is not a valid UUID
        DatabaseError
            If the revocation fails
        """
        user_id = self._parse_user_id(principal.user_id)

        revoked = await self._revoke_all(user_id)

        if principal.access_token:
            await self._blacklist_access_token(principal.access_token)

        await self._audit.record(
            AuditAction.LOGOUT,
            user_id,
            client,
            logout_all=True,
        )
        logger.info("User logged out everywhere: %s (%d sessions)", user_id, revoked)
        return revoked

    async def change_password(
        self,
        principal: Principal,
        old_password: str,
        new_password: str,
        client: ClientInfo | None = None,
    ) -> None:
        """Replace the password and revoke every refresh token of the user.

        Access tokens already issued stay valid until they expire.

        Raises
        ------
        InvalidInputError
            If the principal's user id is not a valid UUID
        UserNotFoundError
            If the user does not exist
        InvalidPasswordError
            If the old password is wrong
        WeakPasswordError
            If the new password fails the strength policy
        """
        user_id = self._parse_user_id(principal.user_id)

        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError

        self._password_service.verify(old_password, user.password_hash)
        self._password_service.validate_strength(new_password)

        user.change_password_hash(self._password_service.hash(new_password))
        await self._user_repo.update(user)

        await self._revoke_all(user_id)

        await self._audit.record(AuditAction.PASSWORD_CHANGE, user_id, client)
        logger.info("Password changed for user: %s", user_id)

    async def get_me(self, principal: Principal) -> UserProfile:
        """
        Raises
        ------
        InvalidInputError
            If the principal's user id is not a valid UUID
        UserNotFoundError
            If the user does not exist
        """
        user_id = self._parse_user_id(principal.user_id)

        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError
        return UserProfile.from_user(user)

    async def authenticate(
        self,
        access_token: str | None,
        assertion: TrustedGatewayAssertion | None = None,
    ) -> Principal:
        """Validate an access token and check it against the blacklist.

        With a gateway assertion the signature and expiry checks are
        skipped, since the gateway already made them. The blacklist is
        consulted either way.

        Raises
        ------
        MissingTokenError
            If no token is given
        InvalidTokenError
            If the signature, expiry or structure is invalid
        TokenRevokedError
            If the token was blacklisted by logout or refresh
        """
        if not access_token:
            raise MissingTokenError

        if assertion is not None:
            claims = self._jwt_service.extract_claims_without_validation(
                access_token,
                assertion,
            )
        else:
            claims = self._jwt_service.validate_access_token(access_token)

        token_hash = self._jwt_service.hash_token(access_token)
        if await self._blacklist_repo.is_blacklisted(token_hash):
            logger.warning("Blacklisted access token presented for %s", claims.subject)
            raise TokenRevokedError

        return Principal(
            user_id=claims.subject,
            email=claims.email,
            role=claims.role,
            access_token=access_token,
        )

    async def revoke_token_family(self, family_id: UUID) -> int:
        """Revoke every refresh token descended from one login.

        Returns
        -------
        The number of refresh tokens revoked
        """
        count = await self._refresh_repo.revoke_by_family_id(family_id)
        logger.warning("Revoked token family %s (%d tokens)", family_id, count)
        return count

    async def get_audit_history(
        self,
        principal: Principal,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditLog]:
        """Return the caller's audit entries, newest first."""
        user_id = self._parse_user_id(principal.user_id)
        if limit < 1 or offset < 0:
            msg = "limit must be positive and offset must not be negative"
            raise InvalidInputError(msg)
        return await self._audit_repo.find_by_user_id(user_id, limit, offset)

    async def _find_user_for_login(self, email: str) -> User | None:
        try:
            email_obj = Email(email)
        except InvalidEmailError:
            return None
        return await self._user_repo.find_by_email(email_obj)

    async def _register_failed_login(self, user: User, client: ClientInfo) -> None:
        locked = user.register_failed_login(self._lockout_policy)
        if locked:
            logger.warning(
                "Account locked for user %s after %d failed attempts",
                user.id,
                user.failed_login_attempts,
            )

        try:
            await self._user_repo.update(user)
        except DatabaseError as e:
            logger.warning("Failed to persist failed login for %s: %s", user.id, e)

        await self._audit.record(AuditAction.LOGIN_FAILED, user.id, client)

    async def _issue_tokens(
        self,
        user: User,
        family_id: UUID | None = None,
    ) -> TokenPair:
        access_token = self._jwt_service.generate_access_token(
            TokenClaims(
                subject=str(user.id),
                email=user.email,
                role=user.role.value,
            ),
        )
        refresh_plain, refresh_hash = self._jwt_service.generate_refresh_token()

        await self._refresh_repo.create(
            RefreshTokenData.issue(
                user_id=user.id,
                token_hash=refresh_hash,
                expires_at=utc_now() + self._jwt_service.refresh_token_expiry,
                family_id=family_id,
            ),
        )

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_plain,
            expires_in=int(self._jwt_service.access_token_expiry.total_seconds()),
        )

    async def _blacklist_access_token(self, access_token: str) -> None:
        entry = BlacklistEntryData(
            token_hash=self._jwt_service.hash_token(access_token),
            expires_at=utc_now() + self._jwt_service.access_token_expiry,
        )
        try:
            await self._blacklist_repo.add(entry)
        except Exception as e:
            logger.warning("Failed to blacklist access token: %s", e)

    async def _revoke_all(self, user_id: UUID) -> int:
        try:
            return await self._refresh_repo.revoke_all_by_user_id(user_id)
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError("Failed to revoke refresh tokens") from e

    @staticmethod
    def _parse_email(email: str) -> Email:
        try:
            return Email(email)
        except InvalidEmailError as e:
            raise InvalidInputError(str(e)) from e

    @staticmethod
    def _parse_user_id(user_id: str) -> UUID:
        try:
            return UUID(str(user_id))
        except ValueError as e:
            raise InvalidInputError("Invalid user id") from e
