"""User aggregate: identity, credentials and lockout state."""

from datetime import datetime
from typing import Union
from uuid import UUID, uuid4

from tessera.domain.shared.time import utc_now
from tessera.domain.user.value_objects import Email, LockoutPolicy, UserRole


class User:
    """
    User aggregate root.

    Owns the password hash and the failed-login counter. The counter is
    reset by a successful login or a password change; ``locked_until`` is
    only set once the counter reaches the policy's maximum and is only
    cleared by an explicit reset.
    """

    def __init__(
        self,
        email: Union[str, Email],
        password_hash: str,
        role: Union[str, UserRole] = UserRole.USER,
        id: UUID | None = None,
        is_verified: bool = False,
        is_active: bool = True,
        failed_login_attempts: int = 0,
        locked_until: datetime | None = None,
        last_login_at: datetime | None = None,
        last_login_ip: str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self._email = email if isinstance(email, Email) else Email(email)
        self._password_hash = password_hash
        self._id = id or uuid4()
        self._role = role if isinstance(role, UserRole) else UserRole(role)
        self._is_verified = is_verified
        self._is_active = is_active
        self._failed_login_attempts = failed_login_attempts
        self._locked_until = locked_until
        self._last_login_at = last_login_at
        self._last_login_ip = last_login_ip
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or self._created_at

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def email_obj(self) -> Email:
        return self._email

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def role(self) -> UserRole:
        return self._role

    @property
    def is_admin(self) -> bool:
        return self._role == UserRole.ADMIN

    @property
    def is_verified(self) -> bool:
        return self._is_verified

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def failed_login_attempts(self) -> int:
        return self._failed_login_attempts

    @property
    def locked_until(self) -> datetime | None:
        return self._locked_until

    @property
    def last_login_at(self) -> datetime | None:
        return self._last_login_at

    @property
    def last_login_ip(self) -> str | None:
        return self._last_login_ip

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def is_locked(self, now: datetime | None = None) -> bool:
        if self._locked_until is None:
            return False
        return (now or utc_now()) < self._locked_until

    def register_failed_login(
        self,
        policy: LockoutPolicy,
        now: datetime | None = None,
    ) -> bool:
        """Count a failed login and lock the account at the policy maximum.

        Returns
        -------
        True if this failure locked the account
        """
        now = now or utc_now()
        self._failed_login_attempts += 1
        self._updated_at = now

        if self._failed_login_attempts >= policy.max_attempts:
            self._locked_until = now + policy.lock_duration
            return True
        return False

    def reset_failed_logins(self) -> None:
        self._failed_login_attempts = 0
        self._locked_until = None
        self._updated_at = utc_now()

    def record_login(self, ip_address: str | None = None) -> None:
        now = utc_now()
        self._last_login_at = now
        self._last_login_ip = ip_address or None
        self._updated_at = now

    def change_password_hash(self, password_hash: str) -> None:
        self._password_hash = password_hash
        self._failed_login_attempts = 0
        self._locked_until = None
        self._updated_at = utc_now()

    def verify(self) -> None:
        self._is_verified = True
        self._updated_at = utc_now()

    def activate(self) -> None:
        self._is_active = True
        self._updated_at = utc_now()

    def deactivate(self) -> None:
        self._is_active = False
        self._updated_at = utc_now()

    @classmethod
    def create(
        cls,
        email: Union[str, Email],
        password_hash: str,
        role: UserRole = UserRole.USER,
    ) -> "User":
        return cls(email=email, password_hash=password_hash, role=role)

    @classmethod
    def reconstitute(
        cls,
        id: UUID,
        email: Union[str, Email],
        password_hash: str,
        role: Union[str, UserRole],
        is_verified: bool,
        is_active: bool,
        failed_login_attempts: int,
        locked_until: datetime | None,
        last_login_at: datetime | None,
        last_login_ip: str | None,
        created_at: datetime,
        updated_at: datetime,
    ) -> "User":
        return cls(
            id=id,
            email=email,
            password_hash=password_hash,
            role=role,
            is_verified=is_verified,
            is_active=is_active,
            failed_login_attempts=failed_login_attempts,
            locked_until=locked_until,
            last_login_at=last_login_at,
            last_login_ip=last_login_ip,
            created_at=created_at,
            updated_at=updated_at,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"User(id={self._id}, email={self._email.value})"
