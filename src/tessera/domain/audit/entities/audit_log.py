"""Audit log entity for security-relevant events."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from tessera.domain.shared.time import utc_now


class AuditAction(str, Enum):
    REGISTER = "register"
    LOGIN = "login"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    TOKEN_REFRESH = "token_refresh"
    PASSWORD_CHANGE = "password_change"
    ACCOUNT_LOCKED = "account_locked"
    ACCOUNT_VERIFIED = "account_verified"


class AuditLog:
    """
    An append-only record of a security event.

    ``user_id`` is None when the actor is unknown, for example a failed
    login with an email that is not registered. It is not required to
    reference an existing user.
    """

    def __init__(
        self,
        action: AuditAction,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        metadata: dict[str, Any] | None = None,
        id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        self._id = id or uuid4()
        self._user_id = user_id
        self._action = AuditAction(action)
        self._ip_address = ip_address or None
        self._user_agent = user_agent or None
        self._metadata = dict(metadata or {})
        self._created_at = created_at or utc_now()

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def user_id(self) -> UUID | None:
        return self._user_id

    @property
    def action(self) -> AuditAction:
        return self._action

    @property
    def ip_address(self) -> str | None:
        return self._ip_address

    @property
    def user_agent(self) -> str | None:
        return self._user_agent

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def add_metadata(self, key: str, value: Any) -> None:
        self._metadata[key] = value

    def __repr__(self) -> str:
        return (
            f"AuditLog(id={self._id}, action={self._action.value}, "
            f"user_id={self._user_id})"
        )
