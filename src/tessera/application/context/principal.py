"""Request-scoped values passed explicitly into application services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClientInfo:
    """Network metadata of the calling client, recorded in the audit log."""

    ip_address: str | None = None
    user_agent: str | None = None

    @classmethod
    def unknown(cls) -> ClientInfo:
        return cls()


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller.

    Built by the transport layer from a verified access token and passed
    by parameter to every operation that requires authentication.
    ``user_id`` is the raw ``sub`` claim and is parsed by the service.
    """

    user_id: str
    email: str
    role: str
    access_token: str | None = None

    def __repr__(self) -> str:
        return f"Principal(user_id={self.user_id!r}, email={self.email!r})"
