"""Abstract repository interface for refresh tokens.

Only the hash of a refresh token is ever stored. Tokens issued from one
login share a family id across every rotation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from tessera.domain.shared.time import utc_now


@dataclass(frozen=True)
class RefreshTokenData:
    """Immutable refresh token record."""

    id: UUID
    user_id: UUID
    token_hash: str
    family_id: UUID
    expires_at: datetime
    is_revoked: bool = False
    revoked_at: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def issue(
        cls,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        family_id: UUID | None = None,
    ) -> RefreshTokenData:
        """Build a new, unrevoked token. Starts a new family unless one is given."""
        return cls(
            id=uuid4(),
            user_id=user_id,
            token_hash=token_hash,
            family_id=family_id or uuid4(),
            expires_at=expires_at,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) >= self.expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        """A token is usable iff it is not revoked and not expired."""
        return not self.is_revoked and not self.is_expired(now)


class RefreshTokenRepository(ABC):
    """Abstract repository interface for refresh token storage.

    All write methods are expected to translate storage failures into
    ``DatabaseError``.
    """

    @abstractmethod
    async def create(self, token: RefreshTokenData) -> None:
        """Persist a newly issued token."""

    @abstractmethod
    async def find_by_hash(self, token_hash: str) -> RefreshTokenData | None:
        """Find a token by its hash, regardless of revocation or expiry."""

    @abstractmethod
    async def find_by_user_id(self, user_id: UUID) -> list[RefreshTokenData]:
        """Return the user's unrevoked, unexpired tokens."""

    @abstractmethod
    async def revoke_by_hash(self, token_hash: str) -> bool:
        """
        Revoke a single token.

        The update only applies to a token that is not revoked yet, so
        at most one caller can consume a given token.

        Returns
        -------
        True if this call revoked the token, False if it was missing or
        already revoked
        """

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke every unrevoked token of a user. Returns the count."""

    @abstractmethod
    async def revoke_by_family_id(self, family_id: UUID) -> int:
        """Revoke every unrevoked token in a family. Returns the count."""

    @abstractmethod
    async def delete_expired(self) -> int:
        """Delete expired tokens. Returns the number of rows removed."""
