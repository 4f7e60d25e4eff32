"""Abstract repository interface for the access token blacklist."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from tessera.domain.shared.time import utc_now


@dataclass(frozen=True)
class BlacklistEntryData:
    """A revoked access token, keyed by its hash.

    ``expires_at`` mirrors the access token lifetime; afterwards the entry
    has no effect and may be removed.
    """

    token_hash: str
    expires_at: datetime
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)


class TokenBlacklistRepository(ABC):
    @abstractmethod
    async def add(self, entry: BlacklistEntryData) -> None:
        pass

    @abstractmethod
    async def is_blacklisted(self, token_hash: str) -> bool:
        """True if an unexpired entry exists for the hash."""

    @abstractmethod
    async def delete_expired(self) -> int:
        pass
