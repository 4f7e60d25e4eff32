"""Audit log repository interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from tessera.domain.audit.entities import AuditLog


class AuditLogRepository(ABC):
    """Repository interface for the audit trail.

    Entries are never updated. The only deletion is the retention purge.
    """

    @abstractmethod
    async def create(self, log: AuditLog) -> None:
        """Append an entry."""

    @abstractmethod
    async def find_by_user_id(
        self,
        user_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditLog]:
        """Return a page of the user's entries, newest first."""

    @abstractmethod
    async def delete_older_than(self, days: int) -> int:
        """Delete entries older than ``days``. Returns the number removed."""
