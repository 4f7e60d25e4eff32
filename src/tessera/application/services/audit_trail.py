"""Best-effort writer for the audit log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from uuid import UUID

from tessera.domain.audit import AuditAction, AuditLog

if TYPE_CHECKING:
    from tessera.application.context import ClientInfo
    from tessera.domain.audit import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditTrail:
    """
    Records security events without ever failing the calling flow.

    A failed write is logged at WARNING and dropped.
    """

    def __init__(self, audit_repository: AuditLogRepository):
        self._audit_repo = audit_repository

    async def record(
        self,
        action: AuditAction,
        user_id: UUID | None,
        client: ClientInfo | None = None,
        **metadata: Any,
    ) -> AuditLog | None:
        """Write one entry. Returns it, or None if the write failed."""
        log = AuditLog(
            action=action,
            user_id=user_id,
            ip_address=client.ip_address if client else None,
            user_agent=client.user_agent if client else None,
        )
        for key, value in metadata.items():
            log.add_metadata(key, value)

        try:
            await self._audit_repo.create(log)
        except Exception as e:
            logger.warning(
                "Failed to record audit event %s for user %s: %s",
                action.value,
                user_id,
                e,
            )
            return None
        return log
