"""Scheduled cleanup of expired tokens and old audit entries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tessera.application.dtos import CleanupReport

if TYPE_CHECKING:
    from tessera.domain.audit import AuditLogRepository
    from tessera_auth.repositories import (
        RefreshTokenRepository,
        TokenBlacklistRepository,
    )

logger = logging.getLogger(__name__)


class TokenMaintenanceService:
    """
    Deletes rows that no longer have any effect.

    Expired refresh tokens and blacklist entries can never validate again,
    so removing them is idempotent and safe next to live requests.
    """

    def __init__(
        self,
        refresh_token_repository: RefreshTokenRepository,
        token_blacklist_repository: TokenBlacklistRepository,
        audit_log_repository: AuditLogRepository,
    ):
        self._refresh_repo = refresh_token_repository
        self._blacklist_repo = token_blacklist_repository
        self._audit_repo = audit_log_repository

    async def run(self, audit_retention_days: int) -> CleanupReport:
        """
        Run one cleanup pass.

        Parameters
        ----------
        audit_retention_days
            Audit entries older than this many days are purged

        Returns
        -------
        CleanupReport with the number of rows removed per table
        """
        if audit_retention_days < 1:
            msg = "audit_retention_days must be at least 1"
            raise ValueError(msg)

        refresh_count = await self._refresh_repo.delete_expired()
        blacklist_count = await self._blacklist_repo.delete_expired()
        audit_count = await self._audit_repo.delete_older_than(audit_retention_days)

        report = CleanupReport(
            expired_refresh_tokens=refresh_count,
            expired_blacklist_entries=blacklist_count,
            purged_audit_logs=audit_count,
        )
        logger.info(
            "Maintenance removed %d refresh tokens, %d blacklist entries, "
            "%d audit entries",
            refresh_count,
            blacklist_count,
            audit_count,
        )
        return report
