"""SQLAlchemy implementation of AuditLogRepository."""

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tessera.domain.audit import AuditAction, AuditLog, AuditLogRepository
from tessera.domain.shared.time import ensure_tz_aware, utc_now
from tessera.infrastructure.persistence.sqlalchemy.models import AuditLogModel
from tessera_auth.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class AuditLogRepositorySQLAlchemy(AuditLogRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, log: AuditLog) -> None:
        model = AuditLogModel(
            id=log.id,
            user_id=log.user_id,
            action=log.action.value,
            ip_address=log.ip_address,
            user_agent=log.user_agent,
            details=log.metadata,
            created_at=log.created_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(model)
        except SQLAlchemyError as e:
            logger.error("Failed to write audit log: %s", e)
            raise DatabaseError("Failed to write audit log") from e

    async def find_by_user_id(
        self,
        user_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditLog]:
        stmt = (
            select(AuditLogModel)
            .where(AuditLogModel.user_id == user_id)
            .order_by(AuditLogModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to read audit log: %s", e)
            raise DatabaseError("Failed to read audit log") from e
        return [self._map_to_domain(model) for model in result.scalars().all()]

    async def delete_older_than(self, days: int) -> int:
        cutoff = utc_now() - timedelta(days=days)
        stmt = delete(AuditLogModel).where(AuditLogModel.created_at < cutoff)
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to purge audit log: %s", e)
            raise DatabaseError("Failed to purge audit log") from e
        return result.rowcount  # type: ignore

    def _map_to_domain(self, model: AuditLogModel) -> AuditLog:
        return AuditLog(
            id=model.id,
            user_id=model.user_id,
            action=AuditAction(model.action),
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            metadata=model.details,
            created_at=ensure_tz_aware(model.created_at),
        )
