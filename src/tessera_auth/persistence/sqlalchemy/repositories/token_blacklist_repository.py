"""SQLAlchemy implementation of TokenBlacklistRepository."""

import logging

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tessera.domain.shared.time import utc_now
from tessera_auth.exceptions import DatabaseError
from tessera_auth.persistence.sqlalchemy.models import TokenBlacklistModel
from tessera_auth.repositories import BlacklistEntryData, TokenBlacklistRepository

logger = logging.getLogger(__name__)


class TokenBlacklistRepositorySQLAlchemy(TokenBlacklistRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, entry: BlacklistEntryData) -> None:
        model = TokenBlacklistModel(
            id=str(entry.id),
            token_hash=entry.token_hash,
            expires_at=entry.expires_at,
            created_at=entry.created_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(model)
        except SQLAlchemyError as e:
            logger.error("Failed to blacklist token: %s", e)
            raise DatabaseError("Failed to blacklist token") from e

    async def is_blacklisted(self, token_hash: str) -> bool:
        stmt = select(
            exists().where(
                TokenBlacklistModel.token_hash == token_hash,
                TokenBlacklistModel.expires_at > utc_now(),
            ),
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to check token blacklist: %s", e)
            raise DatabaseError("Failed to check token blacklist") from e
        return bool(result.scalar())

    async def delete_expired(self) -> int:
        stmt = delete(TokenBlacklistModel).where(
            TokenBlacklistModel.expires_at < utc_now(),
        )
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to delete expired blacklist entries: %s", e)
            raise DatabaseError("Failed to delete expired blacklist entries") from e
        return result.rowcount  # type: ignore
