"""SQLAlchemy implementation of RefreshTokenRepository.

Every write runs inside a SAVEPOINT so that a failed write can be
discarded without aborting the caller's transaction.
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tessera.domain.shared.time import (
    ensure_tz_aware,
    ensure_tz_aware_or_none,
    utc_now,
)
from tessera_auth.exceptions import DatabaseError
from tessera_auth.persistence.sqlalchemy.models import RefreshTokenModel
from tessera_auth.repositories import RefreshTokenData, RefreshTokenRepository

logger = logging.getLogger(__name__)


class RefreshTokenRepositorySQLAlchemy(RefreshTokenRepository):
    """
    SQLAlchemy implementation of RefreshTokenRepository.

    Revocations are conditional UPDATE statements on ``is_revoked = false``,
    so concurrent revocations of the same row cannot both succeed.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Parameters
        ----------
        session
            SQLAlchemy async session
        """
        self._session = session

    def _to_data(self, model: RefreshTokenModel) -> RefreshTokenData:
        """Map SQLAlchemy model to data transfer object."""
        return RefreshTokenData(
            id=UUID(model.id),
            user_id=UUID(model.user_id),
            token_hash=model.token_hash,
            family_id=UUID(model.family_id),
            expires_at=ensure_tz_aware(model.expires_at),
            is_revoked=model.is_revoked,
            revoked_at=ensure_tz_aware_or_none(model.revoked_at),
            created_at=ensure_tz_aware(model.created_at),
        )

    async def create(self, token: RefreshTokenData) -> None:
        model = RefreshTokenModel(
            id=str(token.id),
            user_id=str(token.user_id),
            token_hash=token.token_hash,
            family_id=str(token.family_id),
            expires_at=token.expires_at,
            is_revoked=token.is_revoked,
            revoked_at=token.revoked_at,
            created_at=token.created_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(model)
        except SQLAlchemyError as e:
            logger.error("Failed to create refresh token: %s", e)
            raise DatabaseError("Failed to create refresh token") from e
        logger.debug("Created refresh token %s for user %s", token.id, token.user_id)

    async def find_by_hash(self, token_hash: str) -> RefreshTokenData | None:
        stmt = (
            select(RefreshTokenModel)
            .where(RefreshTokenModel.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to look up refresh token: %s", e)
            raise DatabaseError("Failed to look up refresh token") from e
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def find_by_user_id(self, user_id: UUID) -> list[RefreshTokenData]:
        stmt = (
            select(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == str(user_id),
                RefreshTokenModel.is_revoked.is_(False),
                RefreshTokenModel.expires_at > utc_now(),
            )
            .order_by(RefreshTokenModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to list refresh tokens: %s", e)
            raise DatabaseError("Failed to list refresh tokens") from e
        return [self._to_data(model) for model in result.scalars().all()]

    async def revoke_by_hash(self, token_hash: str) -> bool:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.token_hash == token_hash,
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=utc_now())
        )
        return await self._revoke(stmt, "token") > 0

    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == str(user_id),
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=utc_now())
        )
        count = await self._revoke(stmt, "user tokens")
        logger.info("Revoked %d refresh tokens for user %s", count, user_id)
        return count

    async def revoke_by_family_id(self, family_id: UUID) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.family_id == str(family_id),
                RefreshTokenModel.is_revoked.is_(False),
            )
            .values(is_revoked=True, revoked_at=utc_now())
        )
        count = await self._revoke(stmt, "token family")
        logger.info("Revoked %d refresh tokens in family %s", count, family_id)
        return count

    async def delete_expired(self) -> int:
        stmt = delete(RefreshTokenModel).where(
            RefreshTokenModel.expires_at < utc_now(),
        )
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to delete expired refresh tokens: %s", e)
            raise DatabaseError("Failed to delete expired refresh tokens") from e
        return result.rowcount  # type: ignore

    async def _revoke(self, stmt, what: str) -> int:
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to revoke %s: %s", what, e)
            raise DatabaseError("Failed to revoke refresh token") from e
        return result.rowcount  # type: ignore
