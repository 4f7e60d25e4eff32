"""SQLAlchemy implementation of UserRepository."""

import logging
from typing import Union
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tessera.domain.shared.time import ensure_tz_aware, ensure_tz_aware_or_none
from tessera.domain.user import Email, User, UserRepository
from tessera.infrastructure.persistence.sqlalchemy.models import UserModel
from tessera_auth.exceptions import DatabaseError, UserAlreadyExistsError

logger = logging.getLogger(__name__)


class UserRepositorySQLAlchemy(UserRepository):
    """SQLAlchemy implementation of the UserRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, user: User) -> None:
        model = self._map_to_model(user)
        try:
            async with self._session.begin_nested():
                self._session.add(model)
        except IntegrityError as e:
            raise UserAlreadyExistsError(user.email) from e
        except SQLAlchemyError as e:
            logger.error("Failed to create user: %s", e)
            raise DatabaseError("Failed to create user") from e
        logger.info("Created user: %s (email: %s)", user.id, user.email)

    async def find_by_id(self, user_id: UUID) -> User | None:
        model = await self._find_model_by_id(user_id)
        if model is None:
            return None
        return self._map_to_domain(model)

    async def find_by_email(self, email: Union[str, Email]) -> User | None:
        email_value = email.value if isinstance(email, Email) else Email(email).value

        stmt = (
            select(UserModel)
            .where(UserModel.email == email_value)
            .execution_options(populate_existing=True)
        )
        model = await self._scalar_one_or_none(stmt)
        if model is None:
            return None
        return self._map_to_domain(model)

    async def update(self, user: User) -> None:
        model = await self._find_model_by_id(user.id)
        if model is None:
            msg = f"Cannot update missing user {user.id}"
            raise DatabaseError(msg)

        try:
            async with self._session.begin_nested():
                self._update_model(model, user)
        except SQLAlchemyError as e:
            logger.error("Failed to update user %s: %s", user.id, e)
            raise DatabaseError("Failed to update user") from e
        logger.debug("Updated user: %s", user.id)

    async def exists_by_email(self, email: Union[str, Email]) -> bool:
        email_value = email.value if isinstance(email, Email) else Email(email).value
        stmt = select(exists().where(UserModel.email == email_value))
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to check email: %s", e)
            raise DatabaseError from e
        return bool(result.scalar())

    async def _find_model_by_id(self, user_id: UUID) -> UserModel | None:
        stmt = (
            select(UserModel)
            .where(UserModel.id == user_id)
            .execution_options(populate_existing=True)
        )
        return await self._scalar_one_or_none(stmt)

    async def _scalar_one_or_none(self, stmt) -> UserModel | None:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to load user: %s", e)
            raise DatabaseError("Failed to load user") from e
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: UserModel) -> User:
        return User.reconstitute(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            role=model.role,
            is_verified=model.is_verified,
            is_active=model.is_active,
            failed_login_attempts=model.failed_login_attempts,
            locked_until=ensure_tz_aware_or_none(model.locked_until),
            last_login_at=ensure_tz_aware_or_none(model.last_login_at),
            last_login_ip=model.last_login_ip,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _map_to_model(self, user: User) -> UserModel:
        return UserModel(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            role=user.role.value,
            is_verified=user.is_verified,
            is_active=user.is_active,
            failed_login_attempts=user.failed_login_attempts,
            locked_until=user.locked_until,
            last_login_at=user.last_login_at,
            last_login_ip=user.last_login_ip,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def _update_model(self, model: UserModel, user: User) -> None:
        model.email = user.email
        model.password_hash = user.password_hash
        model.role = user.role.value
        model.is_verified = user.is_verified
        model.is_active = user.is_active
        model.failed_login_attempts = user.failed_login_attempts
        model.locked_until = user.locked_until
        model.last_login_at = user.last_login_at
        model.last_login_ip = user.last_login_ip
        model.updated_at = user.updated_at
