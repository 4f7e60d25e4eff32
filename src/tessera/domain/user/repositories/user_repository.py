"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Optional, Union
from uuid import UUID

from tessera.domain.user.aggregates.user import User
from tessera.domain.user.value_objects.email import Email


class UserRepository(ABC):
    """Repository interface for User aggregates.

    Implementations translate storage failures into ``DatabaseError``.
    """

    @abstractmethod
    async def create(self, user: User) -> None:
        """Persist a new user.

        Raises
        ------
        UserAlreadyExistsError
            If the email is already registered
        """

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """Find a user by their ID."""

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        """Find a user by their email address."""

    @abstractmethod
    async def update(self, user: User) -> None:
        """Persist changes to an existing user."""

    @abstractmethod
    async def exists_by_email(self, email: Union[str, Email]) -> bool:
        """Check if a user exists with the given email."""
