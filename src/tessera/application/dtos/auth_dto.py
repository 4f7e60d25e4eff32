"""DTOs returned by the authentication service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from tessera.domain.user import User


@dataclass(frozen=True)
class UserProfile:
    """Public projection of a user. Never carries the password hash."""

    id: UUID
    email: str
    role: str
    is_verified: bool
    is_active: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserProfile:
        return cls(
            id=user.id,
            email=user.email,
            role=user.role.value,
            is_verified=user.is_verified,
            is_active=user.is_active,
            created_at=user.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "email": self.email,
            "role": self.role,
            "is_verified": self.is_verified,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class TokenPair:
    """An access token and its companion refresh token, both plaintext."""

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"

    def __repr__(self) -> str:
        return (
            f"TokenPair(token_type={self.token_type!r}, "
            f"expires_in={self.expires_in})"
        )


@dataclass(frozen=True)
class AuthResult:
    """Result of a successful login."""

    tokens: TokenPair
    user: UserProfile
