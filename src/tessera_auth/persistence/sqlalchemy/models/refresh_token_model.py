"""SQLAlchemy model for refresh tokens."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tessera.domain.shared.time import utc_now
from tessera_auth.persistence.sqlalchemy.base import AuthBase


class RefreshTokenModel(AuthBase):
    """
    SQLAlchemy model for refresh tokens.

    Stores the SHA-256 hash of the token, never the token itself.
    ``user_id`` has no foreign key so the token store stays decoupled
    from the user table.

    Table: refresh_tokens
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    family_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    is_revoked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return (
            f"<RefreshTokenModel(id={self.id}, user_id={self.user_id}, "
            f"revoked={self.is_revoked})>"
        )
