"""SQLAlchemy base configuration.

Application models share the declarative base of the token tables so a
single metadata covers the whole schema.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from tessera.domain.shared.time import utc_now
from tessera_auth.persistence.sqlalchemy.base import AuthBase as Base


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (utc_now)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


__all__ = ["Base", "TimestampMixin"]
