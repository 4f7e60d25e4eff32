"""SQLAlchemy declarative base for all tessera tables.

The token tables live here and the application's user and audit models
register on the same base, so one ``AuthBase.metadata.create_all`` call
creates the whole schema.
"""

from sqlalchemy.orm import DeclarativeBase


class AuthBase(DeclarativeBase):
    """Declarative base for tessera models."""
