"""Schema management for the shared declarative metadata."""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

# Registers users, audit_logs and the token tables on Base.metadata
import tessera.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from tessera.infrastructure.persistence.sqlalchemy.models.base import Base

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing table; existing tables are left untouched."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ready: %s", ", ".join(sorted(Base.metadata.tables)))


async def drop_tables(engine: AsyncEngine) -> None:
    """Drop every table. Only tests call this."""
    logger.warning("Dropping tables: %s", ", ".join(sorted(Base.metadata.tables)))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
