"""
Database fixtures for repository, flow and integration tests.

Two backends are provided:
- ``sqlite_engine`` / ``sqlite_session``: in-memory SQLite, always on
- ``async_engine`` / ``db_session``: Testcontainers PostgreSQL, only for
  tests marked ``@pytest.mark.integration``

Usage:
    from tests.shared.fixtures.database import sqlite_session

    async def test_something(sqlite_session):
        repo = UserRepositorySQLAlchemy(sqlite_session)
        await repo.create(user)
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from testcontainers.postgres import PostgresContainer

from tessera.infrastructure.persistence.sqlalchemy import (
    create_engine,
    create_session_maker,
    create_tables,
    drop_tables,
)

# Use same Postgres version as production
POSTGRES_IMAGE = "postgres:16-alpine"

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def sqlite_engine():
    """
    In-memory SQLite engine with all tables created.

    StaticPool keeps the single connection alive, so every session of the
    test sees the same database.
    """
    engine = create_engine(SQLITE_MEMORY_URL, poolclass=StaticPool)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def sqlite_session_maker(sqlite_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(sqlite_engine)


@pytest_asyncio.fixture
async def sqlite_session(sqlite_session_maker):
    """Provide a session on the in-memory SQLite database."""
    async with sqlite_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="session")
def postgres_container():
    """
    Start a PostgreSQL container for the test session.

    The container is shared across all tests in the session for performance.
    Each test gets a clean database state via table drop/create.
    """
    with PostgresContainer(POSTGRES_IMAGE) as postgres:
        yield postgres


@pytest.fixture(scope="session")
def async_engine(postgres_container):
    """
    Create an async SQLAlchemy engine connected to the test container.

    Session-scoped to avoid recreating the engine for each test.
    """
    # Testcontainers may return postgresql+psycopg2:// or postgresql://
    connection_url = postgres_container.get_connection_url()
    async_url = connection_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    )
    async_url = async_url.replace("postgresql://", "postgresql+asyncpg://")

    return create_engine(async_url, poolclass=NullPool)


@pytest_asyncio.fixture(scope="function")
async def db_session(async_engine):
    """
    Provide an isolated PostgreSQL session for each test.

    Tables are dropped and recreated around every test.
    """
    await drop_tables(async_engine)
    await create_tables(async_engine)

    async with create_session_maker(async_engine)() as session:
        yield session
        await session.rollback()

    await drop_tables(async_engine)
