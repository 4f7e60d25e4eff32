"""Fixtures for repository tests on Testcontainers PostgreSQL."""

from tests.shared.fixtures.database import (
    async_engine,
    db_session,
    postgres_container,
)

__all__ = ["async_engine", "db_session", "postgres_container"]
