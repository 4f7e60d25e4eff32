"""
Pytest fixtures for infrastructure persistence tests.

Repositories run against in-memory SQLite; the same suite against
PostgreSQL lives in tests/integration/persistence.
"""

from tests.shared.fixtures.database import (
    sqlite_engine,
    sqlite_session,
    sqlite_session_maker,
)

__all__ = ["sqlite_engine", "sqlite_session", "sqlite_session_maker"]
