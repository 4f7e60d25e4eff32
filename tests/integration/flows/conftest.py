"""Fixtures for end-to-end service flows on in-memory SQLite."""

import pytest

from tessera.application.services import AuthenticationService
from tests.shared.fixtures import TestAuthFactory
from tests.shared.fixtures.database import (
    sqlite_engine,
    sqlite_session,
    sqlite_session_maker,
)

__all__ = ["sqlite_engine", "sqlite_session", "sqlite_session_maker"]


@pytest.fixture
def auth_service(sqlite_session) -> AuthenticationService:
    """AuthenticationService wired to real repositories and fast bcrypt."""
    return TestAuthFactory.authentication_service(sqlite_session)
