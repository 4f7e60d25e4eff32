"""Pytest fixtures for API tests.

Each test gets its own SQLite file database, so the app under test runs
the same SQLAlchemy code path as production without needing Docker.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from tessera.infrastructure.persistence.sqlalchemy import (
    create_engine,
    create_session_maker,
    create_tables,
)
from tessera.presentation.api.app import API_V1_PREFIX, create_app
from tessera.presentation.api.dependencies import get_db_session
from tessera_config.settings import Settings
from tests.shared.fixtures.factories import STRONG_PASSWORD, TestAuthFactory


def _run(coro):
    """Run a coroutine in a fresh event loop, apart from TestClient's loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def api_v1_prefix() -> str:
    """Get the API v1 prefix for building URLs."""
    return API_V1_PREFIX


@pytest.fixture
def auth_url(api_v1_prefix) -> str:
    return f"{api_v1_prefix}/auth"


@pytest.fixture
def api_settings() -> Settings:
    """Test API settings with debug enabled."""
    return TestAuthFactory.settings()


@pytest.fixture
def api_engine(tmp_path):
    """Engine on a per-test SQLite file with all tables created."""
    engine = create_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tessera-api.db'}",
        poolclass=NullPool,
    )
    _run(create_tables(engine))
    yield engine
    _run(engine.dispose())


def build_client(settings: Settings, engine) -> TestClient:
    """Create an app for the given settings with its database on ``engine``."""
    app = create_app(settings=settings)
    session_maker = create_session_maker(engine)

    async def override_get_db_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    return TestClient(app)


@pytest.fixture
def test_client(api_settings, api_engine) -> TestClient:
    """TestClient for the app; the lifespan is not run."""
    return build_client(api_settings, api_engine)


@pytest.fixture
def registered_user_data() -> dict:
    return {
        "email": "api-test-user@example.com",
        "password": STRONG_PASSWORD,
    }


@pytest.fixture
def logged_in(test_client, auth_url, registered_user_data) -> dict:
    """Register and log in a user. Returns the login response body."""
    response = test_client.post(f"{auth_url}/register", json=registered_user_data)
    assert response.status_code == 201, response.text

    response = test_client.post(f"{auth_url}/login", json=registered_user_data)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def auth_headers(logged_in) -> dict:
    return {"Authorization": f"Bearer {logged_in['access_token']}"}
