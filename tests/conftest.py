"""Test-session setup shared by every test module.

Layout:
    unit/           services with mocks, repositories on in-memory SQLite,
                    the HTTP error mapping and the CLI
    integration/    service flows and the HTTP API on SQLite; repository
                    tests against a PostgreSQL container
    shared/         fixtures and factories imported by the conftests below

Tests marked ``integration`` start Docker containers and are skipped
unless enabled with ``--run-integration`` (or ``--run-all``), or the
``RUN_INTEGRATION=1`` / ``RUN_ALL_TESTS=1`` environment variables.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from tessera_config import clear_settings_cache

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

# Same precedence as a local run of the service
for _env_name in (".env.dev", ".env"):
    if (CONFIG_DIR / _env_name).exists():
        load_dotenv(CONFIG_DIR / _env_name)
        break


def _enabled(name: str) -> bool:
    return os.environ.get(name, "").lower() in {"1", "true", "yes"}


def pytest_addoption(parser):
    group = parser.getgroup("tessera")
    group.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="also run tests marked integration (needs Docker)",
    )
    group.addoption(
        "--run-all",
        action="store_true",
        default=False,
        help="run every collected test",
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: needs a PostgreSQL container; skipped by default",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-all") or _enabled("RUN_ALL_TESTS"):
        return
    if config.getoption("--run-integration") or _enabled("RUN_INTEGRATION"):
        return

    skip = pytest.mark.skip(
        reason="needs Docker; pass --run-integration or set RUN_INTEGRATION=1",
    )
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def clear_settings():
    """Every test starts from freshly read settings."""
    clear_settings_cache()
    yield
    clear_settings_cache()
