"""Tessera HTTP service.

``create_app`` builds the FastAPI application: the versioned auth routes
under ``/api/v1/auth``, CORS, the error handlers, and ``/health``, which
stays unversioned for probes.

Start it with:
    uvicorn tessera.presentation.api.app:create_app --factory
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from tessera import __version__
from tessera.infrastructure.persistence.sqlalchemy import (
    create_engine,
    create_session_maker,
    create_tables,
)
from tessera.presentation.api.config import get_api_settings
from tessera.presentation.api.exception_handlers import setup_exception_handlers
from tessera.presentation.api.routers import auth_router
from tessera_config.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Our own packages follow the configured level
SERVICE_LOGGERS = ("tessera", "tessera_auth", "tessera_config")

# Driver and client chatter is capped at WARNING
QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "aiosqlite",
    "asyncpg",
    "httpx",
    "httpcore",
    "uvicorn.access",
)


@lru_cache(maxsize=1)
def _configure_logging(log_level_name: str) -> None:
    """Set up root logging once per process for the given level name."""
    level = logging.getLevelName(log_level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in SERVICE_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = __version__
API_V1_PREFIX = "/api/v1"

OPENAPI_TAGS = [
    {
        "name": "Authentication",
        "description": """Accounts, sessions and tokens.

**Flow:**
- `POST /register` creates an account (no tokens)
- `POST /login` returns a short-lived access token and a refresh token
- `POST /refresh` trades the refresh token for a new pair; the old one
  stops working immediately

**Protection:**
- bcrypt password hashes, strength checked on register and change
- Accounts lock for a while after too many wrong passwords
- Logout and refresh revoke the presented access token
- Every security event lands in the audit log (`GET /audit`)
""",
    },
    {
        "name": "Health",
        "description": "Liveness probe for load balancers.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the schema on startup and release the pool on shutdown."""
    logger.info("Tessera API v%s starting", API_VERSION)
    engine: AsyncEngine = app.state.engine
    try:
        await create_tables(engine)
    except (ConnectionRefusedError, OSError):
        logger.critical("Database unreachable, aborting startup")
        raise SystemExit(1) from None

    yield

    await engine.dispose()
    logger.info("Tessera API stopped, connection pool disposed")


def create_v1_router() -> APIRouter:
    """Collect every router served under the v1 prefix."""
    router = APIRouter()
    router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    return router


def _add_cors(app: FastAPI, settings: Settings) -> None:
    # Credentials are allowed so the refresh cookie crosses origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the Tessera FastAPI application.

    Parameters
    ----------
    settings
        Settings to serve with. Tests pass their own instance, which then
        replaces ``get_api_settings`` for every request and chooses the
        database. Defaults to the process-wide ``get_settings()``.

    Returns
    -------
    The application, ready for uvicorn or a ``TestClient``.
    """
    resolved = settings if settings is not None else get_settings()
    _configure_logging(resolved.log_level)

    # Interactive docs only in debug deployments
    docs_enabled = resolved.api_debug
    app = FastAPI(
        title=f"{resolved.app_name} API",
        description=(
            "Registration, login with lockout, refresh token rotation, "
            "revocation and a per-user **audit log**."
        ),
        version=API_VERSION,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    # One engine per application, on the database its settings name
    app.state.engine = create_engine(resolved.database_url)
    app.state.session_maker = create_session_maker(app.state.engine)

    if settings is not None:
        app.dependency_overrides[get_api_settings] = lambda: resolved

    _add_cors(app, resolved)
    setup_exception_handlers(app)
    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Report that the process is up and which API it serves."""
        return {
            "status": "healthy",
            "service": resolved.app_name,
            "version": API_VERSION,
            "api_versions": ["v1"],
        }

    return app
