"""Engine and session factory construction."""

from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_engine(database_url: str, **kwargs) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    For SQLite the driver's own transaction handling is disabled so that
    SQLAlchemy emits BEGIN itself; otherwise SAVEPOINTs do not nest
    inside the request transaction.

    Parameters
    ----------
    database_url
        SQLAlchemy URL (postgresql+asyncpg://... or sqlite+aiosqlite://...)
    **kwargs
        Passed through to create_async_engine

    Returns
    -------
    AsyncEngine instance
    """
    is_sqlite = database_url.startswith("sqlite")
    if not is_sqlite:
        kwargs.setdefault("pool_pre_ping", True)
    elif ":memory:" not in database_url and "///" in database_url:
        Path(database_url.split("///")[-1]).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(database_url, echo=False, **kwargs)

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
