"""Async engine and session factory shared by the API, the CLI and the journal.

The engine is created at import time from ``PostgresSettings``: psycopg3 for
PostgreSQL, aiosqlite when ``DATABASE_URL`` points at SQLite or nothing is
configured. Tests replace it through ``app.state`` rather than patching
this module.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tree_service.core.database import Base
from tree_service.core.settings import get_db_settings
from tree_service.utils.retry import retry

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

db_settings = get_db_settings()

engine = create_async_engine(
    db_settings.get_sqlalchemy_url(), **db_settings.sqlalchemy_engine_kwargs()
)


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """Enforce foreign keys on every new SQLite connection of ``async_engine``.

    SQLite opens connections with foreign keys off, which leaves the
    ``ON DELETE RESTRICT`` on ``tree_nodes.parent_id`` unenforced. Other
    dialects are left alone.
    """
    if async_engine.dialect.name != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)

# expire_on_commit=False: routers serialize nodes after committing
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Session for code running outside a request, e.g. CLI commands.

    Example:
        async with get_async_session() as session:
            trees = await TreeService(session).list_trees()
    """
    async with AsyncSessionLocal() as session:
        yield session


@retry(
    max_attempts=db_settings.startup_retry_attempts,
    initial_delay=db_settings.startup_retry_delay,
    max_delay=30.0,
    stop_after_delay=db_settings.startup_retry_timeout,
)
async def init_database() -> None:
    """Run ``SELECT 1``, retrying with backoff while the database comes up.

    Raises:
        RetryError: The database stayed unreachable for every attempt.
    """
    safe_url = engine.url.render_as_string(hide_password=True)
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info(
        "Database connection established",
        extra={"url": safe_url, "driver": engine.dialect.driver},
    )


async def create_all_tables(bind: AsyncEngine | None = None) -> None:
    """Create the tree and journal tables that do not exist yet.

    Meant for SQLite development databases and tests; PostgreSQL deployments
    run the Alembic migrations instead.
    """
    # Registers the tables on Base.metadata
    from tree_service.features.journal import models as _journal_models  # noqa: F401
    from tree_service.features.trees import models as _tree_models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured", extra={"tables": sorted(Base.metadata.tables)})


async def close_database() -> None:
    """Dispose of the engine's pool on shutdown."""
    await engine.dispose()


__all__ = [
    "AsyncSessionLocal",
    "close_database",
    "create_all_tables",
    "enable_sqlite_foreign_keys",
    "engine",
    "get_async_session",
    "init_database",
]
