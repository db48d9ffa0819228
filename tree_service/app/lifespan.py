"""Application lifespan: logging, database check and optional schema creation.

The engine and session factory are published on ``app.state`` unless the
application already carries its own (tests bind an in-memory database that
way). The journal writer and the health check read them from there.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from tree_service.core.settings import (
    get_app_settings,
    get_db_settings,
    get_logging_settings,
)
from tree_service.infra.database import session as db_session
from tree_service.infra.logging.config import setup_logging
from tree_service.infra.logging.config import shutdown as shutdown_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _connect_database(app: FastAPI) -> None:
    db = get_db_settings()
    if getattr(app.state, "engine", None) is None:
        app.state.engine = db_session.engine
        app.state.session_factory = db_session.AsyncSessionLocal

    try:
        await db_session.init_database()
    except Exception as e:
        if db.startup_require_db:
            logger.exception("Database required but unavailable, failing startup")
            raise
        # Requests fail until the database is reachable; health reports "unavailable"
        logger.warning(
            "Database unavailable, continuing in degraded mode", extra={"error": str(e)}
        )
        return

    if db.create_tables_on_startup:
        await db_session.create_all_tables(app.state.engine)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={
            "service": settings.service_name,
            "version": settings.version,
            "environment": settings.environment,
        },
    )

    await _connect_database(app)
    logger.info(
        "Application startup complete - listening on %s:%s%s",
        settings.host,
        settings.port,
        settings.api_prefix,
    )

    try:
        yield
    finally:
        logger.info("Application shutting down")
        await db_session.close_database()
        shutdown_logging()


__all__ = ["lifespan"]
