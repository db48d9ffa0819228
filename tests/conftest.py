"""Pytest configuration and shared fixtures.

Organization:
    - Database Fixtures: in-memory SQLite engine, session factory and session
    - Application Fixtures: FastAPI app bound to the test database, HTTP client
    - Data Fixtures: small trees built through the service layer

Every test gets a fresh in-memory database. ``StaticPool`` keeps a single
connection so all sessions of one test see the same data.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from tree_service.features.trees.projection import TreeView

# Ensure tests run without external infrastructure
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_EXCEPTION_JOURNAL_ENABLED", "true")
os.environ.setdefault("LOG_FILE_ENABLED", "false")


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Async engine on a fresh in-memory database with every table created.

    Foreign keys are enforced as they are on the application engine. The
    database lives only as long as its single connection, so disposing of
    the engine discards it.
    """
    from tree_service.core.database.base import Base
    from tree_service.features.journal import models as _journal_models  # noqa: F401
    from tree_service.features.trees import models as _tree_models  # noqa: F401
    from tree_service.infra.database.session import enable_sqlite_foreign_keys

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session on the test database, rolled back after the test.

    Example:
        async def test_create_tree(db_session):
            tree = await TreeService(db_session).create_tree("Company")
            assert tree.nodes[0].path == f"{tree.nodes[0].id}."
    """
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(
    db_engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
) -> FastAPI:
    """FastAPI application bound to the test database.

    The request session dependency, the exception journal and the health
    check all use the test engine.
    """
    from tree_service.app.main import create_app
    from tree_service.core.dependencies.database import get_db_session

    application = create_app()
    application.state.engine = db_engine
    application.state.session_factory = session_factory

    async def _get_test_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = _get_test_session
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the test application.

    ``raise_app_exceptions=False`` lets tests observe the 500 response that
    the catch-all handler renders for unexpected errors.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
async def company_tree(db_session: AsyncSession) -> TreeView:
    """A committed three-level tree::

        Company
        ├── Engineering
        │   └── Backend
        └── Sales
    """
    from tree_service.features.trees.service import TreeService

    service = TreeService(db_session)
    tree = await service.create_tree("Company")
    root_id = tree.nodes[0].id
    engineering = await service.create_node(tree.tree_id, root_id, "Engineering")
    await service.create_node(tree.tree_id, root_id, "Sales")
    await service.create_node(tree.tree_id, engineering.id, "Backend")
    await db_session.commit()
    return await service.get_tree(tree.tree_id)
