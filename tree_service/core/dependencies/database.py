"""Database dependencies for FastAPI route handlers.

Two session getters exist for different call sites:

1. `get_db_session()` (this module) - FastAPI dependency
   - Use in route handlers with `Depends(get_db_session)`
   - Session lifecycle tied to the HTTP request
   - Tests replace it through ``app.dependency_overrides``

2. `get_async_session()` (infra.database) - general context manager
   - Use in CLI commands and scripts

Both use the same session factory. Neither commits: routers commit once
the service call returns, and an exception leaves the transaction to be
rolled back when the session closes.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from tree_service.infra.database import get_async_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for database session.

    Yields:
        Database session that is automatically closed after request.
    """
    async with get_async_session() as session:
        yield session
