"""Database infrastructure package.

- **Session Management**: async SQLAlchemy engine and session factory
- **Alembic Commands**: programmatic migration API used by the CLI

Example:
    from tree_service.infra.database import get_async_session

    async with get_async_session() as session:
        result = await session.execute(...)
"""

from .alembic import AlembicCommandConfig, AlembicCommands, get_alembic_commands
from .session import (
    AsyncSessionLocal,
    close_database,
    create_all_tables,
    enable_sqlite_foreign_keys,
    engine,
    get_async_session,
    init_database,
)

__all__ = [
    "AlembicCommandConfig",
    "AlembicCommands",
    "AsyncSessionLocal",
    "close_database",
    "create_all_tables",
    "enable_sqlite_foreign_keys",
    "engine",
    "get_alembic_commands",
    "get_async_session",
    "init_database",
]
