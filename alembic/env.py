"""Alembic migration environment with async engine support.

- compare_type support for detecting column type changes
- Batch mode auto-detection for SQLite compatibility
- Object filtering to exclude system tables
- Empty migration detection to skip no-op revisions

When using the programmatic API (``AlembicCommands``), the database URL is
already set on the config and options arrive through ``config.attributes``.
When using the alembic CLI, the URL comes from settings and defaults apply.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig
from typing import TYPE_CHECKING, Any

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# Importing the models registers their tables on Base.metadata
from tree_service.core.database.base import Base
from tree_service.core.settings import get_db_settings
from tree_service.features.journal import models as journal_models  # noqa: F401
from tree_service.features.trees import models as tree_models  # noqa: F401

if TYPE_CHECKING:
    from collections.abc import Iterable

    from alembic.operations.ops import MigrationScript
    from alembic.runtime.migration import MigrationContext
    from sqlalchemy.engine import Connection

config = context.config

# Setup Python logging from alembic.ini
if config.config_file_name is not None and not config.attributes.get("skip_logging"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

# CLI usage: take the URL from settings unless one was set explicitly
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option(
        "sqlalchemy.url",
        get_db_settings().get_sqlalchemy_url().replace("%", "%%"),
    )

COMPARE_TYPE = config.attributes.get("compare_type", True)
RENDER_AS_BATCH = config.attributes.get("render_as_batch", False)


def include_object(
    obj: Any,
    name: str | None,
    type_: str,
    reflected: bool,
    compare_to: Any,
) -> bool:
    """Skip alembic's own table and PostgreSQL system schemas."""
    _ = reflected, compare_to
    if type_ == "table" and name == "alembic_version":
        return False
    return not (hasattr(obj, "schema") and obj.schema in ("pg_catalog", "information_schema"))


def process_revision_directives(
    context: MigrationContext,
    revision: str | tuple[str, ...] | Iterable[str | None] | Iterable[str],
    directives: list[MigrationScript],
) -> None:
    """Drop autogenerated revisions that contain no operations."""
    _ = context, revision
    if getattr(config.cmd_opts, "autogenerate", False) and directives:
        script = directives[0]
        if script.upgrade_ops is not None and script.upgrade_ops.is_empty():
            directives[:] = []
            print("No changes detected, skipping migration creation")


# =============================================================================
# Migration Runners
# =============================================================================


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without a connection)."""
    url = config.get_main_option("sqlalchemy.url")

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=COMPARE_TYPE,
        include_object=include_object,
        render_as_batch=RENDER_AS_BATCH or bool(url and url.startswith("sqlite")),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Configure the context on ``connection`` and run migrations."""
    use_batch_mode = RENDER_AS_BATCH or connection.dialect.name == "sqlite"

    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=COMPARE_TYPE,
        include_object=include_object,
        render_as_batch=use_batch_mode,
        process_revision_directives=process_revision_directives,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Create an async engine from the config and run migrations on it."""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
