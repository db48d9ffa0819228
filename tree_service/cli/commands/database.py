"""Database commands: connectivity check, Alembic migrations, dev schema.

Example:bash
    tree-service db init            # verify connectivity
    tree-service db upgrade         # apply all pending migrations
    tree-service db current         # show the applied revision
    tree-service db downgrade       # roll back one migration
    tree-service db create-tables   # SQLite development database without Alembic
"""

import sys
from collections.abc import Awaitable, Callable

import click
from sqlalchemy import text

from tree_service.cli.utils import coro, error, info, success, warning
from tree_service.core.settings import get_db_settings


def get_alembic_commands():
    # Imported lazily so --help never creates an engine
    from tree_service.infra.database.alembic import get_alembic_commands

    return get_alembic_commands()


async def _run_alembic(
    action: Callable[..., Awaitable[str]],
    failure: str,
    *args,
    empty: str | None = None,
    done: str | None = None,
    **kwargs,
) -> None:
    """Run one AlembicCommands method, echo its output and exit 1 on failure."""
    try:
        output = await action(*args, **kwargs)
    except Exception as e:
        error(f"{failure}: {e}")
        sys.exit(1)

    if output:
        click.echo(output)
    elif empty:
        info(empty)
    if done:
        success(done)


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Verify that the configured database answers."""
    from tree_service.infra.database import get_async_session

    db_settings = get_db_settings()
    if db_settings.is_sqlite or not db_settings.is_configured:
        target = db_settings.get_sqlalchemy_url()
    else:
        target = f"{db_settings.host}:{db_settings.port}/{db_settings.name}"
    info(f"Connecting to: {target}")

    try:
        async with get_async_session() as session:
            await session.execute(text("SELECT 1"))
            dialect = session.bind.dialect.name
    except Exception as e:
        error(f"Failed to connect to database: {e}")
        sys.exit(1)

    success("Database connected successfully!")
    info(f"Dialect: {dialect}")


@db.command(name="create-tables")
@coro
async def create_tables() -> None:
    """Create missing tree and journal tables from the models (no Alembic)."""
    from tree_service.infra.database import create_all_tables

    try:
        await create_all_tables()
    except Exception as e:
        error(f"Failed to create tables: {e}")
        sys.exit(1)
    success("Tables are in place")


@db.command()
@click.argument("revision", default="head")
@click.option("--sql/--no-sql", default=False, help="Output SQL without executing")
@coro
async def upgrade(revision: str, sql: bool) -> None:
    """Apply database migrations up to REVISION (default: head)."""
    info(f"Upgrading database to: {revision}")
    await _run_alembic(
        get_alembic_commands().upgrade,
        "Failed to upgrade database",
        revision,
        sql=sql,
        done=None if sql else "Database upgraded successfully!",
    )


@db.command()
@click.argument("revision", default="-1")
@click.option("--sql/--no-sql", default=False, help="Output SQL without executing")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@coro
async def downgrade(revision: str, sql: bool, yes: bool) -> None:
    """Roll back database migrations to REVISION (default: -1, one step)."""
    if not sql:
        warning(f"Rolling back to: {revision}")
        if not yes and not click.confirm("Are you sure you want to rollback migrations?"):
            info("Rollback cancelled")
            return

    await _run_alembic(
        get_alembic_commands().downgrade,
        "Failed to downgrade database",
        revision,
        sql=sql,
        done=None if sql else "Database downgraded successfully!",
    )


@db.command()
@coro
async def current() -> None:
    """Show current database revision."""
    await _run_alembic(
        get_alembic_commands().current,
        "Failed to get current revision",
        verbose=True,
        empty="No migrations applied",
    )


@db.command()
@coro
async def history() -> None:
    """Show migration history."""
    await _run_alembic(
        get_alembic_commands().history,
        "Failed to get migration history",
        verbose=True,
        empty="No migrations found",
    )
