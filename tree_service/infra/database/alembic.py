"""Programmatic Alembic command interface with async support.

Runs Alembic commands in-process instead of shelling out, so the CLI
shares the service's settings and engine.

Example:
    from tree_service.infra.database.alembic import get_alembic_commands

    commands = get_alembic_commands()
    output = await commands.upgrade("head")
    head = await commands.get_head_revision()
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


@dataclass
class AlembicCommandConfig:
    """Configuration for Alembic commands.

    Attributes:
        engine: SQLAlchemy async engine whose URL migrations run against
        script_location: Path to alembic scripts directory
        ini_path: Path to alembic.ini
        render_as_batch: Enable batch mode for migrations (required for SQLite ALTERs)
        compare_type: Enable type comparison in autogenerate
    """

    engine: AsyncEngine
    script_location: str = str(PROJECT_ROOT / "alembic")
    ini_path: Path = PROJECT_ROOT / "alembic.ini"
    render_as_batch: bool = False
    compare_type: bool = True

    def get_alembic_config(self, output_buffer: io.StringIO | None = None) -> Config:
        """Build an Alembic Config bound to the engine URL.

        Args:
            output_buffer: Optional StringIO to capture command output

        Raises:
            FileNotFoundError: If alembic.ini is missing
        """
        if not self.ini_path.exists():
            msg = f"alembic.ini not found at {self.ini_path}"
            raise FileNotFoundError(msg)

        config = Config(str(self.ini_path), stdout=output_buffer or io.StringIO())
        config.set_main_option("script_location", self.script_location)
        # render_as_string keeps the password (str() masks it)
        config.set_main_option(
            "sqlalchemy.url",
            self.engine.url.render_as_string(hide_password=False).replace("%", "%%"),
        )

        # Read by env.py through config.attributes
        config.attributes["render_as_batch"] = (
            self.render_as_batch or self.engine.dialect.name == "sqlite"
        )
        config.attributes["compare_type"] = self.compare_type
        # Logging is already configured by the caller
        config.attributes["skip_logging"] = True
        return config


class AlembicCommands:
    """Programmatic interface for Alembic migration operations.

    Every command runs in a worker thread; env.py starts its own event
    loop there to drive the async engine.
    """

    def __init__(self, config: AlembicCommandConfig) -> None:
        self.config = config

    async def _run(self, func, *args, **kwargs) -> str:
        output = io.StringIO()
        alembic_config = self.config.get_alembic_config(output)
        await asyncio.to_thread(func, alembic_config, *args, **kwargs)
        return output.getvalue()

    async def upgrade(self, revision: str = "head", *, sql: bool = False) -> str:
        """Upgrade database to a revision ("head" for latest)."""
        logger.info("Upgrading database", extra={"revision": revision})
        result = await self._run(command.upgrade, revision, sql=sql)
        logger.info("Upgrade completed", extra={"revision": revision})
        return result

    async def downgrade(self, revision: str = "-1", *, sql: bool = False) -> str:
        """Downgrade database to a revision ("-1" for one step, "base" for all)."""
        logger.warning("Downgrading database", extra={"revision": revision})
        result = await self._run(command.downgrade, revision, sql=sql)
        logger.info("Downgrade completed", extra={"revision": revision})
        return result

    async def current(self, *, verbose: bool = False) -> str:
        """Show current database revision."""
        return await self._run(command.current, verbose=verbose)

    async def history(self, *, verbose: bool = False) -> str:
        """Show migration history."""
        return await self._run(command.history, verbose=verbose)

    async def get_head_revision(self) -> str | None:
        """Head revision of the migration scripts, or None if there are none."""

        def _get() -> str | None:
            script = ScriptDirectory.from_config(self.config.get_alembic_config())
            return script.get_current_head()

        return await asyncio.to_thread(_get)


def get_alembic_commands(
    engine: AsyncEngine | None = None,
    *,
    render_as_batch: bool = False,
) -> AlembicCommands:
    """Build AlembicCommands for the given engine (default: the service engine)."""
    if engine is None:
        from tree_service.infra.database.session import engine as default_engine

        engine = default_engine

    return AlembicCommands(AlembicCommandConfig(engine=engine, render_as_batch=render_as_batch))


__all__ = [
    "AlembicCommandConfig",
    "AlembicCommands",
    "get_alembic_commands",
]
