"""Main CLI entry point for tree-service management commands."""

import click

from tree_service.cli.commands import database, server, trees
from tree_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="1.0.0", prog_name="tree-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Tree Service CLI - Management commands for the tree API.

    \b
    Command Groups:
      db         Database connectivity and migrations
      server     Run the HTTP API
      trees      Inspect stored trees

    \b
    Quick Start:
      tree-service db init           # Test database connection
      tree-service db upgrade        # Apply migrations
      tree-service server run        # Serve the API
      tree-service trees list        # List trees
    """
    ctx.ensure_object(dict)


cli.add_command(database.db)
cli.add_command(server.server)
cli.add_command(trees.trees)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
