"""CLI command modules."""

from tree_service.cli.commands import database, server, trees

__all__ = [
    "database",
    "server",
    "trees",
]
