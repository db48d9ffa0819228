"""Output formatting utilities for CLI commands.

Status lines go to stderr so ``--format json`` output on stdout stays
machine-readable.
"""

import click

_RULE = "=" * 60


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green", err=True)


def error(message: str) -> None:
    """Print an error message in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    """Print a warning message in yellow."""
    click.secho(f"⚠ {message}", fg="yellow", err=True)


def info(message: str) -> None:
    """Print an info message in blue."""
    click.secho(f"ℹ {message}", fg="blue", err=True)


def header(message: str) -> None:
    click.secho(f"\n{message}", fg="cyan", bold=True)


def section(title: str) -> None:
    """Print a section divider."""
    click.secho(f"\n{_RULE}", dim=True)
    click.secho(title, bold=True)
    click.secho(_RULE, dim=True)
