"""Server management commands."""

import sys

import click

from tree_service.cli.utils import error, info, success, warning
from tree_service.core.settings import get_app_settings, get_logging_settings


@click.group(name="server")
def server() -> None:
    """Server management commands."""


@server.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind (default: from settings or 0.0.0.0)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind (default: from settings or 8000)",
)
@click.option(
    "--reload/--no-reload",
    default=False,
    help="Enable auto-reload on code changes",
)
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (ignored with --reload)",
)
def run(host: str | None, port: int | None, reload: bool, workers: int) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_app_settings()
    log_settings = get_logging_settings()
    host = host or settings.host
    port = port or settings.port

    if reload and workers > 1:
        warning("--reload is incompatible with --workers > 1. Setting workers to 1.")
        workers = 1

    info(f"Server will run at: http://{host}:{port}{settings.api_prefix}")
    info(f"Environment: {settings.environment}")
    info(f"Auto-reload: {'enabled' if reload else 'disabled'}")

    try:
        success("Starting uvicorn...")
        uvicorn.run(
            "tree_service.app.main:app",
            host=host,
            port=port,
            reload=reload,
            workers=None if reload else workers,
            access_log=settings.debug,
            log_level=log_settings.level.lower(),
        )
    except KeyboardInterrupt:
        info("\nShutting down server...")
    except Exception as e:
        error(f"Failed to start server: {e}")
        sys.exit(1)
