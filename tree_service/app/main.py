"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from tree_service.app.exception_handlers import configure_exception_handlers
from tree_service.app.lifespan import lifespan
from tree_service.app.middleware import configure_middleware
from tree_service.app.router import setup_routers
from tree_service.core.settings import get_app_settings

if TYPE_CHECKING:
    from tree_service.core.settings import AppSettings


def create_app(app_settings: AppSettings | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Settings are loaded once and cached via LRU cache.

    Args:
        app_settings: Optional settings override (tests build apps with
            their own prefix or journal toggle).

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = app_settings or get_app_settings()

    app = FastAPI(
        # Core metadata
        title=app_settings.title,
        description=app_settings.description,
        version=app_settings.version,
        # Documentation URLs
        docs_url=app_settings.get_docs_url(),
        redoc_url=app_settings.get_redoc_url(),
        openapi_url=app_settings.get_openapi_url(),
        root_path=app_settings.root_path,
        # Behavioral settings
        debug=app_settings.debug,
        # Lifecycle
        lifespan=lifespan,
    )

    # Configure exception handlers (must be before middleware)
    configure_exception_handlers(app)

    # Configure middleware (centralized configuration with proper ordering)
    configure_middleware(app, app_settings)

    # Setup routers
    setup_routers(app, app_settings)

    return app


# Application instance for uvicorn
app = create_app()
