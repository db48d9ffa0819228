"""Middleware configuration for FastAPI application.

The middleware stack includes:
- Request ID: Request tracking and log context
- Body Capture: Bounded copy of JSON bodies for the exception journal
- CORS: Cross-Origin Resource Sharing

Example Usage:
    from tree_service.app.middleware import configure_middleware
    from tree_service.core.settings import get_app_settings

    configure_middleware(app, get_app_settings())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

from tree_service.app.middleware.body_capture import RequestBodyCaptureMiddleware
from tree_service.app.middleware.request_id import RequestIDMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

    from tree_service.core.settings import AppSettings

logger = logging.getLogger(__name__)

__all__ = [
    "RequestBodyCaptureMiddleware",
    "RequestIDMiddleware",
    "configure_middleware",
]


def configure_middleware(app: FastAPI, app_settings: AppSettings) -> None:
    """Configure all middleware for the FastAPI application.

    Middleware is applied in REVERSE order (last added = first to execute).
    Execution order, outermost to innermost:

    1. Request ID Middleware
       - Sets request_id, method and path in logging context
       - Outermost so every later log line carries the request ID

    2. CORS Middleware
       - Origins, methods and headers from APP_CORS_* settings

    3. Body Capture Middleware
       - Only when the exception journal is enabled
       - Keeps at most APP_JOURNAL_BODY_MAX_BYTES of JSON bodies

    Args:
        app: FastAPI application instance
        app_settings: Application settings
    """
    logger.info(
        "Configuring middleware stack",
        extra={
            "environment": app_settings.environment,
            "debug": app_settings.debug,
            "service": app_settings.service_name,
        },
    )

    # 3. Body capture (innermost)
    if app_settings.exception_journal_enabled:
        app.add_middleware(
            RequestBodyCaptureMiddleware,
            max_bytes=app_settings.journal_body_max_bytes,
        )
        logger.info(
            "RequestBodyCaptureMiddleware enabled",
            extra={"max_bytes": app_settings.journal_body_max_bytes},
        )

    # 2. CORS
    if app_settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_origins,
            allow_credentials=app_settings.cors_allow_credentials,
            allow_methods=app_settings.cors_allow_methods,
            allow_headers=app_settings.cors_allow_headers,
        )
        logger.info("CORSMiddleware enabled", extra={"origins": app_settings.cors_origins})

    # 1. Request ID (outermost)
    app.add_middleware(RequestIDMiddleware)

    logger.info(
        "All middleware configured successfully",
        extra={"middleware_count": len(app.user_middleware)},
    )
