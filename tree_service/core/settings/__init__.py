"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/db/logging), frozen after validation
and served through LRU-cached loaders:

    from tree_service.core.settings import get_app_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional, local/dev)
    3. Environment variables (production)
    4. .env file (development only)
    5. secrets_dir (Kubernetes/Docker secrets)
"""

from __future__ import annotations

from .app import AppSettings
from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_db_settings,
    get_logging_settings,
)
from .logs import LoggingSettings
from .postgres import PostgresSettings

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "PostgresSettings",
    "clear_settings_cache",
    "get_app_settings",
    "get_db_settings",
    "get_logging_settings",
]
