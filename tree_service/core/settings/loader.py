"""Process-wide settings instances.

Each loader validates its settings on first use and returns the same frozen
object afterwards. Tests that change the environment call
``clear_settings_cache()`` so the next call reads it again.
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .logs import LoggingSettings
from .postgres import PostgresSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> PostgresSettings:
    return PostgresSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance so the next call reloads."""
    for loader in (get_app_settings, get_db_settings, get_logging_settings):
        loader.cache_clear()
