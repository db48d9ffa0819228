"""Logging settings (``LOG_`` environment prefix, ``conf/logging.yaml``)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_logging_yaml_source

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """How the service writes its logs.

    Console output is always available; the rotating JSONL file is opt-in
    with ``LOG_FILE_ENABLED=true``. ``LOG_SQL_LEVEL=INFO`` echoes every
    statement issued against the tree and journal tables.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )

    service_name: str = "tree-service"
    level: LogLevel = "INFO"
    json_logs: bool = Field(default=True, alias="json")

    console_enabled: bool = True
    console_level: LogLevel | None = None

    file_enabled: bool = False
    file_level: LogLevel | None = None
    file_path: Path = Path("logs/tree-service.log.jsonl")
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, le=1024**3)
    file_backup_count: int = Field(default=5, ge=0, le=100)

    sql_level: LogLevel = Field(
        default="WARNING",
        description="Level of the sqlalchemy.engine logger; INFO logs each statement.",
    )
    include_uvicorn: bool = Field(
        default=True, description="Keep uvicorn access records at INFO."
    )
    include_context: bool = True
    capture_warnings: bool = True
    include_function_name: bool = False
    include_process_info: bool = False
    include_thread_info: bool = False

    @field_validator("level", "console_level", "file_level", "sql_level", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``configure_logging``."""
        kwargs = self.model_dump(
            include={
                "service_name",
                "json_logs",
                "console_enabled",
                "file_max_bytes",
                "file_backup_count",
                "sql_level",
                "include_uvicorn",
                "include_context",
                "capture_warnings",
                "include_function_name",
                "include_process_info",
                "include_thread_info",
            }
        )
        kwargs["log_level"] = self.level
        kwargs["console_level"] = self.console_level or self.level
        kwargs["file_level"] = self.file_level or self.level
        kwargs["file_path"] = str(self.file_path) if self.file_enabled else None
        return kwargs

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_logging_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
