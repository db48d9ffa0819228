"""HTTP application settings (``APP_`` environment prefix, ``conf/app.yaml``)."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_app_yaml_source

Environment = Literal["development", "staging", "production", "test"]

_DESCRIPTION = (
    "Manage hierarchies of named nodes stored with materialized paths. "
    "Failed requests are recorded in an exception journal that can be browsed "
    "through the API."
)


class AppSettings(BaseSettings):
    """Identity, routing, CORS and exception journal switches.

    Example: ``APP_API_PREFIX=/api APP_EXCEPTION_JOURNAL_ENABLED=false``
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    service_name: str = Field(
        default="tree-service", min_length=1, max_length=100, pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$"
    )
    title: str = Field(default="Tree Management API", min_length=1, max_length=200)
    description: str = _DESCRIPTION
    version: str = Field(default="1.0.0", pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$")
    environment: Environment = "development"
    debug: bool = False

    api_prefix: str = Field(default="/api", pattern=r"^/.*$")
    root_path: str = Field(default="", description="Set when served behind a path-rewriting proxy.")
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    docs_url: str | None = "/docs"
    redoc_url: str | None = "/redoc"
    openapi_url: str | None = "/openapi.json"
    disable_docs: bool = False

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: list[str] = Field(default_factory=lambda: ["*"])

    exception_journal_enabled: bool = Field(
        default=True, description="Write failed requests to the exception_journal table."
    )
    journal_body_max_bytes: int = Field(
        default=64 * 1024,
        ge=0,
        le=10 * 1024 * 1024,
        description="Request bodies above this size are not kept for the journal.",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_app_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @field_validator("api_prefix")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        # Routers are mounted as prefix + "/tree", so "/" collapses to ""
        return value.rstrip("/")

    @model_validator(mode="after")
    def _no_debug_in_production(self) -> AppSettings:
        if self.environment == "production" and self.debug:
            msg = "Debug mode cannot be enabled in production environment"
            raise ValueError(msg)
        return self

    def _doc_path(self, path: str | None) -> str | None:
        return None if self.disable_docs else path

    def get_docs_url(self) -> str | None:
        return self._doc_path(self.docs_url)

    def get_redoc_url(self) -> str | None:
        return self._doc_path(self.redoc_url)

    def get_openapi_url(self) -> str | None:
        return self._doc_path(self.openapi_url)
