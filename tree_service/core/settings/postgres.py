"""Database settings: PostgreSQL through psycopg3, SQLite for local work.

``DATABASE_URL`` wins over the ``DB_*`` component fields. A PostgreSQL URL
is split into those fields so that pool settings and logging see the same
values; a ``sqlite+aiosqlite://`` URL is taken as-is.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from .yaml_sources import create_db_yaml_source

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./tree_service.db"


class PostgresSettings(BaseSettings):
    """Connection, pool and startup settings (``DB_`` prefix).

    ``DB_ENABLED=false`` without a ``DATABASE_URL`` selects the SQLite file
    ``./tree_service.db``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    enabled: bool = True
    dsn: str | None = Field(default=None, alias="DATABASE_URL")

    host: str = Field(default="localhost", min_length=1, max_length=255)
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = Field(default="postgres", min_length=1, max_length=100)
    password: SecretStr = SecretStr("postgres")
    name: str = Field(default="tree_service", min_length=1, max_length=100)
    driver: str = "psycopg"
    application_name: str = Field(
        default="tree-service",
        max_length=100,
        description="Shown in pg_stat_activity.",
    )

    # Pool, PostgreSQL only
    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=10, ge=0, le=100)
    pool_pre_ping: bool = True
    pool_timeout: float = Field(default=30.0, ge=0.1, le=300.0)
    pool_recycle: int = Field(default=1800, ge=0, le=86400)
    connect_timeout: float = Field(default=5.0, ge=0.1, le=60.0)
    echo: bool = False

    # Startup
    startup_retry_attempts: int = Field(default=3, ge=1, le=20)
    startup_retry_delay: float = Field(default=2.0, ge=0.1, le=60.0)
    startup_retry_timeout: float = Field(default=60.0, ge=5.0, le=300.0)
    startup_require_db: bool = Field(
        default=True,
        description="Abort startup when the database stays unreachable after the retries.",
    )
    create_tables_on_startup: bool = Field(
        default=False,
        description="Create missing tables from model metadata; meant for SQLite development files.",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_db_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def _split_dsn(self) -> PostgresSettings:
        # Frozen model, so fields are assigned through object.__setattr__
        if not self.dsn or self.is_sqlite:
            return self

        parsed = make_url(self.dsn)
        components: dict[str, Any] = {
            "host": parsed.host,
            "port": parsed.port,
            "user": parsed.username,
            "name": parsed.database,
        }
        if "+" in parsed.drivername:
            components["driver"] = parsed.drivername.split("+", 1)[1]
        if parsed.password:
            components["password"] = SecretStr(str(parsed.password))

        for field, value in components.items():
            if value:
                object.__setattr__(self, field, value)
        return self

    @property
    def is_sqlite(self) -> bool:
        return bool(self.dsn) and self.dsn.startswith("sqlite")

    @property
    def is_configured(self) -> bool:
        """SQLite URLs always count; PostgreSQL needs ``enabled`` plus host and name."""
        if self.is_sqlite:
            return True
        return self.enabled and bool(self.host and self.name)

    @computed_field  # type: ignore[misc]
    @property
    def url(self) -> str:
        """The SQLite DSN verbatim or the PostgreSQL URL built from the components."""
        if self.is_sqlite:
            return self.dsn  # type: ignore[return-value]

        query = {"application_name": self.application_name} if self.application_name else {}
        return URL.create(
            f"postgresql+{self.driver}",
            username=self.user,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.name,
            query=query,
        ).render_as_string(hide_password=False)

    def get_sqlalchemy_url(self) -> str:
        """URL the engine connects to; the SQLite fallback when unconfigured."""
        return self.url if self.is_configured else SQLITE_FALLBACK_URL

    def sqlalchemy_engine_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``create_async_engine``.

        aiosqlite rejects the pool and connect timeout options, so a SQLite
        URL only gets ``echo``.
        """
        if self.get_sqlalchemy_url().startswith("sqlite"):
            return {"echo": self.echo}
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": self.pool_pre_ping,
            "pool_timeout": self.pool_timeout,
            "pool_recycle": self.pool_recycle,
            "connect_args": {"connect_timeout": int(self.connect_timeout)},
        }
