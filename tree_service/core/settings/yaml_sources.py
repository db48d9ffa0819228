"""YAML settings sources with conf.d directory support.

Each settings domain reads an optional base file plus an optional drop-in
directory, for example for the database domain:

    conf/db.yaml          base values
    conf/db.d/10-ha.yaml  overrides, applied in file name order

The directory ``conf`` can be moved per domain (``DB_CONFIG_DIR``) or for
every domain at once (``CONFIG_DIR``). Missing files are simply skipped, so
a deployment configured purely through environment variables needs none.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic_settings.sources.providers.yaml import YamlConfigSettingsSource

if TYPE_CHECKING:
    from pydantic_settings import BaseSettings

DEFAULT_CONFIG_DIR = "conf"
SHARED_CONFIG_DIR_ENV = "CONFIG_DIR"


def config_dir(domain_env: str) -> Path:
    """Directory holding YAML files: the domain variable, then the shared one."""
    return Path(
        os.getenv(domain_env) or os.getenv(SHARED_CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR
    )


def discover_yaml_files(base: Path, name: str) -> list[Path]:
    """``<name>.yaml`` followed by ``<name>.d/*.yaml|*.yml`` sorted by file name."""
    files: list[Path] = []

    main_file = base / f"{name}.yaml"
    if main_file.is_file():
        files.append(main_file)

    dropins = base / f"{name}.d"
    if dropins.is_dir():
        files.extend(
            sorted(
                (p for p in dropins.iterdir() if p.suffix in (".yaml", ".yml") and p.is_file()),
                key=lambda p: p.name,
            )
        )
    return files


class ConfDYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML source reading a base file and its conf.d directory.

    Later files win for every top-level key they set.

    Example:
        class PostgresSettings(BaseSettings):
            @classmethod
            def settings_customise_sources(cls, settings_cls, ...):
                return (
                    init_settings,
                    create_db_yaml_source(settings_cls),
                    env_settings,
                    dotenv_settings,
                    file_secret_settings,
                )
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        name: str,
        config_dir_env: str,
        yaml_file_encoding: str | None = "utf-8",
    ) -> None:
        """Initialize the source.

        Args:
            settings_cls: The settings class being configured.
            name: Domain name; selects ``<name>.yaml`` and ``<name>.d/``.
            config_dir_env: Environment variable overriding the directory.
            yaml_file_encoding: File encoding for YAML files.
        """
        self._yaml_files = discover_yaml_files(config_dir(config_dir_env), name)
        super().__init__(
            settings_cls=settings_cls,
            yaml_file=self._yaml_files or None,
            yaml_file_encoding=yaml_file_encoding,
        )

    def __repr__(self) -> str:
        files = ", ".join(str(f) for f in self._yaml_files)
        return f"{self.__class__.__name__}(yaml_files=[{files}])"


# ============================================================================
# Factory functions, one per settings domain
# ============================================================================


def create_app_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """conf/app.yaml and conf/app.d/ (directory override: APP_CONFIG_DIR)."""
    return ConfDYamlConfigSettingsSource(settings_cls, "app", "APP_CONFIG_DIR")


def create_db_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """conf/db.yaml and conf/db.d/ (directory override: DB_CONFIG_DIR)."""
    return ConfDYamlConfigSettingsSource(settings_cls, "db", "DB_CONFIG_DIR")


def create_logging_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """conf/logging.yaml and conf/logging.d/ (directory override: LOGGING_CONFIG_DIR)."""
    return ConfDYamlConfigSettingsSource(settings_cls, "logging", "LOGGING_CONFIG_DIR")


__all__ = [
    "ConfDYamlConfigSettingsSource",
    "config_dir",
    "create_app_yaml_source",
    "create_db_yaml_source",
    "create_logging_yaml_source",
    "discover_yaml_files",
]
