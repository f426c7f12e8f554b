"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (READMEHUB__GITHUB__TOKEN=ghp_...)
  2. readmehub.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. Only ``github.token`` has no usable default:
without it every GraphQL request is rejected upstream and refreshes fail.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("readmehub")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "snapshots.db")

DEFAULT_README_URL = (
    "https://raw.githubusercontent.com/lirantal/awesome-opensource-israel/master/README.md"
)


def _find_config_file() -> str | None:
    """Return the path of the first readmehub.yaml found, or None."""
    candidates = [
        Path("readmehub.yaml"),
        Path(platformdirs.user_config_dir("readmehub")) / "readmehub.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class SourceSettings(BaseModel):
    readme_url: str = DEFAULT_README_URL
    host: str = "github.com"  # Only links on this host are classified


class GitHubSettings(BaseModel):
    graphql_url: str = "https://api.github.com/graphql"
    token: str | None = None


class EnrichmentSettings(BaseModel):
    max_concurrency: int = Field(default=8, ge=1)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    repositories_per_company: int = Field(default=100, ge=1, le=100)


class CacheSettings(BaseModel):
    max_age_days: float = 3


class SnapshotSettings(BaseModel):
    db_path: str = _DEFAULT_DB_PATH


class SchedulerSettings(BaseModel):
    enabled: bool = True
    interval_hours: float = 3


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: READMEHUB__SERVER__PORT=9090
        env_prefix="READMEHUB__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    source: SourceSettings = SourceSettings()
    github: GitHubSettings = GitHubSettings()
    enrichment: EnrichmentSettings = EnrichmentSettings()
    cache: CacheSettings = CacheSettings()
    snapshots: SnapshotSettings = SnapshotSettings()
    scheduler: SchedulerSettings = SchedulerSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
