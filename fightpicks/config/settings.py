from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseModel):
    """Event cache lifetimes, in seconds."""

    live_fresh_seconds: int = Field(
        default=300,
        ge=1,
        description="How long a live event stays cached before it is refetched.",
    )
    pre_event_fresh_seconds: int = Field(
        default=3600,
        ge=1,
        description="Upper bound on how long a scheduled event stays cached.",
    )
    latest_finished_seconds: int = Field(
        default=3600,
        ge=1,
        description="Lifetime of the 'latest' alias once its event is finished.",
    )
    schedule_seconds: int = Field(default=3600, ge=1)
    backend: Literal["memory", "sql"] = Field(
        default="memory",
        description="Where event records are cached: in process, or in the cached_event table.",
    )
    memory_maxsize: int = Field(default=1024, ge=1)


class AggregatorSettings(BaseModel):
    max_concurrency: int = Field(
        default=5,
        ge=1,
        le=64,
        description="Maximum event resolutions in flight for a batch lookup.",
    )


class SourceSettings(BaseModel):
    latest_url: str = "https://site.api.espn.com/apis/site/v2/sports/mma/ufc/scoreboard"
    event_url: str = "https://site.api.espn.com/apis/site/v2/sports/mma/ufc/scoreboard?event={EVENT_ID}"
    schedule_url: str = "https://site.api.espn.com/apis/site/v2/sports/mma/ufc/scoreboard"
    timeout_seconds: float = Field(default=10.0, gt=0)


class DatabaseSettings(BaseModel):
    url: Optional[str] = None
    filename: str = "fightpicks.db"
    data_dir: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 5432
    user: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    echo: bool = False

    def resolved_url(self) -> str:
        """Return the configured URL, composing one from parts when unset."""
        if self.url:
            return self.url
        if self.user and self.name:
            return build_database_url(
                user=self.user,
                password=self.password,
                host=self.host,
                port=str(self.port),
                name=self.name,
            )
        data_dir = Path(self.data_dir) if self.data_dir else _data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return build_sqlite_url(str(data_dir / self.filename))


class LoggingSettings(BaseModel):
    json_logs: bool = True
    level: str = "INFO"
    file: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024

    @model_validator(mode="before")
    @classmethod
    def _alias_json(cls, data: dict[str, object]) -> dict[str, object]:
        if isinstance(data, dict) and "json" in data and "json_logs" not in data:
            data = dict(data)
            data["json_logs"] = data.pop("json")
        return data


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FIGHTPICKS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)
    source: SourceSettings = Field(default_factory=SourceSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def build_database_url(
    *,
    user: str,
    password: str | None,
    host: str,
    port: str,
    name: str,
) -> str:
    auth = f"{user}:{password}" if password else f"{user}"
    return f"postgresql+asyncpg://{auth}@{host}:{port}/{name}"


def build_sqlite_url(path: str) -> str:
    return f"sqlite+aiosqlite:///{os.path.abspath(path)}"


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _data_dir() -> Path:
    return _project_root() / "data"


def _yaml_candidates(path: str | None) -> list[Path]:
    candidates: list[Path] = []
    explicit = path or os.getenv("FIGHTPICKS_CONFIG")
    if explicit:
        candidates.append(Path(explicit).resolve())
    candidates.append(_project_root() / "config" / "fightpicks.yaml")
    return candidates


def _load_yaml_overrides(path: str | None = None) -> Dict[str, Any]:
    for candidate in _yaml_candidates(path):
        if not candidate.exists():
            continue
        with candidate.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"config file {candidate} must contain a mapping")
        return data
    return {}


def load_settings(path: str | None = None, *, env_file: str | None = ".env") -> Settings:
    """Build settings from YAML overrides, then the environment.

    Environment variables win over the YAML file, which wins over defaults.
    """
    if env_file:
        load_dotenv(env_file, override=False)
    overrides = _load_yaml_overrides(path)
    settings = Settings()
    if not overrides:
        return settings
    env_values = settings.model_dump(exclude_defaults=True)
    return Settings.model_validate(_deep_merge(overrides, env_values))


def _deep_merge(base: Dict[str, Any], top: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in top.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """Get process settings, loading them on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = load_settings()
    return _SETTINGS


def reset_settings() -> None:
    global _SETTINGS
    _SETTINGS = None


__all__ = [
    "CacheSettings",
    "AggregatorSettings",
    "SourceSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "build_database_url",
    "build_sqlite_url",
    "load_settings",
    "get_settings",
    "reset_settings",
]
