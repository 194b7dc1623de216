from .settings import (
    AggregatorSettings,
    CacheSettings,
    DatabaseSettings,
    LoggingSettings,
    Settings,
    SourceSettings,
    build_database_url,
    build_sqlite_url,
    get_settings,
    load_settings,
    reset_settings,
)

__all__ = [
    "AggregatorSettings",
    "CacheSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "SourceSettings",
    "build_database_url",
    "build_sqlite_url",
    "get_settings",
    "load_settings",
    "reset_settings",
]
