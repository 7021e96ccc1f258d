"""Configuration management for the genobase build pipeline."""

from .settings import (
    get_settings,
    Settings,
    AdaptorStoreSettings,
    BuildSettings,
    ExternalToolSettings,
    LoggingSettings,
)

__all__ = [
    "get_settings",
    "Settings",
    "AdaptorStoreSettings",
    "BuildSettings",
    "ExternalToolSettings",
    "LoggingSettings",
]
