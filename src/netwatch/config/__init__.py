"""Configuration loading and validation."""

from .errors import ConfigurationError
from .runtime import SettingsSource
from .settings import (
    AlertIntervals,
    NetwatchSettings,
    NetworkSettings,
    ProbeSettings,
    ScanIntervals,
    StatePaths,
    build_settings,
    load_settings,
)

__all__ = [
    "AlertIntervals",
    "ConfigurationError",
    "NetwatchSettings",
    "NetworkSettings",
    "ProbeSettings",
    "ScanIntervals",
    "SettingsSource",
    "StatePaths",
    "build_settings",
    "load_settings",
]
