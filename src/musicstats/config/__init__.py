"""Configuration module for musicstats."""

from .settings import (
    ApiSettings,
    DatabaseSettings,
    KafkaSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "DatabaseSettings",
    "KafkaSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "get_settings",
]
