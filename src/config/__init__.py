"""Configuration package."""

from src.config.settings import (
    AppSettings,
    DebugSettings,
    Settings,
    SpeechSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DebugSettings",
    "Settings",
    "SpeechSettings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
