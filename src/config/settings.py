"""
Configuration Management for Smart Spends

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The spend parser never reads any of it; only the stores, the
debug-feedback channel and the transcript sources do.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key/value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".smart-spends",
        description="Directory holding the local data files"
    )
    namespace: str = Field(
        default="smart-spends",
        min_length=1,
        description="Database name the stores live under"
    )
    store_name: str = Field(
        default="app-data",
        min_length=1,
        description="Name of the key/value store file"
    )

    @property
    def store_path(self) -> Path:
        """Full path to the JSON document backing the store."""
        return Path(self.data_dir) / self.namespace / f"{self.store_name}.json"


class SpeechSettings(BaseSettings):
    """Transcript source configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPEECH_",
        extra="ignore"
    )

    language: str = Field(
        default="en-US",
        description="Recognition language tag"
    )
    continuous: bool = Field(
        default=True,
        description="Keep listening after the first final result"
    )
    interim_results: bool = Field(
        default=True,
        description="Publish interim (non-final) transcripts"
    )


class DebugSettings(BaseSettings):
    """Debug-feedback channel configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DEBUG_FEEDBACK_",
        extra="ignore"
    )

    export_path: str = Field(
        default="debug.json",
        description="Where debug entries are exported as JSON"
    )
    export_on_save: bool = Field(
        default=True,
        description="Rewrite the export file every time an entry is saved"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Defaults applied at persistence time
    main_currency: str = Field(
        default="THB",
        description="Currency used when a confirmed draft leaves it unset"
    )

    # Validation thresholds
    min_draft_confidence: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Parser confidence below which the review shows a warning"
    )
    max_expense_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Maximum reasonable expense amount (for sanity checking)"
    )

    @field_validator('main_currency')
    @classmethod
    def validate_main_currency(cls, v: str) -> str:
        """Only the two supported currencies are accepted."""
        code = v.strip().upper()
        if code not in {"THB", "EUR"}:
            raise ValueError(f"Unsupported main currency: {v}. Allowed: THB, EUR")
        return code


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def speech(self) -> SpeechSettings:
        return SpeechSettings()

    @property
    def debug(self) -> DebugSettings:
        return DebugSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "speech", "debug", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
