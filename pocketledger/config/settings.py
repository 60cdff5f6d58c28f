"""
Configuration Management for Pocket Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger has no external services, so the settings only describe where the
ledger lives on disk and the tunable thresholds of the derivation engine.
"""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".pocketledger",
        description="Directory holding one JSON file per storage slot"
    )
    slot_key: str = Field(
        default="finance-ledger",
        min_length=1,
        max_length=100,
        description="Key of the slot holding the ledger blob"
    )
    archive_purged: bool = Field(
        default=False,
        description="Copy swept transactions to '<slot_key>.archive' before purge"
    )

    @field_validator('slot_key')
    @classmethod
    def validate_slot_key(cls, v: str) -> str:
        """Slot keys become file names, so path separators are refused."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"Invalid slot key: {v!r}")
        return v


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

    # Retention
    grace_period_hours: int = Field(
        default=48,
        ge=1,
        le=24 * 365,
        description="Hours a retired transaction is kept before it is purged"
    )

    # Insights
    trend_threshold_pct: float = Field(
        default=10.0,
        gt=0.0,
        le=1000.0,
        description="Month-over-month expense change (%) that counts as a trend"
    )

    # Audit
    audit_history_limit: int = Field(
        default=500,
        ge=0,
        le=100_000,
        description="How many recent audit events are kept in memory"
    )

    # Dashboard
    recent_transactions_limit: int = Field(
        default=5,
        ge=0,
        le=100,
        description="How many recent transactions the dashboard returns"
    )

    @property
    def grace_period(self) -> timedelta:
        """Grace period as a timedelta."""
        return timedelta(hours=self.grace_period_hours)


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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Returns a dict of {setting_name: is_valid}, plus '<name>_error'
    entries describing any failure. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
