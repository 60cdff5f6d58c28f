"""Tests for configuration loading."""

import pytest
from datetime import timedelta
from pathlib import Path

from pydantic import ValidationError as SettingsError

from pocketledger.config import (
    AppSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:
    """Tests for StorageSettings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LEDGER_STORAGE_SLOT_KEY", raising=False)
        monkeypatch.delenv("LEDGER_STORAGE_DATA_DIR", raising=False)
        settings = StorageSettings()
        assert settings.slot_key == "finance-ledger"
        assert settings.data_dir == Path.home() / ".pocketledger"
        assert settings.archive_purged is False

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("LEDGER_STORAGE_ARCHIVE_PURGED", "true")
        settings = StorageSettings()
        assert settings.data_dir == tmp_path
        assert settings.archive_purged is True

    @pytest.mark.parametrize("key", ["a/b", "a\\b", ".", ".."])
    def test_slot_key_cannot_be_a_path(self, key):
        with pytest.raises(SettingsError, match="Invalid slot key"):
            StorageSettings(slot_key=key)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_grace_period_defaults_to_48_hours(self, monkeypatch):
        monkeypatch.delenv("GRACE_PERIOD_HOURS", raising=False)
        assert AppSettings().grace_period == timedelta(hours=48)

    def test_grace_period_from_environment(self, monkeypatch):
        monkeypatch.setenv("GRACE_PERIOD_HOURS", "6")
        assert AppSettings().grace_period == timedelta(hours=6)

    def test_audit_history_limit_from_environment(self, monkeypatch):
        monkeypatch.setenv("AUDIT_HISTORY_LIMIT", "25")
        assert AppSettings().audit_history_limit == 25

    def test_grace_period_must_be_positive(self):
        with pytest.raises(SettingsError):
            AppSettings(grace_period_hours=0)

    def test_trend_threshold_must_be_positive(self):
        with pytest.raises(SettingsError):
            AppSettings(trend_threshold_pct=0)


class TestValidateAllSettings:
    def test_valid_configuration(self, monkeypatch):
        monkeypatch.delenv("LEDGER_STORAGE_SLOT_KEY", raising=False)
        results = validate_all_settings()
        assert results == {"storage": True, "app": True}

    def test_invalid_configuration_is_reported(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_SLOT_KEY", "../escape")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "Invalid slot key" in results["storage_error"]
        assert results["app"] is True
