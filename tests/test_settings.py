"""Tests for the configuration sections."""

from pathlib import Path

from lifemanager.config.settings import (
    AppSettings,
    CurrencySettings,
    LocalStorageSettings,
)


class TestSettingsSections:
    """Tests for environment-driven settings."""

    def test_app_settings_fields(self):
        assert set(AppSettings.model_fields) == {
            "default_app_title",
            "recent_transactions_limit",
            "future_date_tolerance_days",
        }

    def test_app_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_APP_TITLE", "Household")
        monkeypatch.setenv("RECENT_TRANSACTIONS_LIMIT", "5")
        settings = AppSettings()
        assert settings.default_app_title == "Household"
        assert settings.recent_transactions_limit == 5

    def test_storage_path_expands_home(self, monkeypatch):
        monkeypatch.setenv("LIFEMANAGER_LOCAL_STORAGE_PATH", "~/lm/store.json")
        path = LocalStorageSettings().storage_path
        assert path == Path.home() / "lm" / "store.json"

    def test_base_currency_is_upper_cased(self, monkeypatch):
        monkeypatch.setenv("CURRENCY_BASE_CURRENCY", "jpy")
        assert CurrencySettings().base_currency == "JPY"
