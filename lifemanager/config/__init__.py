"""Configuration package."""

from lifemanager.config.settings import (
    AppSettings,
    CurrencySettings,
    EndpointSettings,
    GoogleSheetsSettings,
    LocalStorageSettings,
    RemoteSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "CurrencySettings",
    "EndpointSettings",
    "GoogleSheetsSettings",
    "LocalStorageSettings",
    "RemoteSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
