"""
Configuration Management for Life Manager

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here. The remote URL and app title are
user preferences kept in the local key/value store (see
services/storage/local.py); everything below is deployment configuration.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LocalStorageSettings(BaseSettings):
    """On-device key/value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LIFEMANAGER_LOCAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_path: Path = Field(
        default=Path.home() / ".lifemanager" / "local_storage.json",
        description="File backing the local key/value store"
    )

    @field_validator('storage_path')
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        return v.expanduser()


class RemoteSettings(BaseSettings):
    """Client-side settings for talking to the remote endpoint."""

    model_config = SettingsConfigDict(
        env_prefix="LIFEMANAGER_REMOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for endpoint requests"
    )
    sync_throttle_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Pause between transactions during local-to-cloud sync"
    )


class CurrencySettings(BaseSettings):
    """Exchange rate lookup configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CURRENCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_base_url: str = Field(
        default="https://open.er-api.com/v6",
        description="Base URL of the exchange rate API"
    )
    base_currency: str = Field(
        default="TWD",
        min_length=3,
        max_length=3,
        description="Currency all amounts are stored in"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
    )
    cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="How long a fetched rate is reused"
    )

    @field_validator('base_currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration for the remote endpoint."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )
    todos_sheet_name: str = Field(
        default="Todos",
        description="Name of the sheet for todos"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the endpoint."
            )
        return v


class EndpointSettings(BaseSettings):
    """HTTP endpoint configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ENDPOINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)
    lock_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="How long a request waits for the global lock"
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

    default_app_title: str = Field(
        default="Life Manager",
        min_length=1,
        description="Title shown until the user sets their own"
    )
    recent_transactions_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many transactions the dashboard lists"
    )

    # Form validation
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="Days ahead a transaction date may be before it is flagged"
    )


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

    # Sub-settings are loaded lazily so a client without spreadsheet
    # credentials still starts.

    @property
    def local_storage(self) -> LocalStorageSettings:
        return LocalStorageSettings()

    @property
    def remote(self) -> RemoteSettings:
        return RemoteSettings()

    @property
    def currency(self) -> CurrencySettings:
        return CurrencySettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def endpoint(self) -> EndpointSettings:
        return EndpointSettings()

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

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    sections = {
        "local_storage": lambda: settings.local_storage,
        "remote": lambda: settings.remote,
        "currency": lambda: settings.currency,
        "google_sheets": lambda: settings.google_sheets,
        "endpoint": lambda: settings.endpoint,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
