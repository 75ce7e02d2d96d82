"""Services package."""

from lifemanager.services.currency import (
    CURRENCIES,
    Conversion,
    Currency,
    ExchangeRateService,
)
from lifemanager.services.storage import (
    ConnectionError,
    DataService,
    DataServiceInterface,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    LocalDataService,
    LocalStore,
    NotFoundError,
    RemoteDataService,
    StorageError,
    StorageKeys,
)

__all__ = [
    # Currency
    "CURRENCIES",
    "Conversion",
    "Currency",
    "ExchangeRateService",
    # Storage
    "ConnectionError",
    "DataService",
    "DataServiceInterface",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "LocalDataService",
    "LocalStore",
    "NotFoundError",
    "RemoteDataService",
    "StorageError",
    "StorageKeys",
]
