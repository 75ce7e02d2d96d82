"""
Storage Services Package

The data service interface, its local and remote implementations,
the mode-switching front used by the views, and the Google Sheets
record store behind the remote endpoint.
"""

from lifemanager.services.storage.interface import (
    ConnectionError,
    DataServiceInterface,
    NotFoundError,
    StorageError,
)
from lifemanager.services.storage.local import (
    LocalDataService,
    LocalStore,
    StorageKeys,
)
from lifemanager.services.storage.remote import RemoteDataService
from lifemanager.services.storage.data_service import DataService
from lifemanager.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    TODO_COLUMNS,
    TRANSACTION_COLUMNS,
)

__all__ = [
    # Interfaces
    "DataServiceInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "DataService",
    "LocalDataService",
    "LocalStore",
    "RemoteDataService",
    "StorageKeys",
    # Google Sheets backend
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "TODO_COLUMNS",
    "TRANSACTION_COLUMNS",
]
