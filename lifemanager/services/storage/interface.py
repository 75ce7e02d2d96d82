"""
Abstract Data Service Interface

We define one interface for the record operations so that:
1. Local and remote modes are interchangeable for every caller
2. Tests can run against the local store without a network
3. The mode can be switched at runtime by configuring a URL

Every operation returns an ApiResponse. A failed remote call is a
response with success=False, not an exception; callers re-fetch the
full dataset after each mutation instead of trusting partial results.
"""

from abc import ABC, abstractmethod

from lifemanager.models.records import (
    ApiResponse,
    AppData,
    Category,
    Todo,
    Transaction,
)


class DataServiceInterface(ABC):
    """
    Abstract interface for record storage operations.

    Implementations: LocalDataService (on-device JSON blob) and
    RemoteDataService (spreadsheet-backed HTTP endpoint).
    """

    #: "local" or "remote", stamped on audit events
    mode: str = ""

    @abstractmethod
    async def fetch_data(self) -> ApiResponse[AppData]:
        """
        Fetch the full dataset.

        Returns:
            Response whose data is the AppData on success
        """
        pass

    @abstractmethod
    async def add_transaction(self, transaction: Transaction) -> ApiResponse:
        """Store a new transaction."""
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> ApiResponse:
        """
        Delete a transaction by id.

        Deleting an unknown id is not an error.
        """
        pass

    @abstractmethod
    async def add_todo(self, todo: Todo) -> ApiResponse:
        """Store a new todo."""
        pass

    @abstractmethod
    async def toggle_todo(self, todo_id: str, is_completed: bool) -> ApiResponse:
        """
        Set a todo's completion flag.

        This sets rather than flips, so repeating a call is harmless.
        """
        pass

    @abstractmethod
    async def delete_todo(self, todo_id: str) -> ApiResponse:
        """Delete a todo by id."""
        pass

    @abstractmethod
    async def reorder_todos(self, todos: list[Todo]) -> ApiResponse:
        """
        Replace the stored todo list with exactly this sequence.

        Also the way target date changes are persisted.
        """
        pass

    @abstractmethod
    async def save_categories(self, categories: list[Category]) -> ApiResponse:
        """Replace the category set."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Record not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
