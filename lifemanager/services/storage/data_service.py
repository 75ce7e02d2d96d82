"""
Data Service

The single entry point the views use for records. On every call it
checks the local store for a configured endpoint URL:
- no URL  -> LocalDataService (on-device blob)
- URL set -> RemoteDataService (spreadsheet-backed endpoint)

Changing the URL in settings therefore switches modes without a restart.
Every mutation is audited, successful or not.
"""

import asyncio
from typing import Optional
from uuid import UUID

import requests

from lifemanager.audit import AuditLogger, create_correlation_id
from lifemanager.config import get_settings
from lifemanager.models.records import (
    ApiResponse,
    AppData,
    Category,
    Todo,
    Transaction,
)
from lifemanager.services.storage.interface import DataServiceInterface, StorageError
from lifemanager.services.storage.local import (
    LocalDataService,
    LocalStore,
    StorageKeys,
)
from lifemanager.services.storage.remote import RemoteDataService


class DataService:
    """Mode-switching front for the local and remote data services."""

    def __init__(
        self,
        store: LocalStore,
        audit_logger: Optional[AuditLogger] = None,
        session: Optional[requests.Session] = None,
    ):
        self._store = store
        self._local = LocalDataService(store)
        self._session = session
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def remote_url(self) -> Optional[str]:
        url = (self._store.get_item(StorageKeys.GAS_URL) or "").strip()
        return url or None

    @property
    def is_remote(self) -> bool:
        return self.remote_url is not None

    @property
    def local(self) -> LocalDataService:
        return self._local

    def backend(self) -> DataServiceInterface:
        """The service for the currently configured mode."""
        url = self.remote_url
        if url:
            return RemoteDataService(url, self._store, session=self._session)
        return self._local

    async def _audit_result(
        self,
        result: ApiResponse,
        backend: DataServiceInterface,
        operation: str,
        correlation_id: Optional[UUID],
    ) -> None:
        if not result.success:
            await self._audit_logger.log_save_failed(
                operation=operation,
                error_message=result.message or "unknown error",
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )

    async def fetch_data(self, correlation_id: Optional[UUID] = None) -> ApiResponse[AppData]:
        backend = self.backend()
        try:
            result = await backend.fetch_data()
        except StorageError as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"storage_mode": backend.mode},
                correlation_id=correlation_id,
            )
            raise

        if result.success and result.data is not None:
            await self._audit_logger.log_data_fetched(
                storage_mode=backend.mode,
                transaction_count=len(result.data.transactions),
                todo_count=len(result.data.todos),
                correlation_id=correlation_id,
            )
        else:
            await self._audit_logger.log_fetch_failed(
                storage_mode=backend.mode,
                error_message=result.message or "unknown error",
                correlation_id=correlation_id,
            )
        return result

    async def add_transaction(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> ApiResponse:
        backend = self.backend()
        result = await backend.add_transaction(transaction)
        if result.success:
            await self._audit_logger.log_transaction_added(
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=transaction.amount,
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_result(result, backend, "add_transaction", correlation_id)
        return result

    async def delete_transaction(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> ApiResponse:
        backend = self.backend()
        result = await backend.delete_transaction(transaction_id)
        if result.success:
            await self._audit_logger.log_transaction_deleted(
                transaction_id=transaction_id,
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_result(result, backend, "delete_transaction", correlation_id)
        return result

    async def add_todo(self, todo: Todo, correlation_id: Optional[UUID] = None) -> ApiResponse:
        backend = self.backend()
        result = await backend.add_todo(todo)
        if result.success:
            await self._audit_logger.log_todo_added(
                todo_id=todo.id,
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_result(result, backend, "add_todo", correlation_id)
        return result

    async def toggle_todo(
        self,
        todo_id: str,
        is_completed: bool,
        correlation_id: Optional[UUID] = None,
    ) -> ApiResponse:
        backend = self.backend()
        result = await backend.toggle_todo(todo_id, is_completed)
        if result.success:
            await self._audit_logger.log_todo_toggled(
                todo_id=todo_id,
                is_completed=is_completed,
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_result(result, backend, "toggle_todo", correlation_id)
        return result

    async def delete_todo(self, todo_id: str, correlation_id: Optional[UUID] = None) -> ApiResponse:
        backend = self.backend()
        result = await backend.delete_todo(todo_id)
        if result.success:
            await self._audit_logger.log_todo_deleted(
                todo_id=todo_id,
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_result(result, backend, "delete_todo", correlation_id)
        return result

    async def reorder_todos(
        self,
        todos: list[Todo],
        correlation_id: Optional[UUID] = None,
    ) -> ApiResponse:
        backend = self.backend()
        result = await backend.reorder_todos(todos)
        if result.success:
            await self._audit_logger.log_todos_reordered(
                todo_count=len(todos),
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_result(result, backend, "reorder_todos", correlation_id)
        return result

    async def save_categories(
        self,
        categories: list[Category],
        correlation_id: Optional[UUID] = None,
    ) -> ApiResponse:
        backend = self.backend()
        result = await backend.save_categories(categories)
        if result.success:
            await self._audit_logger.log_categories_saved(
                category_count=len(categories),
                storage_mode=backend.mode,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_result(result, backend, "save_categories", correlation_id)
        return result

    async def sync_local_to_cloud(self, throttle_seconds: Optional[float] = None) -> ApiResponse:
        """
        Push the local dataset to the configured endpoint.

        Todos are sent as one reorder (a full overwrite of the cloud
        list). Transactions are added one by one with a short pause in
        between. Transactions are not de-duplicated: syncing twice
        uploads them twice.
        """
        url = self.remote_url
        if not url:
            return ApiResponse.failure("Please configure and save the Script URL first.")

        if throttle_seconds is None:
            throttle_seconds = get_settings().remote.sync_throttle_seconds

        correlation_id = create_correlation_id()
        remote = RemoteDataService(url, self._store, session=self._session)
        local_data = self._local.get_local_data()

        success_count = 0
        fail_count = 0

        todos_result = await remote.reorder_todos(local_data.todos)
        if not todos_result.success:
            fail_count += 1
            await self._audit_result(todos_result, remote, "sync_todos", correlation_id)

        # Oldest first, so the cloud sheet (newest at the bottom) keeps local order
        for tx in reversed(local_data.transactions):
            result = await remote.add_transaction(tx)
            if result.success:
                success_count += 1
            else:
                fail_count += 1
                await self._audit_result(result, remote, "sync_transaction", correlation_id)
            if throttle_seconds:
                await asyncio.sleep(throttle_seconds)

        await self._audit_logger.log_sync_completed(
            success_count=success_count,
            fail_count=fail_count,
            correlation_id=correlation_id,
        )

        todo_state = "updated" if todos_result.success else "not updated"
        return ApiResponse(
            success=fail_count == 0,
            data={"uploaded": success_count, "failed": fail_count},
            message=(
                f"Sync finished. Uploaded {success_count} transactions, "
                f"todos {todo_state}. Failed: {fail_count}."
            ),
        )
