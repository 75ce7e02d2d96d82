"""
Local (on-device) storage

The local store is a small string key/value store persisted as one JSON
file, the desktop counterpart of a browser's localStorage. It holds the
user's preferences (remote URL, app title) and, in local mode, the whole
dataset as a single JSON blob under one key.

Local mode has no failure path in normal use: reads and writes are
synchronous file operations. A blob that no longer parses is reported
as a StorageError rather than silently replaced.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from lifemanager.config import get_settings
from lifemanager.models.records import (
    ApiResponse,
    AppData,
    Category,
    Todo,
    Transaction,
    empty_app_data,
)
from lifemanager.services.storage.interface import (
    DataServiceInterface,
    StorageError,
)


class StorageKeys:
    """Keys used in the local key/value store."""
    GAS_URL = "lifemanager_gas_url"
    APP_TITLE = "lifemanager_app_title"
    LOCAL_DATA = "lifemanager_local_data"
    CATEGORIES_CACHE = "lifemanager_categories_cache"


class LocalStore:
    """
    String key/value store backed by a JSON file.

    Every call reads or rewrites the whole file; the store only ever
    holds a handful of keys.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_settings().local_storage.storage_path

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                items = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read local store {self._path}: {e}")
        if not isinstance(items, dict):
            raise StorageError(f"Local store {self._path} is not a key/value object")
        return items

    def _write_all(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file then swap, so a crash never leaves half a file
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write local store {self._path}: {e}")

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)


class LocalDataService(DataServiceInterface):
    """
    Data service that keeps the whole dataset in the local store.

    New transactions and todos go to the head of their lists, so the
    newest record is always first.
    """

    mode = "local"

    def __init__(self, store: LocalStore):
        self._store = store

    def get_local_data(self) -> AppData:
        """Load the dataset, seeding an empty one on first use."""
        raw = self._store.get_item(StorageKeys.LOCAL_DATA)
        if not raw:
            initial = empty_app_data()
            self._save_local_data(initial)
            return initial
        try:
            return AppData.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Local data is corrupt: {e}")

    def _save_local_data(self, data: AppData) -> None:
        self._store.set_item(
            StorageKeys.LOCAL_DATA,
            data.model_dump_json(by_alias=True),
        )

    async def fetch_data(self) -> ApiResponse[AppData]:
        return ApiResponse.ok(data=self.get_local_data())

    async def add_transaction(self, transaction: Transaction) -> ApiResponse:
        data = self.get_local_data()
        data.transactions.insert(0, transaction)
        self._save_local_data(data)
        return ApiResponse.ok(data=transaction)

    async def delete_transaction(self, transaction_id: str) -> ApiResponse:
        data = self.get_local_data()
        data.transactions = [t for t in data.transactions if t.id != transaction_id]
        self._save_local_data(data)
        return ApiResponse.ok()

    async def add_todo(self, todo: Todo) -> ApiResponse:
        data = self.get_local_data()
        data.todos.insert(0, todo)
        self._save_local_data(data)
        return ApiResponse.ok(data=todo)

    async def toggle_todo(self, todo_id: str, is_completed: bool) -> ApiResponse:
        data = self.get_local_data()
        for todo in data.todos:
            if todo.id == todo_id:
                todo.is_completed = is_completed
                self._save_local_data(data)
                break
        return ApiResponse.ok()

    async def delete_todo(self, todo_id: str) -> ApiResponse:
        data = self.get_local_data()
        data.todos = [t for t in data.todos if t.id != todo_id]
        self._save_local_data(data)
        return ApiResponse.ok()

    async def reorder_todos(self, todos: list[Todo]) -> ApiResponse:
        data = self.get_local_data()
        data.todos = list(todos)
        self._save_local_data(data)
        return ApiResponse.ok()

    async def save_categories(self, categories: list[Category]) -> ApiResponse:
        data = self.get_local_data()
        data.categories = list(categories)
        self._save_local_data(data)
        return ApiResponse.ok()
