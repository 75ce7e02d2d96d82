"""
Remote (spreadsheet-backed endpoint) storage

Each operation is one HTTP request to the configured endpoint URL:
- fetch is a GET with ``?action=GET_DATA``
- mutations POST ``{"action": ..., "payload": ...}``

Bodies are posted as text/plain. Script hosts such as Apps Script reject
CORS preflights and read the raw body anyway, and our own endpoint
accepts any content type.

There is no retry policy here. Network and parsing failures come back
as ApiResponse(success=False, message=...) for the UI to show.
"""

import json
from typing import Any, Optional

import requests
import structlog
from pydantic import TypeAdapter, ValidationError

from lifemanager.config import get_settings
from lifemanager.models.records import (
    Action,
    ApiResponse,
    AppData,
    Category,
    Todo,
    Transaction,
)
from lifemanager.services.storage.interface import DataServiceInterface
from lifemanager.services.storage.local import LocalStore, StorageKeys


logger = structlog.get_logger(__name__)

_categories_adapter = TypeAdapter(list[Category])


class RemoteDataService(DataServiceInterface):
    """
    Data service talking to the spreadsheet-backed endpoint.

    Categories are not stored by the endpoint; edits are cached in the
    local store and laid over the fetched dataset.
    """

    mode = "remote"

    def __init__(
        self,
        url: str,
        store: LocalStore,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self._url = url
        self._store = store
        self._session = session or requests.Session()
        self._timeout = timeout or get_settings().remote.request_timeout_seconds

    @property
    def url(self) -> str:
        return self._url

    def _parse_envelope(self, body: Any) -> ApiResponse:
        if not isinstance(body, dict):
            return ApiResponse.failure("Endpoint returned an unexpected response")
        try:
            return ApiResponse.model_validate(body)
        except ValidationError as e:
            return ApiResponse.failure(f"Endpoint returned an unexpected response: {e}")

    def _invalid_json(self, action: Action, error: Exception) -> ApiResponse:
        logger.warning("remote_invalid_json", action=action.value, error=str(error))
        return ApiResponse.failure(f"{action.value}: endpoint returned invalid JSON")

    def _post(self, action: Action, payload: Any) -> ApiResponse:
        """Send one action to the endpoint and parse its envelope."""
        try:
            response = self._session.post(
                self._url,
                data=json.dumps({"action": action.value, "payload": payload}),
                headers={"Content-Type": "text/plain;charset=utf-8"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.JSONDecodeError as e:
            return self._invalid_json(action, e)
        # InvalidURL and MissingSchema are also ValueErrors
        except requests.RequestException as e:
            logger.warning("remote_request_failed", action=action.value, error=str(e))
            return ApiResponse.failure(f"{action.value}: request failed ({e})")
        except ValueError as e:
            return self._invalid_json(action, e)

        result = self._parse_envelope(body)
        if not result.success:
            logger.warning("remote_action_rejected", action=action.value, message=result.message)
        return result

    def _cached_categories(self) -> Optional[list[Category]]:
        raw = self._store.get_item(StorageKeys.CATEGORIES_CACHE)
        if not raw:
            return None
        try:
            return _categories_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("categories_cache_corrupt")
            return None

    async def fetch_data(self) -> ApiResponse[AppData]:
        try:
            response = self._session.get(
                self._url,
                params={"action": Action.GET_DATA.value},
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (ValueError, requests.RequestException) as e:
            logger.error("cloud_fetch_failed", error=str(e))
            return ApiResponse.failure("Failed to fetch from cloud.")

        envelope = self._parse_envelope(body)
        if not envelope.success:
            logger.error("cloud_fetch_rejected", message=envelope.message)
            return ApiResponse.failure(
                f"Failed to fetch from cloud: {envelope.message}"
                if envelope.message else "Failed to fetch from cloud."
            )

        try:
            data = AppData.model_validate(envelope.data or {})
        except ValidationError as e:
            logger.error("cloud_data_invalid", error=str(e))
            return ApiResponse.failure("Cloud data could not be read.")

        cached = self._cached_categories()
        if cached is not None:
            data.categories = cached

        return ApiResponse.ok(data=data)

    async def add_transaction(self, transaction: Transaction) -> ApiResponse:
        return self._post(Action.ADD_TRANSACTION, transaction.to_wire())

    async def delete_transaction(self, transaction_id: str) -> ApiResponse:
        return self._post(Action.DELETE_TRANSACTION, {"id": transaction_id})

    async def add_todo(self, todo: Todo) -> ApiResponse:
        return self._post(Action.ADD_TODO, todo.to_wire())

    async def toggle_todo(self, todo_id: str, is_completed: bool) -> ApiResponse:
        return self._post(
            Action.TOGGLE_TODO,
            {"id": todo_id, "isCompleted": is_completed},
        )

    async def delete_todo(self, todo_id: str) -> ApiResponse:
        return self._post(Action.DELETE_TODO, {"id": todo_id})

    async def reorder_todos(self, todos: list[Todo]) -> ApiResponse:
        return self._post(Action.REORDER_TODOS, [t.to_wire() for t in todos])

    async def save_categories(self, categories: list[Category]) -> ApiResponse:
        self._store.set_item(
            StorageKeys.CATEGORIES_CACHE,
            _categories_adapter.dump_json(categories, by_alias=True).decode("utf-8"),
        )
        return ApiResponse.ok()
