"""
Action Dispatcher

Maps an action name and its payload to a record store operation and
builds the JSON envelope ``{success, data?, message?}``.

One process-wide lock serializes all requests: the spreadsheet has no
transactions, and a delete that locates a row by index must not
interleave with another request's insert. A request that cannot get
the lock within the timeout fails instead of running unguarded.
"""

import threading
from typing import Any, Callable, Optional

import structlog
from pydantic import TypeAdapter

from lifemanager.config import get_settings
from lifemanager.models.records import Action, Todo, Transaction
from lifemanager.services.storage.google_sheets import GoogleSheetsRecordStore


logger = structlog.get_logger(__name__)

_REQUEST_LOCK = threading.Lock()

_todo_list_adapter = TypeAdapter(list[Todo])


class PayloadError(ValueError):
    """Payload is missing or has the wrong shape for the action."""
    pass


def _require_id(payload: Any) -> str:
    if not isinstance(payload, dict) or payload.get("id") in (None, ""):
        raise PayloadError("Payload must include an id")
    return str(payload["id"])


class ActionDispatcher:
    """
    Dispatches endpoint actions to the spreadsheet record store.

    Every outcome is an envelope dict; exceptions never escape handle().
    """

    def __init__(
        self,
        store: GoogleSheetsRecordStore,
        lock: Optional[threading.Lock] = None,
        lock_timeout: Optional[float] = None,
    ):
        self._store = store
        self._lock = lock or _REQUEST_LOCK
        self._lock_timeout = (
            lock_timeout if lock_timeout is not None
            else get_settings().endpoint.lock_timeout_seconds
        )
        self._handlers: dict[Action, Callable[[Any], dict]] = {
            Action.GET_DATA: self._get_data,
            Action.ADD_TRANSACTION: self._add_transaction,
            Action.DELETE_TRANSACTION: self._delete_transaction,
            Action.ADD_TODO: self._add_todo,
            Action.TOGGLE_TODO: self._toggle_todo,
            Action.DELETE_TODO: self._delete_todo,
            Action.REORDER_TODOS: self._reorder_todos,
        }

    def handle(self, action: Optional[str], payload: Any = None) -> dict:
        """Run one request under the global lock."""
        if not self._lock.acquire(timeout=self._lock_timeout):
            logger.warning("endpoint_lock_timeout", action=action)
            return {"success": False, "message": "Server busy, please try again"}
        try:
            try:
                parsed = Action(action)
            except ValueError:
                return {"success": False, "message": "Unknown Action"}

            result = self._handlers[parsed](payload)
            logger.info("endpoint_action", action=parsed.value)
            return result
        except Exception as e:
            logger.error("endpoint_action_failed", action=action, error=str(e))
            return {"success": False, "message": str(e)}
        finally:
            self._lock.release()

    def _get_data(self, payload: Any) -> dict:
        return {"success": True, "data": self._store.get_all_data().to_wire()}

    def _add_transaction(self, payload: Any) -> dict:
        self._store.add_transaction(Transaction.model_validate(payload))
        return {"success": True}

    def _delete_transaction(self, payload: Any) -> dict:
        self._store.delete_transaction(_require_id(payload))
        return {"success": True}

    def _add_todo(self, payload: Any) -> dict:
        self._store.add_todo(Todo.model_validate(payload))
        return {"success": True}

    def _toggle_todo(self, payload: Any) -> dict:
        todo_id = _require_id(payload)
        if not isinstance(payload.get("isCompleted"), bool):
            raise PayloadError("Payload must include isCompleted as a boolean")
        self._store.toggle_todo(todo_id, payload["isCompleted"])
        return {"success": True}

    def _delete_todo(self, payload: Any) -> dict:
        self._store.delete_todo(_require_id(payload))
        return {"success": True}

    def _reorder_todos(self, payload: Any) -> dict:
        if not isinstance(payload, list):
            raise PayloadError("Payload must be the full list of todos")
        self._store.overwrite_todos(_todo_list_adapter.validate_python(payload))
        return {"success": True}
