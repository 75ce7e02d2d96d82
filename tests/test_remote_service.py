"""Tests for RemoteDataService (HTTP mocked with a MagicMock session)."""

import json

import pytest
import requests

from lifemanager.models.records import Category, Todo
from lifemanager.services.storage import RemoteDataService, StorageKeys


URL = "https://example.test/exec"


@pytest.fixture
def service(local_store, http_session):
    return RemoteDataService(URL, local_store, session=http_session, timeout=5)


def _wire_data(expense):
    return {
        "transactions": [expense.to_wire()],
        "todos": [{"id": "t1", "text": "Milk", "isCompleted": True,
                   "createdAt": "2024-05-01T08:00:00+00:00", "targetDate": ""}],
        "categories": [{"id": "cat_1", "label": "Food", "iconKey": "Utensils",
                        "color": "#e8d5d5"}],
    }


class TestFetch:
    """Tests for GET_DATA."""

    @pytest.mark.asyncio
    async def test_fetch_parses_dataset(self, service, http_session, json_response, expense):
        http_session.get.return_value = json_response(
            {"success": True, "data": _wire_data(expense)}
        )

        result = await service.fetch_data()

        assert result.success
        assert result.data.transactions == [expense]
        assert result.data.todos[0].is_completed is True
        assert result.data.todos[0].target_date is None
        http_session.get.assert_called_once_with(
            URL, params={"action": "GET_DATA"}, timeout=5
        )

    @pytest.mark.asyncio
    async def test_network_error_is_failure(self, service, http_session):
        http_session.get.side_effect = requests.ConnectionError("offline")
        result = await service.fetch_data()
        assert not result.success
        assert result.message == "Failed to fetch from cloud."

    @pytest.mark.asyncio
    async def test_http_error_is_failure(self, service, http_session, json_response):
        http_session.get.return_value = json_response({}, status_ok=False)
        result = await service.fetch_data()
        assert not result.success

    @pytest.mark.asyncio
    async def test_invalid_json_is_failure(self, service, http_session):
        response = http_session.get.return_value
        response.json.side_effect = ValueError("Expecting value")
        result = await service.fetch_data()
        assert not result.success
        assert result.message == "Failed to fetch from cloud."

    @pytest.mark.asyncio
    async def test_rejected_envelope_carries_message(self, service, http_session, json_response):
        http_session.get.return_value = json_response(
            {"success": False, "message": "Sheet missing"}
        )
        result = await service.fetch_data()
        assert not result.success
        assert result.message == "Failed to fetch from cloud: Sheet missing"

    @pytest.mark.asyncio
    async def test_cached_categories_override_fetched(
        self, service, local_store, http_session, json_response, expense
    ):
        await service.save_categories([Category(id="cat_9", label="Pets")])
        http_session.get.return_value = json_response(
            {"success": True, "data": _wire_data(expense)}
        )

        result = await service.fetch_data()

        assert [c.id for c in result.data.categories] == ["cat_9"]
        assert local_store.get_item(StorageKeys.CATEGORIES_CACHE) is not None
        http_session.post.assert_not_called()


class TestMutations:
    """Tests for the POSTed actions."""

    def _sent(self, http_session) -> dict:
        kwargs = http_session.post.call_args.kwargs
        assert kwargs["headers"]["Content-Type"].startswith("text/plain")
        return json.loads(kwargs["data"])

    @pytest.mark.asyncio
    async def test_add_transaction_posts_wire_record(
        self, service, http_session, json_response, expense
    ):
        http_session.post.return_value = json_response({"success": True})

        result = await service.add_transaction(expense)

        assert result.success
        assert self._sent(http_session) == {
            "action": "ADD_TRANSACTION",
            "payload": expense.to_wire(),
        }

    @pytest.mark.asyncio
    async def test_delete_and_toggle_payloads(self, service, http_session, json_response):
        http_session.post.return_value = json_response({"success": True})

        await service.delete_transaction("tx-1")
        assert self._sent(http_session) == {
            "action": "DELETE_TRANSACTION",
            "payload": {"id": "tx-1"},
        }

        await service.toggle_todo("t1", True)
        assert self._sent(http_session) == {
            "action": "TOGGLE_TODO",
            "payload": {"id": "t1", "isCompleted": True},
        }

        await service.delete_todo("t1")
        assert self._sent(http_session)["action"] == "DELETE_TODO"

    @pytest.mark.asyncio
    async def test_reorder_posts_full_list(self, service, http_session, json_response, todos):
        http_session.post.return_value = json_response({"success": True})

        await service.reorder_todos(todos)

        sent = self._sent(http_session)
        assert sent["action"] == "REORDER_TODOS"
        assert [t["id"] for t in sent["payload"]] == ["todo-1", "todo-2", "todo-3"]

    @pytest.mark.asyncio
    async def test_add_todo(self, service, http_session, json_response):
        http_session.post.return_value = json_response({"success": True})
        todo = Todo(id="n", text="New")
        result = await service.add_todo(todo)
        assert result.success
        assert self._sent(http_session)["payload"]["text"] == "New"

    @pytest.mark.asyncio
    async def test_endpoint_failure_is_returned(self, service, http_session, json_response, expense):
        http_session.post.return_value = json_response(
            {"success": False, "message": "Unknown Action"}
        )
        result = await service.add_transaction(expense)
        assert not result.success
        assert result.message == "Unknown Action"

    @pytest.mark.asyncio
    async def test_request_exception_is_failure(self, service, http_session, expense):
        http_session.post.side_effect = requests.Timeout("timed out")
        result = await service.add_transaction(expense)
        assert not result.success
        assert result.message.startswith("ADD_TRANSACTION: request failed")

    @pytest.mark.asyncio
    async def test_invalid_json_on_post(self, service, http_session, expense):
        http_session.post.return_value.json.side_effect = ValueError("bad")
        result = await service.add_transaction(expense)
        assert not result.success
        assert result.message == "ADD_TRANSACTION: endpoint returned invalid JSON"

    @pytest.mark.asyncio
    async def test_url_without_scheme_is_request_failure(self, service, http_session, expense):
        http_session.post.side_effect = requests.exceptions.MissingSchema(
            "Invalid URL 'script.google.com/exec': No scheme supplied"
        )
        result = await service.add_transaction(expense)
        assert not result.success
        assert result.message.startswith("ADD_TRANSACTION: request failed")

    @pytest.mark.asyncio
    async def test_requests_json_error_is_invalid_json(self, service, http_session, expense):
        http_session.post.return_value.json.side_effect = (
            requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
        )
        result = await service.add_transaction(expense)
        assert not result.success
        assert result.message == "ADD_TRANSACTION: endpoint returned invalid JSON"

    @pytest.mark.asyncio
    async def test_non_object_response_is_failure(self, service, http_session, json_response, expense):
        http_session.post.return_value = json_response(["not", "an", "envelope"])
        result = await service.add_transaction(expense)
        assert not result.success
