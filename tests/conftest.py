"""
Shared fixtures.

No test touches the network or a real spreadsheet: HTTP goes through
MagicMock sessions and worksheets are in-memory fakes.
"""

import re
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from lifemanager.models.records import Todo, Transaction, TransactionType
from lifemanager.services.storage import LocalStore
from lifemanager.services.storage.google_sheets import (
    TODO_COLUMNS,
    TRANSACTION_COLUMNS,
    GoogleSheetsRecordStore,
)


_RANGE = re.compile(r"^[A-Z]+(\d+):[A-Z]+(\d+)$")


class FakeWorksheet:
    """The subset of gspread.Worksheet the record store uses."""

    def __init__(self, header: list[str]):
        self.rows: list[list] = [list(header)]

    def get_all_values(self, value_render_option=None):
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append(list(values))

    def insert_row(self, values, index=1, value_input_option=None):
        self.rows.insert(index - 1, list(values))

    def update_cell(self, row, col, value):
        target = self.rows[row - 1]
        while len(target) < col:
            target.append("")
        target[col - 1] = value

    def delete_rows(self, start_index, end_index=None):
        del self.rows[start_index - 1:(end_index or start_index)]

    def batch_clear(self, ranges):
        for range_name in ranges:
            first, last = (int(n) for n in _RANGE.match(range_name).groups())
            for idx in range(first - 1, min(last, len(self.rows))):
                self.rows[idx] = [""] * len(self.rows[idx])

    def update(self, range_name=None, values=None, **kwargs):
        first = int(_RANGE.match(range_name).group(1))
        for offset, row in enumerate(values):
            idx = first - 1 + offset
            while len(self.rows) <= idx:
                self.rows.append([])
            self.rows[idx] = list(row)

    def data(self) -> list[list]:
        """Data rows that are not blank."""
        return [row for row in self.rows[1:] if row and row[0] != ""]


class FakeSheetsClient:
    """Stands in for GoogleSheetsClient with two in-memory worksheets."""

    def __init__(self):
        self.transactions = FakeWorksheet(TRANSACTION_COLUMNS)
        self.todos = FakeWorksheet(TODO_COLUMNS)

    def get_transactions_sheet(self):
        return self.transactions

    def get_todos_sheet(self):
        return self.todos


@pytest.fixture
def sheets_client():
    return FakeSheetsClient()


@pytest.fixture
def record_store(sheets_client):
    return GoogleSheetsRecordStore(client=sheets_client)


@pytest.fixture
def local_store(tmp_path):
    return LocalStore(tmp_path / "local_storage.json")


@pytest.fixture
def http_session():
    return MagicMock()


def _json_response(body, status_ok=True):
    response = MagicMock()
    response.json.return_value = body
    if not status_ok:
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    return response


@pytest.fixture
def json_response():
    """Factory for MagicMocks shaped like a requests.Response carrying JSON."""
    return _json_response


@pytest.fixture
def expense():
    return Transaction(
        id="tx-1",
        date=date(2024, 5, 3),
        type=TransactionType.EXPENSE,
        category_id="cat_1",
        amount=120.0,
        note="Lunch",
    )


@pytest.fixture
def income():
    return Transaction(
        id="tx-2",
        date=date(2024, 5, 1),
        type=TransactionType.INCOME,
        category_id="cat_5",
        amount=3000.0,
        note="Salary",
    )


@pytest.fixture
def todos():
    return [
        Todo(id="todo-1", text="Buy milk"),
        Todo(id="todo-2", text="Pay rent", target_date=date(2024, 5, 5)),
        Todo(id="todo-3", text="Call mom", is_completed=True),
    ]
