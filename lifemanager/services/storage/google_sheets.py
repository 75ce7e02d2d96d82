"""
Google Sheets Storage Implementation

Backing store of the remote endpoint. Google Sheets is used because:
1. Users can view and fix their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for one person's ledger)
- No transactions; the endpoint serializes requests with a lock instead
- Limited query capabilities (we filter in Python)

Records are rows with a fixed column order, one worksheet per record
type. The first row of each worksheet is the header.
"""

from datetime import date, timedelta
from typing import Any, Callable, Optional, TypeVar

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from lifemanager.config import get_settings
from lifemanager.models.records import (
    AppData,
    Todo,
    Transaction,
    TransactionType,
    default_categories,
)
from lifemanager.services.storage.interface import (
    ConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT")


# Column order for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "date",
    "type",
    "categoryId",
    "amount",
    "note",
]

# Column order for the Todos sheet
TODO_COLUMNS = [
    "id",
    "text",
    "isCompleted",
    "createdAt",
    "targetDate",
]

# Numbers and booleans come back as native values, not display strings
_RENDER = "UNFORMATTED_VALUE"

_SHEETS_EPOCH = date(1899, 12, 30)


def _column_letter(index: int) -> str:
    """1-based column index to A1 letter (enough for our narrow sheets)."""
    return chr(ord("A") + index - 1)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().upper() == "TRUE"


def _to_date(value: Any) -> date:
    # A date typed into the sheet by hand is stored as a serial day number
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _SHEETS_EPOCH + timedelta(days=int(value))
    return date.fromisoformat(str(value)[:10])


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create(self, title: str, columns: list[str]) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create(
            self._settings.transactions_sheet_name, TRANSACTION_COLUMNS
        )

    def get_todos_sheet(self) -> gspread.Worksheet:
        """Get or create the Todos worksheet."""
        return self._get_or_create(self._settings.todos_sheet_name, TODO_COLUMNS)


class GoogleSheetsRecordStore:
    """
    Row-oriented persistence of transactions and todos.

    Transactions are append-only (plus delete). Todos are kept in the
    user's order, so a reorder rewrites every data row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    # -------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------

    def _transaction_to_row(self, tx: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            tx.id,
            tx.date.isoformat(),
            tx.type.value,
            tx.category_id,
            tx.amount,
            tx.note,
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        def safe_get(index: int, default: Any = "") -> Any:
            try:
                return row[index] if row[index] != "" else default
            except IndexError:
                return default

        return Transaction(
            id=str(safe_get(0)),
            date=_to_date(safe_get(1)),
            type=TransactionType(str(safe_get(2)).upper()),
            category_id=str(safe_get(3)),
            amount=float(safe_get(4, 0)),
            note=str(safe_get(5)),
        )

    def _todo_to_row(self, todo: Todo) -> list:
        """Convert a Todo to a spreadsheet row."""
        return [
            todo.id,
            todo.text,
            todo.is_completed,
            todo.created_at.isoformat(),
            todo.target_date.isoformat() if todo.target_date else "",
        ]

    def _row_to_todo(self, row: list) -> Todo:
        """Convert a spreadsheet row to a Todo."""
        def safe_get(index: int, default: Any = "") -> Any:
            try:
                return row[index] if row[index] != "" else default
            except IndexError:
                return default

        fields: dict[str, Any] = {
            "id": str(safe_get(0)),
            "text": str(safe_get(1)),
            "is_completed": _to_bool(safe_get(2, False)),
        }
        created_at = safe_get(3, None)
        if created_at is not None:
            fields["created_at"] = str(created_at)
        target = safe_get(4, None)
        if target is not None:
            fields["target_date"] = _to_date(target)
        return Todo(**fields)

    def _data_rows(self, sheet: gspread.Worksheet) -> list[list]:
        """All non-empty rows below the header."""
        rows = sheet.get_all_values(value_render_option=_RENDER)[1:]
        return [row for row in rows if row and str(row[0]) != ""]

    def _find_row_index(self, sheet: gspread.Worksheet, record_id: str) -> Optional[int]:
        """1-based sheet row of the record, or None."""
        all_rows = sheet.get_all_values(value_render_option=_RENDER)
        for idx, row in enumerate(all_rows[1:], start=2):  # row 1 is the header
            if row and str(row[0]) == str(record_id):
                return idx
        return None

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------

    def get_all_data(self) -> AppData:
        """
        Load every record.

        Transactions are returned newest first (reverse sheet order),
        todos in sheet order. Categories are the defaults; the sheet
        does not store them. Rows that no longer parse (usually hand
        edits) are logged and left out.
        """
        try:
            tx_rows = self._data_rows(self._client.get_transactions_sheet())
            todo_rows = self._data_rows(self._client.get_todos_sheet())
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read records: {e}")

        transactions = self._parse_rows(tx_rows, self._row_to_transaction, "transactions")
        transactions.reverse()

        return AppData(
            transactions=transactions,
            todos=self._parse_rows(todo_rows, self._row_to_todo, "todos"),
            categories=default_categories(),
        )

    def _parse_rows(
        self,
        rows: list[list],
        convert: Callable[[list], RecordT],
        sheet: str,
    ) -> list[RecordT]:
        records = []
        for row in rows:
            try:
                records.append(convert(row))
            except (ValidationError, ValueError, TypeError, OverflowError) as e:
                logger.warning("sheet_row_skipped", sheet=sheet, row=row, error=str(e))
        return records

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------

    def add_transaction(self, tx: Transaction) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            sheet.append_row(self._transaction_to_row(tx), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._delete_by_id(self._client.get_transactions_sheet(), transaction_id)

    def add_todo(self, todo: Todo) -> None:
        """Insert a todo at the top of the list, matching local mode."""
        try:
            sheet = self._client.get_todos_sheet()
            sheet.insert_row(self._todo_to_row(todo), index=2, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save todo: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def toggle_todo(self, todo_id: str, is_completed: bool) -> bool:
        """Set the completion flag. Returns False when the id is unknown."""
        try:
            sheet = self._client.get_todos_sheet()
            idx = self._find_row_index(sheet, todo_id)
            if idx is None:
                return False
            sheet.update_cell(idx, TODO_COLUMNS.index("isCompleted") + 1, is_completed)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update todo: {e}")

    def delete_todo(self, todo_id: str) -> bool:
        return self._delete_by_id(self._client.get_todos_sheet(), todo_id)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def overwrite_todos(self, todos: list[Todo]) -> None:
        """
        Replace every todo row with the given sequence.

        Clears the data area below the header, then writes the new rows
        from row 2 in one call.
        """
        try:
            sheet = self._client.get_todos_sheet()
            last_row = len(sheet.get_all_values(value_render_option=_RENDER))
            last_col = _column_letter(len(TODO_COLUMNS))
            if last_row > 1:
                sheet.batch_clear([f"A2:{last_col}{last_row}"])
            if todos:
                rows = [self._todo_to_row(todo) for todo in todos]
                sheet.update(
                    range_name=f"A2:{last_col}{len(rows) + 1}",
                    values=rows,
                )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to rewrite todos: {e}")

    def _delete_by_id(self, sheet: gspread.Worksheet, record_id: str) -> bool:
        """Delete the first row with this id. Returns False when absent."""
        try:
            idx = self._find_row_index(sheet, record_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete {record_id}: {e}")
