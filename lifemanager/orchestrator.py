"""
Main Orchestrator for Life Manager

This module ties the components together and defines the flows the
views call:
1. Expenses (validate form → convert currency → save → dashboard)
2. Todos (add, toggle, delete, move, date assignment)
3. Settings (endpoint URL, title, categories, sync)

The flows never touch storage directly; every read and write goes
through DataService, so the local/remote switch and auditing apply
uniformly. Form input is validated before a record is built, and a
failed validation never reaches storage.
"""

from datetime import date
from pathlib import Path
from typing import Optional

import requests

from lifemanager.audit import AuditLogger, create_correlation_id
from lifemanager.config import get_settings
from lifemanager.models.records import (
    ApiResponse,
    AppData,
    Category,
    Todo,
    Transaction,
    TransactionType,
)
from lifemanager.queries import (
    CategoryTotal,
    MonthSummary,
    category_breakdown,
    current_month,
    recent_transactions,
    summarize_month,
)
from lifemanager.services.currency import ExchangeRateService
from lifemanager.services.storage import (
    DataService,
    LocalStore,
    NotFoundError,
    StorageKeys,
)
from lifemanager.validation import FormValidator, parse_amount


SETUP_GUIDE = """\
Storage modes

- Local mode (default): records are kept in a JSON file on this machine.
- Cloud mode (Google Sheets): once an endpoint URL is saved, records are
  read from and written to your spreadsheet.

Setting up the cloud endpoint

1. Create a Google Sheet and a service account with access to it.
2. Set GOOGLE_SHEETS_CREDENTIALS_PATH and GOOGLE_SHEETS_SPREADSHEET_ID.
3. Start the endpoint: lifemanager-endpoint (or
   uvicorn lifemanager.endpoint.server:app).
4. Paste the endpoint URL into the Script URL field and save.
5. Optionally press "Sync local data" to upload what you recorded locally.

Todo to expense

When you complete a todo, you are offered to record an expense with the
todo text pre-filled as the note.
"""


class Dashboard:
    """Figures shown on the expense page for one month."""

    def __init__(
        self,
        month: str,
        summary: MonthSummary,
        breakdown: list[CategoryTotal],
        recent: list[Transaction],
    ):
        self.month = month
        self.summary = summary
        self.breakdown = breakdown
        self.recent = recent


def array_move(items: list, old_index: int, new_index: int) -> list:
    """Return a copy with the item at old_index moved to new_index."""
    if not 0 <= old_index < len(items):
        raise IndexError(f"Index {old_index} out of range")
    new_index = max(0, min(new_index, len(items) - 1))
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


def _index_of(todos: list[Todo], todo_id: str) -> int:
    for index, todo in enumerate(todos):
        if todo.id == todo_id:
            return index
    raise NotFoundError(f"Todo {todo_id} not found")


class ExpenseFlow:
    """
    Orchestrates the expense page.

    Foreign-currency amounts are converted to the base currency before
    saving; when no rate is available the amount is saved unconverted.
    """

    def __init__(
        self,
        data_service: DataService,
        exchange_service: Optional[ExchangeRateService] = None,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._data_service = data_service
        self._exchange_service = exchange_service or ExchangeRateService()
        self._validator = validator or FormValidator()
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def base_currency(self) -> str:
        return self._exchange_service.base_currency

    async def load(self) -> ApiResponse[AppData]:
        return await self._data_service.fetch_data()

    async def add_transaction(
        self,
        amount,
        tx_type: TransactionType,
        category_id: Optional[str],
        tx_date: Optional[date],
        categories: list[Category],
        note: str = "",
        currency: Optional[str] = None,
    ) -> ApiResponse:
        """
        Validate the form, convert the amount and save the transaction.

        Returns a failure response carrying the validation summary when
        the form is invalid. On success, data is the saved Transaction.
        """
        correlation_id = create_correlation_id()

        validation = self._validator.validate_transaction(
            amount=amount,
            category_id=category_id,
            tx_date=tx_date,
            categories=categories,
            tx_type=tx_type,
            note=note,
        )
        if not validation.is_valid:
            return ApiResponse.failure(
                self._validator.get_user_friendly_summary(validation)
            )

        value = parse_amount(amount)
        note = (note or "").strip()

        if currency and currency.upper() != self.base_currency:
            conversion = await self._exchange_service.convert(value, currency)
            if conversion.converted:
                await self._audit_logger.log_currency_converted(
                    from_currency=conversion.original_currency,
                    to_currency=conversion.currency,
                    rate=conversion.rate,
                    original_amount=conversion.original_amount,
                    correlation_id=correlation_id,
                )
                value = conversion.amount
                origin = f"{conversion.original_currency} {conversion.original_amount:,.2f}"
                note = f"{note} ({origin})" if note else origin
            else:
                await self._audit_logger.log_currency_conversion_failed(
                    from_currency=currency.upper(),
                    to_currency=self.base_currency,
                    correlation_id=correlation_id,
                )

            note_check = self._validator.validate_note(note)
            if not note_check.is_valid:
                return ApiResponse.failure(
                    self._validator.get_user_friendly_summary(note_check)
                )

        transaction = Transaction(
            date=tx_date,
            type=tx_type,
            category_id=category_id,
            amount=value,
            note=note,
        )
        result = await self._data_service.add_transaction(
            transaction,
            correlation_id=correlation_id,
        )
        if result.success:
            return ApiResponse.ok(data=transaction, message=result.message)
        return result

    async def delete_transaction(self, transaction_id: str) -> ApiResponse:
        return await self._data_service.delete_transaction(
            transaction_id,
            correlation_id=create_correlation_id(),
        )

    def dashboard(self, data: AppData, month: Optional[str] = None) -> Dashboard:
        month = month or current_month()
        limit = get_settings().app.recent_transactions_limit
        return Dashboard(
            month=month,
            summary=summarize_month(data.transactions, month),
            breakdown=category_breakdown(data.transactions, data.categories, month),
            recent=recent_transactions(data.transactions, limit),
        )


class TodoFlow:
    """
    Orchestrates the todo page.

    Order and target dates are changed on a copy of the list, which is
    then persisted whole through reorder.
    """

    def __init__(
        self,
        data_service: DataService,
        validator: Optional[FormValidator] = None,
    ):
        self._data_service = data_service
        self._validator = validator or FormValidator()

    async def add_todo(
        self,
        text: Optional[str],
        target_date: Optional[date] = None,
    ) -> ApiResponse:
        validation = self._validator.validate_todo_text(text)
        if not validation.is_valid:
            return ApiResponse.failure(validation.errors[0])

        todo = Todo(text=text.strip(), target_date=target_date)
        result = await self._data_service.add_todo(
            todo,
            correlation_id=create_correlation_id(),
        )
        if result.success:
            return ApiResponse.ok(data=todo, message=result.message)
        return result

    async def toggle_todo(self, todo: Todo) -> tuple[ApiResponse, Optional[str]]:
        """
        Flip the completion flag.

        Returns the result and, when the todo was just completed, the
        note to pre-fill an expense with.
        """
        is_completed = not todo.is_completed
        result = await self._data_service.toggle_todo(
            todo.id,
            is_completed,
            correlation_id=create_correlation_id(),
        )
        suggestion = todo.text if result.success and is_completed else None
        return result, suggestion

    async def delete_todo(self, todo_id: str) -> ApiResponse:
        return await self._data_service.delete_todo(
            todo_id,
            correlation_id=create_correlation_id(),
        )

    async def move_todo(
        self,
        todos: list[Todo],
        todo_id: str,
        new_index: int,
    ) -> ApiResponse:
        reordered = array_move(todos, _index_of(todos, todo_id), new_index)
        result = await self._data_service.reorder_todos(
            reordered,
            correlation_id=create_correlation_id(),
        )
        if result.success:
            return ApiResponse.ok(data=reordered, message=result.message)
        return result

    async def set_target_date(
        self,
        todos: list[Todo],
        todo_id: str,
        target_date: Optional[date],
    ) -> ApiResponse:
        """Assign (or clear, with None) a todo's date group."""
        index = _index_of(todos, todo_id)
        updated = list(todos)
        updated[index] = todos[index].model_copy(update={"target_date": target_date})
        result = await self._data_service.reorder_todos(
            updated,
            correlation_id=create_correlation_id(),
        )
        if result.success:
            return ApiResponse.ok(data=updated, message=result.message)
        return result

    @staticmethod
    def group_by_date(todos: list[Todo]) -> list[tuple[Optional[date], list[Todo]]]:
        # Dated groups ascending, undated last; list order kept inside a group
        groups: dict[Optional[date], list[Todo]] = {}
        for todo in todos:
            groups.setdefault(todo.target_date, []).append(todo)
        dated = sorted(key for key in groups if key is not None)
        ordered = [(key, groups[key]) for key in dated]
        if None in groups:
            ordered.append((None, groups[None]))
        return ordered


class SettingsFlow:
    """Orchestrates the settings page."""

    def __init__(
        self,
        store: LocalStore,
        data_service: DataService,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._data_service = data_service
        self._validator = validator or FormValidator()
        self._audit_logger = audit_logger or AuditLogger()

    def get_remote_url(self) -> str:
        return self._store.get_item(StorageKeys.GAS_URL) or ""

    def get_app_title(self) -> str:
        title = (self._store.get_item(StorageKeys.APP_TITLE) or "").strip()
        return title or get_settings().app.default_app_title

    async def save_settings(self, remote_url: str, app_title: str) -> ApiResponse:
        """
        Persist the endpoint URL and the title.

        An empty URL switches back to local mode; an empty title falls
        back to the default.
        """
        remote_url = (remote_url or "").strip()
        app_title = (app_title or "").strip()

        if remote_url:
            self._store.set_item(StorageKeys.GAS_URL, remote_url)
        else:
            self._store.remove_item(StorageKeys.GAS_URL)

        if app_title:
            self._store.set_item(StorageKeys.APP_TITLE, app_title)
        else:
            self._store.remove_item(StorageKeys.APP_TITLE)

        await self._audit_logger.log_settings_saved(
            remote_configured=bool(remote_url),
            correlation_id=create_correlation_id(),
        )
        return ApiResponse.ok(message="Settings saved")

    async def add_category(
        self,
        label: Optional[str],
        categories: list[Category],
    ) -> ApiResponse:
        validation = self._validator.validate_category_label(label, categories)
        if not validation.is_valid:
            return ApiResponse.failure(validation.errors[0])

        category = Category(label=label.strip())
        updated = [*categories, category]
        result = await self._data_service.save_categories(
            updated,
            correlation_id=create_correlation_id(),
        )
        if result.success:
            return ApiResponse.ok(data=updated, message=result.message)
        return result

    async def remove_category(
        self,
        category_id: str,
        categories: list[Category],
    ) -> ApiResponse:
        """Remove a category; its transactions are kept."""
        if not any(category.id == category_id for category in categories):
            raise NotFoundError(f"Category {category_id} not found")

        updated = [c for c in categories if c.id != category_id]
        result = await self._data_service.save_categories(
            updated,
            correlation_id=create_correlation_id(),
        )
        if result.success:
            return ApiResponse.ok(data=updated, message=result.message)
        return result

    async def sync_local_to_cloud(self) -> ApiResponse:
        return await self._data_service.sync_local_to_cloud()

    def guide(self) -> str:
        return SETUP_GUIDE


def create_app_components(
    store_path: Optional[Path] = None,
    session: Optional[requests.Session] = None,
) -> tuple[ExpenseFlow, TodoFlow, SettingsFlow, DataService]:
    """
    Factory function to create all application components.

    Args:
        store_path: Location of the local JSON store. Defaults to the
                    configured path.
        session: HTTP session shared by the remote and currency clients.

    Returns:
        (expense_flow, todo_flow, settings_flow, data_service)
    """
    store = LocalStore(store_path)
    audit_logger = AuditLogger()
    validator = FormValidator()
    data_service = DataService(store, audit_logger=audit_logger, session=session)

    expense_flow = ExpenseFlow(
        data_service,
        exchange_service=ExchangeRateService(session=session),
        validator=validator,
        audit_logger=audit_logger,
    )
    todo_flow = TodoFlow(data_service, validator=validator)
    settings_flow = SettingsFlow(
        store,
        data_service,
        validator=validator,
        audit_logger=audit_logger,
    )

    return expense_flow, todo_flow, settings_flow, data_service
