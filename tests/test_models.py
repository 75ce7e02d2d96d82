"""
Tests for Life Manager

Test strategy:
1. Unit tests for individual components (models, validators, queries)
2. Integration tests for flows (with a temporary local store)
3. No real API calls in tests (use mocks)
"""

import pytest
from datetime import date, datetime
from uuid import uuid4

from lifemanager.models.records import (
    Action,
    ApiResponse,
    AppData,
    Category,
    Todo,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    default_categories,
    empty_app_data,
)
from lifemanager.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestRecordModels:
    """Tests for record Pydantic models."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        tx = Transaction(
            date=date(2024, 5, 3),
            type=TransactionType.EXPENSE,
            category_id="cat_1",
            amount=120,
        )
        assert tx.amount == 120.0
        assert tx.note == ""
        assert tx.id

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(
                date=date(2024, 5, 3),
                type=TransactionType.EXPENSE,
                category_id="cat_1",
                amount=-1,
            )

    def test_transaction_is_immutable(self, expense):
        """Test that a saved transaction cannot be edited in place."""
        with pytest.raises(ValueError):
            expense.amount = 999

    def test_transaction_none_note_becomes_empty(self):
        tx = Transaction(
            date=date(2024, 5, 3),
            type="INCOME",
            category_id="cat_1",
            amount=1,
            note=None,
        )
        assert tx.note == ""

    def test_transaction_month_and_sign(self, expense, income):
        assert expense.month == "2024-05"
        assert expense.signed_amount == -120.0
        assert income.signed_amount == 3000.0

    def test_transaction_wire_format_is_camel_case(self, expense):
        """Test the JSON wire names."""
        wire = expense.to_wire()
        assert wire == {
            "id": "tx-1",
            "date": "2024-05-03",
            "type": "EXPENSE",
            "categoryId": "cat_1",
            "amount": 120.0,
            "note": "Lunch",
        }

    def test_transaction_accepts_wire_names(self):
        tx = Transaction.model_validate({
            "id": "x",
            "date": "2024-01-31",
            "type": "INCOME",
            "categoryId": "cat_2",
            "amount": "15.5",
        })
        assert tx.category_id == "cat_2"
        assert tx.amount == 15.5

    def test_transaction_date_field_is_a_calendar_date(self):
        """The field named ``date`` still validates as datetime.date."""
        assert Transaction.model_fields["date"].annotation is date
        tx = Transaction.model_validate({
            "date": "2024-02-29",
            "type": "EXPENSE",
            "categoryId": "cat_1",
            "amount": 1,
        })
        assert tx.date == date(2024, 2, 29)
        assert tx.to_wire()["date"] == "2024-02-29"
        with pytest.raises(ValueError):
            Transaction(date="not a date", type="EXPENSE", category_id="cat_1", amount=1)

    def test_todo_defaults(self):
        todo = Todo(text="  Water plants  ")
        assert todo.text == "Water plants"
        assert todo.is_completed is False
        assert todo.target_date is None
        assert isinstance(todo.created_at, datetime)

    def test_todo_rejects_blank_text(self):
        with pytest.raises(ValueError):
            Todo(text="   ")

    def test_todo_empty_target_date_is_none(self):
        todo = Todo.model_validate({"text": "x", "targetDate": ""})
        assert todo.target_date is None

    def test_todo_wire_format(self):
        todo = Todo(id="t", text="x", target_date=date(2024, 6, 1))
        wire = todo.to_wire()
        assert wire["isCompleted"] is False
        assert wire["targetDate"] == "2024-06-01"
        assert "createdAt" in wire

    def test_category_defaults(self):
        category = Category(label="Pets")
        assert category.id.startswith("cat_")
        assert category.icon_key == "Circle"
        assert category.color == "#d1d5db"

    def test_category_rejects_bad_color(self):
        with pytest.raises(ValueError):
            Category(label="Pets", color="blue")

    def test_app_data_round_trips_through_json(self, expense, todos):
        data = AppData(transactions=[expense], todos=todos, categories=default_categories())
        restored = AppData.model_validate_json(data.model_dump_json(by_alias=True))
        assert restored == data

    def test_category_by_id(self):
        data = empty_app_data()
        assert data.category_by_id("cat_1").label == "Food"
        assert data.category_by_id("missing") is None


class TestDefaults:
    """Tests for the seeded categories."""

    def test_six_default_categories(self):
        categories = default_categories()
        assert [c.id for c in categories] == [f"cat_{n}" for n in range(1, 7)]

    def test_defaults_are_fresh_copies(self):
        first = default_categories()
        first.pop()
        assert len(default_categories()) == 6

    def test_empty_app_data(self):
        data = empty_app_data()
        assert data.transactions == []
        assert data.todos == []
        assert len(data.categories) == 6


class TestApiResponse:
    """Tests for the response envelope."""

    def test_ok_envelope(self):
        result = ApiResponse.ok(data={"a": 1})
        assert result.success is True
        assert result.to_wire() == {"success": True, "data": {"a": 1}}

    def test_failure_envelope(self):
        result = ApiResponse.failure("boom")
        assert result.success is False
        assert result.to_wire() == {"success": False, "message": "boom"}

    def test_action_values(self):
        assert Action("REORDER_TODOS") is Action.REORDER_TODOS
        assert len(list(Action)) == 7


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TODO_ADDED,
            description="Todo added",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_id="tx-1",
            correlation_id=correlation_id,
            description="Transaction deleted",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transaction_deleted"
        assert log_dict["entity_id"] == "tx-1"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_audit_event_builder_transaction_added(self):
        event = AuditEventBuilder.transaction_added("tx-1", "EXPENSE", 120.0, "local")
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_type == "transaction"
        assert event.storage_mode == "local"
        assert event.is_user_action is True
        assert event.details == {"type": "EXPENSE", "amount": 120.0}

    def test_audit_event_builder_sync_with_failures_is_warning(self):
        event = AuditEventBuilder.sync_completed(success_count=3, fail_count=1)
        assert event.severity == AuditSeverity.WARNING
        ok = AuditEventBuilder.sync_completed(success_count=3, fail_count=0)
        assert ok.severity == AuditSeverity.INFO

    def test_audit_event_builder_save_failed(self):
        event = AuditEventBuilder.save_failed("add_todo", "timeout", "remote")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "timeout"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(issues=[
            ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter a valid amount",
                severity="error",
            ),
        ])
        assert not result.is_valid
        assert result.errors == ["Please enter a valid amount"]

    def test_validation_result_warnings_only(self):
        result = ValidationResult(issues=[
            ValidationIssue(
                field="date",
                issue_type="future_date",
                message="Date is in the future",
                severity="warning",
            ),
        ])
        assert result.is_valid
        assert result.warnings == ["Date is in the future"]

    def test_issue_severity_is_constrained(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")
