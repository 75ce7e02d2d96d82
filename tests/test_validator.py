"""Tests for form validation."""

from datetime import date, timedelta

import pytest

from lifemanager.models.records import Category, default_categories
from lifemanager.validation import FormValidator, parse_amount


@pytest.fixture
def validator():
    return FormValidator(future_date_tolerance_days=7)


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize("value, expected", [
        ("12.5", 12.5),
        (" 1,200 ", 1200.0),
        (30, 30.0),
        ("abc", None),
        ("", None),
        (None, None),
        ("nan", None),
        ("inf", None),
        (True, None),
    ])
    def test_parse(self, value, expected):
        assert parse_amount(value) == expected


class TestTransactionForm:
    """Tests for validate_transaction."""

    def test_valid_form(self, validator):
        result = validator.validate_transaction(
            amount="120",
            category_id="cat_1",
            tx_date=date.today(),
            categories=default_categories(),
        )
        assert result.is_valid
        assert result.issues == []

    def test_missing_amount(self, validator):
        result = validator.validate_transaction("", "cat_1", date.today(), default_categories())
        assert not result.is_valid
        assert result.issues[0].field == "amount"

    def test_zero_amount(self, validator):
        result = validator.validate_transaction("0", "cat_1", date.today(), default_categories())
        assert not result.is_valid
        assert result.issues[0].issue_type == "invalid_value"

    def test_unknown_category(self, validator):
        result = validator.validate_transaction("5", "cat_x", date.today(), default_categories())
        assert not result.is_valid
        assert result.issues[0].issue_type == "unknown_reference"

    def test_bad_type(self, validator):
        result = validator.validate_transaction(
            "5", "cat_1", date.today(), default_categories(), tx_type="REFUND"
        )
        assert not result.is_valid

    def test_far_future_date_is_warning(self, validator):
        result = validator.validate_transaction(
            "5", "cat_1", date.today() + timedelta(days=30), default_categories()
        )
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_missing_date(self, validator):
        result = validator.validate_transaction("5", "cat_1", None, default_categories())
        assert not result.is_valid

    def test_summary_lists_problems(self, validator):
        result = validator.validate_transaction("", None, None, default_categories())
        summary = validator.get_user_friendly_summary(result)
        assert summary.count("❌") == 3


class TestTodoAndCategoryForms:
    """Tests for the todo and category checks."""

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_todo_rejected(self, validator, text):
        assert not validator.validate_todo_text(text).is_valid

    def test_todo_text_ok(self, validator):
        assert validator.validate_todo_text("Buy milk").is_valid

    def test_blank_category_rejected(self, validator):
        assert not validator.validate_category_label(" ", default_categories()).is_valid

    def test_duplicate_category_is_warning(self, validator):
        result = validator.validate_category_label("food", [Category(id="c", label="Food")])
        assert result.is_valid
        assert result.warnings


class TestLengthLimits:
    """Text longer than the stored limit is an error, not an exception."""

    def test_long_note_rejected(self, validator):
        result = validator.validate_transaction(
            "5", "cat_1", date.today(), default_categories(), note="x" * 501
        )
        assert not result.is_valid
        assert result.issues[0].field == "note"
        assert result.issues[0].issue_type == "too_long"

    def test_note_at_limit_ok(self, validator):
        result = validator.validate_transaction(
            "5", "cat_1", date.today(), default_categories(), note="x" * 500
        )
        assert result.is_valid

    def test_long_todo_rejected(self, validator):
        result = validator.validate_todo_text("y" * 501)
        assert not result.is_valid
        assert "too long" in result.errors[0]

    def test_long_category_rejected(self, validator):
        result = validator.validate_category_label("z" * 51, default_categories())
        assert not result.is_valid
        assert result.issues[0].issue_type == "too_long"
