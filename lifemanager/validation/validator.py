"""
Form Validation

Checks user input before it becomes a record. Two kinds of findings:

- errors block the submission (missing or non-positive amount, unknown
  category, blank todo text, text over the stored length)
- warnings are shown but do not block (a date far in the future)

Validation NEVER silently fixes input. It reports issues and the view
decides what to show.
"""

from datetime import date, timedelta
from typing import Any, Optional

from lifemanager.config import get_settings
from lifemanager.models.records import (
    CATEGORY_LABEL_MAX_LENGTH,
    NOTE_MAX_LENGTH,
    TODO_TEXT_MAX_LENGTH,
    Category,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


def parse_amount(value: Any) -> Optional[float]:
    """Parse a form amount; None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and infinity are not amounts
    if amount != amount or amount in (float("inf"), float("-inf")):
        return None
    return amount


def _too_long(field: str, label: str, text: str, limit: int) -> Optional[ValidationIssue]:
    if len(text) <= limit:
        return None
    return ValidationIssue(
        field=field,
        issue_type="too_long",
        message=f"{label} is too long ({len(text)} characters, max {limit})",
        severity="error",
    )


class FormValidator:
    """Validates the expense, todo and category forms."""

    def __init__(self, future_date_tolerance_days: Optional[int] = None):
        if future_date_tolerance_days is None:
            future_date_tolerance_days = get_settings().app.future_date_tolerance_days
        self._future_tolerance = timedelta(days=future_date_tolerance_days)

    def validate_transaction(
        self,
        amount: Any,
        category_id: Optional[str],
        tx_date: Optional[date],
        categories: list[Category],
        tx_type: Any = TransactionType.EXPENSE,
        note: Optional[str] = None,
    ) -> ValidationResult:
        issues = list(self.validate_note(note).issues)

        parsed = parse_amount(amount)
        if parsed is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter a valid amount",
                severity="error",
            ))
        elif parsed <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        try:
            TransactionType(tx_type)
        except ValueError:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Unknown transaction type: {tx_type}",
                severity="error",
            ))

        if not category_id:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Please choose a category",
                severity="error",
            ))
        elif not any(category.id == category_id for category in categories):
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="unknown_reference",
                message="The selected category no longer exists",
                severity="error",
            ))

        if tx_date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Please choose a date",
                severity="error",
            ))
        elif tx_date > date.today() + self._future_tolerance:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({tx_date.isoformat()}) is in the future",
                severity="warning",
            ))

        return ValidationResult(issues=issues)

    def validate_note(self, note: Optional[str]) -> ValidationResult:
        """Check a transaction note, including any appended currency origin."""
        issue = _too_long("note", "Note", (note or "").strip(), NOTE_MAX_LENGTH)
        return ValidationResult(issues=[issue] if issue else [])

    def validate_todo_text(self, text: Optional[str]) -> ValidationResult:
        issues = []
        if not text or not text.strip():
            issues.append(ValidationIssue(
                field="text",
                issue_type="missing",
                message="Todo text cannot be empty",
                severity="error",
            ))
        else:
            issue = _too_long("text", "Todo text", text.strip(), TODO_TEXT_MAX_LENGTH)
            if issue:
                issues.append(issue)
        return ValidationResult(issues=issues)

    def validate_category_label(
        self,
        label: Optional[str],
        categories: list[Category],
    ) -> ValidationResult:
        issues = []
        if not label or not label.strip():
            issues.append(ValidationIssue(
                field="label",
                issue_type="missing",
                message="Category name cannot be empty",
                severity="error",
            ))
        elif len(label.strip()) > CATEGORY_LABEL_MAX_LENGTH:
            issues.append(_too_long(
                "label", "Category name", label.strip(), CATEGORY_LABEL_MAX_LENGTH
            ))
        elif any(c.label.casefold() == label.strip().casefold() for c in categories):
            issues.append(ValidationIssue(
                field="label",
                issue_type="duplicate",
                message=f"A category named '{label.strip()}' already exists",
                severity="warning",
            ))
        return ValidationResult(issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        if result.is_valid and not result.warnings:
            return ""
        lines = [f"❌ {message}" for message in result.errors]
        lines.extend(f"⚠️ {message}" for message in result.warnings)
        return "\n".join(lines)
