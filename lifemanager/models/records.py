"""
Core Data Models for Life Manager

These models define the record schemas shared by the local store, the
remote endpoint and the views. They are designed to:
1. Validate records at every boundary (form, local blob, HTTP, sheet row)
2. Serialize to the camelCase JSON wire format
3. Keep Python-side attribute names snake_case

Wire names come from the alias generator; always dump with
``by_alias=True`` when the result leaves the process.
"""

import datetime as dt
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Generic, Optional, TypeVar
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money flow."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Action(str, Enum):
    """
    Actions understood by the remote endpoint.

    The value is sent verbatim as the ``action`` field of the request.
    """
    GET_DATA = "GET_DATA"
    ADD_TRANSACTION = "ADD_TRANSACTION"
    DELETE_TRANSACTION = "DELETE_TRANSACTION"
    ADD_TODO = "ADD_TODO"
    TOGGLE_TODO = "TOGGLE_TODO"
    DELETE_TODO = "DELETE_TODO"
    REORDER_TODOS = "REORDER_TODOS"


NOTE_MAX_LENGTH = 500
TODO_TEXT_MAX_LENGTH = 500
CATEGORY_LABEL_MAX_LENGTH = 50


def _new_id() -> str:
    return uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for records exchanged as camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# RECORDS
# =============================================================================

class Category(WireModel):
    """
    A user-editable transaction category.

    Transactions reference categories by id only. Removing a category
    leaves its transactions in place.
    """

    id: str = Field(
        default_factory=lambda: f"cat_{int(_utc_now().timestamp() * 1000)}",
        min_length=1,
    )
    label: str = Field(
        ...,
        min_length=1,
        max_length=CATEGORY_LABEL_MAX_LENGTH,
        description="Display name"
    )
    icon_key: str = Field(
        default="Circle",
        description="Icon name used by the views"
    )
    color: str = Field(
        default="#d1d5db",
        pattern=r"^#[0-9a-fA-F]{6}$",
        description="Hex color"
    )


class Transaction(WireModel):
    """
    A single income or expense entry.

    Transactions are immutable once created; the only change allowed
    is deletion.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, min_length=1)
    date: dt.date = Field(
        ...,
        description="Calendar day of the transaction"
    )
    type: TransactionType
    category_id: str = Field(
        ...,
        description="Id of the category this belongs to"
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Amount in the base currency"
    )
    note: str = Field(
        default="",
        max_length=NOTE_MAX_LENGTH,
    )

    @field_validator('note', mode='before')
    @classmethod
    def none_note_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def month(self) -> str:
        """The YYYY-MM prefix used for monthly grouping."""
        return self.date.isoformat()[:7]

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == TransactionType.INCOME else -self.amount


class Todo(WireModel):
    """
    A to-do item.

    Mutable fields: completion flag, target date, and (implicitly) its
    position in the list.
    """

    id: str = Field(default_factory=_new_id, min_length=1)
    text: str = Field(
        ...,
        min_length=1,
        max_length=TODO_TEXT_MAX_LENGTH,
    )
    is_completed: bool = False
    created_at: datetime = Field(default_factory=_utc_now)
    target_date: Optional[date] = Field(
        default=None,
        description="Day the todo is grouped under, if any"
    )

    @field_validator('target_date', mode='before')
    @classmethod
    def empty_target_date(cls, v: Any) -> Any:
        # Spreadsheet cells come back as "" when unset
        return None if v == "" else v


class AppData(WireModel):
    """The full dataset returned by a fetch."""

    transactions: list[Transaction] = Field(default_factory=list)
    todos: list[Todo] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)

    def category_by_id(self, category_id: str) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None


DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Result envelope of every data service operation.

    Matches the endpoint's JSON response ``{success, data?, message?}``.
    """

    success: bool
    data: Optional[DataT] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(cls, message: str) -> "ApiResponse":
        return cls(success=False, message=message)

    def to_wire(self) -> dict:
        """Dump to JSON-compatible dict, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# DEFAULTS
# =============================================================================

_DEFAULT_CATEGORY_ROWS = [
    ("cat_1", "Food", "Utensils", "#e8d5d5"),
    ("cat_2", "Transport", "Bus", "#8fa3ad"),
    ("cat_3", "Shopping", "ShoppingBag", "#8da399"),
    ("cat_4", "Entertainment", "Film", "#f0c4c4"),
    ("cat_5", "Bills", "Zap", "#b8c5d6"),
    ("cat_6", "Medical", "Heart", "#d6b8b8"),
]


def default_categories() -> list[Category]:
    """Fresh copies of the categories every new dataset starts with."""
    return [
        Category(id=cat_id, label=label, icon_key=icon_key, color=color)
        for cat_id, label, icon_key, color in _DEFAULT_CATEGORY_ROWS
    ]


def empty_app_data() -> AppData:
    return AppData(categories=default_categories())


# =============================================================================
# FORM VALIDATION RESULTS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_reference')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form submission."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def errors(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == "warning"]
