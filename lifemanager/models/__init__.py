"""
Data Models Package

Pydantic models for the records (transactions, todos, categories),
the response envelope, and audit events.
"""

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

__all__ = [
    # Record models
    "Action",
    "ApiResponse",
    "AppData",
    "Category",
    "Todo",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "default_categories",
    "empty_app_data",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
