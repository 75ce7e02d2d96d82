"""
Audit Models for Life Manager

Every mutation of the dataset is logged as an audit event. This gives:
1. Traceability of what the user changed and when
2. Debugging information when a remote call fails
3. A correlation id tying together the steps of one user action

Audit events go to the structured log only; they are not persisted
alongside the records.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    One event type per data service operation, plus system events.
    """
    # Data loading
    DATA_FETCHED = "data_fetched"
    FETCH_FAILED = "fetch_failed"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    CURRENCY_CONVERTED = "currency_converted"
    CURRENCY_CONVERSION_FAILED = "currency_conversion_failed"

    # Todos
    TODO_ADDED = "todo_added"
    TODO_TOGGLED = "todo_toggled"
    TODO_DELETED = "todo_deleted"
    TODOS_REORDERED = "todos_reordered"

    # Settings
    CATEGORIES_SAVED = "categories_saved"
    SETTINGS_SAVED = "settings_saved"
    SYNC_COMPLETED = "sync_completed"

    # Failures
    SAVE_FAILED = "save_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'transaction', 'todo')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Id of the record this event relates to"
    )
    storage_mode: Optional[str] = Field(
        default=None,
        description="'local' or 'remote'"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all calls of one sync)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "storage_mode": self.storage_mode,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(tx_id, "EXPENSE", 120.0, "local")
        event = AuditEventBuilder.todo_toggled(todo_id, True, "remote")
    """

    @staticmethod
    def data_fetched(
        storage_mode: str,
        transaction_count: int,
        todo_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_FETCHED,
            severity=AuditSeverity.DEBUG,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description=f"Loaded {transaction_count} transactions and {todo_count} todos",
            details={
                "transaction_count": transaction_count,
                "todo_count": todo_count,
            },
        )

    @staticmethod
    def fetch_failed(
        storage_mode: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description="Loading records failed",
            error_message=error_message,
        )

    @staticmethod
    def transaction_added(
        transaction_id: str,
        transaction_type: str,
        amount: float,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description=f"{transaction_type.capitalize()} of {amount:,.2f} recorded",
            details={
                "type": transaction_type,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def currency_converted(
        from_currency: str,
        to_currency: str,
        rate: float,
        original_amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_CONVERTED,
            correlation_id=correlation_id,
            description=f"Converted {original_amount} {from_currency} to {to_currency} at {rate}",
            details={
                "from": from_currency,
                "to": to_currency,
                "rate": rate,
                "original_amount": original_amount,
            },
        )

    @staticmethod
    def currency_conversion_failed(
        from_currency: str,
        to_currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_CONVERSION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"No {from_currency}->{to_currency} rate, keeping original amount",
            details={
                "from": from_currency,
                "to": to_currency,
            },
        )

    @staticmethod
    def todo_added(
        todo_id: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TODO_ADDED,
            entity_type="todo",
            entity_id=todo_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description="Todo added",
            is_user_action=True,
        )

    @staticmethod
    def todo_toggled(
        todo_id: str,
        is_completed: bool,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TODO_TOGGLED,
            entity_type="todo",
            entity_id=todo_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description=f"Todo marked {'done' if is_completed else 'open'}",
            details={"is_completed": is_completed},
            is_user_action=True,
        )

    @staticmethod
    def todo_deleted(
        todo_id: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TODO_DELETED,
            entity_type="todo",
            entity_id=todo_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description="Todo deleted",
            is_user_action=True,
        )

    @staticmethod
    def todos_reordered(
        todo_count: int,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TODOS_REORDERED,
            entity_type="todo",
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description=f"Todo list rewritten with {todo_count} items",
            details={"todo_count": todo_count},
            is_user_action=True,
        )

    @staticmethod
    def categories_saved(
        category_count: int,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_SAVED,
            entity_type="category",
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description=f"Saved {category_count} categories",
            details={"category_count": category_count},
            is_user_action=True,
        )

    @staticmethod
    def settings_saved(
        remote_configured: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_SAVED,
            correlation_id=correlation_id,
            description="Settings saved",
            details={"remote_configured": remote_configured},
            is_user_action=True,
        )

    @staticmethod
    def sync_completed(
        success_count: int,
        fail_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_COMPLETED,
            severity=AuditSeverity.WARNING if fail_count else AuditSeverity.INFO,
            storage_mode="remote",
            correlation_id=correlation_id,
            description=f"Local data pushed to cloud: {success_count} ok, {fail_count} failed",
            details={
                "success_count": success_count,
                "fail_count": fail_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
            description=f"{operation} failed",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

