"""
Audit Logger

Every mutation of the dataset is logged. This provides:
1. Traceability of user changes in both storage modes
2. Debugging capability for remote failures
3. Correlation ids to trace the calls of one user action

The audit logger:
- Is async so it can be awaited inline with data service calls
- Never raises; a logging failure must not break a save
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from lifemanager.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Writes audit events to the structured log, at a level matching
    the event severity.
    """

    def __init__(self, storage_mode: Optional[str] = None):
        """
        Initialize audit logger.

        Args:
            storage_mode: Default storage mode stamped on events
                          that don't carry one.
        """
        self._storage_mode = storage_mode
        self._logger = structlog.get_logger("lifemanager.audit")
        self.events: deque[AuditEvent] = deque(maxlen=200)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log write itself failed.
        """
        if event.storage_mode is None and self._storage_mode:
            event.storage_mode = self._storage_mode

        self.events.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    async def log_data_fetched(
        self,
        storage_mode: str,
        transaction_count: int,
        todo_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.data_fetched(
            storage_mode=storage_mode,
            transaction_count=transaction_count,
            todo_count=todo_count,
            correlation_id=correlation_id,
        ))

    async def log_fetch_failed(
        self,
        storage_mode: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.fetch_failed(
            storage_mode=storage_mode,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_transaction_added(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: float,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log transaction creation."""
        await self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_transaction_deleted(
        self,
        transaction_id: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_currency_converted(
        self,
        from_currency: str,
        to_currency: str,
        rate: float,
        original_amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.currency_converted(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            original_amount=original_amount,
            correlation_id=correlation_id,
        ))

    async def log_currency_conversion_failed(
        self,
        from_currency: str,
        to_currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.currency_conversion_failed(
            from_currency=from_currency,
            to_currency=to_currency,
            correlation_id=correlation_id,
        ))

    async def log_todo_added(
        self,
        todo_id: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.todo_added(
            todo_id=todo_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_todo_toggled(
        self,
        todo_id: str,
        is_completed: bool,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.todo_toggled(
            todo_id=todo_id,
            is_completed=is_completed,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_todo_deleted(
        self,
        todo_id: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.todo_deleted(
            todo_id=todo_id,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_todos_reordered(
        self,
        todo_count: int,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.todos_reordered(
            todo_count=todo_count,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_categories_saved(
        self,
        category_count: int,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.categories_saved(
            category_count=category_count,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_settings_saved(
        self,
        remote_configured: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.settings_saved(
            remote_configured=remote_configured,
            correlation_id=correlation_id,
        ))

    async def log_sync_completed(
        self,
        success_count: int,
        fail_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.sync_completed(
            success_count=success_count,
            fail_count=fail_count,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(
        self,
        operation: str,
        error_message: str,
        storage_mode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a mutation that came back with success=False."""
        await self.log(AuditEventBuilder.save_failed(
            operation=operation,
            error_message=error_message,
            storage_mode=storage_mode,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a sync run).
    Pass it through all subsequent operations.
    """
    return uuid4()
