"""
Audit Logger

DESIGN DECISION: Every significant step of a quick-add interaction is logged.
This provides:
1. Traceability from phrase to stored expense
2. Debugging capability when the parser guesses wrong
3. A history the user can look back on

The audit logger:
- Is async to match the storage interface
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import KeyValueStorageInterface, StorageError, StorageKey


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

    Logs events both to:
    1. Structured local log (for debugging)
    2. The key/value store under the 'audit' key (if one is attached)
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                events = await self._storage.load_item(StorageKey.AUDIT, [])
                events.append(event.model_dump(mode="json"))
                await self._storage.save_item(StorageKey.AUDIT, events)
                return True
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def get_events(
        self,
        correlation_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Stored events, newest first, optionally for one correlation id.

        Returns an empty list when no storage is attached.
        """
        if not self._storage:
            return []

        raw_events = await self._storage.load_item(StorageKey.AUDIT, [])
        events = [AuditEvent.model_validate(raw) for raw in raw_events]
        if correlation_id is not None:
            events = [e for e in events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

    async def log_draft_parsed(
        self,
        parsed: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a parse that produced a previewable draft."""
        await self.log(AuditEventBuilder.draft_parsed(parsed, correlation_id))

    async def log_draft_discarded(
        self,
        raw_text: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log user discarding a draft."""
        await self.log(AuditEventBuilder.draft_discarded(raw_text, correlation_id))

    async def log_user_confirmed(
        self,
        merchant: str,
        category_key: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log user confirmation."""
        await self.log(AuditEventBuilder.user_confirmed(merchant, category_key, correlation_id))

    async def log_expense_saved(
        self,
        expense_id: str,
        merchant: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log expense save."""
        event = AuditEventBuilder.expense_saved(
            expense_id=expense_id,
            merchant=merchant,
            amount=amount,
            currency=currency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_save_failed(
        self,
        merchant: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed expense save."""
        await self.log(AuditEventBuilder.save_failed(merchant, error_message, correlation_id))

    async def log_settings_updated(self, field: str, value: str) -> None:
        """Log a settings change."""
        await self.log(AuditEventBuilder.settings_updated(field, value))

    async def log_debug_feedback(
        self,
        recognized_phrase: str,
        user_prompt: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a debug-feedback submission."""
        event = AuditEventBuilder.debug_feedback_recorded(
            recognized_phrase=recognized_phrase,
            user_prompt=user_prompt,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transcript_error(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a transcript source error."""
        await self.log(AuditEventBuilder.transcript_error(error_message, correlation_id))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new quick-add interaction.
    Pass it through all subsequent operations.
    """
    return uuid4()
