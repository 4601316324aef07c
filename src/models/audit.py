"""
Audit Models for Smart Spends

Every significant step of a quick-add interaction is logged:
draft parsed, draft confirmed or discarded, expense saved, feedback recorded.
This provides:
1. Traceability from a spoken phrase to the stored expense
2. Debugging information when the parser guesses wrong
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.models.expense import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transcript capture
    TRANSCRIPT_ERROR = "transcript_error"

    # Parsing and review
    DRAFT_PARSED = "draft_parsed"
    DRAFT_DISCARDED = "draft_discarded"
    USER_CONFIRMED = "user_confirmed"

    # Persistence
    EXPENSE_SAVED = "expense_saved"
    SAVE_FAILED = "save_failed"
    SETTINGS_UPDATED = "settings_updated"

    # Debug feedback
    DEBUG_FEEDBACK_RECORDED = "debug_feedback_recorded"

    # System events
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

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'draft', 'settings')"
    )
    entity_id: Optional[str] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one quick-add interaction)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

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
        event = AuditEventBuilder.draft_parsed(parsed.to_log_dict(), correlation_id)
        event = AuditEventBuilder.expense_saved(expense_id, merchant, amount, currency, correlation_id)
    """

    @staticmethod
    def draft_parsed(
        parsed: dict,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_PARSED,
            severity=AuditSeverity.DEBUG,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"Draft parsed with {parsed.get('confidence', 0):.0%} confidence",
            details=parsed,
        )

    @staticmethod
    def draft_discarded(
        raw_text: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_DISCARDED,
            entity_type="draft",
            correlation_id=correlation_id,
            description="User discarded the draft",
            details={"raw_text": raw_text},
            is_user_action=True,
        )

    @staticmethod
    def user_confirmed(
        merchant: str,
        category_key: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CONFIRMED,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"User confirmed draft for {merchant}",
            details={
                "merchant": merchant,
                "category_key": category_key,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_saved(
        expense_id: str,
        merchant: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_SAVED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense saved: {merchant} - {amount} {currency}",
            details={
                "merchant": merchant,
                "amount": amount,
                "currency": currency,
            },
        )

    @staticmethod
    def save_failed(
        merchant: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Failed to save expense for {merchant}",
            error_message=error_message,
        )

    @staticmethod
    def settings_updated(
        field: str,
        value: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            description=f"Setting {field} changed to {value}",
            details={field: value},
            is_user_action=True,
        )

    @staticmethod
    def debug_feedback_recorded(
        recognized_phrase: str,
        user_prompt: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBUG_FEEDBACK_RECORDED,
            entity_type="debug",
            correlation_id=correlation_id,
            description="Debug feedback recorded",
            details={
                "recognized_phrase": recognized_phrase,
                "user_prompt": user_prompt,
            },
            is_user_action=True,
        )

    @staticmethod
    def transcript_error(
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSCRIPT_ERROR,
            severity=AuditSeverity.WARNING,
            entity_type="transcript",
            correlation_id=correlation_id,
            description="Transcript source reported an error",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
