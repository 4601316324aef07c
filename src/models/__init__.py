"""
Data Models Package

This package contains all Pydantic models used in Smart Spends.
All data flowing through the system must conform to these schemas.
"""

from src.models.expense import (
    Category,
    CategoryKey,
    Currency,
    DebugEntry,
    DraftConfirmation,
    Expense,
    NewExpenseInput,
    ParsedSpend,
    SpendSummary,
    SummaryWindow,
    UserSettings,
    ValidationIssue,
    ValidationResult,
    as_utc,
    utcnow,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Category",
    "CategoryKey",
    "Currency",
    "DebugEntry",
    "DraftConfirmation",
    "Expense",
    "NewExpenseInput",
    "ParsedSpend",
    "SpendSummary",
    "SummaryWindow",
    "UserSettings",
    "ValidationIssue",
    "ValidationResult",
    "as_utc",
    "utcnow",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
