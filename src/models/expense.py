"""
Core Data Models for Smart Spends

These models define the schemas for all data flowing through the system:
1. ParsedSpend - the transient draft produced by the spend parser
2. Expense - the persisted record, created ONLY after human confirmation
3. Settings, categories, debug entries, validation and summary results

DESIGN DECISION: A ParsedSpend is PROPOSED data. Nothing derived from it
is stored until the user confirms (or edits) it on the review surface.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def utcnow() -> datetime:
    """Timezone-aware current time used for all timestamps."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """
    Supported currencies.

    THB is the default currency of the whole system.
    """
    THB = "THB"
    EUR = "EUR"


class CategoryKey(str, Enum):
    """Category keys the parser can guess. Resolved to Category records by the caller."""
    FOOD = "food"
    FUN = "fun"
    BILLS = "bills"


class SummaryWindow(str, Enum):
    """Look-back windows for the spend summary."""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"

    @property
    def days(self) -> int:
        return 30 if self is SummaryWindow.LAST_30_DAYS else 7


# =============================================================================
# PARSER OUTPUT
# =============================================================================

class ParsedSpend(BaseModel):
    """
    Structured draft recovered from one free-form utterance.

    CRITICAL: This is a transient computation result, never stored.
    All fields except raw_text and confidence are optional because
    the heuristics may not find them.
    """
    model_config = ConfigDict(frozen=True)

    raw_text: Any = Field(
        ...,
        description="Trimmed input text (or the untouched input when it was empty/invalid)"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Positive amount without currency sign"
    )
    currency: Optional[Currency] = Field(
        default=None,
        description="Always set on non-empty input"
    )
    merchant: Optional[str] = Field(
        default=None,
        description="Short business/person name span"
    )
    note: Optional[str] = Field(
        default=None,
        description="Leftover descriptive text"
    )
    group_guess: Optional[Union[CategoryKey, str]] = Field(
        default=None,
        description="Category key guessed from keywords"
    )
    confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Weighted completeness score (0-1)"
    )

    @property
    def has_preview_fields(self) -> bool:
        """A draft is worth previewing once it has an amount or a merchant."""
        return self.amount is not None or self.merchant is not None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "raw_text": self.raw_text if isinstance(self.raw_text, str) else repr(self.raw_text),
            "amount": str(self.amount) if self.amount is not None else None,
            "currency": self.currency.value if self.currency else None,
            "merchant": self.merchant,
            "note": self.note,
            "group_guess": _key_value(self.group_guess),
            "confidence": self.confidence,
        }


def _key_value(key: Optional[Union[CategoryKey, str]]) -> Optional[str]:
    if key is None:
        return None
    return key.value if isinstance(key, CategoryKey) else str(key)


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class Category(BaseModel):
    """A spending category the user can file expenses under."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    key: Union[CategoryKey, str] = Field(..., description="Stable category key")
    label: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = Field(
        default=None,
        pattern="^#[0-9a-fA-F]{6}$",
        description="Display color as #rrggbb"
    )


class NewExpenseInput(BaseModel):
    """
    What the review surface submits to the expense store.

    Currency and occurred_at are optional; the store applies defaults.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0, description="Amount in the given currency")
    currency: Optional[Currency] = None
    merchant: str = Field(..., min_length=1, max_length=200)
    note: Optional[str] = Field(default=None, max_length=1000)
    category_id: Optional[str] = None
    occurred_at: Optional[datetime] = None

    @field_validator('note')
    @classmethod
    def blank_note_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class Expense(BaseModel):
    """
    A confirmed expense.

    CRITICAL: Only Expense objects are persisted to storage, and only
    after the user explicitly confirmed the draft.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique expense ID"
    )
    amount: Decimal = Field(..., gt=0)
    currency: Currency
    merchant: str = Field(..., min_length=1, max_length=200)
    note: Optional[str] = Field(default=None, max_length=1000)
    category_id: Optional[str] = None
    occurred_at: datetime = Field(
        default_factory=utcnow,
        description="When the money was spent"
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        description="When the record was saved"
    )

    @field_validator('occurred_at', 'created_at')
    @classmethod
    def timestamps_are_aware(cls, v: datetime) -> datetime:
        return as_utc(v)


class UserSettings(BaseModel):
    """User preferences persisted under the 'settings' key."""

    main_currency: Currency = Currency.THB
    categories: list[Category] = Field(default_factory=list)


class DraftConfirmation(BaseModel):
    """
    The draft as the user left it on the review surface.

    Every field may differ from what the parser proposed.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0)
    currency: Optional[Currency] = None
    merchant: str = Field(..., min_length=1, max_length=200)
    note: Optional[str] = Field(default=None, max_length=1000)
    category_key: Optional[str] = None

    @field_validator('note', 'category_key')
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


# =============================================================================
# DEBUG FEEDBACK
# =============================================================================

class DebugEntry(BaseModel):
    """
    One debug-feedback submission: what was heard, what was parsed,
    and what the user meant to say. Logged for offline review only.
    """

    timestamp: datetime = Field(default_factory=utcnow)
    user_prompt: str = Field(..., description="What the user meant to say")
    recognized_phrase: str = Field(..., description="Transcript the parser saw")
    parsed_amount: Optional[Decimal] = None
    parsed_currency: Optional[str] = None
    parsed_merchant: Optional[str] = None
    parsed_note: Optional[str] = None
    parsed_category: Optional[str] = None
    confidence: Optional[float] = None

    @classmethod
    def from_parse(
        cls,
        user_prompt: str,
        recognized_phrase: str,
        parsed: Optional[ParsedSpend],
    ) -> "DebugEntry":
        if parsed is None:
            return cls(user_prompt=user_prompt, recognized_phrase=recognized_phrase)
        return cls(
            user_prompt=user_prompt,
            recognized_phrase=recognized_phrase,
            parsed_amount=parsed.amount,
            parsed_currency=parsed.currency.value if parsed.currency else None,
            parsed_merchant=parsed.merchant,
            parsed_note=parsed.note,
            parsed_category=_key_value(parsed.group_guess),
            confidence=parsed.confidence,
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'low_confidence', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage draft validation.

    Stage 1: Completeness (fields the expense record needs)
    Stage 2: Plausibility (values that look wrong)
    """

    validated_at: datetime = Field(default_factory=utcnow)

    completeness_valid: bool
    plausibility_valid: bool
    is_valid: bool
    can_proceed_with_review: bool = Field(
        ...,
        description="Is there enough to show the user a draft?"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class SpendSummary(BaseModel):
    """Totals over a look-back window, in the main currency only."""

    window: SummaryWindow
    currency: Currency
    start: datetime
    end: datetime
    total: Decimal = Decimal("0")
    by_group: dict[str, Decimal] = Field(default_factory=dict)
    expense_count: int = Field(default=0, ge=0)
