"""
Main Orchestrator for Smart Spends

This module ties together all the components and defines the
end-to-end quick-add flow:
    phrase -> draft -> validate -> review -> confirm -> save

DESIGN DECISION: The orchestrator enforces the boundaries:
- The parser only ever sees finalized text (never mid-utterance)
- Nothing persists without human confirmation
- Every step is audited
"""

from typing import Callable, Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger, create_correlation_id
from src.config import get_settings
from src.models.expense import (
    DebugEntry,
    DraftConfirmation,
    Expense,
    NewExpenseInput,
    ParsedSpend,
    ValidationResult,
)
from src.parsing import parse_spend
from src.queries import SpendSummaryExecutor
from src.services.debug import DebugFeedbackLogger
from src.services.speech import TranscriptSourceInterface, TranscriptState, TranscriptStatus
from src.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    StorageError,
)
from src.stores import CategoryRegistry, ExpenseStore, SettingsStore
from src.validation import DraftValidator


class QuickAddFlow:
    """
    Orchestrates the quick-add flow.

    Flow:
    1. Capture → A transcript source delivers interim/final text
    2. Preview → Parse the current text once nobody is mid-utterance
    3. Validate → Two-stage draft validation
    4. Review → Present to user (PAUSE - require confirmation)
    5. Confirm → User explicitly approves (possibly edited) values
    6. Save → Persist through the expense store

    Human confirmation (step 5) is MANDATORY.
    The system NEVER auto-saves a draft.
    """

    def __init__(
        self,
        expense_store: ExpenseStore,
        settings_store: Optional[SettingsStore] = None,
        category_registry: Optional[CategoryRegistry] = None,
        validator: Optional[DraftValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        feedback_logger: Optional[DebugFeedbackLogger] = None,
        parser: Callable[[str], ParsedSpend] = parse_spend,
    ):
        self._expense_store = expense_store
        self._settings_store = settings_store
        self._categories = category_registry or CategoryRegistry()
        self._validator = validator or DraftValidator()
        self._audit_logger = audit_logger
        self._feedback_logger = feedback_logger
        self._parser = parser
        self._logger = structlog.get_logger()

        self._current_text = ""
        self._listening = False
        self._pending_transcript_error: Optional[str] = None
        self._last_audited_draft: Optional[tuple[Optional[UUID], str]] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def current_text(self) -> str:
        return self._current_text

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def categories(self) -> CategoryRegistry:
        return self._categories

    def recent_expenses(self, limit: int = 10) -> list[Expense]:
        return self._expense_store.list_expenses(limit=limit)

    def history(self) -> list[Expense]:
        """Every saved expense, newest first by occurred_at."""
        return sorted(
            self._expense_store.list_expenses(),
            key=lambda expense: expense.occurred_at,
            reverse=True,
        )

    async def initialize(self) -> None:
        """Load settings first: the expense store reads the main currency."""
        if self._settings_store is not None:
            await self._settings_store.initialize()
        await self._expense_store.initialize()

    # -- capture --------------------------------------------------------------

    def follow(self, source: TranscriptSourceInterface) -> None:
        """Track the best-known text of a transcript source."""
        self.unfollow()
        self._unsubscribe = source.subscribe(self._on_transcript_state)
        self._on_transcript_state(source.state)

    def unfollow(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def set_text(self, text: str) -> None:
        """Typed text replaces whatever was captured."""
        self._current_text = text

    def clear(self) -> None:
        self._current_text = ""
        self._last_audited_draft = None

    def _on_transcript_state(self, state: TranscriptState) -> None:
        self._listening = state.is_listening
        if state.current_text:
            self._current_text = state.current_text
        if state.status == TranscriptStatus.ERROR and state.error:
            self._pending_transcript_error = state.error

    # -- review ---------------------------------------------------------------

    async def preview(
        self,
        text: Optional[str] = None,
        is_listening: Optional[bool] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[ParsedSpend]:
        """
        Parse the current text into a draft worth showing.

        Returns None while listening, for empty text, or when the draft
        has neither an amount nor a merchant.
        """
        if self._pending_transcript_error and self._audit_logger:
            await self._audit_logger.log_transcript_error(
                self._pending_transcript_error,
                correlation_id=correlation_id,
            )
        self._pending_transcript_error = None

        text = self._current_text if text is None else text
        listening = self._listening if is_listening is None else is_listening
        if not text or listening:
            return None

        parsed = self._parser(text)
        if not parsed.has_preview_fields:
            return None

        # Reruns of the same draft within one interaction are audited once
        draft_key = (correlation_id, parsed.raw_text)
        if self._audit_logger and draft_key != self._last_audited_draft:
            self._last_audited_draft = draft_key
            await self._audit_logger.log_draft_parsed(
                parsed.to_log_dict(),
                correlation_id=correlation_id,
            )

        return parsed

    def validate(self, parsed: ParsedSpend) -> tuple[ValidationResult, str]:
        """
        Validate a draft.

        Returns:
            (validation_result, user_message)
        """
        result = self._validator.validate(parsed)
        return result, self._validator.get_user_friendly_summary(result)

    async def confirm(
        self,
        confirmation: DraftConfirmation,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Save the draft the user confirmed.

        CRITICAL: Called ONLY after explicit user confirmation.

        Raises:
            StorageError: If the expense could not be saved
        """
        correlation_id = correlation_id or create_correlation_id()

        category = self._categories.get_by_key(confirmation.category_key)
        data = NewExpenseInput(
            amount=confirmation.amount,
            currency=confirmation.currency,
            merchant=confirmation.merchant,
            note=confirmation.note,
            category_id=category.id if category else None,
        )

        if self._audit_logger:
            await self._audit_logger.log_user_confirmed(
                merchant=data.merchant,
                category_key=confirmation.category_key,
                correlation_id=correlation_id,
            )

        try:
            expense = await self._expense_store.add_expense(data)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    merchant=data.merchant,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_expense_saved(
                expense_id=expense.id,
                merchant=expense.merchant,
                amount=str(expense.amount),
                currency=expense.currency.value,
                correlation_id=correlation_id,
            )

        self.clear()
        return expense

    async def discard(
        self,
        parsed: Optional[ParsedSpend] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Record that the user dropped the draft. Nothing is persisted."""
        raw_text = parsed.raw_text if parsed is not None else self._current_text
        self.clear()

        if self._audit_logger:
            await self._audit_logger.log_draft_discarded(
                raw_text if isinstance(raw_text, str) else None,
                correlation_id=correlation_id,
            )

    async def record_feedback(
        self,
        user_prompt: str,
        parsed: Optional[ParsedSpend] = None,
        recognized_phrase: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[DebugEntry]:
        """
        Send "what I meant to say" to the debug-feedback channel.

        Raises:
            RuntimeError: If no feedback logger is configured
        """
        if self._feedback_logger is None:
            raise RuntimeError("Debug feedback is not configured")

        return await self._feedback_logger.record(
            user_prompt=user_prompt,
            recognized_phrase=recognized_phrase if recognized_phrase is not None else self._current_text,
            parsed=parsed,
            correlation_id=correlation_id,
        )


def create_app_components(
    use_file_storage: bool = True,
) -> tuple[QuickAddFlow, SpendSummaryExecutor, SettingsStore]:
    """
    Factory function to create all application components.

    Args:
        use_file_storage: Whether to persist to the local JSON store.
                          Set to False for in-memory only runs.

    Returns:
        (quick_add_flow, summary_executor, settings_store)
    """
    logger = structlog.get_logger()
    settings = get_settings()

    storage: KeyValueStorageInterface
    if use_file_storage:
        store_path = settings.storage.store_path
        try:
            store_path.parent.mkdir(parents=True, exist_ok=True)
            storage = JsonFileStorage(store_path)
        except OSError as e:
            # Data directory unusable - continue without persistence
            logger.warning("file_storage_unavailable", path=str(store_path), error=str(e))
            storage = InMemoryStorage()
    else:
        storage = InMemoryStorage()

    audit_logger = AuditLogger(storage)
    categories = CategoryRegistry()
    settings_store = SettingsStore(
        storage,
        category_registry=categories,
        audit_logger=audit_logger,
    )
    expense_store = ExpenseStore(storage, settings_store=settings_store)

    quick_add_flow = QuickAddFlow(
        expense_store=expense_store,
        settings_store=settings_store,
        category_registry=categories,
        audit_logger=audit_logger,
        feedback_logger=DebugFeedbackLogger(storage, audit_logger=audit_logger),
    )

    summary_executor = SpendSummaryExecutor(
        expense_store,
        settings_store,
        category_registry=categories,
    )

    return quick_add_flow, summary_executor, settings_store
