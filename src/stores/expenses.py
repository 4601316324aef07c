"""
Expense Store

Keeps the confirmed expenses (newest first) and persists them under
the 'expenses' key.

CRITICAL: Only user-confirmed data reaches add_expense().
Drafts from the parser are never written here directly.
"""

import asyncio
from datetime import datetime
from typing import Optional

import structlog
from pydantic import ValidationError

from src.models.expense import Currency, Expense, NewExpenseInput, as_utc, utcnow
from src.services.storage import KeyValueStorageInterface, StorageKey
from src.stores.settings import SettingsStore


class ExpenseStore:
    """In-memory list of expenses, backed by the key/value store."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        settings_store: Optional[SettingsStore] = None,
    ):
        self._storage = storage
        self._settings_store = settings_store
        self._expenses: list[Expense] = []
        self._lock = asyncio.Lock()
        self._logger = structlog.get_logger()

    @property
    def expenses(self) -> list[Expense]:
        return list(self._expenses)

    async def initialize(self) -> list[Expense]:
        """
        Load persisted expenses, newest first by occurred_at.

        Records that no longer validate are skipped and logged.
        """
        raw_expenses = await self._storage.load_item(StorageKey.EXPENSES, [])

        loaded = []
        for raw in raw_expenses:
            try:
                loaded.append(Expense.model_validate(raw))
            except ValidationError as e:
                self._logger.warning(
                    "expense_record_skipped",
                    record_id=raw.get("id") if isinstance(raw, dict) else None,
                    error=str(e),
                )

        loaded.sort(key=lambda expense: expense.occurred_at, reverse=True)
        self._expenses = loaded
        return self.expenses

    def _default_currency(self) -> Currency:
        if self._settings_store is not None:
            return self._settings_store.main_currency
        return Currency.THB

    def _create_expense(self, data: NewExpenseInput) -> Expense:
        now = utcnow()
        return Expense(
            amount=data.amount,
            currency=data.currency or self._default_currency(),
            merchant=data.merchant,
            note=data.note,
            category_id=data.category_id,
            occurred_at=data.occurred_at or now,
            created_at=now,
        )

    async def add_expense(self, data: NewExpenseInput) -> Expense:
        """
        Create and persist an expense.

        Raises:
            StorageError: If the expenses could not be saved.
                          The in-memory list is left unchanged.
        """
        expense = self._create_expense(data)

        # One read-save-assign at a time, or concurrent adds drop each other
        async with self._lock:
            new_expenses = [expense, *self._expenses]
            await self._storage.save_item(
                StorageKey.EXPENSES,
                [e.model_dump(mode="json") for e in new_expenses],
            )
            self._expenses = new_expenses

        self._logger.info(
            "expense_added",
            expense_id=expense.id,
            currency=expense.currency.value,
        )
        return expense

    def list_expenses(self, limit: Optional[int] = None) -> list[Expense]:
        """All expenses, newest first."""
        if limit is None:
            return self.expenses
        return self._expenses[:limit]

    def get_expenses_by_date_range(
        self,
        start: datetime,
        end: datetime,
    ) -> list[Expense]:
        """Expenses with start <= occurred_at <= end (naive bounds are UTC)."""
        start, end = as_utc(start), as_utc(end)
        return [
            expense for expense in self._expenses
            if start <= expense.occurred_at <= end
        ]
