"""
Spend Summary

Totals over the last 7 or 30 days, in the main currency.

Only expenses in the main currency are counted; nothing is converted.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Union

from src.models.expense import SpendSummary, SummaryWindow, as_utc, utcnow
from src.stores import CategoryRegistry, ExpenseStore, SettingsStore


UNCATEGORIZED_LABEL = "Uncategorized"


class SpendSummaryExecutor:
    """Computes SpendSummary results from the stores."""

    def __init__(
        self,
        expense_store: ExpenseStore,
        settings_store: SettingsStore,
        category_registry: Optional[CategoryRegistry] = None,
    ):
        self._expenses = expense_store
        self._settings = settings_store
        self._categories = category_registry or CategoryRegistry()

    @staticmethod
    def window_bounds(
        window: SummaryWindow,
        now: Optional[datetime] = None,
    ) -> tuple[datetime, datetime]:
        """The window covers today plus the previous days - 1 days, to the same time."""
        end = as_utc(now) if now is not None else utcnow()
        start = end - timedelta(days=window.days - 1)
        return start, end

    def summarize(
        self,
        window: Union[SummaryWindow, str] = SummaryWindow.LAST_7_DAYS,
        now: Optional[datetime] = None,
    ) -> SpendSummary:
        window = SummaryWindow(window)
        currency = self._settings.main_currency
        start, end = self.window_bounds(window, now)

        in_window = [
            expense for expense in self._expenses.get_expenses_by_date_range(start, end)
            if expense.currency == currency
        ]

        total = Decimal("0")
        by_group: dict[str, Decimal] = {}
        for expense in in_window:
            total += expense.amount
            category = self._categories.get_by_id(expense.category_id)
            label = category.label if category else UNCATEGORIZED_LABEL
            by_group[label] = by_group.get(label, Decimal("0")) + expense.amount

        return SpendSummary(
            window=window,
            currency=currency,
            start=start,
            end=end,
            total=total,
            by_group=by_group,
            expense_count=len(in_window),
        )
