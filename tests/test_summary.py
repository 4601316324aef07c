"""Tests for the 7/30-day spend summary."""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from src.models.expense import Currency, NewExpenseInput, SummaryWindow
from src.queries import UNCATEGORIZED_LABEL, SpendSummaryExecutor
from src.services.storage import InMemoryStorage
from src.stores import ExpenseStore, SettingsStore


NOW = datetime(2024, 12, 31, 18, 0, tzinfo=timezone.utc)


def build(main_currency="THB", expenses=()):
    storage = InMemoryStorage()
    settings_store = SettingsStore(storage, default_currency=main_currency)
    expense_store = ExpenseStore(storage, settings_store=settings_store)

    async def setup():
        await settings_store.initialize()
        for data in expenses:
            await expense_store.add_expense(data)

    asyncio.run(setup())
    return SpendSummaryExecutor(expense_store, settings_store)


def spend(amount, days_ago=0, currency=Currency.THB, category_id="cat-food"):
    return NewExpenseInput(
        amount=Decimal(amount),
        currency=currency,
        merchant="Somewhere",
        category_id=category_id,
        occurred_at=NOW - timedelta(days=days_ago),
    )


class TestWindowBounds:
    """Tests for window boundaries."""

    def test_seven_day_window(self):
        """Test that the window covers today and the six days before."""
        start, end = SpendSummaryExecutor.window_bounds(SummaryWindow.LAST_7_DAYS, NOW)
        assert end == NOW
        assert start == NOW - timedelta(days=6)

    def test_naive_now_is_utc(self):
        """Test that a naive reference time is read as UTC."""
        _, end = SpendSummaryExecutor.window_bounds(SummaryWindow.LAST_30_DAYS, datetime(2024, 12, 31))
        assert end.tzinfo is not None


class TestSummarize:
    """Tests for SpendSummaryExecutor.summarize."""

    def test_totals_by_group(self):
        """Test totals and category grouping."""
        executor = build(expenses=[
            spend("100", category_id="cat-food"),
            spend("50", days_ago=2, category_id="cat-fun"),
            spend("25", days_ago=3, category_id=None),
        ])
        summary = executor.summarize("7d", now=NOW)

        assert summary.total == Decimal("175")
        assert summary.expense_count == 3
        assert summary.by_group == {
            "Food": Decimal("100"),
            "Fun": Decimal("50"),
            UNCATEGORIZED_LABEL: Decimal("25"),
        }

    def test_window_excludes_older_expenses(self):
        """Test 7-day versus 30-day windows."""
        executor = build(expenses=[spend("10"), spend("20", days_ago=10)])

        assert executor.summarize(SummaryWindow.LAST_7_DAYS, now=NOW).total == Decimal("10")
        assert executor.summarize(SummaryWindow.LAST_30_DAYS, now=NOW).total == Decimal("30")

    def test_only_main_currency_counts(self):
        """Test that other currencies are left out, not converted."""
        executor = build(main_currency="EUR", expenses=[
            spend("10", currency=Currency.EUR),
            spend("500", currency=Currency.THB),
        ])
        summary = executor.summarize("30d", now=NOW)

        assert summary.currency == Currency.EUR
        assert summary.total == Decimal("10")
        assert summary.expense_count == 1

    def test_empty(self):
        """Test a summary with no expenses."""
        summary = build().summarize(now=NOW)
        assert summary.window == SummaryWindow.LAST_7_DAYS
        assert summary.total == Decimal("0")
        assert summary.by_group == {}
