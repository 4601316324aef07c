"""Tests for the category registry, settings store and expense store."""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.audit import AuditLogger
from src.models.audit import AuditEventType
from src.models.expense import Category, CategoryKey, Currency, NewExpenseInput
from src.services.storage import InMemoryStorage, StorageError, StorageKey
from src.stores import DEFAULT_CATEGORIES, CategoryRegistry, ExpenseStore, SettingsStore


class FailingStorage(InMemoryStorage):
    """Storage whose writes always fail."""

    async def save_item(self, key, value):
        raise StorageError("disk full")


class YieldingStorage(InMemoryStorage):
    """Storage that hands control back to the loop before every write."""

    async def save_item(self, key, value):
        await asyncio.sleep(0)
        await super().save_item(key, value)


class TestCategoryRegistry:
    """Tests for CategoryRegistry."""

    def test_defaults_cover_every_guessable_key(self):
        """Test that each parser category key resolves."""
        registry = CategoryRegistry()
        for key in CategoryKey:
            assert registry.get_by_key(key) is not None

    def test_lookup_by_string_key(self):
        """Test that plain strings resolve like enum members."""
        registry = CategoryRegistry()
        assert registry.get_by_key("fun").id == "cat-fun"

    def test_lookup_by_id(self):
        """Test lookup by category id."""
        registry = CategoryRegistry()
        assert registry.get_by_id("cat-bills").label == "Bills"
        assert registry.get_by_id("cat-unknown") is None
        assert registry.get_by_id(None) is None

    def test_custom_categories(self):
        """Test a registry with its own category list."""
        travel = Category(id="cat-travel", key="travel", label="Travel")
        registry = CategoryRegistry([travel])
        assert registry.list_categories() == [travel]
        assert registry.get_by_key(CategoryKey.FOOD) is None

    def test_list_is_a_copy(self):
        """Test that callers cannot change the registry through the list."""
        registry = CategoryRegistry()
        registry.list_categories().clear()
        assert len(registry.list_categories()) == len(DEFAULT_CATEGORIES)


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_defaults_before_anything_is_saved(self):
        """Test initial settings."""
        store = SettingsStore(InMemoryStorage(), default_currency="THB")
        settings = asyncio.run(store.initialize())

        assert settings.main_currency == Currency.THB
        assert [c.id for c in settings.categories] == ["cat-food", "cat-fun", "cat-bills"]

    def test_set_main_currency_persists(self):
        """Test that the currency survives a reload."""
        storage = InMemoryStorage()

        async def scenario():
            store = SettingsStore(storage, default_currency="THB")
            await store.initialize()
            await store.set_main_currency("EUR")

            reloaded = SettingsStore(storage, default_currency="THB")
            return await reloaded.initialize()

        assert asyncio.run(scenario()).main_currency == Currency.EUR

    def test_set_main_currency_is_audited(self):
        """Test the settings_updated audit event."""
        storage = InMemoryStorage()
        audit_logger = AuditLogger(storage)

        async def scenario():
            store = SettingsStore(storage, audit_logger=audit_logger, default_currency="THB")
            await store.set_main_currency(Currency.EUR)
            return await audit_logger.get_events()

        events = asyncio.run(scenario())
        assert events[0].event_type == AuditEventType.SETTINGS_UPDATED
        assert events[0].details == {"main_currency": "EUR"}

    def test_unsupported_currency_rejected(self):
        """Test that only THB and EUR are accepted."""
        store = SettingsStore(InMemoryStorage(), default_currency="THB")
        with pytest.raises(ValueError):
            asyncio.run(store.set_main_currency("USD"))

    def test_failed_save_keeps_previous_settings(self):
        """Test that state only changes after a successful save."""
        store = SettingsStore(FailingStorage(), default_currency="THB")
        with pytest.raises(StorageError):
            asyncio.run(store.set_main_currency("EUR"))
        assert store.main_currency == Currency.THB

    def test_invalid_stored_settings_fall_back(self):
        """Test that unreadable settings do not break startup."""
        storage = InMemoryStorage()
        asyncio.run(storage.save_item(StorageKey.SETTINGS, {"main_currency": "XYZ"}))

        store = SettingsStore(storage, default_currency="EUR")
        settings = asyncio.run(store.initialize())
        assert settings.main_currency == Currency.EUR


class TestExpenseStore:
    """Tests for ExpenseStore."""

    def test_add_expense_defaults_currency_to_main(self):
        """Test that an unset currency takes the main currency."""
        storage = InMemoryStorage()

        async def scenario():
            settings_store = SettingsStore(storage, default_currency="EUR")
            await settings_store.initialize()
            store = ExpenseStore(storage, settings_store=settings_store)
            return await store.add_expense(NewExpenseInput(amount=Decimal("12.5"), merchant="Cafe"))

        expense = asyncio.run(scenario())
        assert expense.currency == Currency.EUR

    def test_add_expense_without_settings_uses_thb(self):
        """Test the fallback currency."""
        store = ExpenseStore(InMemoryStorage())
        expense = asyncio.run(store.add_expense(NewExpenseInput(amount=Decimal("100"), merchant="Shop")))
        assert expense.currency == Currency.THB

    def test_explicit_currency_is_kept(self):
        """Test that a confirmed currency is never overridden."""
        store = ExpenseStore(InMemoryStorage())
        expense = asyncio.run(store.add_expense(
            NewExpenseInput(amount=Decimal("5"), currency=Currency.EUR, merchant="Kiosk")
        ))
        assert expense.currency == Currency.EUR

    def test_newest_first_and_persisted(self):
        """Test ordering and reload."""
        storage = InMemoryStorage()

        async def scenario():
            store = ExpenseStore(storage)
            await store.add_expense(NewExpenseInput(amount=Decimal("1"), merchant="First"))
            await store.add_expense(NewExpenseInput(amount=Decimal("2"), merchant="Second"))
            reloaded = ExpenseStore(storage)
            await reloaded.initialize()
            return store.list_expenses(), reloaded.list_expenses(limit=1)

        in_memory, reloaded = asyncio.run(scenario())
        assert [e.merchant for e in in_memory] == ["Second", "First"]
        assert reloaded[0].merchant == "Second"
        assert reloaded[0].amount == Decimal("2")

    def test_initialize_sorts_by_occurred_at(self):
        """Test that stored order does not matter."""
        storage = InMemoryStorage()
        now = datetime.now(timezone.utc)
        raw = [
            {"amount": "1", "currency": "THB", "merchant": "Old", "occurred_at": (now - timedelta(days=3)).isoformat()},
            {"amount": "2", "currency": "THB", "merchant": "New", "occurred_at": now.isoformat()},
        ]
        asyncio.run(storage.save_item(StorageKey.EXPENSES, raw))

        store = ExpenseStore(storage)
        expenses = asyncio.run(store.initialize())
        assert [e.merchant for e in expenses] == ["New", "Old"]

    def test_initialize_skips_invalid_records(self):
        """Test that a broken record does not hide the others."""
        storage = InMemoryStorage()
        raw = [
            {"amount": "-1", "currency": "THB", "merchant": "Broken"},
            {"amount": "10", "currency": "THB", "merchant": "Fine"},
        ]
        asyncio.run(storage.save_item(StorageKey.EXPENSES, raw))

        store = ExpenseStore(storage)
        expenses = asyncio.run(store.initialize())
        assert [e.merchant for e in expenses] == ["Fine"]

    def test_failed_save_leaves_list_unchanged(self):
        """Test that a storage failure surfaces and nothing is added."""
        store = ExpenseStore(FailingStorage())
        with pytest.raises(StorageError):
            asyncio.run(store.add_expense(NewExpenseInput(amount=Decimal("1"), merchant="X")))
        assert store.list_expenses() == []

    def test_concurrent_adds_keep_every_expense(self):
        """Test that overlapping adds neither drop nor overwrite each other."""
        storage = YieldingStorage()

        async def scenario():
            store = ExpenseStore(storage)
            await asyncio.gather(
                store.add_expense(NewExpenseInput(amount=Decimal("1"), merchant="First")),
                store.add_expense(NewExpenseInput(amount=Decimal("2"), merchant="Second")),
            )
            reloaded = ExpenseStore(storage)
            await reloaded.initialize()
            return store.list_expenses(), reloaded.list_expenses()

        in_memory, reloaded = asyncio.run(scenario())
        assert {e.merchant for e in in_memory} == {"First", "Second"}
        assert {e.merchant for e in reloaded} == {"First", "Second"}

    def test_date_range_is_inclusive(self):
        """Test range bounds, including naive datetimes."""
        store = ExpenseStore(InMemoryStorage())
        occurred = datetime(2024, 12, 10, 12, 0, tzinfo=timezone.utc)

        asyncio.run(store.add_expense(
            NewExpenseInput(amount=Decimal("1"), merchant="X", occurred_at=occurred)
        ))

        assert len(store.get_expenses_by_date_range(occurred, occurred)) == 1
        assert len(store.get_expenses_by_date_range(datetime(2024, 12, 1), datetime(2024, 12, 31))) == 1
        assert store.get_expenses_by_date_range(datetime(2024, 12, 11), datetime(2024, 12, 31)) == []
