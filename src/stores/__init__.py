"""State stores package: categories, settings and expenses."""

from src.stores.categories import DEFAULT_CATEGORIES, CategoryRegistry
from src.stores.expenses import ExpenseStore
from src.stores.settings import SettingsStore

__all__ = [
    "DEFAULT_CATEGORIES",
    "CategoryRegistry",
    "ExpenseStore",
    "SettingsStore",
]
