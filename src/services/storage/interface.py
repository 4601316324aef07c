"""
Abstract Storage Interface

DESIGN DECISION: All persistence goes through a small durable key/value
store keyed by logical names ("expenses", "settings", ...).
This allows us to:
1. Swap the local JSON file for another backend later
2. Use in-memory storage for testing
3. Keep the stores decoupled from the storage implementation

Values are JSON-compatible (dicts, lists, strings, numbers).
The stores are responsible for turning models into such values.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class StorageKey(str, Enum):
    """Logical names of everything we persist."""
    EXPENSES = "expenses"
    CATEGORIES = "categories"
    SETTINGS = "settings"
    DEBUG = "debug"
    AUDIT = "audit"


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key/value storage operations.

    Failure contract:
    - save_item raises StorageError
    - load_item never raises; it logs and returns the fallback
    - remove_item / clear_all never raise; they log and return False
    """

    @abstractmethod
    async def save_item(self, key: StorageKey, value: Any) -> None:
        """
        Store a value under a key, replacing what was there.

        Raises:
            StorageError: If the value could not be persisted
        """
        pass

    @abstractmethod
    async def load_item(self, key: StorageKey, fallback: Any) -> Any:
        """
        Load the value stored under a key.

        Returns:
            The stored value, or fallback if nothing is stored
            or the store could not be read
        """
        pass

    @abstractmethod
    async def remove_item(self, key: StorageKey) -> bool:
        """
        Remove a key.

        Returns:
            True if removed (or already absent)
        """
        pass

    @abstractmethod
    async def clear_all(self) -> bool:
        """
        Remove every key of this store.

        Returns:
            True if cleared
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Storage location does not exist."""
    pass


class SerializationError(StorageError):
    """Value could not be converted to or from JSON."""
    pass
