"""
In-Memory Storage

Used by the tests and as a fallback when the local data directory
cannot be used. Values are round-tripped through JSON so anything that
would not survive the file store fails here too.
"""

import json
from typing import Any

from src.services.storage.interface import (
    KeyValueStorageInterface,
    SerializationError,
    StorageKey,
)


class InMemoryStorage(KeyValueStorageInterface):
    """Key/value store that lives as long as the process."""

    def __init__(self):
        self._items: dict[str, str] = {}

    async def save_item(self, key: StorageKey, value: Any) -> None:
        try:
            self._items[key.value] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Value is not JSON serializable: {e}") from e

    async def load_item(self, key: StorageKey, fallback: Any) -> Any:
        payload = self._items.get(key.value)
        if payload is None:
            return fallback
        value = json.loads(payload)
        return fallback if value is None else value

    async def remove_item(self, key: StorageKey) -> bool:
        self._items.pop(key.value, None)
        return True

    async def clear_all(self) -> bool:
        self._items.clear()
        return True
