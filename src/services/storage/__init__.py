"""
Storage Services Package

Provides the abstract key/value interface and its implementations.
Currently a local JSON file backs it, but it is designed to be swappable.
"""

from src.services.storage.interface import (
    KeyValueStorageInterface,
    NotFoundError,
    SerializationError,
    StorageError,
    StorageKey,
)
from src.services.storage.json_file import JsonFileStorage
from src.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    "StorageKey",
    # Exceptions
    "NotFoundError",
    "SerializationError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
