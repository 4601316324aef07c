"""
Services package.

src.services.debug is not re-exported here; import it directly.
"""

from src.services.speech import (
    BaseTranscriptSource,
    ScriptedTranscriptSource,
    TranscriptSourceError,
    TranscriptSourceInterface,
    TranscriptState,
    TranscriptStatus,
    TypedTranscriptSource,
)
from src.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    NotFoundError,
    SerializationError,
    StorageError,
    StorageKey,
)

__all__ = [
    # Transcript sources
    "BaseTranscriptSource",
    "ScriptedTranscriptSource",
    "TranscriptSourceError",
    "TranscriptSourceInterface",
    "TranscriptState",
    "TranscriptStatus",
    "TypedTranscriptSource",
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "NotFoundError",
    "SerializationError",
    "StorageError",
    "StorageKey",
]
