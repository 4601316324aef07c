"""
Local JSON File Storage

DESIGN DECISION: The whole store is one small JSON document on disk,
one top-level entry per StorageKey. Personal expense data is tiny, so
read-modify-write of the full document is fine.

TRADEOFFS:
- Not suitable for large data sets (we're fine for personal use)
- One writer per file (guarded by an asyncio lock inside the process)
- Writes go to a temp file first and are swapped in atomically
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Optional

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.services.storage.interface import (
    KeyValueStorageInterface,
    NotFoundError,
    SerializationError,
    StorageError,
    StorageKey,
)


class JsonFileStorage(KeyValueStorageInterface):
    """Key/value store persisted as a single JSON document."""

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize the file store.

        Args:
            path: Location of the JSON document.
                  If None, uses the configured storage path.
        """
        self._path = Path(path) if path is not None else get_settings().storage.store_path
        self._lock = asyncio.Lock()
        self._logger = structlog.get_logger()

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            raise NotFoundError(f"No store at {self._path}")

        try:
            with self._path.open("r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Store at {self._path} is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise SerializationError(f"Store at {self._path} is not a JSON object")

        return document

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_payload(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self._path)

    def _write_document(self, document: dict[str, Any]) -> None:
        try:
            payload = json.dumps(document, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Value is not JSON serializable: {e}") from e

        try:
            self._write_payload(payload)
        except OSError as e:
            raise StorageError(f"Could not write {self._path}: {e}") from e

    async def save_item(self, key: StorageKey, value: Any) -> None:
        async with self._lock:
            try:
                try:
                    document = self._read_document()
                except NotFoundError:
                    document = {}
                document[key.value] = value
                self._write_document(document)
            except StorageError as e:
                self._logger.error(
                    "storage_save_failed",
                    key=key.value,
                    path=str(self._path),
                    error=str(e),
                )
                raise

    async def load_item(self, key: StorageKey, fallback: Any) -> Any:
        async with self._lock:
            try:
                document = self._read_document()
            except NotFoundError:
                return fallback
            except (StorageError, OSError) as e:
                self._logger.error(
                    "storage_load_failed",
                    key=key.value,
                    path=str(self._path),
                    error=str(e),
                )
                return fallback

        value = document.get(key.value)
        return fallback if value is None else value

    async def remove_item(self, key: StorageKey) -> bool:
        async with self._lock:
            try:
                document = self._read_document()
                if key.value in document:
                    del document[key.value]
                    self._write_document(document)
                return True
            except NotFoundError:
                return True
            except (StorageError, OSError) as e:
                self._logger.error(
                    "storage_remove_failed",
                    key=key.value,
                    path=str(self._path),
                    error=str(e),
                )
                return False

    async def clear_all(self) -> bool:
        async with self._lock:
            try:
                self._write_document({})
                return True
            except StorageError as e:
                self._logger.error(
                    "storage_clear_failed",
                    path=str(self._path),
                    error=str(e),
                )
                return False
