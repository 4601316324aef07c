"""
Debug Feedback Channel

When a parse comes out wrong the user can say what they meant. The entry
(transcript + parser output + "what I meant") is stored under the 'debug'
key and mirrored to a JSON file for offline review.

IMPORTANT: This is a logging sink only. The parser never reads it.
"""

import json
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

import structlog

from src.audit import AuditLogger
from src.config import get_settings
from src.models.expense import DebugEntry, ParsedSpend
from src.services.storage import KeyValueStorageInterface, StorageError, StorageKey


class DebugFeedbackLogger:
    """Collects debug entries and exports them as debug.json."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        export_path: Optional[Union[str, Path]] = None,
        export_on_save: Optional[bool] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            storage: Where entries are kept
            export_path: JSON export location. If None, uses the debug settings.
            export_on_save: Rewrite the export after every saved entry.
                            If None, uses the debug settings.
            audit_logger: Optional audit trail
        """
        if export_path is None or export_on_save is None:
            debug = get_settings().debug
            export_path = export_path if export_path is not None else debug.export_path
            export_on_save = export_on_save if export_on_save is not None else debug.export_on_save

        self._storage = storage
        self._export_path = Path(export_path)
        self._export_on_save = export_on_save
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger()

    @property
    def export_path(self) -> Path:
        return self._export_path

    async def record(
        self,
        user_prompt: str,
        recognized_phrase: Optional[str],
        parsed: Optional[ParsedSpend],
        correlation_id: Optional[UUID] = None,
    ) -> Optional[DebugEntry]:
        """
        Bundle the parser's output with what the user meant and save it.

        Returns None (and saves nothing) when the user prompt is blank.
        """
        prompt = (user_prompt or "").strip()
        if not prompt:
            return None

        entry = DebugEntry.from_parse(prompt, recognized_phrase or "", parsed)
        await self.save_entry(entry)

        if self._audit_logger:
            await self._audit_logger.log_debug_feedback(
                recognized_phrase=entry.recognized_phrase,
                user_prompt=entry.user_prompt,
                correlation_id=correlation_id,
            )

        return entry

    async def save_entry(self, entry: DebugEntry) -> None:
        """
        Append an entry and, if enabled, refresh the export file.

        The export is a mirror: if it cannot be written the failure is
        logged and the saved entry stands. Use export_entries() to retry.

        Raises:
            StorageError: If the entry could not be written
        """
        raw_entries = await self._storage.load_item(StorageKey.DEBUG, [])
        raw_entries.append(entry.model_dump(mode="json"))
        await self._storage.save_item(StorageKey.DEBUG, raw_entries)

        self._logger.info(
            "debug_entry_saved",
            recognized_phrase=entry.recognized_phrase,
            entry_count=len(raw_entries),
        )

        if self._export_on_save:
            try:
                self._write_export(raw_entries, self._export_path)
            except StorageError:
                self._logger.warning(
                    "debug_entry_kept_without_export",
                    path=str(self._export_path),
                )

    async def get_entries(self) -> list[DebugEntry]:
        raw_entries = await self._storage.load_item(StorageKey.DEBUG, [])
        return [DebugEntry.model_validate(raw) for raw in raw_entries]

    async def export_entries(self, path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write all entries to a JSON file.

        Returns:
            The path written to

        Raises:
            StorageError: If the file could not be written
        """
        target = Path(path) if path is not None else self._export_path
        raw_entries = await self._storage.load_item(StorageKey.DEBUG, [])
        self._write_export(raw_entries, target)
        return target

    async def clear_entries(self) -> None:
        await self._storage.save_item(StorageKey.DEBUG, [])

    def _write_export(self, raw_entries: list[dict], path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(raw_entries, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            self._logger.error("debug_export_failed", path=str(path), error=str(e))
            raise StorageError(f"Could not write debug export to {path}: {e}") from e
