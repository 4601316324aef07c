"""
Settings Store

Holds the user's preferences (main currency, categories) and persists
them under the 'settings' key.

DESIGN DECISION: The main currency is applied by the expense store when a
confirmed draft leaves the currency unset. The parser never sees it.
"""

from typing import Optional, Union

import structlog
from pydantic import ValidationError

from src.audit import AuditLogger
from src.config import get_settings
from src.models.expense import Currency, UserSettings
from src.services.storage import KeyValueStorageInterface, StorageKey
from src.stores.categories import CategoryRegistry


class SettingsStore:
    """In-memory view of the user settings, backed by the key/value store."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        category_registry: Optional[CategoryRegistry] = None,
        audit_logger: Optional[AuditLogger] = None,
        default_currency: Optional[Union[Currency, str]] = None,
    ):
        """
        Args:
            storage: Where settings are persisted
            category_registry: Source of the category list
            audit_logger: Optional audit trail for settings changes
            default_currency: Main currency before anything was saved.
                              If None, uses the configured main currency.
        """
        self._storage = storage
        self._categories = category_registry or CategoryRegistry()
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger()

        if default_currency is None:
            default_currency = get_settings().app.main_currency
        self._defaults = UserSettings(main_currency=Currency(default_currency))
        self._settings = self._defaults

    @property
    def settings(self) -> UserSettings:
        return self._settings

    @property
    def main_currency(self) -> Currency:
        return self._settings.main_currency

    async def initialize(self) -> UserSettings:
        """Load persisted settings, falling back to the defaults."""
        raw = await self._storage.load_item(StorageKey.SETTINGS, None)

        loaded = self._defaults
        if raw is not None:
            try:
                loaded = UserSettings.model_validate(raw)
            except ValidationError as e:
                self._logger.warning(
                    "settings_invalid_using_defaults",
                    error=str(e),
                )

        # Categories come from the registry whenever it has any
        categories = self._categories.list_categories()
        self._settings = loaded.model_copy(
            update={"categories": categories or loaded.categories}
        )
        return self._settings

    async def set_main_currency(self, currency: Union[Currency, str]) -> UserSettings:
        """
        Change and persist the main currency.

        Raises:
            ValueError: If the currency is not supported
            StorageError: If the settings could not be saved
        """
        currency = Currency(currency)
        new_settings = self._settings.model_copy(update={"main_currency": currency})

        await self._storage.save_item(
            StorageKey.SETTINGS,
            new_settings.model_dump(mode="json"),
        )
        self._settings = new_settings

        if self._audit_logger:
            await self._audit_logger.log_settings_updated("main_currency", currency.value)

        return self._settings
