# File: store.py
"""Handles persistent data storage for the Zen Planner integration.

Uses Home Assistant's Storage helper to save and load planner data so that
tasks, goals, habits, categories, chat history, reminders and the selected
subscription tier survive restarts. UI-only state is never written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const
from .data_builders import build_default_categories

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class ZenPlannerStore:
    """Persistence port for the planner coordinator.

    Thin wrapper around Home Assistant's Store API. The coordinator hands it
    complete snapshots via set_data() and schedules async_save(); the store
    never interprets the data beyond the top-level collection keys.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store[dict[str, Any]] = Store(
            hass, const.STORAGE_VERSION, storage_key
        )
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return the canonical data structure for a fresh installation.

        Collections start empty except for the seeded categories.
        """
        return {
            const.DATA_TASKS: [],
            const.DATA_GOALS: [],
            const.DATA_HABITS: [],
            const.DATA_CATEGORIES: build_default_categories(),
            const.DATA_CHAT_MESSAGES: [],
            const.DATA_REMINDERS: [],
            const.DATA_SUBSCRIPTION: const.DEFAULT_SUBSCRIPTION,
        }

    async def async_load(self) -> dict[str, Any] | None:
        """Load the persisted snapshot.

        Returns:
            The stored snapshot, or None when nothing has been saved yet.
            Missing collections are filled with defaults; unknown keys dropped.
        """
        const.LOGGER.debug("DEBUG: ZenPlannerStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing planner storage found")
            return None

        defaults = ZenPlannerStore.get_default_structure()
        self._data = {
            key: existing_data.get(key, defaults[key]) for key in const.PERSISTED_KEYS
        }
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                key: len(value)
                for key, value in self._data.items()
                if isinstance(value, list)
            },
        )
        return self._data

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the last snapshot handed to or loaded by the store."""
        return self._data

    def get_storage_path(self) -> str:
        """Return the absolute path of the storage file."""
        return self._store.path

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the snapshot to be written by the next save."""
        self._data = {key: new_data[key] for key in const.PERSISTED_KEYS}

    async def async_save(self) -> None:
        """Save the current snapshot to storage.

        Errors are logged but not raised; the in-memory state stays
        authoritative and the next mutation retries the write.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Planner data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Delete the storage file from disk and clear the in-memory snapshot."""
        self._data = {}
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
