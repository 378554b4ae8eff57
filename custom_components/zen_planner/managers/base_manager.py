"""Base manager class for Zen Planner managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import ZenPlannerCoordinator


class BaseManager(ABC):
    """Base class for all Zen Planner managers with scoped event support.

    Provides:
    - Instance-scoped event emitting (emit)
    - Instance-scoped event listening (listen)
    - Automatic cleanup via coordinator's config_entry.async_on_unload

    Data Persistence:
    - All state changes go through coordinator.mutate(), which persists and
      notifies entities. Managers never write to storage directly.

    Subclasses must implement:
    - async_setup(): Subscribe to events, initialize state
    """

    def __init__(self, hass: HomeAssistant, coordinator: ZenPlannerCoordinator) -> None:
        """Initialize manager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator managing this integration instance
        """
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id

    def emit(self, suffix: str, **payload: Any) -> None:
        """Emit instance-scoped event to other managers and entities.

        Args:
            suffix: Signal suffix constant (e.g., const.SIGNAL_SUFFIX_GOAL_DELETED)
            **payload: Event data dict passed to listeners
        """
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "Emitting event '%s' for instance %s with payload keys: %s",
            suffix,
            self.entry_id,
            list(payload.keys()),
        )
        # Pass payload as single dict argument (dispatcher only supports *args)
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Subscribe to instance-scoped event with automatic cleanup.

        The subscription is removed when the config entry is unloaded.
        """
        signal = get_event_signal(self.entry_id, suffix)
        unsub = async_dispatcher_connect(self.hass, signal, callback)
        self.coordinator.config_entry.async_on_unload(unsub)
        const.LOGGER.debug(
            "Manager %s listening to event '%s' for instance %s",
            self.__class__.__name__,
            suffix,
            self.entry_id,
        )

    @staticmethod
    def find_by_id(
        items: list[dict[str, Any]], item_id: str
    ) -> dict[str, Any] | None:
        """Return the item whose id matches, or None."""
        return next((item for item in items if item.get(const.DATA_ID) == item_id), None)

    def mutate_and_emit(
        self, mutation: Callable[[dict[str, Any]], None], suffix: str, **payload: Any
    ) -> None:
        """Apply a mutation through the coordinator, then emit once it has applied.

        Before hydration the signal is held back with the queued mutation, so
        listeners never refresh against state that has not changed yet.
        """
        self.coordinator.mutate(mutation, lambda: self.emit(suffix, **payload))

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager (subscribe to events, initialize state).

        Called once during integration setup.
        """
