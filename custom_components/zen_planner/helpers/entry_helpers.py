"""Config entry lookup helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntryState

from .. import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import ZenPlannerCoordinator


def get_loaded_coordinator(hass: HomeAssistant) -> ZenPlannerCoordinator | None:
    """Return the coordinator of the first loaded Zen Planner entry.

    Returns:
        The coordinator, or None when no entry is currently loaded.
    """
    for entry in hass.config_entries.async_entries(const.DOMAIN):
        if entry.state is ConfigEntryState.LOADED:
            return entry.runtime_data
    return None
