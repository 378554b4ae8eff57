# File: __init__.py
"""Initialization file for the Zen Planner integration.

Handles setting up the integration, including loading configuration entries,
hydrating the planner store, registering services and HTTP endpoints, and
forwarding setup to the calendar and sensor platforms.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util

from . import const
from .coordinator import ZenPlannerConfigEntry, ZenPlannerCoordinator
from .services import async_setup_services, async_unload_services
from .store import ZenPlannerStore
from .utils.dt_utils import set_default_timezone
from .views import async_register_views


async def async_setup_entry(hass: HomeAssistant, entry: ZenPlannerConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Zen Planner entry: %s", entry.entry_id)

    # Must be done before anything computes a local "today"
    set_default_timezone(dt_util.get_default_time_zone())

    store = ZenPlannerStore(hass, const.STORAGE_KEY)
    coordinator = ZenPlannerCoordinator(hass, entry, store)

    # Listeners first, so signals from replayed mutations reach them
    await coordinator.async_setup_managers()
    # Raises ConfigEntryNotReady on storage failure; queued mutations survive
    await coordinator.async_hydrate()
    await coordinator.async_config_entry_first_refresh()

    entry.runtime_data = coordinator

    async_setup_services(hass)
    async_register_views(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_update_options))

    const.LOGGER.info("INFO: Zen Planner setup complete for entry: %s", entry.entry_id)
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so new completion settings take effect."""
    const.LOGGER.debug("DEBUG: Options changed, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ZenPlannerConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Zen Planner entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing Zen Planner entry: %s", entry.entry_id)

    await ZenPlannerStore(hass, const.STORAGE_KEY).async_delete_storage()

    const.LOGGER.info("INFO: Zen Planner entry data cleared: %s", entry.entry_id)
