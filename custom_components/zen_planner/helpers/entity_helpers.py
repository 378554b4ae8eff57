"""Entity and signal helpers for Zen Planner."""

from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Each config entry gets its own signal namespace so that two planners
    never see each other's events.

    Format: 'zen_planner_{entry_id}_{suffix}'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


def create_planner_device_info(entry_id: str, title: str) -> DeviceInfo:
    """Return the device every planner entity is grouped under."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, entry_id)},
        name=title,
        manufacturer=const.ZEN_PLANNER_TITLE,
        entry_type=DeviceEntryType.SERVICE,
    )
