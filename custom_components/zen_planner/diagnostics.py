"""Diagnostics support for Zen Planner integration.

The config entry diagnostics return the persisted planner snapshot exactly
as it is stored, so it can be pasted back during data recovery. The API key
of the completion service is redacted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.diagnostics import async_redact_data

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .coordinator import ZenPlannerConfigEntry

TO_REDACT = {const.CONF_COMPLETION_API_KEY}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ZenPlannerConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator = entry.runtime_data
    return {
        "config": async_redact_data({**entry.data, **entry.options}, TO_REDACT),
        "ui_state": dict(coordinator.ui_state),
        "pending_reminders": sum(
            1
            for reminder in coordinator.reminders
            if not reminder.get(const.DATA_REMINDER_IS_NOTIFIED)
        ),
        "storage": coordinator.snapshot(),
    }
