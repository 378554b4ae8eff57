# File: options_flow.py
"""Options flow for the Zen Planner integration.

Lets the user change the completion service connection and how often the
coordinator checks for due reminders. Saving reloads the entry.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class ZenPlannerOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the completion service and refresh interval."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Show and validate the options form."""
        current = {**self.config_entry.data, **self.config_entry.options}
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_completion_inputs(user_input)
            if not errors:
                const.LOGGER.debug("DEBUG: Saving Zen Planner options")
                return self.async_create_entry(data=user_input)
            current.update(user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=fh.build_options_schema(current),
            errors=errors,
        )
