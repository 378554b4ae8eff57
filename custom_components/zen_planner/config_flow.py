# File: config_flow.py
"""Config flow for the Zen Planner integration.

A single planner instance is allowed. The only setup step collects the
completion service connection (base URL, optional API key, model).
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import ZenPlannerOptionsFlowHandler


class ZenPlannerConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Zen Planner."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Collect the completion service settings."""
        if self._async_current_entries():
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_completion_inputs(user_input)
            if not errors:
                const.LOGGER.info(
                    "INFO: Creating Zen Planner entry (completion service %s)",
                    user_input[const.CONF_COMPLETION_BASE_URL],
                )
                return self.async_create_entry(
                    title=const.ZEN_PLANNER_TITLE, data=user_input
                )

        return self.async_show_form(
            step_id="user",
            data_schema=fh.build_completion_schema(user_input or {}),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> ZenPlannerOptionsFlowHandler:
        """Return the Options Flow."""
        return ZenPlannerOptionsFlowHandler()
