# File: flow_helpers.py
"""Helpers for the Zen Planner integration's Config and Options flow.

Schema builders and validation shared by both flows:
- validate_completion_inputs(user_input) -> errors_dict (empty = valid)
- build_completion_schema(defaults) -> vol.Schema
- build_options_schema(defaults) -> vol.Schema
"""

from __future__ import annotations

from typing import Any

from homeassistant.helpers import config_validation as cv
import voluptuous as vol

from . import const


def build_completion_schema(defaults: dict[str, Any]) -> vol.Schema:
    """Return the completion service form, prefilled from defaults."""
    return vol.Schema(
        {
            vol.Required(
                const.CONF_COMPLETION_BASE_URL,
                default=defaults.get(
                    const.CONF_COMPLETION_BASE_URL, const.DEFAULT_COMPLETION_BASE_URL
                ),
            ): cv.string,
            vol.Optional(
                const.CONF_COMPLETION_API_KEY,
                default=defaults.get(
                    const.CONF_COMPLETION_API_KEY, const.DEFAULT_COMPLETION_API_KEY
                ),
            ): cv.string,
            vol.Required(
                const.CONF_COMPLETION_MODEL,
                default=defaults.get(
                    const.CONF_COMPLETION_MODEL, const.DEFAULT_COMPLETION_MODEL
                ),
            ): cv.string,
        }
    )


def build_options_schema(defaults: dict[str, Any]) -> vol.Schema:
    """Return the options form: completion settings plus refresh interval."""
    return build_completion_schema(defaults).extend(
        {
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=defaults.get(
                    const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                ),
            ): vol.All(vol.Coerce(int), vol.Range(min=1, max=60)),
        }
    )


def validate_completion_inputs(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate the completion service fields.

    Returns:
        Errors keyed by field, empty when the input is valid.
    """
    errors: dict[str, str] = {}
    try:
        cv.url(user_input.get(const.CONF_COMPLETION_BASE_URL))
    except vol.Invalid:
        errors[const.CONF_COMPLETION_BASE_URL] = const.TRANS_KEY_ERROR_INVALID_URL
    if not str(user_input.get(const.CONF_COMPLETION_MODEL, "")).strip():
        errors[const.CONF_COMPLETION_MODEL] = const.TRANS_KEY_ERROR_INVALID_NAME
    return errors
