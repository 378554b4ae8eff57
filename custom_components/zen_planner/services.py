# File: services.py
"""Defines custom services for the Zen Planner integration.

Every planner operation is exposed as a service so scripts, automations and
the dashboard can drive the store. Schemas check shapes; value rules
(priorities, dates, tiers) are enforced by the builders and surface as
ServiceValidationError with a translated message.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv
import voluptuous as vol

from . import const
from .data_builders import EntityValidationError
from .helpers.entry_helpers import get_loaded_coordinator
from .utils.dt_utils import dt_today_local

if TYPE_CHECKING:
    from .coordinator import ZenPlannerCoordinator

type ServiceHandler = Callable[[ServiceCall], Awaitable[ServiceResponse]]

# --- Service Schemas ---
_SUBTASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_TITLE): cv.string,
        vol.Optional(const.DATA_COMPLETED): cv.boolean,
    },
    extra=vol.ALLOW_EXTRA,
)

_MILESTONE_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_TITLE): cv.string,
        vol.Optional(const.DATA_COMPLETED): cv.boolean,
    },
    extra=vol.ALLOW_EXTRA,
)

_TASK_FIELDS = {
    vol.Optional(const.DATA_DESCRIPTION): cv.string,
    vol.Optional(const.DATA_COMPLETED): cv.boolean,
    vol.Optional(const.DATA_TASK_PRIORITY): cv.string,
    vol.Optional(const.DATA_TASK_DUE_DATE): vol.Any(None, cv.string),
    vol.Optional(const.DATA_TASK_DUE_TIME): vol.Any(None, cv.string),
    vol.Optional(const.DATA_TASK_REMINDER_MINUTES_BEFORE): vol.Any(
        None, vol.Coerce(int)
    ),
    vol.Optional(const.DATA_TASK_CATEGORY): cv.string,
    vol.Optional(const.DATA_TASK_SUBTASKS): vol.All(cv.ensure_list, [_SUBTASK_SCHEMA]),
    vol.Optional(const.DATA_TASK_GOAL_ID): vol.Any(None, cv.string),
}

ADD_TASK_SCHEMA = vol.Schema({vol.Required(const.DATA_TITLE): cv.string, **_TASK_FIELDS})

UPDATE_TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Optional(const.DATA_TITLE): cv.string,
        **_TASK_FIELDS,
    }
)

TASK_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_TASK_ID): cv.string})

REORDER_TASKS_SCHEMA = vol.Schema(
    {vol.Required(const.FIELD_TASK_IDS): vol.All(cv.ensure_list, [cv.string])}
)

_GOAL_FIELDS = {
    vol.Optional(const.DATA_DESCRIPTION): cv.string,
    vol.Optional(const.DATA_GOAL_TARGET_DATE): vol.Any(None, cv.string),
    vol.Optional(const.DATA_COLOR): cv.string,
    vol.Optional(const.DATA_GOAL_MILESTONES): vol.All(
        cv.ensure_list, [_MILESTONE_SCHEMA]
    ),
}

ADD_GOAL_SCHEMA = vol.Schema({vol.Required(const.DATA_TITLE): cv.string, **_GOAL_FIELDS})

UPDATE_GOAL_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_GOAL_ID): cv.string,
        vol.Optional(const.DATA_TITLE): cv.string,
        **_GOAL_FIELDS,
    }
)

GOAL_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_GOAL_ID): cv.string})

TOGGLE_MILESTONE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_GOAL_ID): cv.string,
        vol.Required(const.FIELD_MILESTONE_ID): cv.string,
    }
)

_HABIT_FIELDS = {
    vol.Optional(const.DATA_DESCRIPTION): cv.string,
    vol.Optional(const.DATA_HABIT_FREQUENCY): cv.string,
    vol.Optional(const.DATA_COLOR): cv.string,
}

ADD_HABIT_SCHEMA = vol.Schema(
    {vol.Required(const.DATA_TITLE): cv.string, **_HABIT_FIELDS}
)

UPDATE_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Optional(const.DATA_TITLE): cv.string,
        **_HABIT_FIELDS,
    }
)

HABIT_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_HABIT_ID): cv.string})

TOGGLE_HABIT_COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Optional(const.FIELD_DATE): cv.string,
    }
)

ADD_CATEGORY_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_CATEGORY_NAME): cv.string,
        vol.Optional(const.DATA_COLOR): cv.string,
        vol.Optional(const.DATA_CATEGORY_ICON): cv.string,
    }
)

ADD_CHAT_MESSAGE_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_CHAT_ROLE): cv.string,
        vol.Required(const.DATA_CHAT_CONTENT): cv.string,
    }
)

ADD_REMINDER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Optional(const.DATA_REMINDER_TASK_TITLE): cv.string,
        vol.Optional(const.DATA_REMINDER_DUE_DATE): cv.string,
        vol.Optional(const.DATA_REMINDER_DUE_TIME): cv.string,
        vol.Optional(const.DATA_REMINDER_AT): cv.string,
        vol.Optional("minutes_before"): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)

DISMISS_REMINDER_SCHEMA = vol.Schema({vol.Required(const.FIELD_REMINDER_ID): cv.string})

SET_SUBSCRIPTION_SCHEMA = vol.Schema({vol.Required(const.FIELD_TIER): cv.string})

SET_ACTIVE_TAB_SCHEMA = vol.Schema({vol.Required(const.FIELD_TAB): cv.string})

SET_SELECTED_DATE_SCHEMA = vol.Schema({vol.Required(const.FIELD_DATE): cv.string})

ASK_ADVISOR_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MESSAGE): vol.All(
            cv.string, vol.Strip, vol.Length(min=1, max=const.MAX_MESSAGE_LENGTH)
        ),
    }
)

GET_TASK_STATS_SCHEMA = vol.Schema({})


def _get_coordinator(hass: HomeAssistant) -> ZenPlannerCoordinator:
    coordinator = get_loaded_coordinator(hass)
    if coordinator is None:
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NOT_LOADED,
        )
    return coordinator


def _fields(call: ServiceCall, *exclude: str) -> dict[str, Any]:
    """Return the call data without the id fields that select the target."""
    return {k: v for k, v in call.data.items() if k not in exclude}


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Zen Planner services."""

    # --- Tasks ---

    async def handle_add_task(call: ServiceCall) -> None:
        """Handle adding a task."""
        _get_coordinator(hass).task_manager.add_task(dict(call.data))

    async def handle_update_task(call: ServiceCall) -> None:
        """Handle updating a task."""
        _get_coordinator(hass).task_manager.update_task(
            call.data[const.FIELD_TASK_ID], _fields(call, const.FIELD_TASK_ID)
        )

    async def handle_delete_task(call: ServiceCall) -> None:
        """Handle deleting a task."""
        _get_coordinator(hass).task_manager.delete_task(call.data[const.FIELD_TASK_ID])

    async def handle_toggle_task(call: ServiceCall) -> None:
        """Handle toggling a task's completed flag."""
        _get_coordinator(hass).task_manager.toggle_task(call.data[const.FIELD_TASK_ID])

    async def handle_reorder_tasks(call: ServiceCall) -> None:
        """Handle reordering tasks."""
        _get_coordinator(hass).task_manager.reorder_tasks_by_ids(
            call.data[const.FIELD_TASK_IDS]
        )

    # --- Goals ---

    async def handle_add_goal(call: ServiceCall) -> None:
        """Handle adding a goal."""
        _get_coordinator(hass).goal_manager.add_goal(dict(call.data))

    async def handle_update_goal(call: ServiceCall) -> None:
        """Handle updating a goal."""
        _get_coordinator(hass).goal_manager.update_goal(
            call.data[const.FIELD_GOAL_ID], _fields(call, const.FIELD_GOAL_ID)
        )

    async def handle_delete_goal(call: ServiceCall) -> None:
        """Handle deleting a goal."""
        _get_coordinator(hass).goal_manager.delete_goal(call.data[const.FIELD_GOAL_ID])

    async def handle_toggle_milestone(call: ServiceCall) -> None:
        """Handle toggling a goal milestone."""
        _get_coordinator(hass).goal_manager.toggle_milestone(
            call.data[const.FIELD_GOAL_ID], call.data[const.FIELD_MILESTONE_ID]
        )

    # --- Habits ---

    async def handle_add_habit(call: ServiceCall) -> None:
        """Handle adding a habit."""
        _get_coordinator(hass).habit_manager.add_habit(dict(call.data))

    async def handle_update_habit(call: ServiceCall) -> None:
        """Handle updating a habit."""
        _get_coordinator(hass).habit_manager.update_habit(
            call.data[const.FIELD_HABIT_ID], _fields(call, const.FIELD_HABIT_ID)
        )

    async def handle_delete_habit(call: ServiceCall) -> None:
        """Handle deleting a habit."""
        _get_coordinator(hass).habit_manager.delete_habit(
            call.data[const.FIELD_HABIT_ID]
        )

    async def handle_toggle_habit_completion(call: ServiceCall) -> None:
        """Handle marking or unmarking a habit day (default: today)."""
        day = call.data.get(const.FIELD_DATE) or dt_today_local().isoformat()
        _get_coordinator(hass).habit_manager.toggle_habit_completion(
            call.data[const.FIELD_HABIT_ID], day
        )

    # --- Categories, chat, reminders ---

    async def handle_add_category(call: ServiceCall) -> None:
        """Handle adding a category."""
        _get_coordinator(hass).system_manager.add_category(dict(call.data))

    async def handle_add_chat_message(call: ServiceCall) -> None:
        """Handle appending a chat message."""
        _get_coordinator(hass).system_manager.add_chat_message(dict(call.data))

    async def handle_clear_chat(call: ServiceCall) -> None:
        """Handle clearing the chat history."""
        _get_coordinator(hass).system_manager.clear_chat()

    async def handle_add_reminder(call: ServiceCall) -> None:
        """Handle scheduling a reminder."""
        reminder_input = _fields(call, const.FIELD_TASK_ID)
        reminder_input[const.DATA_REMINDER_TASK_ID] = call.data[const.FIELD_TASK_ID]
        _get_coordinator(hass).task_manager.add_reminder(reminder_input)

    async def handle_dismiss_reminder(call: ServiceCall) -> None:
        """Handle dismissing a reminder."""
        _get_coordinator(hass).task_manager.dismiss_reminder(
            call.data[const.FIELD_REMINDER_ID]
        )

    # --- Subscription and UI state ---

    async def handle_set_subscription(call: ServiceCall) -> None:
        """Handle selecting a subscription tier."""
        _get_coordinator(hass).system_manager.set_subscription(
            call.data[const.FIELD_TIER]
        )

    async def handle_set_active_tab(call: ServiceCall) -> None:
        """Handle recording the active tab."""
        _get_coordinator(hass).system_manager.set_active_tab(call.data[const.FIELD_TAB])

    async def handle_set_selected_date(call: ServiceCall) -> None:
        """Handle recording the selected calendar date."""
        _get_coordinator(hass).system_manager.set_selected_date(
            call.data[const.FIELD_DATE]
        )

    # --- Responses ---

    async def handle_ask_advisor(call: ServiceCall) -> ServiceResponse:
        """Handle an advisor round-trip and return the assistant message."""
        message = await _get_coordinator(hass).advisor_manager.async_ask(
            call.data[const.FIELD_MESSAGE]
        )
        if message is None:
            return {"discarded": True, const.DATA_CHAT_CONTENT: None}
        return {"discarded": False, **message}

    async def handle_get_task_stats(call: ServiceCall) -> ServiceResponse:
        """Return task, habit and goal statistics."""
        coordinator = _get_coordinator(hass)
        return {
            const.DATA_TASKS: dict(coordinator.task_manager.get_task_stats()),
            const.DATA_HABITS: dict(coordinator.habit_manager.get_habit_summary()),
            const.DATA_GOALS: dict(coordinator.goal_manager.get_goal_summary()),
        }

    services: list[tuple[str, ServiceHandler, vol.Schema, SupportsResponse]] = [
        (const.SERVICE_ADD_TASK, handle_add_task, ADD_TASK_SCHEMA, SupportsResponse.NONE),
        (
            const.SERVICE_UPDATE_TASK,
            handle_update_task,
            UPDATE_TASK_SCHEMA,
            SupportsResponse.NONE,
        ),
        (const.SERVICE_DELETE_TASK, handle_delete_task, TASK_ID_SCHEMA, SupportsResponse.NONE),
        (const.SERVICE_TOGGLE_TASK, handle_toggle_task, TASK_ID_SCHEMA, SupportsResponse.NONE),
        (
            const.SERVICE_REORDER_TASKS,
            handle_reorder_tasks,
            REORDER_TASKS_SCHEMA,
            SupportsResponse.NONE,
        ),
        (const.SERVICE_ADD_GOAL, handle_add_goal, ADD_GOAL_SCHEMA, SupportsResponse.NONE),
        (
            const.SERVICE_UPDATE_GOAL,
            handle_update_goal,
            UPDATE_GOAL_SCHEMA,
            SupportsResponse.NONE,
        ),
        (const.SERVICE_DELETE_GOAL, handle_delete_goal, GOAL_ID_SCHEMA, SupportsResponse.NONE),
        (
            const.SERVICE_TOGGLE_MILESTONE,
            handle_toggle_milestone,
            TOGGLE_MILESTONE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (const.SERVICE_ADD_HABIT, handle_add_habit, ADD_HABIT_SCHEMA, SupportsResponse.NONE),
        (
            const.SERVICE_UPDATE_HABIT,
            handle_update_habit,
            UPDATE_HABIT_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_DELETE_HABIT,
            handle_delete_habit,
            HABIT_ID_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_TOGGLE_HABIT_COMPLETION,
            handle_toggle_habit_completion,
            TOGGLE_HABIT_COMPLETION_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_ADD_CATEGORY,
            handle_add_category,
            ADD_CATEGORY_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_ADD_CHAT_MESSAGE,
            handle_add_chat_message,
            ADD_CHAT_MESSAGE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (const.SERVICE_CLEAR_CHAT, handle_clear_chat, vol.Schema({}), SupportsResponse.NONE),
        (
            const.SERVICE_ADD_REMINDER,
            handle_add_reminder,
            ADD_REMINDER_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_DISMISS_REMINDER,
            handle_dismiss_reminder,
            DISMISS_REMINDER_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_SET_SUBSCRIPTION,
            handle_set_subscription,
            SET_SUBSCRIPTION_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_SET_ACTIVE_TAB,
            handle_set_active_tab,
            SET_ACTIVE_TAB_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_SET_SELECTED_DATE,
            handle_set_selected_date,
            SET_SELECTED_DATE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_ASK_ADVISOR,
            handle_ask_advisor,
            ASK_ADVISOR_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_GET_TASK_STATS,
            handle_get_task_stats,
            GET_TASK_STATS_SCHEMA,
            SupportsResponse.ONLY,
        ),
    ]

    for service, handler, schema, supports_response in services:
        hass.services.async_register(
            const.DOMAIN,
            service,
            _translate_validation_errors(handler),
            schema=schema,
            supports_response=supports_response,
        )

    const.LOGGER.info("INFO: Zen Planner services have been registered")


def _translate_validation_errors(handler: ServiceHandler) -> ServiceHandler:
    """Wrap a handler so builder validation errors become ServiceValidationError."""

    async def _wrapped(call: ServiceCall) -> ServiceResponse:
        try:
            return await handler(call)
        except EntityValidationError as err:
            const.LOGGER.warning(
                "WARNING: %s rejected: invalid %s", call.service, err.field
            )
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=err.translation_key,
                translation_placeholders={"value": "", **err.placeholders},
            ) from err

    return _wrapped


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Zen Planner services when unloading the integration."""
    services = [
        const.SERVICE_ADD_TASK,
        const.SERVICE_UPDATE_TASK,
        const.SERVICE_DELETE_TASK,
        const.SERVICE_TOGGLE_TASK,
        const.SERVICE_REORDER_TASKS,
        const.SERVICE_ADD_GOAL,
        const.SERVICE_UPDATE_GOAL,
        const.SERVICE_DELETE_GOAL,
        const.SERVICE_TOGGLE_MILESTONE,
        const.SERVICE_ADD_HABIT,
        const.SERVICE_UPDATE_HABIT,
        const.SERVICE_DELETE_HABIT,
        const.SERVICE_TOGGLE_HABIT_COMPLETION,
        const.SERVICE_ADD_CATEGORY,
        const.SERVICE_ADD_CHAT_MESSAGE,
        const.SERVICE_CLEAR_CHAT,
        const.SERVICE_ADD_REMINDER,
        const.SERVICE_DISMISS_REMINDER,
        const.SERVICE_SET_SUBSCRIPTION,
        const.SERVICE_SET_ACTIVE_TAB,
        const.SERVICE_SET_SELECTED_DATE,
        const.SERVICE_ASK_ADVISOR,
        const.SERVICE_GET_TASK_STATS,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Zen Planner services have been unregistered")
