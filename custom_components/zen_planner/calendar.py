# pyright: reportIncompatibleVariableOverride=false
"""Calendar platform for Zen Planner integration.

Provides a read-only calendar of task due dates and goal target dates.
Tasks without a due time are all-day events; tasks with one are short timed
events. Goals are always all-day.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from homeassistant.components.calendar import CalendarEntity, CalendarEvent
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_connect

from . import const
from .engines.calendar_engine import CalendarEngine
from .entity import ZenPlannerCoordinatorEntity
from .helpers.entity_helpers import get_event_signal
from .utils.dt_utils import dt_combine_local, dt_now_utc, dt_parse_date

if TYPE_CHECKING:
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import ZenPlannerConfigEntry, ZenPlannerCoordinator
    from .type_defs import PlannerCalendarEvent

# Set to 0 (unlimited) for coordinator-based entities that don't poll
PARALLEL_UPDATES = 0


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ZenPlannerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Zen Planner calendar platform."""
    async_add_entities([ZenPlannerCalendar(entry.runtime_data)])


class ZenPlannerCalendar(ZenPlannerCoordinatorEntity, CalendarEntity):
    """Calendar entity projecting dated tasks and goals."""

    _attr_translation_key = const.TRANS_KEY_CALENDAR_NAME

    def __init__(self, coordinator: ZenPlannerCoordinator) -> None:
        """Initialize the calendar entity."""
        super().__init__(coordinator, const.CALENDAR_UID_SUFFIX)
        self._events_cache: list[CalendarEvent] | None = None

    async def async_added_to_hass(self) -> None:
        """Subscribe to mutation signals that invalidate the event cache."""
        await super().async_added_to_hass()

        for suffix in (
            const.SIGNAL_SUFFIX_TASKS_CHANGED,
            const.SIGNAL_SUFFIX_TASK_DELETED,
            const.SIGNAL_SUFFIX_GOALS_CHANGED,
            const.SIGNAL_SUFFIX_GOAL_DELETED,
        ):
            signal = get_event_signal(self.coordinator.config_entry.entry_id, suffix)
            self.async_on_remove(
                async_dispatcher_connect(self.hass, signal, self._on_calendar_data_changed)
            )

    @callback
    def _on_calendar_data_changed(self, _payload: dict[str, Any] | None = None) -> None:
        """Invalidate cached events when tasks or goals mutate."""
        self._events_cache = None
        self.async_write_ha_state()

    @callback
    def _handle_coordinator_update(self) -> None:
        """Drop cached events whenever the coordinator pushes new state."""
        self._events_cache = None
        super()._handle_coordinator_update()

    @staticmethod
    def _to_calendar_event(event: PlannerCalendarEvent) -> CalendarEvent | None:
        day = dt_parse_date(event["date"])
        if day is None:
            return None

        prefix = "✓ " if event["completed"] else ""
        description = f"{event['type']}"
        if event.get("priority"):
            description = f"{description} ({event['priority']})"

        start: datetime.date | datetime.datetime
        end: datetime.date | datetime.datetime
        if event.get("time"):
            start = dt_combine_local(day, event["time"])
            end = start + datetime.timedelta(minutes=const.CALENDAR_EVENT_DURATION)
        else:
            start = day
            end = day + datetime.timedelta(days=1)

        return CalendarEvent(
            start=start,
            end=end,
            summary=f"{prefix}{event['title']}",
            description=description,
            uid=f"{event['type']}_{event['id']}",
        )

    def _get_cached_events(self) -> list[CalendarEvent]:
        """Return all projected events, rebuilding them after a mutation."""
        if self._events_cache is None:
            projected = CalendarEngine.project_events(
                self.coordinator.tasks, self.coordinator.goals
            )
            self._events_cache = [
                calendar_event
                for calendar_event in map(self._to_calendar_event, projected)
                if calendar_event is not None
            ]
        return list(self._events_cache)

    @staticmethod
    def _event_overlaps_window(
        event: CalendarEvent,
        window_start: datetime.datetime,
        window_end: datetime.datetime,
    ) -> bool:
        return event.start_datetime_local < window_end and (
            event.end_datetime_local > window_start
        )

    async def async_get_events(
        self,
        hass: HomeAssistant,
        start_date: datetime.datetime,
        end_date: datetime.datetime,
    ) -> list[CalendarEvent]:
        """Return the events overlapping [start_date, end_date]."""
        return [
            event
            for event in self._get_cached_events()
            if self._event_overlaps_window(event, start_date, end_date)
        ]

    @property
    def event(self) -> CalendarEvent | None:
        """Return the current or next upcoming event."""
        now = dt_now_utc()
        upcoming = [
            event for event in self._get_cached_events() if event.end_datetime_local > now
        ]
        if not upcoming:
            return None
        return min(upcoming, key=lambda event: event.start_datetime_local)

    async def async_create_event(self, **kwargs: Any) -> None:
        """Create a new event - not supported for read-only calendar."""
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_CALENDAR_READ_ONLY,
        )

    async def async_delete_event(
        self,
        uid: str,
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Delete an event - not supported for read-only calendar."""
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_CALENDAR_READ_ONLY,
        )

    async def async_update_event(
        self,
        uid: str,
        event: dict[str, Any],
        recurrence_id: str | None = None,
        recurrence_range: str | None = None,
    ) -> None:
        """Update an event - not supported for read-only calendar."""
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_CALENDAR_READ_ONLY,
        )
