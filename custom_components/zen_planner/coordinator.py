# File: coordinator.py
"""Coordinator for the Zen Planner integration.

Owns the planner state (tasks, goals, habits, categories, chat history,
reminders, subscription tier and UI-only state), hydrates it from storage
and is the single write path for every mutation.

Mutations go through mutate(): the change is applied synchronously inside the
event loop, the persisted subset is handed to the store, and listeners are
notified. Mutations issued before hydration finishes are queued and replayed
in order once the stored snapshot has been loaded, so nothing done during
startup is lost or overwritten by the load.
"""

from __future__ import annotations

from collections.abc import Callable
import copy
from datetime import timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady, HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .managers import (
    AdvisorManager,
    GoalManager,
    HabitManager,
    SystemManager,
    TaskManager,
)
from .store import ZenPlannerStore
from .utils.dt_utils import dt_now_utc, dt_parse, dt_today_local

type Mutation = Callable[[dict[str, Any]], None]
type AppliedCallback = Callable[[], None]


class ZenPlannerCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator and state store for one Zen Planner instance.

    The persistence port is injected so tests (or a second instance) can use
    their own store without touching global state.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: ZenPlannerStore,
    ) -> None:
        """Initialize the ZenPlannerCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self.has_hydrated = False
        self._data: dict[str, Any] = ZenPlannerStore.get_default_structure()
        self._ui_state: dict[str, Any] = {
            const.DATA_ACTIVE_TAB: const.DEFAULT_ACTIVE_TAB,
            const.DATA_SELECTED_DATE: dt_today_local().isoformat(),
        }
        self._pending_mutations: list[tuple[Mutation, AppliedCallback | None]] = []

        self.task_manager = TaskManager(hass, self)
        self.goal_manager = GoalManager(hass, self)
        self.habit_manager = HabitManager(hass, self)
        self.system_manager = SystemManager(hass, self)
        self.advisor_manager = AdvisorManager(hass, self)

    # -------------------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------------------

    @property
    def tasks(self) -> list[dict[str, Any]]:
        """Return the task collection."""
        return self._data[const.DATA_TASKS]

    @property
    def goals(self) -> list[dict[str, Any]]:
        """Return the goal collection."""
        return self._data[const.DATA_GOALS]

    @property
    def habits(self) -> list[dict[str, Any]]:
        """Return the habit collection."""
        return self._data[const.DATA_HABITS]

    @property
    def categories(self) -> list[dict[str, Any]]:
        """Return the category collection."""
        return self._data[const.DATA_CATEGORIES]

    @property
    def chat_messages(self) -> list[dict[str, Any]]:
        """Return the advisor conversation."""
        return self._data[const.DATA_CHAT_MESSAGES]

    @property
    def reminders(self) -> list[dict[str, Any]]:
        """Return the reminder collection."""
        return self._data[const.DATA_REMINDERS]

    @property
    def subscription(self) -> str:
        """Return the selected subscription tier."""
        return self._data[const.DATA_SUBSCRIPTION]

    @property
    def ui_state(self) -> dict[str, Any]:
        """Return the UI-only state (active tab, selected date)."""
        return self._ui_state

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the persisted subset of state."""
        return copy.deepcopy({key: self._data[key] for key in const.PERSISTED_KEYS})

    # -------------------------------------------------------------------------------------
    # Hydration
    # -------------------------------------------------------------------------------------

    async def async_hydrate(self) -> None:
        """Load the stored snapshot, then replay queued mutations.

        Sets has_hydrated exactly once. A storage failure leaves the queue
        intact and raises ConfigEntryNotReady so Home Assistant retries.
        """
        if self.has_hydrated:
            return

        try:
            stored = await self.store.async_load()
        except (HomeAssistantError, OSError, ValueError) as err:
            const.LOGGER.error("ERROR: Failed to load planner storage: %s", err)
            raise ConfigEntryNotReady(f"Unable to load planner storage: {err}") from err

        if stored is not None:
            self._data = copy.deepcopy(stored)
        self.has_hydrated = True

        pending, self._pending_mutations = self._pending_mutations, []
        const.LOGGER.info(
            "INFO: Planner hydrated (%s tasks, %s goals, %s habits); replaying %s queued mutation(s)",
            len(self.tasks),
            len(self.goals),
            len(self.habits),
            len(pending),
        )
        for mutation, _ in pending:
            mutation(self._data)
        if pending:
            self._persist()
        self.async_set_updated_data(self._data)
        for _, on_applied in pending:
            if on_applied is not None:
                on_applied()

    # -------------------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------------------

    def mutate(
        self, mutation: Mutation, on_applied: AppliedCallback | None = None
    ) -> None:
        """Apply a mutation to the state, persist it and notify listeners.

        Before hydration the mutation is queued instead of applied.
        on_applied runs once the mutation has been applied, after hydration
        for queued mutations.
        """
        if not self.has_hydrated:
            const.LOGGER.debug(
                "DEBUG: Queuing mutation until storage hydration completes (%s queued)",
                len(self._pending_mutations) + 1,
            )
            self._pending_mutations.append((mutation, on_applied))
            return

        mutation(self._data)
        self._persist_and_update()
        if on_applied is not None:
            on_applied()

    def set_ui_state(self, key: str, value: Any) -> None:
        """Assign a UI-only field. Not persisted."""
        self._ui_state[key] = value
        self.async_update_listeners()

    def _persist(self) -> None:
        """Save the persisted subset to storage."""
        self.store.set_data(self.snapshot())
        self.hass.add_job(self.store.async_save)

    def _persist_and_update(self) -> None:
        """Save and push the new state to entities."""
        self._persist()
        self.async_set_updated_data(self._data)

    # -------------------------------------------------------------------------------------
    # Periodic update
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update: fire reminders that have come due."""
        try:
            self._process_due_reminders()
        except (KeyError, TypeError, ValueError) as err:
            raise UpdateFailed(f"Error updating Zen Planner data: {err}") from err
        return self._data

    def _process_due_reminders(self) -> None:
        """Mark due reminders notified and fire a bus event for each."""
        if not self.has_hydrated:
            return

        now = dt_now_utc()
        due = [
            reminder
            for reminder in self.reminders
            if not reminder.get(const.DATA_REMINDER_IS_NOTIFIED)
            and (fire_at := dt_parse(reminder.get(const.DATA_REMINDER_AT))) is not None
            and fire_at <= now
        ]
        if not due:
            return

        for reminder in due:
            reminder[const.DATA_REMINDER_IS_NOTIFIED] = True
            self.hass.bus.async_fire(
                const.EVENT_REMINDER_DUE,
                {
                    "reminder_id": reminder[const.DATA_ID],
                    const.DATA_REMINDER_TASK_ID: reminder[const.DATA_REMINDER_TASK_ID],
                    const.DATA_REMINDER_TASK_TITLE: reminder.get(
                        const.DATA_REMINDER_TASK_TITLE, ""
                    ),
                    const.DATA_REMINDER_DUE_DATE: reminder.get(
                        const.DATA_REMINDER_DUE_DATE
                    ),
                    const.DATA_REMINDER_DUE_TIME: reminder.get(
                        const.DATA_REMINDER_DUE_TIME
                    ),
                },
            )
            const.LOGGER.debug(
                "DEBUG: Reminder %s fired for task '%s'",
                reminder[const.DATA_ID],
                reminder.get(const.DATA_REMINDER_TASK_TITLE),
            )
        self._persist()

    # -------------------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------------------

    async def async_setup_managers(self) -> None:
        """Let each manager subscribe to the events it handles."""
        for manager in (
            self.task_manager,
            self.goal_manager,
            self.habit_manager,
            self.system_manager,
            self.advisor_manager,
        ):
            await manager.async_setup()


type ZenPlannerConfigEntry = ConfigEntry[ZenPlannerCoordinator]
