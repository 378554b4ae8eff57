"""Tests for the Zen Planner coordinator and its managers.

Covers the write path (mutate, persist, notify), hydration with queued
mutations, cross-entity rules (goal deletion, task deletion), habit streaks,
milestone progress and reminder firing.
"""

# pylint: disable=redefined-outer-name
# pylint: disable=protected-access

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers.dispatcher import async_dispatcher_connect
import pytest
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_capture_events,
)

from custom_components.zen_planner import const
from custom_components.zen_planner.coordinator import ZenPlannerCoordinator
from custom_components.zen_planner.data_builders import (
    EntityValidationError,
    build_goal,
)
from custom_components.zen_planner.helpers.completion_client import (
    CompletionServiceError,
)
from custom_components.zen_planner.helpers.entity_helpers import get_event_signal
from custom_components.zen_planner.store import ZenPlannerStore
from custom_components.zen_planner.utils.dt_utils import dt_now_utc

pytestmark = pytest.mark.asyncio

TODAY = date(2025, 4, 7)


def _stored_task(task_id: str, title: str) -> dict[str, Any]:
    return {
        const.DATA_ID: task_id,
        const.DATA_TITLE: title,
        const.DATA_COMPLETED: False,
        const.DATA_TASK_PRIORITY: const.PRIORITY_MEDIUM,
        const.DATA_TASK_CATEGORY: "work",
        const.DATA_TASK_SUBTASKS: [],
        const.DATA_CREATED_AT: "2025-04-01T09:00:00+00:00",
        const.DATA_UPDATED_AT: "2025-04-01T09:00:00+00:00",
        const.DATA_TASK_ORDER: 0,
    }


# =============================================================================
# TEST: Setup and persistence
# =============================================================================


async def test_setup_loads_fresh_state(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """A fresh planner is hydrated with seeded categories."""
    coordinator: ZenPlannerCoordinator = init_integration.runtime_data

    assert init_integration.state is ConfigEntryState.LOADED
    assert coordinator.has_hydrated
    assert coordinator.tasks == []
    assert [c["id"] for c in coordinator.categories][:2] == ["personal", "work"]
    assert coordinator.subscription == const.TIER_FREE
    assert coordinator.ui_state[const.DATA_ACTIVE_TAB] == const.DEFAULT_ACTIVE_TAB


async def test_mutation_is_persisted(
    hass: HomeAssistant,
    coordinator: ZenPlannerCoordinator,
    hass_storage: dict[str, Any],
) -> None:
    """Adding a task writes the persisted subset to storage."""
    coordinator.task_manager.add_task({const.DATA_TITLE: "Write report"})
    await hass.async_block_till_done()

    saved = hass_storage[const.STORAGE_KEY]["data"]
    assert [t["title"] for t in saved[const.DATA_TASKS]] == ["Write report"]
    assert const.DATA_ACTIVE_TAB not in saved


async def test_ui_state_not_persisted(
    hass: HomeAssistant,
    coordinator: ZenPlannerCoordinator,
    hass_storage: dict[str, Any],
) -> None:
    """Active tab and selected date live only in memory."""
    coordinator.system_manager.set_active_tab("habits")
    coordinator.system_manager.set_selected_date("2025-04-07")
    await hass.async_block_till_done()

    assert coordinator.ui_state == {
        const.DATA_ACTIVE_TAB: "habits",
        const.DATA_SELECTED_DATE: "2025-04-07",
    }
    assert const.STORAGE_KEY not in hass_storage


async def test_snapshot_is_a_copy(coordinator: ZenPlannerCoordinator) -> None:
    """Changing a snapshot never changes the live state."""
    coordinator.task_manager.add_task({const.DATA_TITLE: "A"})
    snapshot = coordinator.snapshot()
    snapshot[const.DATA_TASKS][0][const.DATA_TITLE] = "Changed"
    assert coordinator.tasks[0][const.DATA_TITLE] == "A"


async def test_storage_round_trip(
    hass: HomeAssistant,
    coordinator: ZenPlannerCoordinator,
    hass_storage: dict[str, Any],
) -> None:
    """A fresh coordinator hydrates exactly what the previous one saved."""
    coordinator.goal_manager.add_goal(
        {const.DATA_TITLE: "Run 10k", const.DATA_GOAL_MILESTONES: [{"title": "5k"}]}
    )
    goal_id = coordinator.goals[0][const.DATA_ID]
    coordinator.task_manager.add_task(
        {
            const.DATA_TITLE: "Dentist",
            const.DATA_TASK_DUE_DATE: "2030-01-02",
            const.DATA_TASK_DUE_TIME: "09:00",
            const.DATA_TASK_GOAL_ID: goal_id,
        }
    )
    coordinator.task_manager.add_reminder(
        {const.DATA_REMINDER_TASK_ID: coordinator.tasks[0][const.DATA_ID]}
    )
    coordinator.habit_manager.add_habit({const.DATA_TITLE: "Meditate"})
    coordinator.habit_manager.toggle_habit_completion(
        coordinator.habits[0][const.DATA_ID], TODAY.isoformat(), today=TODAY
    )
    coordinator.system_manager.add_category({const.DATA_CATEGORY_NAME: "Errands"})
    coordinator.system_manager.add_chat_message(
        {const.DATA_CHAT_ROLE: "user", const.DATA_CHAT_CONTENT: "Hello"}
    )
    coordinator.system_manager.set_subscription(const.TIER_PRO)
    await hass.async_block_till_done()
    saved = coordinator.snapshot()
    assert all(saved[key] for key in const.PERSISTED_KEYS)
    assert hass_storage[const.STORAGE_KEY]["data"] == saved

    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="reloaded_entry")
    entry.add_to_hass(hass)
    reloaded = ZenPlannerCoordinator(hass, entry, ZenPlannerStore(hass))
    await reloaded.async_hydrate()

    assert reloaded.snapshot() == saved


# =============================================================================
# TEST: Hydration
# =============================================================================


async def test_mutations_before_hydration_are_replayed(hass: HomeAssistant) -> None:
    """Mutations issued during startup survive the storage load."""
    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="early_entry")
    entry.add_to_hass(hass)

    stored = ZenPlannerStore.get_default_structure()
    stored[const.DATA_TASKS] = [_stored_task("t0", "Stored")]
    store = ZenPlannerStore(hass)

    coordinator = ZenPlannerCoordinator(hass, entry, store)
    coordinator.task_manager.add_task({const.DATA_TITLE: "Early"})
    coordinator.system_manager.set_subscription(const.TIER_PRO)

    # Nothing applied until hydration
    assert coordinator.tasks == []
    assert coordinator.subscription == const.TIER_FREE

    with patch.object(store, "async_load", AsyncMock(return_value=stored)):
        await coordinator.async_hydrate()
    await hass.async_block_till_done()

    assert [t["title"] for t in coordinator.tasks] == ["Stored", "Early"]
    assert coordinator.tasks[1][const.DATA_TASK_ORDER] == 1
    assert coordinator.subscription == const.TIER_PRO
    assert store.data[const.DATA_SUBSCRIPTION] == const.TIER_PRO


async def test_invalid_input_never_queued(hass: HomeAssistant) -> None:
    """Validation happens before a mutation is queued."""
    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="early_entry")
    entry.add_to_hass(hass)
    coordinator = ZenPlannerCoordinator(hass, entry, ZenPlannerStore(hass))

    with pytest.raises(EntityValidationError):
        coordinator.task_manager.add_task({const.DATA_TITLE: ""})

    assert coordinator._pending_mutations == []


async def test_hydration_failure_raises_not_ready(hass: HomeAssistant) -> None:
    """A storage error keeps the queue and asks HA to retry."""
    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="early_entry")
    entry.add_to_hass(hass)
    store = ZenPlannerStore(hass)
    coordinator = ZenPlannerCoordinator(hass, entry, store)
    coordinator.task_manager.add_task({const.DATA_TITLE: "Queued"})

    with (
        patch.object(store, "async_load", AsyncMock(side_effect=OSError("disk"))),
        pytest.raises(ConfigEntryNotReady),
    ):
        await coordinator.async_hydrate()

    assert not coordinator.has_hydrated
    assert len(coordinator._pending_mutations) == 1


async def test_queued_reorder_uses_hydrated_tasks(hass: HomeAssistant) -> None:
    """A reorder issued before hydration reorders the stored tasks."""
    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="early_entry")
    entry.add_to_hass(hass)
    stored = ZenPlannerStore.get_default_structure()
    stored[const.DATA_TASKS] = [
        {**_stored_task("t0", "First"), const.DATA_TASK_ORDER: 0},
        {**_stored_task("t1", "Second"), const.DATA_TASK_ORDER: 1},
    ]
    store = ZenPlannerStore(hass)
    coordinator = ZenPlannerCoordinator(hass, entry, store)

    coordinator.task_manager.reorder_tasks_by_ids(["t1", "t0"])

    with patch.object(store, "async_load", AsyncMock(return_value=stored)):
        await coordinator.async_hydrate()

    assert [t[const.DATA_ID] for t in coordinator.tasks] == ["t1", "t0"]
    assert [t[const.DATA_TASK_ORDER] for t in coordinator.tasks] == [0, 1]


async def test_queued_reminders_resolve_on_replay(hass: HomeAssistant) -> None:
    """Queued reminders find stored tasks; unknown tasks are dropped."""
    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="early_entry")
    entry.add_to_hass(hass)
    stored = ZenPlannerStore.get_default_structure()
    stored[const.DATA_TASKS] = [
        {**_stored_task("t0", "Dentist"), const.DATA_TASK_DUE_DATE: "2030-01-02"}
    ]
    store = ZenPlannerStore(hass)
    coordinator = ZenPlannerCoordinator(hass, entry, store)

    coordinator.task_manager.add_reminder({const.DATA_REMINDER_TASK_ID: "t0"})
    coordinator.task_manager.add_reminder({const.DATA_REMINDER_TASK_ID: "ghost"})

    with patch.object(store, "async_load", AsyncMock(return_value=stored)):
        await coordinator.async_hydrate()

    assert len(coordinator.reminders) == 1
    reminder = coordinator.reminders[0]
    assert reminder[const.DATA_REMINDER_TASK_ID] == "t0"
    assert reminder[const.DATA_REMINDER_TASK_TITLE] == "Dentist"
    assert reminder[const.DATA_REMINDER_DUE_DATE] == "2030-01-02"


async def test_signals_wait_for_replay(hass: HomeAssistant) -> None:
    """Change signals of queued mutations fire once they are applied."""
    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="early_entry")
    entry.add_to_hass(hass)
    store = ZenPlannerStore(hass)
    coordinator = ZenPlannerCoordinator(hass, entry, store)
    received: list[dict[str, Any]] = []

    @callback
    def _record(payload: dict[str, Any]) -> None:
        received.append(payload)

    unsub = async_dispatcher_connect(
        hass,
        get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_TASKS_CHANGED),
        _record,
    )

    coordinator.task_manager.add_task({const.DATA_TITLE: "Early"})
    await hass.async_block_till_done()
    assert received == []

    with patch.object(store, "async_load", AsyncMock(return_value=None)):
        await coordinator.async_hydrate()
    await hass.async_block_till_done()

    assert len(received) == 1
    assert [t[const.DATA_TITLE] for t in coordinator.tasks] == ["Early"]
    unsub()


async def test_queued_goal_delete_clears_task_references(
    hass: HomeAssistant,
) -> None:
    """Deleting a goal during startup still clears tasks linked to it."""
    entry = MockConfigEntry(domain=const.DOMAIN, entry_id="early_entry")
    entry.add_to_hass(hass)
    goal = build_goal({const.DATA_TITLE: "Run 10k"})
    stored = ZenPlannerStore.get_default_structure()
    stored[const.DATA_GOALS] = [goal]
    stored[const.DATA_TASKS] = [
        {**_stored_task("t0", "Train"), const.DATA_TASK_GOAL_ID: goal[const.DATA_ID]}
    ]
    store = ZenPlannerStore(hass)
    coordinator = ZenPlannerCoordinator(hass, entry, store)
    await coordinator.async_setup_managers()

    coordinator.goal_manager.delete_goal(goal[const.DATA_ID])

    with patch.object(store, "async_load", AsyncMock(return_value=stored)):
        await coordinator.async_hydrate()
    await hass.async_block_till_done()

    assert coordinator.goals == []
    assert coordinator.tasks[0][const.DATA_TASK_GOAL_ID] is None


# =============================================================================
# TEST: Tasks
# =============================================================================


async def test_task_lifecycle(coordinator: ZenPlannerCoordinator) -> None:
    """Create, update, toggle and delete a task."""
    tasks = coordinator.task_manager
    tasks.add_task({const.DATA_TITLE: "Write report"})
    task_id = coordinator.tasks[0][const.DATA_ID]
    created_at = coordinator.tasks[0][const.DATA_CREATED_AT]

    tasks.update_task(
        task_id,
        {
            const.DATA_TITLE: "Write quarterly report",
            const.DATA_ID: "hijack",
            const.DATA_CREATED_AT: "1999-01-01",
        },
    )
    task = coordinator.tasks[0]
    assert task[const.DATA_TITLE] == "Write quarterly report"
    assert task[const.DATA_ID] == task_id
    assert task[const.DATA_CREATED_AT] == created_at

    tasks.toggle_task(task_id)
    assert coordinator.tasks[0][const.DATA_COMPLETED] is True

    tasks.delete_task(task_id)
    assert coordinator.tasks == []


async def test_unknown_ids_are_no_ops(coordinator: ZenPlannerCoordinator) -> None:
    """Operations on missing ids leave state untouched."""
    coordinator.task_manager.add_task({const.DATA_TITLE: "Only"})
    before = coordinator.snapshot()

    coordinator.task_manager.update_task("missing", {const.DATA_TITLE: "X"})
    coordinator.task_manager.toggle_task("missing")
    coordinator.task_manager.delete_task("missing")
    coordinator.goal_manager.toggle_milestone("missing", "missing")
    coordinator.habit_manager.toggle_habit_completion("missing", "2025-04-07")

    assert coordinator.snapshot() == before


async def test_overdue_task_completed(coordinator: ZenPlannerCoordinator) -> None:
    """Completing an overdue task removes it from the overdue count."""
    coordinator.task_manager.add_task(
        {const.DATA_TITLE: "Late", const.DATA_TASK_DUE_DATE: "2000-01-01"}
    )
    assert coordinator.task_manager.get_task_stats()["overdue"] == 1

    coordinator.task_manager.toggle_task(coordinator.tasks[0][const.DATA_ID])

    stats = coordinator.task_manager.get_task_stats()
    assert stats["overdue"] == 0
    assert stats["completion_rate"] == 100
    assert stats["productivity_score"] == 100


async def test_reorder_tasks_by_ids(coordinator: ZenPlannerCoordinator) -> None:
    """Listed tasks come first and every order field is renumbered."""
    for title in ("A", "B", "C"):
        coordinator.task_manager.add_task({const.DATA_TITLE: title})
    ids = {t[const.DATA_TITLE]: t[const.DATA_ID] for t in coordinator.tasks}

    coordinator.task_manager.reorder_tasks_by_ids([ids["C"], "unknown", ids["A"]])

    assert [t[const.DATA_TITLE] for t in coordinator.tasks] == ["C", "A", "B"]
    assert [t[const.DATA_TASK_ORDER] for t in coordinator.tasks] == [0, 1, 2]


async def test_tasks_for_date(coordinator: ZenPlannerCoordinator) -> None:
    """Only tasks due on the day are returned."""
    coordinator.task_manager.add_task(
        {const.DATA_TITLE: "Due", const.DATA_TASK_DUE_DATE: "2025-04-07"}
    )
    coordinator.task_manager.add_task({const.DATA_TITLE: "Undated"})

    result = coordinator.task_manager.tasks_for_date("2025-04-07")
    assert [t[const.DATA_TITLE] for t in result] == ["Due"]


# =============================================================================
# TEST: Goals
# =============================================================================


async def test_milestone_progress(coordinator: ZenPlannerCoordinator) -> None:
    """Toggling milestones recomputes progress: 25 then 100."""
    coordinator.goal_manager.add_goal(
        {
            const.DATA_TITLE: "Run 10k",
            const.DATA_GOAL_MILESTONES: [
                {"title": "5k"},
                {"title": "7k"},
                {"title": "8k"},
                {"title": "10k"},
            ],
        }
    )
    goal = coordinator.goals[0]
    milestone_ids = [m[const.DATA_ID] for m in goal[const.DATA_GOAL_MILESTONES]]

    coordinator.goal_manager.toggle_milestone(goal[const.DATA_ID], milestone_ids[0])
    assert coordinator.goals[0][const.DATA_GOAL_PROGRESS] == 25

    for milestone_id in milestone_ids[1:]:
        coordinator.goal_manager.toggle_milestone(goal[const.DATA_ID], milestone_id)
    assert coordinator.goals[0][const.DATA_GOAL_PROGRESS] == 100


async def test_update_goal_milestones_recomputes(
    coordinator: ZenPlannerCoordinator,
) -> None:
    """Replacing milestones recomputes progress; a supplied progress is ignored."""
    coordinator.goal_manager.add_goal({const.DATA_TITLE: "Read"})
    goal_id = coordinator.goals[0][const.DATA_ID]

    coordinator.goal_manager.update_goal(
        goal_id,
        {
            const.DATA_GOAL_PROGRESS: 99,
            const.DATA_GOAL_MILESTONES: [
                {"title": "Book 1", "completed": True},
                {"title": "Book 2"},
            ],
        },
    )

    assert coordinator.goals[0][const.DATA_GOAL_PROGRESS] == 50


async def test_delete_goal_clears_task_references(
    hass: HomeAssistant, coordinator: ZenPlannerCoordinator
) -> None:
    """Tasks pointing at a deleted goal lose the reference."""
    coordinator.goal_manager.add_goal({const.DATA_TITLE: "Launch"})
    goal_id = coordinator.goals[0][const.DATA_ID]
    coordinator.task_manager.add_task(
        {const.DATA_TITLE: "Ship it", const.DATA_TASK_GOAL_ID: goal_id}
    )
    coordinator.task_manager.add_task(
        {const.DATA_TITLE: "Other", const.DATA_TASK_GOAL_ID: "another-goal"}
    )

    coordinator.goal_manager.delete_goal(goal_id)
    await hass.async_block_till_done()

    assert coordinator.goals == []
    assert coordinator.tasks[0][const.DATA_TASK_GOAL_ID] is None
    assert coordinator.tasks[1][const.DATA_TASK_GOAL_ID] == "another-goal"


# =============================================================================
# TEST: Habits
# =============================================================================


async def test_habit_streak_and_best(coordinator: ZenPlannerCoordinator) -> None:
    """Three days marked give streak 3; unmarking today drops it, best stays."""
    coordinator.habit_manager.add_habit({const.DATA_TITLE: "Meditate"})
    habit_id = coordinator.habits[0][const.DATA_ID]

    for offset in (2, 1, 0):
        day = (TODAY - timedelta(days=offset)).isoformat()
        coordinator.habit_manager.toggle_habit_completion(habit_id, day, today=TODAY)
    habit = coordinator.habits[0]
    assert habit[const.DATA_HABIT_STREAK] == 3
    assert habit[const.DATA_HABIT_BEST_STREAK] == 3

    coordinator.habit_manager.toggle_habit_completion(
        habit_id, TODAY.isoformat(), today=TODAY
    )
    habit = coordinator.habits[0]
    assert habit[const.DATA_HABIT_STREAK] == 0
    assert habit[const.DATA_HABIT_BEST_STREAK] == 3
    assert len(habit[const.DATA_HABIT_COMPLETIONS]) == 3


async def test_habit_invalid_day(coordinator: ZenPlannerCoordinator) -> None:
    """A non-ISO day is rejected before anything is queued."""
    coordinator.habit_manager.add_habit({const.DATA_TITLE: "Read"})
    with pytest.raises(EntityValidationError):
        coordinator.habit_manager.toggle_habit_completion(
            coordinator.habits[0][const.DATA_ID], "today"
        )


async def test_update_habit_keeps_streaks(coordinator: ZenPlannerCoordinator) -> None:
    """Updates cannot overwrite completions or streaks."""
    coordinator.habit_manager.add_habit({const.DATA_TITLE: "Walk"})
    habit_id = coordinator.habits[0][const.DATA_ID]
    coordinator.habit_manager.toggle_habit_completion(
        habit_id, TODAY.isoformat(), today=TODAY
    )

    coordinator.habit_manager.update_habit(
        habit_id, {const.DATA_TITLE: "Long walk", const.DATA_HABIT_STREAK: 50}
    )

    habit = coordinator.habits[0]
    assert habit[const.DATA_TITLE] == "Long walk"
    assert habit[const.DATA_HABIT_STREAK] == 1


# =============================================================================
# TEST: Reminders
# =============================================================================


async def test_due_reminder_fires_once(
    hass: HomeAssistant, coordinator: ZenPlannerCoordinator
) -> None:
    """A due reminder fires one event and is marked notified."""
    events = async_capture_events(hass, const.EVENT_REMINDER_DUE)
    coordinator.task_manager.add_task(
        {const.DATA_TITLE: "Dentist", const.DATA_TASK_DUE_DATE: "2025-04-07"}
    )
    task_id = coordinator.tasks[0][const.DATA_ID]
    coordinator.task_manager.add_reminder(
        {
            const.DATA_REMINDER_TASK_ID: task_id,
            const.DATA_REMINDER_AT: (dt_now_utc() - timedelta(minutes=1)).isoformat(),
        }
    )
    coordinator.task_manager.add_reminder(
        {
            const.DATA_REMINDER_TASK_ID: task_id,
            const.DATA_REMINDER_AT: (dt_now_utc() + timedelta(days=1)).isoformat(),
        }
    )

    await coordinator.async_refresh()
    await coordinator.async_refresh()
    await hass.async_block_till_done()

    assert len(events) == 1
    assert events[0].data[const.DATA_REMINDER_TASK_TITLE] == "Dentist"
    assert [r[const.DATA_REMINDER_IS_NOTIFIED] for r in coordinator.reminders] == [
        True,
        False,
    ]


async def test_reminder_copies_task_fields(coordinator: ZenPlannerCoordinator) -> None:
    """Title, due date and time default to the task's values."""
    coordinator.task_manager.add_task(
        {
            const.DATA_TITLE: "Standup",
            const.DATA_TASK_DUE_DATE: "2030-01-02",
            const.DATA_TASK_DUE_TIME: "09:00",
            const.DATA_TASK_REMINDER_MINUTES_BEFORE: 15,
        }
    )
    task_id = coordinator.tasks[0][const.DATA_ID]

    coordinator.task_manager.add_reminder({const.DATA_REMINDER_TASK_ID: task_id})

    reminder = coordinator.reminders[0]
    assert reminder[const.DATA_REMINDER_TASK_TITLE] == "Standup"
    assert reminder[const.DATA_REMINDER_DUE_DATE] == "2030-01-02"
    assert reminder[const.DATA_REMINDER_DUE_TIME] == "09:00"
    assert reminder[const.DATA_REMINDER_IS_NOTIFIED] is False


async def test_reminder_for_unknown_task_rejected(
    coordinator: ZenPlannerCoordinator,
) -> None:
    """Without the task there is no due date to schedule from."""
    with pytest.raises(EntityValidationError) as err:
        coordinator.task_manager.add_reminder({const.DATA_REMINDER_TASK_ID: "ghost"})
    assert err.value.translation_key == const.TRANS_KEY_ERROR_UNKNOWN_TASK


async def test_delete_task_removes_reminders(
    coordinator: ZenPlannerCoordinator,
) -> None:
    """Reminders go away with their task; dismiss removes one directly."""
    for title in ("Keep", "Drop"):
        coordinator.task_manager.add_task(
            {const.DATA_TITLE: title, const.DATA_TASK_DUE_DATE: "2030-01-01"}
        )
    keep_id, drop_id = (t[const.DATA_ID] for t in coordinator.tasks)
    coordinator.task_manager.add_reminder({const.DATA_REMINDER_TASK_ID: keep_id})
    coordinator.task_manager.add_reminder({const.DATA_REMINDER_TASK_ID: drop_id})

    coordinator.task_manager.delete_task(drop_id)
    assert [r[const.DATA_REMINDER_TASK_ID] for r in coordinator.reminders] == [keep_id]

    coordinator.task_manager.dismiss_reminder(coordinator.reminders[0][const.DATA_ID])
    assert coordinator.reminders == []


# =============================================================================
# TEST: System manager
# =============================================================================


async def test_categories_chat_and_subscription(
    coordinator: ZenPlannerCoordinator,
) -> None:
    """Categories append, chat clears, unknown tiers are rejected."""
    coordinator.system_manager.add_category(
        {const.DATA_CATEGORY_NAME: "Errands", const.DATA_COLOR: "#123456"}
    )
    assert coordinator.categories[-1][const.DATA_CATEGORY_NAME] == "Errands"

    coordinator.system_manager.add_chat_message({"role": "user", "content": "Hi"})
    assert len(coordinator.chat_messages) == 1
    coordinator.system_manager.clear_chat()
    assert coordinator.chat_messages == []

    with pytest.raises(EntityValidationError):
        coordinator.system_manager.set_subscription("platinum")
    coordinator.system_manager.set_subscription(const.TIER_BUSINESS)
    assert coordinator.subscription == const.TIER_BUSINESS
    assert coordinator.system_manager.get_plan()[const.PLAN_NAME] == "Business"


# =============================================================================
# TEST: Advisor manager
# =============================================================================


def _mock_client(side_effect: Any) -> MagicMock:
    client = MagicMock()
    client.async_complete = AsyncMock(side_effect=side_effect)
    return client


async def test_advisor_round_trip(coordinator: ZenPlannerCoordinator) -> None:
    """The user message and exactly one assistant reply are recorded."""
    coordinator.task_manager.add_task({const.DATA_TITLE: "Write report"})
    client = _mock_client(["Start with the report."])

    with patch.object(coordinator.advisor_manager, "_build_client", return_value=client):
        reply = await coordinator.advisor_manager.async_ask("What next?")

    assert reply is not None
    assert reply[const.DATA_CHAT_CONTENT] == "Start with the report."
    assert [m[const.DATA_CHAT_ROLE] for m in coordinator.chat_messages] == [
        const.ROLE_USER,
        const.ROLE_ASSISTANT,
    ]
    system_prompt = client.async_complete.call_args.args[0]
    assert "Write report" in system_prompt


async def test_advisor_failure_appends_fallback(
    coordinator: ZenPlannerCoordinator,
) -> None:
    """An upstream failure still appends one assistant message."""
    client = _mock_client(CompletionServiceError("down"))

    with patch.object(coordinator.advisor_manager, "_build_client", return_value=client):
        reply = await coordinator.advisor_manager.async_ask("Hello?")

    assert reply is not None
    assert reply[const.DATA_CHAT_CONTENT] == const.ADVISOR_FALLBACK_REPLY
    assert len(coordinator.chat_messages) == 2


async def test_advisor_empty_reply(coordinator: ZenPlannerCoordinator) -> None:
    """An empty completion becomes the no-response reply."""
    client = _mock_client([""])

    with patch.object(coordinator.advisor_manager, "_build_client", return_value=client):
        reply = await coordinator.advisor_manager.async_ask("Hello?")

    assert reply is not None
    assert reply[const.DATA_CHAT_CONTENT] == const.NO_RESPONSE_REPLY


async def test_advisor_stale_reply_discarded(
    hass: HomeAssistant, coordinator: ZenPlannerCoordinator
) -> None:
    """A reply that arrives after a newer request started is dropped."""
    first_started = asyncio.Event()
    release_first = asyncio.Event()

    async def _complete(system_prompt: str, user_message: str, **kwargs: Any) -> str:
        if user_message == "first":
            first_started.set()
            await release_first.wait()
            return "stale reply"
        return "fresh reply"

    client = _mock_client(_complete)
    manager = coordinator.advisor_manager

    with patch.object(manager, "_build_client", return_value=client):
        first = hass.async_create_task(manager.async_ask("first"))
        await first_started.wait()
        second = await manager.async_ask("second")
        release_first.set()
        assert await first is None

    assert second is not None
    assert manager.latest_request_id == 2
    assert [m[const.DATA_CHAT_CONTENT] for m in coordinator.chat_messages] == [
        "first",
        "second",
        "fresh reply",
    ]


# =============================================================================
# TEST: Unload
# =============================================================================


async def test_unload_removes_services(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Unloading the entry unregisters every service."""
    assert hass.services.has_service(const.DOMAIN, const.SERVICE_ADD_TASK)

    assert await hass.config_entries.async_unload(init_integration.entry_id)
    await hass.async_block_till_done()

    assert init_integration.state is ConfigEntryState.NOT_LOADED
    assert not hass.services.has_service(const.DOMAIN, const.SERVICE_ADD_TASK)
    assert not hass.services.has_service(const.DOMAIN, const.SERVICE_ASK_ADVISOR)
