"""Task Manager - Task and reminder lifecycle.

Handles:
- Task create / update / delete / toggle
- Explicit reordering (full-list replace or by id sequence)
- Reminders tied to tasks (add / dismiss, removal with their task)
- Clearing goal references when a goal is deleted (GOAL_DELETED listener)

Unknown ids are a silent no-op (logged at debug). Validation happens before
the mutation is handed to the coordinator, so invalid input never enters the
pre-hydration queue.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..data_builders import (
    EntityValidationError,
    build_reminder,
    build_task,
    sanitize_task_update,
)
from ..engines.calendar_engine import CalendarEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils.dt_utils import dt_now_iso, dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import ReminderData, TaskStats


class TaskManager(BaseManager):
    """Manager for tasks and their reminders."""

    async def async_setup(self) -> None:
        """Subscribe to goal deletions to clear dangling goal references."""
        self.listen(const.SIGNAL_SUFFIX_GOAL_DELETED, self._on_goal_deleted)

    # ------------------------------------------------------------------
    # Selectors
    # ------------------------------------------------------------------

    def get_task_stats(self) -> TaskStats:
        """Return task statistics relative to now."""
        return StatisticsEngine.compute_task_stats(self.coordinator.tasks, dt_now_utc())

    def tasks_for_date(self, day: str) -> list[Mapping[str, Any]]:
        """Return tasks due on the given ISO date."""
        return CalendarEngine.tasks_for_date(self.coordinator.tasks, day)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def add_task(self, user_input: dict[str, Any]) -> None:
        """Create a task and append it to the collection."""
        task = build_task(user_input)

        def _apply(data: dict[str, Any]) -> None:
            task[const.DATA_TASK_ORDER] = len(data[const.DATA_TASKS])
            data[const.DATA_TASKS].append(task)

        const.LOGGER.debug("DEBUG: Task '%s' added (%s)", task["title"], task["id"])
        self.mutate_and_emit(
            _apply, const.SIGNAL_SUFFIX_TASKS_CHANGED, task_id=task["id"]
        )

    def update_task(self, task_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into a task and refresh updated_at.

        id, created_at and order cannot be changed through an update.
        """
        updates = sanitize_task_update(fields)

        def _apply(data: dict[str, Any]) -> None:
            task = self.find_by_id(data[const.DATA_TASKS], task_id)
            if task is None:
                const.LOGGER.debug("DEBUG: update_task ignored, unknown id %s", task_id)
                return
            task.update(updates)
            task[const.DATA_UPDATED_AT] = dt_now_iso()

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_TASKS_CHANGED, task_id=task_id)

    def delete_task(self, task_id: str) -> None:
        """Remove a task and any reminders attached to it."""

        def _apply(data: dict[str, Any]) -> None:
            before = len(data[const.DATA_TASKS])
            data[const.DATA_TASKS] = [
                t for t in data[const.DATA_TASKS] if t.get(const.DATA_ID) != task_id
            ]
            if len(data[const.DATA_TASKS]) == before:
                const.LOGGER.debug("DEBUG: delete_task ignored, unknown id %s", task_id)
                return
            data[const.DATA_REMINDERS] = [
                r
                for r in data[const.DATA_REMINDERS]
                if r.get(const.DATA_REMINDER_TASK_ID) != task_id
            ]

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_TASK_DELETED, task_id=task_id)

    def toggle_task(self, task_id: str) -> None:
        """Flip a task's completed flag."""

        def _apply(data: dict[str, Any]) -> None:
            task = self.find_by_id(data[const.DATA_TASKS], task_id)
            if task is None:
                const.LOGGER.debug("DEBUG: toggle_task ignored, unknown id %s", task_id)
                return
            task[const.DATA_COMPLETED] = not task.get(const.DATA_COMPLETED, False)
            task[const.DATA_UPDATED_AT] = dt_now_iso()

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_TASKS_CHANGED, task_id=task_id)

    def reorder_tasks(self, tasks: list[dict[str, Any]]) -> None:
        """Replace the whole task collection with a caller-ordered list.

        The caller is responsible for renumbering each task's order field.
        """
        new_tasks = [dict(task) for task in tasks]

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_TASKS] = new_tasks

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_TASKS_CHANGED)

    def reorder_tasks_by_ids(self, task_ids: list[str]) -> None:
        """Reorder tasks to follow task_ids and renumber their order field.

        Tasks missing from task_ids keep their relative order after the
        listed ones. Unknown ids are skipped. The order is resolved against
        the collection at apply time, so a queued reorder works on the
        hydrated tasks.
        """
        wanted = list(dict.fromkeys(task_ids))

        def _apply(data: dict[str, Any]) -> None:
            tasks = data[const.DATA_TASKS]
            by_id = {t[const.DATA_ID]: t for t in tasks}
            listed = [by_id[task_id] for task_id in wanted if task_id in by_id]
            listed_ids = {t[const.DATA_ID] for t in listed}
            remaining = [t for t in tasks if t[const.DATA_ID] not in listed_ids]
            data[const.DATA_TASKS] = [
                {**task, const.DATA_TASK_ORDER: index}
                for index, task in enumerate(listed + remaining)
            ]

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_TASKS_CHANGED)

    @callback
    def _on_goal_deleted(self, payload: dict[str, Any]) -> None:
        """Clear goal_id on tasks that referenced a deleted goal."""
        goal_id = payload["goal_id"]

        def _apply(data: dict[str, Any]) -> None:
            for task in data[const.DATA_TASKS]:
                if task.get(const.DATA_TASK_GOAL_ID) == goal_id:
                    task[const.DATA_TASK_GOAL_ID] = None
                    task[const.DATA_UPDATED_AT] = dt_now_iso()

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_TASKS_CHANGED)

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    @staticmethod
    def _build_task_reminder(
        tasks: list[dict[str, Any]], user_input: dict[str, Any]
    ) -> ReminderData:
        """Build a reminder, filling task_title / due_date / due_time from its task.

        Raises:
            EntityValidationError: If the reminder has no due date and the
                task cannot be found to supply one.
        """
        reminder_input = dict(user_input)
        task_id = str(user_input.get(const.DATA_REMINDER_TASK_ID))
        task = BaseManager.find_by_id(tasks, task_id)
        if task is not None:
            reminder_input.setdefault(
                const.DATA_REMINDER_TASK_TITLE, task[const.DATA_TITLE]
            )
            reminder_input.setdefault(
                const.DATA_REMINDER_DUE_DATE, task.get(const.DATA_TASK_DUE_DATE)
            )
            reminder_input.setdefault(
                const.DATA_REMINDER_DUE_TIME, task.get(const.DATA_TASK_DUE_TIME)
            )
            if task.get(const.DATA_TASK_REMINDER_MINUTES_BEFORE) is not None:
                reminder_input.setdefault(
                    "minutes_before", task[const.DATA_TASK_REMINDER_MINUTES_BEFORE]
                )
        elif not reminder_input.get(const.DATA_REMINDER_DUE_DATE):
            raise EntityValidationError(
                field=const.DATA_REMINDER_TASK_ID,
                translation_key=const.TRANS_KEY_ERROR_UNKNOWN_TASK,
                placeholders={"value": task_id},
            )
        return build_reminder(reminder_input)

    def add_reminder(self, user_input: dict[str, Any]) -> None:
        """Create a reminder for a task.

        Missing task_title / due_date / due_time are taken from the task.
        Before hydration the task is looked up when the queued mutation is
        replayed; a reminder that cannot be built then is dropped with a
        warning.

        Raises:
            EntityValidationError: If the reminder has no due date and the
                task cannot be found to supply one (after hydration).
        """
        if self.coordinator.has_hydrated:
            reminder = self._build_task_reminder(self.coordinator.tasks, user_input)

            def _apply(data: dict[str, Any]) -> None:
                data[const.DATA_REMINDERS].append(reminder)

            const.LOGGER.debug(
                "DEBUG: Reminder %s scheduled at %s",
                reminder["id"],
                reminder["reminder_at"],
            )
        else:
            pending_input = dict(user_input)

            def _apply(data: dict[str, Any]) -> None:
                try:
                    queued = self._build_task_reminder(
                        data[const.DATA_TASKS], pending_input
                    )
                except EntityValidationError as err:
                    const.LOGGER.warning(
                        "WARNING: Queued reminder for task %s dropped: %s",
                        pending_input.get(const.DATA_REMINDER_TASK_ID),
                        err,
                    )
                    return
                data[const.DATA_REMINDERS].append(queued)

        self.coordinator.mutate(_apply)

    def dismiss_reminder(self, reminder_id: str) -> None:
        """Remove a reminder."""

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_REMINDERS] = [
                r
                for r in data[const.DATA_REMINDERS]
                if r.get(const.DATA_ID) != reminder_id
            ]

        self.coordinator.mutate(_apply)
