"""Calendar Engine - Projects dated tasks and goals onto calendar events.

Output order is stable: all dated tasks in collection order, then all dated
goals in collection order. No de-duplication is performed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_parse_date
from ..utils.math_utils import to_int

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ..type_defs import PlannerCalendarEvent


class CalendarEngine:
    """Stateless calendar projection."""

    @staticmethod
    def project_events(
        tasks: Sequence[Mapping[str, Any]],
        goals: Sequence[Mapping[str, Any]],
    ) -> list[PlannerCalendarEvent]:
        """Return one event per task with a due date and per goal with a target date.

        Task events carry the task's completion flag, priority and optional
        time. Goal events are completed when progress reaches 100 and carry
        the goal's color.
        """
        events: list[PlannerCalendarEvent] = []

        for task in tasks:
            due_date = task.get(const.DATA_TASK_DUE_DATE)
            if not due_date:
                continue
            event: PlannerCalendarEvent = {
                "id": task[const.DATA_ID],
                "title": task.get(const.DATA_TITLE, ""),
                "date": due_date,
                "type": const.EVENT_TYPE_TASK,
                "completed": bool(task.get(const.DATA_COMPLETED)),
                "priority": task.get(const.DATA_TASK_PRIORITY, const.DEFAULT_PRIORITY),
            }
            if task.get(const.DATA_TASK_DUE_TIME):
                event["time"] = task[const.DATA_TASK_DUE_TIME]
            events.append(event)

        for goal in goals:
            target_date = goal.get(const.DATA_GOAL_TARGET_DATE)
            if not target_date:
                continue
            events.append(
                {
                    "id": goal[const.DATA_ID],
                    "title": goal.get(const.DATA_TITLE, ""),
                    "date": target_date,
                    "type": const.EVENT_TYPE_GOAL,
                    "completed": to_int(goal.get(const.DATA_GOAL_PROGRESS)) >= 100,
                    "color": goal.get(const.DATA_COLOR, const.DEFAULT_GOAL_COLOR),
                }
            )

        return events

    @staticmethod
    def tasks_for_date(
        tasks: Sequence[Mapping[str, Any]], day: str
    ) -> list[Mapping[str, Any]]:
        """Return the tasks due on `day` (ISO date), in collection order."""
        target = dt_parse_date(day)
        if target is None:
            return []
        return [
            task
            for task in tasks
            if dt_parse_date(task.get(const.DATA_TASK_DUE_DATE)) == target
        ]
