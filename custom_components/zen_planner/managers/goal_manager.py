"""Goal Manager - Goal and milestone lifecycle.

Goal progress is always derived from milestones by the StatisticsEngine;
it is recomputed whenever the milestone list changes and can never be set
directly. A goal with no milestones keeps the progress it already had.

Deleting a goal emits GOAL_DELETED so the TaskManager can clear task
references to it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..data_builders import build_goal, sanitize_goal_update
from ..engines.statistics_engine import StatisticsEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import GoalSummary


class GoalManager(BaseManager):
    """Manager for goals and milestones."""

    async def async_setup(self) -> None:
        """No event subscriptions needed."""

    def get_goal_summary(self) -> GoalSummary:
        """Return aggregate goal statistics."""
        return StatisticsEngine.compute_goal_summary(self.coordinator.goals)

    def add_goal(self, user_input: dict[str, Any]) -> None:
        """Create a goal and append it to the collection."""
        goal = build_goal(user_input)

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_GOALS].append(goal)

        const.LOGGER.debug("DEBUG: Goal '%s' added (%s)", goal["title"], goal["id"])
        self.mutate_and_emit(
            _apply, const.SIGNAL_SUFFIX_GOALS_CHANGED, goal_id=goal["id"]
        )

    def update_goal(self, goal_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into a goal, recomputing progress if milestones changed."""
        updates = sanitize_goal_update(fields)

        def _apply(data: dict[str, Any]) -> None:
            goal = self.find_by_id(data[const.DATA_GOALS], goal_id)
            if goal is None:
                const.LOGGER.debug("DEBUG: update_goal ignored, unknown id %s", goal_id)
                return
            goal.update(updates)
            if const.DATA_GOAL_MILESTONES in updates:
                goal[const.DATA_GOAL_PROGRESS] = StatisticsEngine.compute_goal_progress(
                    goal[const.DATA_GOAL_MILESTONES],
                    goal.get(const.DATA_GOAL_PROGRESS, 0),
                )

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_GOALS_CHANGED, goal_id=goal_id)

    def delete_goal(self, goal_id: str) -> None:
        """Remove a goal."""

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_GOALS] = [
                g for g in data[const.DATA_GOALS] if g.get(const.DATA_ID) != goal_id
            ]

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_GOAL_DELETED, goal_id=goal_id)

    def toggle_milestone(self, goal_id: str, milestone_id: str) -> None:
        """Flip a milestone's completed flag and recompute goal progress."""

        def _apply(data: dict[str, Any]) -> None:
            goal = self.find_by_id(data[const.DATA_GOALS], goal_id)
            if goal is None:
                const.LOGGER.debug(
                    "DEBUG: toggle_milestone ignored, unknown goal %s", goal_id
                )
                return
            milestone = self.find_by_id(goal[const.DATA_GOAL_MILESTONES], milestone_id)
            if milestone is None:
                const.LOGGER.debug(
                    "DEBUG: toggle_milestone ignored, unknown milestone %s", milestone_id
                )
                return
            milestone[const.DATA_COMPLETED] = not milestone.get(const.DATA_COMPLETED)
            goal[const.DATA_GOAL_PROGRESS] = StatisticsEngine.compute_goal_progress(
                goal[const.DATA_GOAL_MILESTONES], goal.get(const.DATA_GOAL_PROGRESS, 0)
            )

        self.mutate_and_emit(_apply, const.SIGNAL_SUFFIX_GOALS_CHANGED, goal_id=goal_id)
