"""Habit Manager - Habit lifecycle and completion tracking.

Completions, streak and best_streak are owned by this manager: updates
cannot write them, and every completion toggle recomputes the streak
(walking back from the caller's today) and ratchets the best streak.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from .. import const
from ..data_builders import (
    EntityValidationError,
    build_habit,
    sanitize_habit_update,
)
from ..engines.statistics_engine import StatisticsEngine
from ..engines.streak_engine import StreakEngine
from ..utils.dt_utils import dt_parse_date, dt_today_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import HabitSummary


class HabitManager(BaseManager):
    """Manager for habits."""

    async def async_setup(self) -> None:
        """No event subscriptions needed."""

    def get_habit_summary(self) -> HabitSummary:
        """Return aggregate habit statistics."""
        return StatisticsEngine.compute_habit_summary(self.coordinator.habits)

    def add_habit(self, user_input: dict[str, Any]) -> None:
        """Create a habit with no completions."""
        habit = build_habit(user_input)

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_HABITS].append(habit)

        const.LOGGER.debug("DEBUG: Habit '%s' added (%s)", habit["title"], habit["id"])
        self.mutate_and_emit(
            _apply, const.SIGNAL_SUFFIX_HABITS_CHANGED, habit_id=habit["id"]
        )

    def update_habit(self, habit_id: str, fields: dict[str, Any]) -> None:
        """Merge editable fields into a habit."""
        updates = sanitize_habit_update(fields)

        def _apply(data: dict[str, Any]) -> None:
            habit = self.find_by_id(data[const.DATA_HABITS], habit_id)
            if habit is None:
                const.LOGGER.debug("DEBUG: update_habit ignored, unknown id %s", habit_id)
                return
            habit.update(updates)

        self.mutate_and_emit(
            _apply, const.SIGNAL_SUFFIX_HABITS_CHANGED, habit_id=habit_id
        )

    def delete_habit(self, habit_id: str) -> None:
        """Remove a habit."""

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_HABITS] = [
                h for h in data[const.DATA_HABITS] if h.get(const.DATA_ID) != habit_id
            ]

        self.mutate_and_emit(
            _apply, const.SIGNAL_SUFFIX_HABITS_CHANGED, habit_id=habit_id
        )

    def toggle_habit_completion(
        self, habit_id: str, day: str, today: date | None = None
    ) -> None:
        """Flip the completion mark for `day` and recompute streaks.

        Args:
            habit_id: Habit to update
            day: ISO date being marked or unmarked
            today: The local "today" the streak is measured from; defaults to
                the current local date when the mutation is applied.

        Raises:
            EntityValidationError: If `day` is not an ISO date.
        """
        parsed_day = dt_parse_date(day)
        if parsed_day is None:
            raise EntityValidationError(
                field=const.DATA_COMPLETION_DATE,
                translation_key=const.TRANS_KEY_ERROR_INVALID_DATE,
                placeholders={"value": str(day)},
            )
        day_iso = parsed_day.isoformat()

        def _apply(data: dict[str, Any]) -> None:
            habit = self.find_by_id(data[const.DATA_HABITS], habit_id)
            if habit is None:
                const.LOGGER.debug(
                    "DEBUG: toggle_habit_completion ignored, unknown id %s", habit_id
                )
                return
            completions = StreakEngine.toggle_completion(
                habit.get(const.DATA_HABIT_COMPLETIONS, []), day_iso
            )
            streak = StreakEngine.calculate_streak(
                completions, today or dt_today_local()
            )
            habit[const.DATA_HABIT_COMPLETIONS] = completions
            habit[const.DATA_HABIT_STREAK] = streak
            habit[const.DATA_HABIT_BEST_STREAK] = StreakEngine.update_best_streak(
                habit.get(const.DATA_HABIT_BEST_STREAK, 0), streak
            )

        self.mutate_and_emit(
            _apply, const.SIGNAL_SUFFIX_HABITS_CHANGED, habit_id=habit_id
        )
