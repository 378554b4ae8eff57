"""Streak Engine - Consecutive-day habit streak calculation.

Stateless helpers for habit completion bookkeeping:
- Toggle a day's completion mark (one entry per date)
- Count the run of completed days ending today
- Ratchet the best streak

The best streak is a running maximum of the current streak observed after
each toggle, not a recomputation over the full history. Un-marking a day
lowers the current streak but never the best streak.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_parse_date

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import HabitCompletion


class StreakEngine:
    """Pure functions for habit streak tracking.

    Example:
        completions = StreakEngine.toggle_completion([], "2025-04-07")
        streak = StreakEngine.calculate_streak(completions, date(2025, 4, 7))
        best = StreakEngine.update_best_streak(previous_best, streak)
    """

    @staticmethod
    def completed_dates(completions: Iterable[HabitCompletion]) -> set[date]:
        """Return the set of days marked completed.

        Entries with unparseable dates are skipped.
        """
        days: set[date] = set()
        for entry in completions:
            if not entry.get(const.DATA_COMPLETED):
                continue
            parsed = dt_parse_date(entry.get(const.DATA_COMPLETION_DATE))
            if parsed is not None:
                days.add(parsed)
        return days

    @staticmethod
    def calculate_streak(completions: Iterable[HabitCompletion], today: date) -> int:
        """Count consecutive completed days walking backward from today.

        If today itself is not completed the streak is 0, even when
        yesterday was. Future-dated completions are ignored.

        Args:
            completions: The habit's completion entries
            today: The caller's local "today"

        Returns:
            Length of the run of completed days ending at today.
        """
        days = StreakEngine.completed_dates(completions)
        streak = 0
        cursor = today
        while cursor in days:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    @staticmethod
    def update_best_streak(previous_best: int, streak: int) -> int:
        """Return max(previous_best, streak)."""
        return max(previous_best, streak)

    @staticmethod
    def toggle_completion(
        completions: list[HabitCompletion], day: str
    ) -> list[HabitCompletion]:
        """Flip the entry for `day`, or add it as completed.

        Returns a new list; the input is not modified. At most one entry per
        date is kept.
        """
        toggled: list[HabitCompletion] = []
        found = False
        for entry in completions:
            if entry.get(const.DATA_COMPLETION_DATE) == day and not found:
                found = True
                toggled.append(
                    {
                        const.DATA_COMPLETION_DATE: day,
                        const.DATA_COMPLETED: not entry.get(const.DATA_COMPLETED),
                    }  # type: ignore[misc]
                )
            elif entry.get(const.DATA_COMPLETION_DATE) == day:
                # Collapse duplicates written by older clients
                continue
            else:
                toggled.append(dict(entry))  # type: ignore[arg-type]

        if not found:
            toggled.append(
                {const.DATA_COMPLETION_DATE: day, const.DATA_COMPLETED: True}  # type: ignore[misc]
            )
        return toggled
