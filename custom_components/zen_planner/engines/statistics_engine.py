"""Statistics Engine - Derived progress and productivity figures.

This engine centralizes every number the planner shows but never stores
directly:
- Goal progress from milestones
- Task statistics (totals, overdue, completion rate, productivity score)
- Priority and category breakdowns and the seven-day trend
- Habit and goal summaries used by sensors and the analysis endpoint

Design Principles:
    - Stateless: No coordinator reference, operates on passed data structures
    - Deterministic: "now" is always supplied by the caller
    - Rounding: percentages round half-up (2.5 → 3), never banker's rounding
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import as_local, dt_last_n_days, dt_local_date, dt_parse_date
from ..utils.math_utils import average, calculate_percentage, clamp, to_int

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from zoneinfo import ZoneInfo

    from ..type_defs import (
        DailyTrend,
        GoalSummary,
        HabitSummary,
        TaskStats,
    )


class StatisticsEngine:
    """Stateless calculations over tasks, goals and habits.

    Example:
        stats = StatisticsEngine.compute_task_stats(tasks, dt_now_utc())
        stats["productivity_score"]  # 0..100
    """

    # ────────────────────────────────────────────────────────────────
    # Goals
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def compute_goal_progress(
        milestones: Sequence[Mapping[str, Any]], current_progress: int
    ) -> int:
        """Return goal progress as a whole percentage of completed milestones.

        A goal without milestones keeps its current progress.

        Examples:
            4 milestones, 1 completed → 25
            3 milestones, 2 completed → 67
            0 milestones, current 40 → 40
        """
        if not milestones:
            return current_progress
        completed = sum(1 for m in milestones if m.get(const.DATA_COMPLETED))
        return calculate_percentage(completed, len(milestones))

    @staticmethod
    def compute_goal_summary(goals: Sequence[Mapping[str, Any]]) -> GoalSummary:
        """Summarize goals: count, fully completed count and mean progress."""
        progresses = [to_int(g.get(const.DATA_GOAL_PROGRESS)) for g in goals]
        return {
            const.STAT_TOTAL: len(goals),
            const.STAT_COMPLETED: sum(1 for p in progresses if p >= 100),
            const.STAT_AVG_PROGRESS: average(progresses),
        }  # type: ignore[return-value]

    # ────────────────────────────────────────────────────────────────
    # Tasks
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def is_overdue(task: Mapping[str, Any], today: date) -> bool:
        """True when an incomplete task's due date is before today.

        Comparison is by calendar date only. A task due today is never
        overdue, whatever its due time.
        """
        if task.get(const.DATA_COMPLETED):
            return False
        due = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
        return due is not None and due < today

    @staticmethod
    def task_day(task: Mapping[str, Any], tz: ZoneInfo | None = None) -> date | None:
        """Day a task counts toward in the trend: due date, else creation day."""
        due = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
        if due is not None:
            return due
        return dt_local_date(task.get(const.DATA_CREATED_AT), tz)

    @staticmethod
    def compute_weekly_trend(
        tasks: Sequence[Mapping[str, Any]], today: date, tz: ZoneInfo | None = None
    ) -> list[DailyTrend]:
        """Per-day task totals for the seven days ending today, oldest first."""
        buckets: dict[date, list[int]] = {
            day: [0, 0] for day in dt_last_n_days(today, const.WEEKLY_TREND_DAYS)
        }
        for task in tasks:
            day = StatisticsEngine.task_day(task, tz)
            if day not in buckets:
                continue
            buckets[day][1] += 1
            if task.get(const.DATA_COMPLETED):
                buckets[day][0] += 1

        return [
            {
                const.STAT_DATE: day.isoformat(),
                const.STAT_COMPLETED: completed,
                const.STAT_TOTAL: total,
            }  # type: ignore[misc]
            for day, (completed, total) in buckets.items()
        ]

    @staticmethod
    def compute_task_stats(
        tasks: Sequence[Mapping[str, Any]],
        now: datetime,
        tz: ZoneInfo | None = None,
    ) -> TaskStats:
        """Compute task statistics relative to `now`.

        Productivity score = completion rate minus 5 points per overdue task,
        clamped to 0..100.

        Args:
            tasks: Task records
            now: Current instant (aware). Its local date is "today".
            tz: Optional timezone override for "local".

        Returns:
            TaskStats with totals, rates, breakdowns and the weekly trend.
        """
        today = as_local(now, tz).date()
        total = len(tasks)
        completed = sum(1 for t in tasks if t.get(const.DATA_COMPLETED))
        overdue = sum(1 for t in tasks if StatisticsEngine.is_overdue(t, today))
        completion_rate = calculate_percentage(completed, total)
        productivity_score = int(
            clamp(
                completion_rate - const.OVERDUE_PENALTY_PER_TASK * overdue,
                0,
                100,
            )
        )

        by_priority = dict.fromkeys(const.PRIORITIES, 0)
        by_category: dict[str, int] = {}
        for task in tasks:
            if not task.get(const.DATA_COMPLETED):
                priority = task.get(const.DATA_TASK_PRIORITY, const.DEFAULT_PRIORITY)
                if priority in const.PRIORITIES:
                    by_priority[priority] += 1
            category = str(task.get(const.DATA_TASK_CATEGORY) or const.DEFAULT_CATEGORY)
            by_category[category] = by_category.get(category, 0) + 1

        return {
            const.STAT_TOTAL: total,
            const.STAT_COMPLETED: completed,
            const.STAT_PENDING: total - completed,
            const.STAT_OVERDUE: overdue,
            const.STAT_COMPLETION_RATE: completion_rate,
            const.STAT_PRODUCTIVITY_SCORE: productivity_score,
            const.STAT_BY_PRIORITY: by_priority,
            const.STAT_BY_CATEGORY: by_category,
            const.STAT_WEEKLY_TREND: StatisticsEngine.compute_weekly_trend(
                tasks, today, tz
            ),
        }  # type: ignore[return-value]

    # ────────────────────────────────────────────────────────────────
    # Habits
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def compute_habit_summary(habits: Iterable[Mapping[str, Any]]) -> HabitSummary:
        """Summarize habits: count, active streaks, mean and best streak."""
        streaks = [to_int(h.get(const.DATA_HABIT_STREAK)) for h in habits]
        best = [to_int(h.get(const.DATA_HABIT_BEST_STREAK)) for h in habits]
        return {
            const.STAT_TOTAL: len(streaks),
            const.STAT_ACTIVE_STREAKS: sum(1 for s in streaks if s > 0),
            const.STAT_AVG_STREAK: average(streaks),
            const.STAT_BEST_OVERALL_STREAK: max(best + streaks, default=0),
        }  # type: ignore[return-value]
