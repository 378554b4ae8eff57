"""Engines - Pure computation modules with no Home Assistant dependencies.

Engines are stateless: they operate on the data structures passed to them and
never persist anything. The coordinator and managers own state and persistence.

- StreakEngine: Consecutive-day habit streaks and the best-streak ratchet
- StatisticsEngine: Goal progress, task statistics and productivity score
- CalendarEngine: Projection of dated tasks and goals onto calendar events
"""

from .calendar_engine import CalendarEngine
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine

__all__ = [
    "CalendarEngine",
    "StatisticsEngine",
    "StreakEngine",
]
