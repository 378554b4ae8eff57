"""Manager modules for Zen Planner integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and handle cross-cutting concerns.
"""

from .advisor_manager import AdvisorManager
from .base_manager import BaseManager
from .goal_manager import GoalManager
from .habit_manager import HabitManager
from .system_manager import SystemManager
from .task_manager import TaskManager

__all__ = [
    "AdvisorManager",
    "BaseManager",
    "GoalManager",
    "HabitManager",
    "SystemManager",
    "TaskManager",
]
