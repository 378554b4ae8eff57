"""Type definitions for Zen Planner data structures.

TypedDict is used for STATIC structures whose keys are known at design time
(entity records, creation inputs, derived statistics). Aggregations keyed by
runtime values (tasks per category, plans per tier) stay plain dicts.

Each entity has two shapes:
- ``<Entity>Data``: the full stored record, including store-assigned fields
- ``<Entity>Create``: what a caller may supply when creating one; store-assigned
  fields (id, timestamps, order, derived progress/streaks) are absent

IMPORTANT: This file must NOT import from coordinator.py, helpers or managers
to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime enforcement of the creation
boundary lives in data_builders.py.
"""

from typing import Any, Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases
# =============================================================================

Priority = Literal["high", "medium", "low"]
Frequency = Literal["daily", "weekly", "monthly"]
ChatRole = Literal["user", "assistant"]
SubscriptionTier = Literal["free", "starter", "pro", "business", "enterprise"]
CalendarEventType = Literal["task", "goal"]


# =============================================================================
# Entities
# =============================================================================


class SubtaskData(TypedDict):
    """Checklist item inside a task."""

    id: str
    title: str
    completed: bool


class TaskData(TypedDict):
    """Stored task record."""

    id: str
    title: str
    description: NotRequired[str]
    completed: bool
    priority: Priority
    due_date: NotRequired[str | None]
    due_time: NotRequired[str | None]
    reminder_minutes_before: NotRequired[int | None]
    category: str
    goal_id: NotRequired[str | None]
    subtasks: list[SubtaskData]
    created_at: str
    updated_at: str
    order: int


class TaskCreate(TypedDict):
    """Caller-supplied fields for a new task."""

    title: str
    description: NotRequired[str]
    completed: NotRequired[bool]
    priority: NotRequired[Priority]
    due_date: NotRequired[str | None]
    due_time: NotRequired[str | None]
    reminder_minutes_before: NotRequired[int | None]
    category: NotRequired[str]
    goal_id: NotRequired[str | None]
    subtasks: NotRequired[list[SubtaskData]]


class MilestoneData(TypedDict):
    """Checkpoint inside a goal."""

    id: str
    title: str
    completed: bool
    target_date: NotRequired[str | None]


class GoalData(TypedDict):
    """Stored goal record. ``progress`` is derived from milestones."""

    id: str
    title: str
    description: NotRequired[str]
    color: str
    milestones: list[MilestoneData]
    progress: int
    target_date: NotRequired[str | None]
    created_at: str


class GoalCreate(TypedDict):
    """Caller-supplied fields for a new goal."""

    title: str
    description: NotRequired[str]
    color: NotRequired[str]
    milestones: NotRequired[list[MilestoneData]]
    target_date: NotRequired[str | None]


class HabitCompletion(TypedDict):
    """One day's completion mark for a habit."""

    date: str
    completed: bool


class HabitData(TypedDict):
    """Stored habit record. ``streak`` and ``best_streak`` are derived."""

    id: str
    title: str
    description: NotRequired[str]
    frequency: Frequency
    color: str
    completions: list[HabitCompletion]
    streak: int
    best_streak: int
    created_at: str


class HabitCreate(TypedDict):
    """Caller-supplied fields for a new habit."""

    title: str
    description: NotRequired[str]
    frequency: NotRequired[Frequency]
    color: NotRequired[str]


class CategoryData(TypedDict):
    """Task category."""

    id: str
    name: str
    color: str
    icon: NotRequired[str | None]


class CategoryCreate(TypedDict):
    """Caller-supplied fields for a new category."""

    name: str
    color: NotRequired[str]
    icon: NotRequired[str | None]


class ChatMessageData(TypedDict):
    """One message in the advisor conversation."""

    id: str
    role: ChatRole
    content: str
    timestamp: str


class ChatMessageCreate(TypedDict):
    """Caller-supplied fields for a new chat message."""

    role: ChatRole
    content: str


class ReminderData(TypedDict):
    """Stored reminder record."""

    id: str
    task_id: str
    task_title: str
    due_date: str
    due_time: NotRequired[str | None]
    reminder_at: str
    is_notified: bool


class ReminderCreate(TypedDict):
    """Caller-supplied fields for a new reminder."""

    task_id: str
    task_title: str
    due_date: str
    due_time: NotRequired[str | None]
    reminder_at: NotRequired[str | None]
    minutes_before: NotRequired[int]


class SubscriptionPlan(TypedDict):
    """Static plan definition, display only."""

    name: str
    price: float
    billing_cycle: str
    features: list[str]
    limits: dict[str, int]
    highlighted: bool


# =============================================================================
# Store snapshot
# =============================================================================


class PlannerSnapshot(TypedDict):
    """Persisted subset of planner state."""

    tasks: list[TaskData]
    goals: list[GoalData]
    habits: list[HabitData]
    categories: list[CategoryData]
    chat_messages: list[ChatMessageData]
    reminders: list[ReminderData]
    subscription: SubscriptionTier


# =============================================================================
# Derived views
# =============================================================================


class DailyTrend(TypedDict):
    """Task totals for one local calendar day."""

    date: str
    completed: int
    total: int


class TaskStats(TypedDict):
    """Aggregate task statistics."""

    total: int
    completed: int
    pending: int
    overdue: int
    completion_rate: int
    productivity_score: int
    by_priority: dict[str, int]
    by_category: dict[str, int]
    weekly_trend: list[DailyTrend]


class HabitSummary(TypedDict):
    """Aggregate habit statistics."""

    total: int
    active_streaks: int
    avg_streak: int
    best_overall_streak: int


class GoalSummary(TypedDict):
    """Aggregate goal statistics."""

    total: int
    completed: int
    avg_progress: int


class PlannerCalendarEvent(TypedDict):
    """Calendar projection of a task or goal."""

    id: str
    title: str
    date: str
    time: NotRequired[str | None]
    type: CalendarEventType
    completed: bool
    priority: NotRequired[Priority]
    color: NotRequired[str]


class AnalysisInsight(TypedDict):
    """One insight in a productivity analysis."""

    type: str
    title: str
    description: str
    actionable: bool
    action: NotRequired[str]


class AnalysisResult(TypedDict):
    """Productivity analysis returned by the analyze endpoint."""

    stats: dict[str, Any]
    productivityScore: int  # noqa: N815
    insights: list[AnalysisInsight]
    recommendations: list[str]
