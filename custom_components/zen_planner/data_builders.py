"""Entity construction and validation helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults
- The creation boundary (store-assigned fields are never taken from callers)
- Field validation for create and update payloads

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes a creation input with DATA_* keys
- Drops any store-assigned keys the caller tried to supply
- Generates the id (UUID) and timestamps
- Applies field defaults
- Returns the complete entity dict ready for storage

### Sanitize Functions
`sanitize_<entity>_update()` functions validate a partial update and strip the
fields an update may not touch (id, created_at, derived values).

Consumers:
- managers/*.py (store mutations)
- services.py (indirectly, through the managers)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from typing import Any, cast
import uuid

from . import const
from .engines.statistics_engine import StatisticsEngine
from .type_defs import (
    CategoryData,
    ChatMessageData,
    ChatRole,
    Frequency,
    GoalData,
    HabitData,
    MilestoneData,
    Priority,
    ReminderData,
    SubtaskData,
    TaskData,
)
from .utils.dt_utils import (
    dt_combine_local,
    dt_now_iso,
    dt_parse,
    dt_parse_date,
    dt_parse_time,
)

# ==============================================================================
# Exceptions
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Raised when a create or update payload fails validation. The field
    attribute names the DATA_* key that failed so callers can report it.

    Attributes:
        field: The DATA_* constant identifying the offending field
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders

    Example:
        raise EntityValidationError(
            field=const.DATA_TASK_PRIORITY,
            translation_key=const.TRANS_KEY_ERROR_INVALID_PRIORITY,
            placeholders={"value": "urgent"},
        )
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(f"Validation failed for {field}: {translation_key}")


# ==============================================================================
# Field helpers
# ==============================================================================


def _new_id() -> str:
    return str(uuid.uuid4())


def _drop_fields(
    user_input: dict[str, Any], forbidden: Iterable[str], entity: str
) -> dict[str, Any]:
    """Return a copy of user_input without the forbidden keys."""
    forbidden_set = set(forbidden)
    ignored = sorted(key for key in user_input if key in forbidden_set)
    if ignored:
        const.LOGGER.debug(
            "DEBUG: Ignoring store-assigned %s fields from caller: %s",
            entity,
            ignored,
        )
    return {k: v for k, v in user_input.items() if k not in forbidden_set}


def _require_text(value: Any, field: str, translation_key: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise EntityValidationError(field=field, translation_key=translation_key)
    return text


def _validate_choice(
    value: Any, choices: Iterable[str], field: str, translation_key: str
) -> str:
    if value not in tuple(choices):
        raise EntityValidationError(
            field=field,
            translation_key=translation_key,
            placeholders={"value": str(value)},
        )
    return cast("str", value)


def _validate_optional_date(value: Any, field: str) -> str | None:
    """Accept None/"" as "no date", otherwise require a parseable ISO date."""
    if value in (None, ""):
        return None
    parsed = dt_parse_date(value if isinstance(value, str) else None)
    if parsed is None:
        raise EntityValidationError(
            field=field,
            translation_key=const.TRANS_KEY_ERROR_INVALID_DATE,
            placeholders={"value": str(value)},
        )
    return parsed.isoformat()


def _validate_optional_time(value: Any, field: str) -> str | None:
    if value in (None, ""):
        return None
    parsed = dt_parse_time(value if isinstance(value, str) else None)
    if parsed is None:
        raise EntityValidationError(
            field=field,
            translation_key=const.TRANS_KEY_ERROR_INVALID_TIME,
            placeholders={"value": str(value)},
        )
    return parsed.strftime("%H:%M")


def _validate_minutes(value: Any, field: str) -> int | None:
    if value is None:
        return None
    try:
        minutes = int(value)
    except (TypeError, ValueError) as err:
        raise EntityValidationError(
            field=field,
            translation_key=const.TRANS_KEY_ERROR_INVALID_REMINDER,
            placeholders={"value": str(value)},
        ) from err
    if minutes < 0:
        raise EntityValidationError(
            field=field,
            translation_key=const.TRANS_KEY_ERROR_INVALID_REMINDER,
            placeholders={"value": str(value)},
        )
    return minutes


def build_subtasks(items: Any) -> list[SubtaskData]:
    """Normalize a subtask list, assigning ids to new entries."""
    subtasks: list[SubtaskData] = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        subtasks.append(
            SubtaskData(
                id=str(item.get(const.DATA_ID) or _new_id()),
                title=_require_text(
                    item.get(const.DATA_TITLE),
                    const.DATA_TASK_SUBTASKS,
                    const.TRANS_KEY_ERROR_INVALID_TITLE,
                ),
                completed=bool(item.get(const.DATA_COMPLETED, False)),
            )
        )
    return subtasks


def build_milestones(items: Any) -> list[MilestoneData]:
    """Normalize a milestone list, assigning ids to new entries."""
    milestones: list[MilestoneData] = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        milestone = MilestoneData(
            id=str(item.get(const.DATA_ID) or _new_id()),
            title=_require_text(
                item.get(const.DATA_TITLE),
                const.DATA_GOAL_MILESTONES,
                const.TRANS_KEY_ERROR_INVALID_TITLE,
            ),
            completed=bool(item.get(const.DATA_COMPLETED, False)),
        )
        target_date = _validate_optional_date(
            item.get(const.DATA_GOAL_TARGET_DATE), const.DATA_GOAL_MILESTONES
        )
        if target_date:
            milestone[const.DATA_GOAL_TARGET_DATE] = target_date
        milestones.append(milestone)
    return milestones


# ==============================================================================
# Tasks
# ==============================================================================


def build_task(user_input: dict[str, Any], order: int = 0) -> TaskData:
    """Build a new task from a creation input.

    Args:
        user_input: Creation fields (TaskCreate shape). Store-assigned keys
            (id, created_at, updated_at, order) are ignored.
        order: Position in the collection. The store overwrites it with the
            collection length at the moment the task is appended.

    Raises:
        EntityValidationError: If title, priority, due date/time or reminder
            offset is invalid.
    """
    data = _drop_fields(user_input, const.SERVER_ASSIGNED_TASK_FIELDS, "task")
    now_iso = dt_now_iso()

    task = TaskData(
        id=_new_id(),
        title=_require_text(
            data.get(const.DATA_TITLE),
            const.DATA_TITLE,
            const.TRANS_KEY_ERROR_INVALID_TITLE,
        ),
        completed=bool(data.get(const.DATA_COMPLETED, False)),
        priority=cast(
            "Priority",
            _validate_choice(
                data.get(const.DATA_TASK_PRIORITY, const.DEFAULT_PRIORITY),
                const.PRIORITIES,
                const.DATA_TASK_PRIORITY,
                const.TRANS_KEY_ERROR_INVALID_PRIORITY,
            ),
        ),
        category=str(data.get(const.DATA_TASK_CATEGORY) or const.DEFAULT_CATEGORY),
        subtasks=build_subtasks(data.get(const.DATA_TASK_SUBTASKS)),
        created_at=now_iso,
        updated_at=now_iso,
        order=order,
    )

    if data.get(const.DATA_DESCRIPTION):
        task[const.DATA_DESCRIPTION] = str(data[const.DATA_DESCRIPTION])
    task[const.DATA_TASK_DUE_DATE] = _validate_optional_date(
        data.get(const.DATA_TASK_DUE_DATE), const.DATA_TASK_DUE_DATE
    )
    task[const.DATA_TASK_DUE_TIME] = _validate_optional_time(
        data.get(const.DATA_TASK_DUE_TIME), const.DATA_TASK_DUE_TIME
    )
    task[const.DATA_TASK_REMINDER_MINUTES_BEFORE] = _validate_minutes(
        data.get(const.DATA_TASK_REMINDER_MINUTES_BEFORE),
        const.DATA_TASK_REMINDER_MINUTES_BEFORE,
    )
    task[const.DATA_TASK_GOAL_ID] = data.get(const.DATA_TASK_GOAL_ID) or None
    return task


def sanitize_task_update(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial task update and drop fields it may not change."""
    updates = _drop_fields(fields, const.SERVER_ASSIGNED_TASK_FIELDS, "task")

    if const.DATA_TITLE in updates:
        updates[const.DATA_TITLE] = _require_text(
            updates[const.DATA_TITLE],
            const.DATA_TITLE,
            const.TRANS_KEY_ERROR_INVALID_TITLE,
        )
    if const.DATA_TASK_PRIORITY in updates:
        _validate_choice(
            updates[const.DATA_TASK_PRIORITY],
            const.PRIORITIES,
            const.DATA_TASK_PRIORITY,
            const.TRANS_KEY_ERROR_INVALID_PRIORITY,
        )
    if const.DATA_TASK_DUE_DATE in updates:
        updates[const.DATA_TASK_DUE_DATE] = _validate_optional_date(
            updates[const.DATA_TASK_DUE_DATE], const.DATA_TASK_DUE_DATE
        )
    if const.DATA_TASK_DUE_TIME in updates:
        updates[const.DATA_TASK_DUE_TIME] = _validate_optional_time(
            updates[const.DATA_TASK_DUE_TIME], const.DATA_TASK_DUE_TIME
        )
    if const.DATA_TASK_REMINDER_MINUTES_BEFORE in updates:
        updates[const.DATA_TASK_REMINDER_MINUTES_BEFORE] = _validate_minutes(
            updates[const.DATA_TASK_REMINDER_MINUTES_BEFORE],
            const.DATA_TASK_REMINDER_MINUTES_BEFORE,
        )
    if const.DATA_TASK_SUBTASKS in updates:
        updates[const.DATA_TASK_SUBTASKS] = build_subtasks(
            updates[const.DATA_TASK_SUBTASKS]
        )
    if const.DATA_COMPLETED in updates:
        updates[const.DATA_COMPLETED] = bool(updates[const.DATA_COMPLETED])
    return updates


# ==============================================================================
# Goals
# ==============================================================================


def build_goal(user_input: dict[str, Any]) -> GoalData:
    """Build a new goal. Progress is derived from the supplied milestones."""
    data = _drop_fields(user_input, const.SERVER_ASSIGNED_GOAL_FIELDS, "goal")
    milestones = build_milestones(data.get(const.DATA_GOAL_MILESTONES))

    goal = GoalData(
        id=_new_id(),
        title=_require_text(
            data.get(const.DATA_TITLE),
            const.DATA_TITLE,
            const.TRANS_KEY_ERROR_INVALID_TITLE,
        ),
        color=str(data.get(const.DATA_COLOR) or const.DEFAULT_GOAL_COLOR),
        milestones=milestones,
        progress=StatisticsEngine.compute_goal_progress(milestones, 0),
        created_at=dt_now_iso(),
    )
    if data.get(const.DATA_DESCRIPTION):
        goal[const.DATA_DESCRIPTION] = str(data[const.DATA_DESCRIPTION])
    goal[const.DATA_GOAL_TARGET_DATE] = _validate_optional_date(
        data.get(const.DATA_GOAL_TARGET_DATE), const.DATA_GOAL_TARGET_DATE
    )
    return goal


def sanitize_goal_update(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial goal update. A supplied progress value is discarded."""
    updates = _drop_fields(fields, const.SERVER_ASSIGNED_GOAL_FIELDS, "goal")

    if const.DATA_TITLE in updates:
        updates[const.DATA_TITLE] = _require_text(
            updates[const.DATA_TITLE],
            const.DATA_TITLE,
            const.TRANS_KEY_ERROR_INVALID_TITLE,
        )
    if const.DATA_GOAL_MILESTONES in updates:
        updates[const.DATA_GOAL_MILESTONES] = build_milestones(
            updates[const.DATA_GOAL_MILESTONES]
        )
    if const.DATA_GOAL_TARGET_DATE in updates:
        updates[const.DATA_GOAL_TARGET_DATE] = _validate_optional_date(
            updates[const.DATA_GOAL_TARGET_DATE], const.DATA_GOAL_TARGET_DATE
        )
    return updates


# ==============================================================================
# Habits
# ==============================================================================


def build_habit(user_input: dict[str, Any]) -> HabitData:
    """Build a new habit with no completions and zero streaks."""
    data = _drop_fields(user_input, const.SERVER_ASSIGNED_HABIT_FIELDS, "habit")

    habit = HabitData(
        id=_new_id(),
        title=_require_text(
            data.get(const.DATA_TITLE),
            const.DATA_TITLE,
            const.TRANS_KEY_ERROR_INVALID_TITLE,
        ),
        frequency=cast(
            "Frequency",
            _validate_choice(
                data.get(const.DATA_HABIT_FREQUENCY, const.DEFAULT_FREQUENCY),
                const.FREQUENCIES,
                const.DATA_HABIT_FREQUENCY,
                const.TRANS_KEY_ERROR_INVALID_FREQUENCY,
            ),
        ),
        color=str(data.get(const.DATA_COLOR) or const.DEFAULT_HABIT_COLOR),
        completions=[],
        streak=0,
        best_streak=0,
        created_at=dt_now_iso(),
    )
    if data.get(const.DATA_DESCRIPTION):
        habit[const.DATA_DESCRIPTION] = str(data[const.DATA_DESCRIPTION])
    return habit


def sanitize_habit_update(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial habit update. Completions and streaks are not editable."""
    updates = _drop_fields(fields, const.SERVER_ASSIGNED_HABIT_FIELDS, "habit")

    if const.DATA_TITLE in updates:
        updates[const.DATA_TITLE] = _require_text(
            updates[const.DATA_TITLE],
            const.DATA_TITLE,
            const.TRANS_KEY_ERROR_INVALID_TITLE,
        )
    if const.DATA_HABIT_FREQUENCY in updates:
        _validate_choice(
            updates[const.DATA_HABIT_FREQUENCY],
            const.FREQUENCIES,
            const.DATA_HABIT_FREQUENCY,
            const.TRANS_KEY_ERROR_INVALID_FREQUENCY,
        )
    return updates


# ==============================================================================
# Categories, chat, reminders
# ==============================================================================


def build_category(user_input: dict[str, Any]) -> CategoryData:
    """Build a new category."""
    category = CategoryData(
        id=_new_id(),
        name=_require_text(
            user_input.get(const.DATA_CATEGORY_NAME),
            const.DATA_CATEGORY_NAME,
            const.TRANS_KEY_ERROR_INVALID_NAME,
        ),
        color=str(user_input.get(const.DATA_COLOR) or "#6b7280"),
    )
    if user_input.get(const.DATA_CATEGORY_ICON):
        category[const.DATA_CATEGORY_ICON] = str(user_input[const.DATA_CATEGORY_ICON])
    return category


def build_default_categories() -> list[CategoryData]:
    """Return fresh copies of the seeded categories."""
    return [cast("CategoryData", dict(item)) for item in const.DEFAULT_CATEGORIES]


def build_chat_message(user_input: dict[str, Any]) -> ChatMessageData:
    """Build a chat message stamped with the current time."""
    return ChatMessageData(
        id=_new_id(),
        role=cast(
            "ChatRole",
            _validate_choice(
                user_input.get(const.DATA_CHAT_ROLE),
                const.CHAT_ROLES,
                const.DATA_CHAT_ROLE,
                const.TRANS_KEY_ERROR_INVALID_ROLE,
            ),
        ),
        content=str(user_input.get(const.DATA_CHAT_CONTENT) or ""),
        timestamp=dt_now_iso(),
    )


def build_reminder(user_input: dict[str, Any]) -> ReminderData:
    """Build a reminder, deriving the fire time when the caller omits it.

    The fire time is the task's due date (at its due time, or local midnight
    when there is none) minus ``minutes_before``.
    """
    task_id = _require_text(
        user_input.get(const.DATA_REMINDER_TASK_ID),
        const.DATA_REMINDER_TASK_ID,
        const.TRANS_KEY_ERROR_UNKNOWN_TASK,
    )
    due_date = _validate_optional_date(
        user_input.get(const.DATA_REMINDER_DUE_DATE), const.DATA_REMINDER_DUE_DATE
    )
    if due_date is None:
        raise EntityValidationError(
            field=const.DATA_REMINDER_DUE_DATE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_DATE,
            placeholders={"value": ""},
        )
    due_time = _validate_optional_time(
        user_input.get(const.DATA_REMINDER_DUE_TIME), const.DATA_REMINDER_DUE_TIME
    )

    supplied_at = dt_parse(user_input.get(const.DATA_REMINDER_AT))
    if supplied_at is not None:
        reminder_at = supplied_at
    else:
        minutes_before = (
            _validate_minutes(
                user_input.get("minutes_before", 0), const.DATA_REMINDER_AT
            )
            or 0
        )
        due_day = dt_parse_date(due_date)
        assert due_day is not None
        reminder_at = dt_combine_local(due_day, due_time) - timedelta(
            minutes=minutes_before
        )

    reminder = ReminderData(
        id=_new_id(),
        task_id=task_id,
        task_title=str(user_input.get(const.DATA_REMINDER_TASK_TITLE) or ""),
        due_date=due_date,
        reminder_at=reminder_at.isoformat(),
        is_notified=False,
    )
    reminder[const.DATA_REMINDER_DUE_TIME] = due_time
    return reminder
