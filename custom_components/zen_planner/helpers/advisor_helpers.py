"""Advisor gateway helpers.

Pure functions shared by the HTTP endpoints and the in-store advisor chat:
- Normalizing client payloads (camelCase keys, non-list fields)
- Building the bounded context summary the completion service sees
- Prompt construction for chat and analysis
- Extracting and validating the JSON analysis reply, with a safe fallback
"""

from __future__ import annotations

from datetime import datetime
import json
import math
import re
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.statistics_engine import StatisticsEngine
from ..utils.math_utils import clamp, round_half_up, to_int

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ..type_defs import AnalysisInsight, AnalysisResult

CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI productivity advisor for Zen Planner. "
    "Be concise and helpful."
)

ANALYSIS_SYSTEM_PROMPT = (
    "You are a productivity analysis AI. Analyze data and provide actionable "
    "insights in JSON format only. No markdown, just valid JSON."
)

INSIGHT_TYPES = ("tip", "warning", "achievement", "suggestion")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")
_CODE_FENCE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{.*\}", re.S)


# ==============================================================================
# Payload normalization
# ==============================================================================


def camel_to_snake(key: str) -> str:
    """Convert a camelCase key to snake_case ("dueDate" → "due_date")."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def normalize_entity_keys(value: Any) -> Any:
    """Recursively convert dict keys from camelCase to snake_case."""
    if isinstance(value, dict):
        return {
            camel_to_snake(str(k)): normalize_entity_keys(v) for k, v in value.items()
        }
    if isinstance(value, list):
        return [normalize_entity_keys(item) for item in value]
    return value


def coerce_entity_list(value: Any) -> list[dict[str, Any]]:
    """Return value as a list of normalized entity dicts.

    Anything that is not a list becomes []. Non-dict items are skipped.
    """
    if not isinstance(value, list):
        return []
    return [normalize_entity_keys(item) for item in value if isinstance(item, dict)]


def _truncate(text: Any) -> str:
    title = str(text or "").replace("\n", " ").strip()
    if len(title) > const.MAX_CONTEXT_TITLE_LENGTH:
        return title[: const.MAX_CONTEXT_TITLE_LENGTH - 1] + "…"
    return title


# ==============================================================================
# Chat
# ==============================================================================


def build_context_summary(
    tasks: Sequence[Mapping[str, Any]],
    goals: Sequence[Mapping[str, Any]],
    habits: Sequence[Mapping[str, Any]],
) -> str:
    """Build the bounded plain-text summary of the user's data.

    Only titles, completion flags, priorities, goal progress and habit
    streaks are included. Item counts and title lengths are capped so a
    large or hostile payload cannot blow up the prompt.
    """
    lines: list[str] = []

    if tasks:
        lines.append(f"\nTasks ({len(tasks)}):")
        for task in tasks[: const.MAX_CONTEXT_TASKS]:
            mark = "✓" if task.get(const.DATA_COMPLETED) else "○"
            priority = task.get(const.DATA_TASK_PRIORITY) or const.DEFAULT_PRIORITY
            if priority not in const.PRIORITIES:
                priority = const.DEFAULT_PRIORITY
            lines.append(f"- {mark} {_truncate(task.get(const.DATA_TITLE))} ({priority})")
        if len(tasks) > const.MAX_CONTEXT_TASKS:
            lines.append(f"- … and {len(tasks) - const.MAX_CONTEXT_TASKS} more")

    if goals:
        lines.append("\nGoals:")
        for goal in goals[: const.MAX_CONTEXT_GOALS]:
            progress = int(clamp(to_int(goal.get(const.DATA_GOAL_PROGRESS)), 0, 100))
            lines.append(f"- {_truncate(goal.get(const.DATA_TITLE))} ({progress}%)")

    if habits:
        lines.append("\nHabits:")
        for habit in habits[: const.MAX_CONTEXT_HABITS]:
            streak = max(0, to_int(habit.get(const.DATA_HABIT_STREAK)))
            lines.append(
                f"- {_truncate(habit.get(const.DATA_TITLE))} ({streak} day streak)"
            )

    return "\n".join(lines)


def build_chat_system_prompt(context_summary: str) -> str:
    """Return the advisor system prompt, with the user context appended."""
    if not context_summary:
        return CHAT_SYSTEM_PROMPT
    return f"{CHAT_SYSTEM_PROMPT}\n\nUser context:{context_summary}"


def validate_chat_message(message: Any) -> str | None:
    """Return an error string for an invalid chat message, else None."""
    if not isinstance(message, str) or not message.strip():
        return const.ERROR_MESSAGE_REQUIRED
    if len(message) > const.MAX_MESSAGE_LENGTH:
        return const.ERROR_MESSAGE_TOO_LONG
    return None


# ==============================================================================
# Analysis
# ==============================================================================


def compute_request_stats(
    tasks: Sequence[Mapping[str, Any]],
    goals: Sequence[Mapping[str, Any]],
    habits: Sequence[Mapping[str, Any]],
    now: datetime,
) -> dict[str, Any]:
    """Compute the stats block returned by the analyze endpoint.

    Keys are camelCase because the block is returned to the browser as-is.
    """
    task_stats = StatisticsEngine.compute_task_stats(tasks, now)
    goal_summary = StatisticsEngine.compute_goal_summary(goals)
    habit_summary = StatisticsEngine.compute_habit_summary(habits)
    return {
        "totalTasks": task_stats["total"],
        "completedTasks": task_stats["completed"],
        "pendingTasks": task_stats["pending"],
        "overdueTasks": task_stats["overdue"],
        "completionRate": task_stats["completion_rate"],
        "priorityDistribution": task_stats["by_priority"],
        "categoryDistribution": task_stats["by_category"],
        "totalGoals": goal_summary["total"],
        "avgGoalProgress": goal_summary["avg_progress"],
        "totalHabits": habit_summary["total"],
        "avgStreak": habit_summary["avg_streak"],
        "activeStreaks": habit_summary["active_streaks"],
    }


def build_analysis_prompt(stats: Mapping[str, Any]) -> str:
    """Return the analysis user prompt for a stats block."""
    priorities = stats["priorityDistribution"]
    categories = "\n".join(
        f"- {_truncate(category)}: {count} tasks"
        for category, count in stats["categoryDistribution"].items()
    )
    return f"""Analyze the following productivity data and provide 3-5 actionable insights:

TASK STATISTICS:
- Total tasks: {stats["totalTasks"]}
- Completed: {stats["completedTasks"]}
- Pending: {stats["pendingTasks"]}
- Overdue: {stats["overdueTasks"]}
- Completion rate: {stats["completionRate"]}%

PRIORITY BREAKDOWN (pending):
- High: {priorities.get("high", 0)}
- Medium: {priorities.get("medium", 0)}
- Low: {priorities.get("low", 0)}

CATEGORY DISTRIBUTION:
{categories}

GOAL PROGRESS:
- Total goals: {stats["totalGoals"]}
- Average progress: {stats["avgGoalProgress"]}%

HABIT TRACKING:
- Total habits: {stats["totalHabits"]}
- Active streaks: {stats["activeStreaks"]}
- Average streak: {stats["avgStreak"]} days

Provide insights in the following JSON format only:
{{
  "productivityScore": <number 0-100>,
  "insights": [
    {{
      "type": "tip|warning|achievement|suggestion",
      "title": "<short title>",
      "description": "<detailed insight>",
      "actionable": <boolean>,
      "action": "<optional action suggestion>"
    }}
  ],
  "recommendations": ["<recommendation 1>", "<recommendation 2>"]
}}"""


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object out of a model reply.

    Markdown code fences are stripped first. If the remainder is not a JSON
    object, the outermost {...} block is tried.

    Raises:
        ValueError: If no JSON object can be recovered.
    """
    cleaned = _CODE_FENCE.sub("", text or "").strip()
    try:
        parsed = json.loads(cleaned)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    match = _JSON_OBJECT.search(cleaned)
    if not match:
        raise ValueError("No JSON object found in model output")
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("Model output JSON must be an object")
    return parsed


def default_analysis(stats: Mapping[str, Any]) -> AnalysisResult:
    """Return the low-confidence result used when the model cannot help."""
    return {
        "stats": dict(stats),
        "productivityScore": stats["completionRate"],
        "insights": [
            {
                "type": "suggestion",
                "title": "Keep tracking your progress",
                "description": "Continue using the app to get more personalized insights.",
                "actionable": False,
            }
        ],
        "recommendations": [
            "Add more tasks to get better insights",
            "Set up goals to track long-term progress",
        ],
    }


def _coerce_insight(item: Any) -> AnalysisInsight | None:
    if not isinstance(item, dict):
        return None
    title = str(item.get("title") or "").strip()
    description = str(item.get("description") or "").strip()
    if not title or not description:
        return None
    insight_type = item.get("type")
    insight: AnalysisInsight = {
        "type": insight_type if insight_type in INSIGHT_TYPES else "tip",
        "title": title,
        "description": description,
        "actionable": bool(item.get("actionable", False)),
    }
    if isinstance(item.get("action"), str) and item["action"].strip():
        insight["action"] = item["action"].strip()
    return insight


def build_analysis_result(
    reply: str, stats: Mapping[str, Any]
) -> tuple[AnalysisResult, bool]:
    """Turn a model reply into an analysis result.

    Returns:
        (result, used_fallback). Malformed fields are dropped; a reply that
        cannot be parsed at all yields the default result.
    """
    try:
        parsed = extract_json_object(reply)
    except ValueError as err:
        const.LOGGER.warning("WARNING: Unparseable analysis reply, using default: %s", err)
        return default_analysis(stats), True

    score = parsed.get("productivityScore")
    if (
        isinstance(score, bool)
        or not isinstance(score, (int, float))
        or not math.isfinite(score)
    ):
        score = stats["completionRate"]
    raw_insights = parsed.get("insights")
    insights = [
        insight
        for insight in (
            _coerce_insight(item)
            for item in (raw_insights if isinstance(raw_insights, list) else [])
        )
        if insight is not None
    ]
    raw_recommendations = parsed.get("recommendations")
    recommendations = [
        str(item).strip()
        for item in (raw_recommendations if isinstance(raw_recommendations, list) else [])
        if isinstance(item, str) and item.strip()
    ]

    return {
        "stats": dict(stats),
        "productivityScore": int(clamp(round_half_up(score), 0, 100)),
        "insights": insights,
        "recommendations": recommendations,
    }, False
