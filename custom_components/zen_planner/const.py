# File: const.py
"""Constants for the Zen Planner integration.

This file centralizes configuration keys, defaults, storage keys, signal
suffixes, service names and platform identifiers for consistency across
the integration.
"""

import logging
from typing import Final

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
ZEN_PLANNER_TITLE = "Zen Planner"

DOMAIN = "zen_planner"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [
    Platform.CALENDAR,
    Platform.SENSOR,
]

COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_KEY = "zen_planner_storage"
STORAGE_VERSION = 1

# hass.data keys shared across config entries
DATA_RATE_LIMITER = "rate_limiter"
DATA_VIEWS_REGISTERED = "views_registered"

# ------------------------------------------------------------------------------------------------
# Configuration Keys / Defaults
# ------------------------------------------------------------------------------------------------
CONF_COMPLETION_BASE_URL = "completion_base_url"
CONF_COMPLETION_API_KEY = "completion_api_key"
CONF_COMPLETION_MODEL = "completion_model"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_COMPLETION_BASE_URL = "http://127.0.0.1:1234"
DEFAULT_COMPLETION_API_KEY = ""
DEFAULT_COMPLETION_MODEL = "gpt-4o-mini"
DEFAULT_UPDATE_INTERVAL = 1  # minutes
DEFAULT_COMPLETION_TIMEOUT = 30  # seconds

# ------------------------------------------------------------------------------------------------
# Persisted Collections
# ------------------------------------------------------------------------------------------------
DATA_TASKS = "tasks"
DATA_GOALS = "goals"
DATA_HABITS = "habits"
DATA_CATEGORIES = "categories"
DATA_CHAT_MESSAGES = "chat_messages"
DATA_REMINDERS = "reminders"
DATA_SUBSCRIPTION = "subscription"

PERSISTED_KEYS: Final = (
    DATA_TASKS,
    DATA_GOALS,
    DATA_HABITS,
    DATA_CATEGORIES,
    DATA_CHAT_MESSAGES,
    DATA_REMINDERS,
    DATA_SUBSCRIPTION,
)

# UI-only state (never persisted)
DATA_ACTIVE_TAB = "active_tab"
DATA_SELECTED_DATE = "selected_date"
DEFAULT_ACTIVE_TAB = "dashboard"

# Common entity fields
DATA_ID = "id"
DATA_TITLE = "title"
DATA_DESCRIPTION = "description"
DATA_COMPLETED = "completed"
DATA_COLOR = "color"
DATA_CREATED_AT = "created_at"
DATA_UPDATED_AT = "updated_at"

# Task
DATA_TASK_PRIORITY = "priority"
DATA_TASK_DUE_DATE = "due_date"
DATA_TASK_DUE_TIME = "due_time"
DATA_TASK_REMINDER_MINUTES_BEFORE = "reminder_minutes_before"
DATA_TASK_CATEGORY = "category"
DATA_TASK_SUBTASKS = "subtasks"
DATA_TASK_GOAL_ID = "goal_id"
DATA_TASK_ORDER = "order"

# Goal
DATA_GOAL_MILESTONES = "milestones"
DATA_GOAL_PROGRESS = "progress"
DATA_GOAL_TARGET_DATE = "target_date"

# Habit
DATA_HABIT_FREQUENCY = "frequency"
DATA_HABIT_COMPLETIONS = "completions"
DATA_HABIT_STREAK = "streak"
DATA_HABIT_BEST_STREAK = "best_streak"
DATA_COMPLETION_DATE = "date"

# Category
DATA_CATEGORY_NAME = "name"
DATA_CATEGORY_ICON = "icon"

# Chat message
DATA_CHAT_ROLE = "role"
DATA_CHAT_CONTENT = "content"
DATA_CHAT_TIMESTAMP = "timestamp"

# Reminder
DATA_REMINDER_TASK_ID = "task_id"
DATA_REMINDER_TASK_TITLE = "task_title"
DATA_REMINDER_DUE_DATE = "due_date"
DATA_REMINDER_DUE_TIME = "due_time"
DATA_REMINDER_AT = "reminder_at"
DATA_REMINDER_IS_NOTIFIED = "is_notified"

# Fields that only the store may assign
SERVER_ASSIGNED_TASK_FIELDS: Final = frozenset(
    {DATA_ID, DATA_CREATED_AT, DATA_UPDATED_AT, DATA_TASK_ORDER}
)
SERVER_ASSIGNED_GOAL_FIELDS: Final = frozenset(
    {DATA_ID, DATA_CREATED_AT, DATA_GOAL_PROGRESS}
)
SERVER_ASSIGNED_HABIT_FIELDS: Final = frozenset(
    {
        DATA_ID,
        DATA_CREATED_AT,
        DATA_HABIT_COMPLETIONS,
        DATA_HABIT_STREAK,
        DATA_HABIT_BEST_STREAK,
    }
)

# ------------------------------------------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------------------------------------------
PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"
PRIORITIES: Final = (PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW)
DEFAULT_PRIORITY = PRIORITY_MEDIUM

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_MONTHLY = "monthly"
FREQUENCIES: Final = (FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_MONTHLY)
DEFAULT_FREQUENCY = FREQUENCY_DAILY

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
CHAT_ROLES: Final = (ROLE_USER, ROLE_ASSISTANT)

EVENT_TYPE_TASK = "task"
EVENT_TYPE_GOAL = "goal"

TIER_FREE = "free"
TIER_STARTER = "starter"
TIER_PRO = "pro"
TIER_BUSINESS = "business"
TIER_ENTERPRISE = "enterprise"
SUBSCRIPTION_TIERS: Final = (
    TIER_FREE,
    TIER_STARTER,
    TIER_PRO,
    TIER_BUSINESS,
    TIER_ENTERPRISE,
)
DEFAULT_SUBSCRIPTION = TIER_FREE

DEFAULT_CATEGORY = "personal"
DEFAULT_GOAL_COLOR = "#8b5cf6"
DEFAULT_HABIT_COLOR = "#22c55e"

UNLIMITED = -1

DEFAULT_CATEGORIES: Final = (
    {DATA_ID: "personal", DATA_CATEGORY_NAME: "Personal", DATA_COLOR: "#8b5cf6"},
    {DATA_ID: "work", DATA_CATEGORY_NAME: "Work", DATA_COLOR: "#3b82f6"},
    {DATA_ID: "health", DATA_CATEGORY_NAME: "Health", DATA_COLOR: "#22c55e"},
    {DATA_ID: "learning", DATA_CATEGORY_NAME: "Learning", DATA_COLOR: "#f59e0b"},
    {DATA_ID: "other", DATA_CATEGORY_NAME: "Other", DATA_COLOR: "#6b7280"},
)

# Plan catalogue, display only. Limit keys: tasks, goals, habits, ai_messages,
# reminders. UNLIMITED means no cap.
PLAN_NAME = "name"
PLAN_PRICE = "price"
PLAN_BILLING_CYCLE = "billing_cycle"
PLAN_FEATURES = "features"
PLAN_LIMITS = "limits"
PLAN_HIGHLIGHTED = "highlighted"

SUBSCRIPTION_PLANS: Final = {
    TIER_FREE: {
        PLAN_NAME: "Free",
        PLAN_PRICE: 0.0,
        PLAN_BILLING_CYCLE: "monthly",
        PLAN_FEATURES: [
            "Up to 25 tasks",
            "2 goals",
            "3 habits",
            "10 AI messages/month",
        ],
        PLAN_LIMITS: {
            "tasks": 25,
            "goals": 2,
            "habits": 3,
            "ai_messages": 10,
            "reminders": 3,
        },
        PLAN_HIGHLIGHTED: False,
    },
    TIER_STARTER: {
        PLAN_NAME: "Starter",
        PLAN_PRICE: 6.97,
        PLAN_BILLING_CYCLE: "monthly",
        PLAN_FEATURES: [
            "Unlimited tasks",
            "Up to 5 goals",
            "Up to 10 habits",
            "50 AI messages/month",
            "Basic reminders",
            "Calendar view",
        ],
        PLAN_LIMITS: {
            "tasks": UNLIMITED,
            "goals": 5,
            "habits": 10,
            "ai_messages": 50,
            "reminders": 10,
        },
        PLAN_HIGHLIGHTED: False,
    },
    TIER_PRO: {
        PLAN_NAME: "Pro",
        PLAN_PRICE: 12.97,
        PLAN_BILLING_CYCLE: "monthly",
        PLAN_FEATURES: [
            "Everything in Starter",
            "Unlimited goals",
            "Unlimited habits",
            "200 AI messages/month",
            "Smart reminders",
            "Priority support",
            "Advanced analytics",
        ],
        PLAN_LIMITS: {
            "tasks": UNLIMITED,
            "goals": UNLIMITED,
            "habits": UNLIMITED,
            "ai_messages": 200,
            "reminders": 50,
        },
        PLAN_HIGHLIGHTED: True,
    },
    TIER_BUSINESS: {
        PLAN_NAME: "Business",
        PLAN_PRICE: 29.97,
        PLAN_BILLING_CYCLE: "monthly",
        PLAN_FEATURES: [
            "Everything in Pro",
            "500 AI messages/month",
            "Team collaboration",
            "Shared calendars",
            "Admin dashboard",
            "API access",
            "Custom integrations",
        ],
        PLAN_LIMITS: {
            "tasks": UNLIMITED,
            "goals": UNLIMITED,
            "habits": UNLIMITED,
            "ai_messages": 500,
            "reminders": UNLIMITED,
        },
        PLAN_HIGHLIGHTED: False,
    },
    TIER_ENTERPRISE: {
        PLAN_NAME: "Enterprise",
        PLAN_PRICE: 49.97,
        PLAN_BILLING_CYCLE: "monthly",
        PLAN_FEATURES: [
            "Everything in Business",
            "Unlimited AI messages",
            "Unlimited team members",
            "White-label options",
            "SSO authentication",
            "Dedicated support",
            "SLA guarantee",
            "Custom development",
        ],
        PLAN_LIMITS: {
            "tasks": UNLIMITED,
            "goals": UNLIMITED,
            "habits": UNLIMITED,
            "ai_messages": UNLIMITED,
            "reminders": UNLIMITED,
        },
        PLAN_HIGHLIGHTED: False,
    },
}

# ------------------------------------------------------------------------------------------------
# Statistics keys
# ------------------------------------------------------------------------------------------------
STAT_TOTAL = "total"
STAT_COMPLETED = "completed"
STAT_PENDING = "pending"
STAT_OVERDUE = "overdue"
STAT_COMPLETION_RATE = "completion_rate"
STAT_PRODUCTIVITY_SCORE = "productivity_score"
STAT_BY_PRIORITY = "by_priority"
STAT_BY_CATEGORY = "by_category"
STAT_WEEKLY_TREND = "weekly_trend"
STAT_DATE = "date"

STAT_ACTIVE_STREAKS = "active_streaks"
STAT_AVG_STREAK = "avg_streak"
STAT_BEST_OVERALL_STREAK = "best_overall_streak"
STAT_AVG_PROGRESS = "avg_progress"

OVERDUE_PENALTY_PER_TASK = 5
WEEKLY_TREND_DAYS = 7

# ------------------------------------------------------------------------------------------------
# Calendar
# ------------------------------------------------------------------------------------------------
CALENDAR_EVENT_DURATION = 30  # minutes, for tasks with a due time
CALENDAR_UID_SUFFIX = "_calendar"

# ------------------------------------------------------------------------------------------------
# Advisor Gateway
# ------------------------------------------------------------------------------------------------
URL_ADVISOR = "/api/ai-advisor"
URL_ANALYZE = "/api/analyze"
VIEW_NAME_ADVISOR = "api:zen_planner:ai_advisor"
VIEW_NAME_ANALYZE = "api:zen_planner:analyze"

RATE_LIMIT_PREFIX_ADVISOR = "advisor"
RATE_LIMIT_PREFIX_ANALYZE = "analyze"
RATE_LIMIT_ADVISOR_MAX = 20
RATE_LIMIT_ANALYZE_MAX = 10
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_CLEANUP_INTERVAL_SECONDS = 60
ANONYMOUS_CLIENT = "anonymous"

HEADER_RATE_LIMIT_REMAINING = "X-RateLimit-Remaining"
HEADER_RATE_LIMIT_RESET = "X-RateLimit-Reset"

MAX_MESSAGE_LENGTH = 2000
MAX_CONTEXT_TASKS = 50
MAX_CONTEXT_GOALS = 20
MAX_CONTEXT_HABITS = 20
MAX_CONTEXT_TITLE_LENGTH = 100

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 500
ANALYSIS_TEMPERATURE = 0.5
ANALYSIS_MAX_TOKENS = 800

ERROR_INVALID_JSON = "Invalid JSON body."
ERROR_MESSAGE_REQUIRED = "Message is required."
ERROR_MESSAGE_TOO_LONG = f"Message must be {MAX_MESSAGE_LENGTH} characters or fewer."
ERROR_RATE_LIMITED = "Too many requests. Please try again later."
ERROR_CHAT_FAILED = "Failed to get response"
ERROR_NOT_LOADED = "Zen Planner is not loaded."

NO_RESPONSE_REPLY = "Sorry, no response."
ADVISOR_FALLBACK_REPLY = (
    "Sorry, I couldn't reach the advisor right now. Please try again in a moment."
)

# ------------------------------------------------------------------------------------------------
# Signals (instance-scoped via get_event_signal)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_TASKS_CHANGED = "tasks_changed"
SIGNAL_SUFFIX_GOALS_CHANGED = "goals_changed"
SIGNAL_SUFFIX_GOAL_DELETED = "goal_deleted"
SIGNAL_SUFFIX_TASK_DELETED = "task_deleted"
SIGNAL_SUFFIX_HABITS_CHANGED = "habits_changed"

# Bus events
EVENT_REMINDER_DUE = "zen_planner_reminder_due"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADD_TASK = "add_task"
SERVICE_UPDATE_TASK = "update_task"
SERVICE_DELETE_TASK = "delete_task"
SERVICE_TOGGLE_TASK = "toggle_task"
SERVICE_REORDER_TASKS = "reorder_tasks"
SERVICE_ADD_GOAL = "add_goal"
SERVICE_UPDATE_GOAL = "update_goal"
SERVICE_DELETE_GOAL = "delete_goal"
SERVICE_TOGGLE_MILESTONE = "toggle_milestone"
SERVICE_ADD_HABIT = "add_habit"
SERVICE_UPDATE_HABIT = "update_habit"
SERVICE_DELETE_HABIT = "delete_habit"
SERVICE_TOGGLE_HABIT_COMPLETION = "toggle_habit_completion"
SERVICE_ADD_CATEGORY = "add_category"
SERVICE_ADD_CHAT_MESSAGE = "add_chat_message"
SERVICE_CLEAR_CHAT = "clear_chat"
SERVICE_ADD_REMINDER = "add_reminder"
SERVICE_DISMISS_REMINDER = "dismiss_reminder"
SERVICE_SET_SUBSCRIPTION = "set_subscription"
SERVICE_SET_ACTIVE_TAB = "set_active_tab"
SERVICE_SET_SELECTED_DATE = "set_selected_date"
SERVICE_ASK_ADVISOR = "ask_advisor"
SERVICE_GET_TASK_STATS = "get_task_stats"

# Service fields
FIELD_TASK_ID = "task_id"
FIELD_TASK_IDS = "task_ids"
FIELD_GOAL_ID = "goal_id"
FIELD_MILESTONE_ID = "milestone_id"
FIELD_HABIT_ID = "habit_id"
FIELD_REMINDER_ID = "reminder_id"
FIELD_DATE = "date"
FIELD_TIER = "tier"
FIELD_TAB = "tab"
FIELD_MESSAGE = "message"

# ------------------------------------------------------------------------------------------------
# Translation keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_INVALID_URL = "invalid_url"
TRANS_KEY_ERROR_NOT_LOADED = "not_loaded"
TRANS_KEY_ERROR_INVALID_TITLE = "invalid_title"
TRANS_KEY_ERROR_INVALID_PRIORITY = "invalid_priority"
TRANS_KEY_ERROR_INVALID_FREQUENCY = "invalid_frequency"
TRANS_KEY_ERROR_INVALID_DATE = "invalid_date"
TRANS_KEY_ERROR_INVALID_TIME = "invalid_time"
TRANS_KEY_ERROR_INVALID_ROLE = "invalid_role"
TRANS_KEY_ERROR_INVALID_NAME = "invalid_name"
TRANS_KEY_ERROR_INVALID_REMINDER = "invalid_reminder"
TRANS_KEY_ERROR_INVALID_TIER = "invalid_tier"
TRANS_KEY_ERROR_UNKNOWN_TASK = "unknown_task"
TRANS_KEY_ERROR_CALENDAR_READ_ONLY = "calendar_read_only"

TRANS_KEY_CALENDAR_NAME = "planner_calendar"
TRANS_KEY_SENSOR_PRODUCTIVITY = "productivity_score"
TRANS_KEY_SENSOR_ACTIVE_STREAKS = "active_habit_streaks"
TRANS_KEY_SENSOR_SUBSCRIPTION = "subscription_tier"

SENSOR_UID_SUFFIX_PRODUCTIVITY = "_productivity_score"
SENSOR_UID_SUFFIX_ACTIVE_STREAKS = "_active_habit_streaks"
SENSOR_UID_SUFFIX_SUBSCRIPTION = "_subscription_tier"
