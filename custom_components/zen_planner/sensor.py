# File: sensor.py
"""Sensors for the Zen Planner integration.

Sensors Defined in This File (3):
01. ProductivityScoreSensor - 0-100 score, task stats as attributes
02. ActiveHabitStreaksSensor - habits with a running streak
03. SubscriptionTierSensor - selected tier, plan details as attributes
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.const import PERCENTAGE

from . import const
from .entity import ZenPlannerCoordinatorEntity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import ZenPlannerConfigEntry, ZenPlannerCoordinator

# Set to 0 (unlimited) for coordinator-based entities that don't poll
PARALLEL_UPDATES = 0


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ZenPlannerConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensors for the Zen Planner integration."""
    coordinator = entry.runtime_data
    async_add_entities(
        [
            ProductivityScoreSensor(coordinator),
            ActiveHabitStreaksSensor(coordinator),
            SubscriptionTierSensor(coordinator),
        ]
    )


# ------------------------------------------------------------------------------------------
class ProductivityScoreSensor(ZenPlannerCoordinatorEntity, SensorEntity):
    """Productivity score derived from completion rate and overdue tasks."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_PRODUCTIVITY
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_icon = "mdi:chart-line"

    def __init__(self, coordinator: ZenPlannerCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, const.SENSOR_UID_SUFFIX_PRODUCTIVITY)

    @property
    def native_value(self) -> int:
        """Return the productivity score."""
        return self.coordinator.task_manager.get_task_stats()[
            const.STAT_PRODUCTIVITY_SCORE
        ]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return task counts, breakdowns and the weekly trend."""
        stats = self.coordinator.task_manager.get_task_stats()
        return {
            const.STAT_TOTAL: stats[const.STAT_TOTAL],
            const.STAT_COMPLETED: stats[const.STAT_COMPLETED],
            const.STAT_PENDING: stats[const.STAT_PENDING],
            const.STAT_OVERDUE: stats[const.STAT_OVERDUE],
            const.STAT_COMPLETION_RATE: stats[const.STAT_COMPLETION_RATE],
            const.STAT_BY_PRIORITY: stats[const.STAT_BY_PRIORITY],
            const.STAT_BY_CATEGORY: stats[const.STAT_BY_CATEGORY],
            const.STAT_WEEKLY_TREND: stats[const.STAT_WEEKLY_TREND],
        }


# ------------------------------------------------------------------------------------------
class ActiveHabitStreaksSensor(ZenPlannerCoordinatorEntity, SensorEntity):
    """Number of habits whose streak is above zero."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_ACTIVE_STREAKS
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:fire"

    def __init__(self, coordinator: ZenPlannerCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, const.SENSOR_UID_SUFFIX_ACTIVE_STREAKS)

    @property
    def native_value(self) -> int:
        """Return the number of active streaks."""
        return self.coordinator.habit_manager.get_habit_summary()[
            const.STAT_ACTIVE_STREAKS
        ]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return habit and goal aggregates."""
        habits = self.coordinator.habit_manager.get_habit_summary()
        goals = self.coordinator.goal_manager.get_goal_summary()
        return {
            "total_habits": habits[const.STAT_TOTAL],
            const.STAT_AVG_STREAK: habits[const.STAT_AVG_STREAK],
            const.STAT_BEST_OVERALL_STREAK: habits[const.STAT_BEST_OVERALL_STREAK],
            "total_goals": goals[const.STAT_TOTAL],
            "completed_goals": goals[const.STAT_COMPLETED],
            const.STAT_AVG_PROGRESS: goals[const.STAT_AVG_PROGRESS],
        }


# ------------------------------------------------------------------------------------------
class SubscriptionTierSensor(ZenPlannerCoordinatorEntity, SensorEntity):
    """Selected subscription tier (display only)."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_SUBSCRIPTION
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = list(const.SUBSCRIPTION_TIERS)
    _attr_icon = "mdi:card-account-details-star"

    def __init__(self, coordinator: ZenPlannerCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, const.SENSOR_UID_SUFFIX_SUBSCRIPTION)

    @property
    def native_value(self) -> str:
        """Return the selected tier."""
        return self.coordinator.subscription

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the plan definition of the selected tier."""
        plan = self.coordinator.system_manager.get_plan()
        return {
            const.PLAN_NAME: plan[const.PLAN_NAME],
            const.PLAN_PRICE: plan[const.PLAN_PRICE],
            const.PLAN_BILLING_CYCLE: plan[const.PLAN_BILLING_CYCLE],
            const.PLAN_FEATURES: list(plan[const.PLAN_FEATURES]),
            const.PLAN_LIMITS: dict(plan[const.PLAN_LIMITS]),
        }
