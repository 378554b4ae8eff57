"""Base entity classes for Zen Planner integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import ZenPlannerCoordinator
from .helpers.entity_helpers import create_planner_device_info


class ZenPlannerCoordinatorEntity(CoordinatorEntity[ZenPlannerCoordinator]):
    """Base entity class for Zen Planner entities with typed coordinator access.

    Every entity is grouped under the planner's service device and named
    through its translation key.
    """

    _attr_has_entity_name = True

    def __init__(self, coordinator: ZenPlannerCoordinator, uid_suffix: str) -> None:
        """Initialize the entity.

        Args:
            coordinator: The ZenPlannerCoordinator of this config entry.
            uid_suffix: Suffix appended to the entry id to form the unique id.
        """
        super().__init__(coordinator)
        entry = coordinator.config_entry
        self._attr_unique_id = f"{entry.entry_id}{uid_suffix}"
        self._attr_device_info = create_planner_device_info(entry.entry_id, entry.title)

    @property
    def coordinator(self) -> ZenPlannerCoordinator:
        """Return typed coordinator."""
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: ZenPlannerCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)
