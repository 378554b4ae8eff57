"""System Manager - Categories, chat history, subscription and UI state.

Small collections that have no cross-entity rules live here. The
subscription tier is display-only: selecting a tier never enforces its
limits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from .. import const
from ..data_builders import (
    EntityValidationError,
    build_category,
    build_chat_message,
)
from ..utils.dt_utils import dt_parse_date
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import ChatMessageData, SubscriptionPlan


class SystemManager(BaseManager):
    """Manager for categories, chat messages, subscription and UI state."""

    async def async_setup(self) -> None:
        """No event subscriptions needed."""

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def add_category(self, user_input: dict[str, Any]) -> None:
        """Append a category."""
        category = build_category(user_input)

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_CATEGORIES].append(category)

        self.coordinator.mutate(_apply)

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def add_chat_message(self, user_input: dict[str, Any]) -> ChatMessageData:
        """Append a chat message stamped with the current time."""
        message = build_chat_message(user_input)

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_CHAT_MESSAGES].append(message)

        self.coordinator.mutate(_apply)
        return message

    def clear_chat(self) -> None:
        """Remove every chat message."""

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_CHAT_MESSAGES] = []

        self.coordinator.mutate(_apply)

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def set_subscription(self, tier: str) -> None:
        """Select a subscription tier.

        Raises:
            EntityValidationError: If tier is not a known tier.
        """
        if tier not in const.SUBSCRIPTION_TIERS:
            raise EntityValidationError(
                field=const.DATA_SUBSCRIPTION,
                translation_key=const.TRANS_KEY_ERROR_INVALID_TIER,
                placeholders={"value": str(tier)},
            )

        def _apply(data: dict[str, Any]) -> None:
            data[const.DATA_SUBSCRIPTION] = tier

        self.coordinator.mutate(_apply)
        const.LOGGER.info("INFO: Subscription tier set to %s", tier)

    def get_plan(self, tier: str | None = None) -> SubscriptionPlan:
        """Return the plan definition for a tier (default: the selected one)."""
        selected = tier or self.coordinator.subscription
        plan = const.SUBSCRIPTION_PLANS.get(
            selected, const.SUBSCRIPTION_PLANS[const.DEFAULT_SUBSCRIPTION]
        )
        return cast("SubscriptionPlan", plan)

    # ------------------------------------------------------------------
    # UI state (not persisted)
    # ------------------------------------------------------------------

    def set_active_tab(self, tab: str) -> None:
        """Record the active UI tab."""
        self.coordinator.set_ui_state(const.DATA_ACTIVE_TAB, tab)

    def set_selected_date(self, day: str) -> None:
        """Record the date selected in the calendar view.

        Raises:
            EntityValidationError: If day is not an ISO date.
        """
        parsed = dt_parse_date(day)
        if parsed is None:
            raise EntityValidationError(
                field=const.DATA_SELECTED_DATE,
                translation_key=const.TRANS_KEY_ERROR_INVALID_DATE,
                placeholders={"value": str(day)},
            )
        self.coordinator.set_ui_state(const.DATA_SELECTED_DATE, parsed.isoformat())
