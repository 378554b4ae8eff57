"""Advisor Manager - In-store chat round-trip with the completion service.

ask() appends the user message, queries the completion service with a
summary of the planner's own collections, and appends exactly one assistant
message. Each call gets an increasing request id; a reply that arrives after
a newer request was started is discarded instead of being appended out of
order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..helpers.advisor_helpers import build_chat_system_prompt, build_context_summary
from ..helpers.completion_client import CompletionClient, CompletionServiceError
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import ZenPlannerCoordinator
    from ..type_defs import ChatMessageData


class AdvisorManager(BaseManager):
    """Manager for the advisor conversation."""

    def __init__(self, hass: HomeAssistant, coordinator: ZenPlannerCoordinator) -> None:
        """Initialize the advisor manager."""
        super().__init__(hass, coordinator)
        self._request_id = 0

    async def async_setup(self) -> None:
        """No event subscriptions needed."""

    @property
    def latest_request_id(self) -> int:
        """Return the id of the most recently started request."""
        return self._request_id

    def _build_client(self) -> CompletionClient:
        return CompletionClient.from_entry(self.hass, self.coordinator.config_entry)

    async def async_ask(self, message: str) -> ChatMessageData | None:
        """Send a message to the advisor and record the exchange.

        Returns:
            The assistant message that was appended, or None when the reply
            was discarded because a newer request superseded it.
        """
        system_manager = self.coordinator.system_manager
        system_manager.add_chat_message(
            {const.DATA_CHAT_ROLE: const.ROLE_USER, const.DATA_CHAT_CONTENT: message}
        )

        self._request_id += 1
        request_id = self._request_id

        system_prompt = build_chat_system_prompt(
            build_context_summary(
                self.coordinator.tasks,
                self.coordinator.goals,
                self.coordinator.habits,
            )
        )

        try:
            reply = await self._build_client().async_complete(
                system_prompt,
                message.strip(),
                temperature=const.CHAT_TEMPERATURE,
                max_tokens=const.CHAT_MAX_TOKENS,
            )
        except CompletionServiceError as err:
            const.LOGGER.warning("WARNING: Advisor request %s failed: %s", request_id, err)
            reply = const.ADVISOR_FALLBACK_REPLY

        if request_id != self._request_id:
            const.LOGGER.debug(
                "DEBUG: Discarding advisor reply for request %s (latest is %s)",
                request_id,
                self._request_id,
            )
            return None

        return system_manager.add_chat_message(
            {
                const.DATA_CHAT_ROLE: const.ROLE_ASSISTANT,
                const.DATA_CHAT_CONTENT: reply or const.NO_RESPONSE_REPLY,
            }
        )
