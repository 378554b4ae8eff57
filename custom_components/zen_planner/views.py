# File: views.py
"""HTTP endpoints for the Zen Planner advisor.

Two stateless endpoints served by the Home Assistant HTTP server:
- POST /api/ai-advisor: free-text chat with a context summary of the
  caller's tasks, goals and habits
- POST /api/analyze: productivity stats plus model-generated insights

Both are rate limited per client address. The planner store is never read
or written here: the caller sends the data it wants considered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from aiohttp import web
from homeassistant.components.http import KEY_HASS, HomeAssistantView

from . import const
from .helpers.advisor_helpers import (
    ANALYSIS_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_analysis_result,
    build_chat_system_prompt,
    build_context_summary,
    coerce_entity_list,
    compute_request_stats,
    default_analysis,
    validate_chat_message,
)
from .helpers.completion_client import CompletionClient, CompletionServiceError
from .helpers.entry_helpers import get_loaded_coordinator
from .helpers.rate_limit import (
    ADVISOR_LIMIT,
    ANALYZE_LIMIT,
    RateLimitConfig,
    RateLimiter,
    RateLimitResult,
)
from .utils.dt_utils import dt_now_iso, dt_now_utc

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


def client_rate_limit_key(prefix: str, request: web.Request) -> str:
    """Return the limiter key for a request ("advisor:10.0.0.2")."""
    return f"{prefix}:{request.remote or const.ANONYMOUS_CLIENT}"


def _rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        const.HEADER_RATE_LIMIT_REMAINING: str(result.remaining),
        const.HEADER_RATE_LIMIT_RESET: result.reset_at.isoformat(),
    }


class _PlannerAdvisorView(HomeAssistantView, ABC):
    """Shared request handling: rate limit, JSON body, error envelopes."""

    rate_limit_prefix: str
    rate_limit: RateLimitConfig

    def __init__(self, limiter: RateLimiter) -> None:
        """Initialize the view with the shared limiter."""
        self._limiter = limiter

    def _error(
        self, message: str, status: HTTPStatus, headers: dict[str, str]
    ) -> web.Response:
        return self.json(
            {"success": False, "error": message}, status_code=status, headers=headers
        )

    async def post(self, request: web.Request) -> web.Response:
        """Handle a POST request."""
        result = self._limiter.check(
            client_rate_limit_key(self.rate_limit_prefix, request), self.rate_limit
        )
        headers = _rate_limit_headers(result)
        if not result.allowed:
            const.LOGGER.warning(
                "WARNING: Rate limit reached for %s from %s",
                self.url,
                request.remote or const.ANONYMOUS_CLIENT,
            )
            return self._error(
                const.ERROR_RATE_LIMITED, HTTPStatus.TOO_MANY_REQUESTS, headers
            )

        try:
            body = await request.json()
        except ValueError:
            return self._error(const.ERROR_INVALID_JSON, HTTPStatus.BAD_REQUEST, headers)
        if not isinstance(body, dict):
            return self._error(const.ERROR_INVALID_JSON, HTTPStatus.BAD_REQUEST, headers)

        return await self._async_handle(request.app[KEY_HASS], body, headers)

    def _get_client(self, hass: HomeAssistant) -> CompletionClient | None:
        coordinator = get_loaded_coordinator(hass)
        if coordinator is None:
            return None
        return CompletionClient.from_entry(hass, coordinator.config_entry)

    @abstractmethod
    async def _async_handle(
        self, hass: HomeAssistant, body: dict[str, Any], headers: dict[str, str]
    ) -> web.Response:
        """Answer a rate-limited request with a JSON object body."""


class AdvisorView(_PlannerAdvisorView):
    """Chat endpoint."""

    url = const.URL_ADVISOR
    name = const.VIEW_NAME_ADVISOR
    rate_limit_prefix = const.RATE_LIMIT_PREFIX_ADVISOR
    rate_limit = ADVISOR_LIMIT

    async def _async_handle(
        self, hass: HomeAssistant, body: dict[str, Any], headers: dict[str, str]
    ) -> web.Response:
        message = body.get(const.FIELD_MESSAGE)
        if (error := validate_chat_message(message)) is not None:
            return self._error(error, HTTPStatus.BAD_REQUEST, headers)

        client = self._get_client(hass)
        if client is None:
            return self._error(
                const.ERROR_NOT_LOADED, HTTPStatus.SERVICE_UNAVAILABLE, headers
            )

        context = body.get("context")
        if not isinstance(context, dict):
            context = {}
        summary = build_context_summary(
            coerce_entity_list(context.get(const.DATA_TASKS)),
            coerce_entity_list(context.get(const.DATA_GOALS)),
            coerce_entity_list(context.get(const.DATA_HABITS)),
        )

        try:
            reply = await client.async_complete(
                build_chat_system_prompt(summary),
                message.strip(),
                temperature=const.CHAT_TEMPERATURE,
                max_tokens=const.CHAT_MAX_TOKENS,
            )
        except CompletionServiceError as err:
            const.LOGGER.error("ERROR: Advisor chat request failed: %s", err)
            return self._error(
                const.ERROR_CHAT_FAILED, HTTPStatus.INTERNAL_SERVER_ERROR, headers
            )

        return self.json(
            {
                "success": True,
                "response": reply or const.NO_RESPONSE_REPLY,
                "timestamp": dt_now_iso(),
            },
            headers=headers,
        )


class AnalyzeView(_PlannerAdvisorView):
    """Productivity analysis endpoint."""

    url = const.URL_ANALYZE
    name = const.VIEW_NAME_ANALYZE
    rate_limit_prefix = const.RATE_LIMIT_PREFIX_ANALYZE
    rate_limit = ANALYZE_LIMIT

    async def _async_handle(
        self, hass: HomeAssistant, body: dict[str, Any], headers: dict[str, str]
    ) -> web.Response:
        client = self._get_client(hass)
        if client is None:
            return self._error(
                const.ERROR_NOT_LOADED, HTTPStatus.SERVICE_UNAVAILABLE, headers
            )

        stats = compute_request_stats(
            coerce_entity_list(body.get(const.DATA_TASKS)),
            coerce_entity_list(body.get(const.DATA_GOALS)),
            coerce_entity_list(body.get(const.DATA_HABITS)),
            dt_now_utc(),
        )

        try:
            reply = await client.async_complete(
                ANALYSIS_SYSTEM_PROMPT,
                build_analysis_prompt(stats),
                temperature=const.ANALYSIS_TEMPERATURE,
                max_tokens=const.ANALYSIS_MAX_TOKENS,
            )
        except CompletionServiceError as err:
            const.LOGGER.warning(
                "WARNING: Analysis request failed, returning default analysis: %s", err
            )
            analysis = default_analysis(stats)
        else:
            analysis, _ = build_analysis_result(reply or "{}", stats)

        return self.json(
            {"success": True, "analysis": analysis, "timestamp": dt_now_iso()},
            headers=headers,
        )


def async_register_views(hass: HomeAssistant) -> None:
    """Register the advisor endpoints once per Home Assistant instance.

    Views cannot be unregistered, so they stay registered across entry
    reloads and answer 503 while no entry is loaded.
    """
    domain_data = hass.data.setdefault(const.DOMAIN, {})
    if domain_data.get(const.DATA_VIEWS_REGISTERED):
        return

    limiter = domain_data.setdefault(const.DATA_RATE_LIMITER, RateLimiter())
    hass.http.register_view(AdvisorView(limiter))
    hass.http.register_view(AnalyzeView(limiter))
    domain_data[const.DATA_VIEWS_REGISTERED] = True
    const.LOGGER.debug("DEBUG: Registered advisor endpoints")
