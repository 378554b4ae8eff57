"""Client for the external chat-completion service.

Speaks the OpenAI-compatible ``/v1/chat/completions`` protocol (OpenAI,
LM Studio, Ollama, vLLM and friends all accept it): a system message plus
a user message go in, the first choice's message content comes out.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import aiohttp
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant


class CompletionServiceError(HomeAssistantError):
    """The completion service was unreachable or returned an unusable reply."""


class CompletionClient:
    """Thin async wrapper around one completion endpoint."""

    def __init__(
        self,
        hass: HomeAssistant,
        base_url: str,
        model: str,
        api_key: str | None = None,
        timeout: float = const.DEFAULT_COMPLETION_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            hass: Home Assistant instance (provides the shared aiohttp session)
            base_url: Service root, e.g. "http://127.0.0.1:1234"
            model: Model name sent with each request
            api_key: Optional bearer token
            timeout: Seconds before a request is abandoned
        """
        self.hass = hass
        self.url = f"{base_url.rstrip('/')}/v1/chat/completions"
        self.model = model
        self._api_key = api_key
        self._timeout = timeout

    @classmethod
    def from_entry(cls, hass: HomeAssistant, entry: ConfigEntry) -> CompletionClient:
        """Build a client from a config entry (options override data)."""
        settings = {**entry.data, **entry.options}
        return cls(
            hass,
            base_url=settings.get(
                const.CONF_COMPLETION_BASE_URL, const.DEFAULT_COMPLETION_BASE_URL
            ),
            model=settings.get(
                const.CONF_COMPLETION_MODEL, const.DEFAULT_COMPLETION_MODEL
            ),
            api_key=settings.get(const.CONF_COMPLETION_API_KEY) or None,
        )

    async def async_complete(
        self,
        system_prompt: str,
        user_message: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Send one completion request and return the reply text.

        Returns:
            The first choice's message content, stripped. May be empty.

        Raises:
            CompletionServiceError: On connection failure, timeout, a non-200
                status or a response without a choices list.
        """
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        session = async_get_clientsession(self.hass)
        try:
            async with asyncio.timeout(self._timeout):
                async with session.post(self.url, json=body, headers=headers) as response:
                    if response.status != 200:
                        text = await response.text()
                        raise CompletionServiceError(
                            f"HTTP {response.status} from completion service: {text[:400]}"
                        )
                    payload: Any = await response.json(content_type=None)
        except TimeoutError as err:
            raise CompletionServiceError(
                f"Completion service timed out after {self._timeout}s"
            ) from err
        except aiohttp.ClientError as err:
            raise CompletionServiceError(
                f"Completion service connection error: {err}"
            ) from err
        except ValueError as err:
            raise CompletionServiceError(
                f"Completion service returned invalid JSON: {err}"
            ) from err

        return self._extract_content(payload)

    @staticmethod
    def _extract_content(payload: Any) -> str:
        if not isinstance(payload, dict):
            raise CompletionServiceError("Completion response must be a JSON object")
        choices = payload.get("choices")
        if not isinstance(choices, list):
            raise CompletionServiceError("Completion response has no choices")
        if not choices:
            return ""
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return content.strip() if isinstance(content, str) else ""
