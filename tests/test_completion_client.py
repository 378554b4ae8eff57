"""Tests for the chat-completion client.

Uses the aioclient_mock fixture so no request leaves the test process.
"""

# pylint: disable=redefined-outer-name

from __future__ import annotations

import aiohttp
from homeassistant.core import HomeAssistant
import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry
from pytest_homeassistant_custom_component.test_util.aiohttp import AiohttpClientMocker

from custom_components.zen_planner import const
from custom_components.zen_planner.helpers.completion_client import (
    CompletionClient,
    CompletionServiceError,
)

from tests.conftest import COMPLETION_URL

pytestmark = pytest.mark.asyncio


@pytest.fixture
def client(hass: HomeAssistant) -> CompletionClient:
    """Return a client for the default local service."""
    return CompletionClient(
        hass,
        base_url=f"{const.DEFAULT_COMPLETION_BASE_URL}/",
        model="test-model",
        api_key="secret",
    )


def _reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


async def _complete(client: CompletionClient) -> str:
    return await client.async_complete(
        "system prompt", "user message", temperature=0.7, max_tokens=500
    )


async def test_returns_first_choice_content(
    client: CompletionClient, aioclient_mock: AiohttpClientMocker
) -> None:
    """The stripped content of the first choice is returned."""
    aioclient_mock.post(COMPLETION_URL, json=_reply("  Plan your day.  "))

    assert await _complete(client) == "Plan your day."
    assert aioclient_mock.call_count == 1

    _, url, body, headers = aioclient_mock.mock_calls[0]
    assert str(url) == COMPLETION_URL
    assert body["model"] == "test-model"
    assert body["messages"] == [
        {"role": "system", "content": "system prompt"},
        {"role": "user", "content": "user message"},
    ]
    assert body["max_tokens"] == 500
    assert headers["Authorization"] == "Bearer secret"


async def test_no_api_key_no_auth_header(
    hass: HomeAssistant, aioclient_mock: AiohttpClientMocker
) -> None:
    """Local services without a key get no Authorization header."""
    aioclient_mock.post(COMPLETION_URL, json=_reply("ok"))
    client = CompletionClient(hass, const.DEFAULT_COMPLETION_BASE_URL, "m")

    await _complete(client)

    headers = aioclient_mock.mock_calls[0][3]
    assert "Authorization" not in headers


async def test_empty_choices_is_empty_reply(
    client: CompletionClient, aioclient_mock: AiohttpClientMocker
) -> None:
    """A response with no choices yields an empty string."""
    aioclient_mock.post(COMPLETION_URL, json={"choices": []})
    assert await _complete(client) == ""


@pytest.mark.parametrize(
    "mock_kwargs",
    [
        {"status": 500, "text": "upstream exploded"},
        {"status": 401, "text": "bad key"},
        {"exc": aiohttp.ClientConnectionError()},
        {"exc": TimeoutError()},
        {"text": "not json"},
        {"json": {"error": "no choices"}},
        {"json": ["not", "an", "object"]},
    ],
)
async def test_failures_raise_service_error(
    client: CompletionClient,
    aioclient_mock: AiohttpClientMocker,
    mock_kwargs: dict,
) -> None:
    """Transport, status and payload problems surface as CompletionServiceError."""
    aioclient_mock.post(COMPLETION_URL, **mock_kwargs)

    with pytest.raises(CompletionServiceError):
        await _complete(client)


async def test_from_entry_prefers_options(hass: HomeAssistant) -> None:
    """Options override the original entry data."""
    entry = MockConfigEntry(
        domain=const.DOMAIN,
        data={
            const.CONF_COMPLETION_BASE_URL: "http://old:1234",
            const.CONF_COMPLETION_MODEL: "old-model",
            const.CONF_COMPLETION_API_KEY: "",
        },
        options={
            const.CONF_COMPLETION_BASE_URL: "https://llm.example.com",
            const.CONF_COMPLETION_MODEL: "new-model",
        },
    )

    client = CompletionClient.from_entry(hass, entry)

    assert client.url == "https://llm.example.com/v1/chat/completions"
    assert client.model == "new-model"
