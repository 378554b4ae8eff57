"""Shared fixtures for Zen Planner tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.zen_planner import const
from custom_components.zen_planner.coordinator import ZenPlannerCoordinator
from custom_components.zen_planner.data_builders import build_default_categories

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

COMPLETION_URL = f"{const.DEFAULT_COMPLETION_BASE_URL}/v1/chat/completions"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.ZEN_PLANNER_TITLE,
        data={
            const.CONF_COMPLETION_BASE_URL: const.DEFAULT_COMPLETION_BASE_URL,
            const.CONF_COMPLETION_API_KEY: "test-api-key",
            const.CONF_COMPLETION_MODEL: "test-model",
        },
        options={},
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_storage_data() -> dict[str, Any]:
    """Return mock storage data structure (a fresh planner)."""
    return {
        const.DATA_TASKS: [],
        const.DATA_GOALS: [],
        const.DATA_HABITS: [],
        const.DATA_CATEGORIES: build_default_categories(),
        const.DATA_CHAT_MESSAGES: [],
        const.DATA_REMINDERS: [],
        const.DATA_SUBSCRIPTION: const.DEFAULT_SUBSCRIPTION,
    }


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the Zen Planner integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


@pytest.fixture
def coordinator(
    init_integration: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> ZenPlannerCoordinator:
    """Return the coordinator of the loaded entry."""
    return init_integration.runtime_data


def get_entity_id(hass: HomeAssistant, platform: str, uid_suffix: str) -> str:
    """Look up an entity id from the unique id suffix used by the integration."""
    entity_id = er.async_get(hass).async_get_entity_id(
        platform, const.DOMAIN, f"test_entry_id{uid_suffix}"
    )
    assert entity_id is not None
    return entity_id
