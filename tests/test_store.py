"""Tests for ZenPlannerStore persistence.

Uses the hass_storage fixture, which backs Home Assistant's Store with an
in-memory dict.
"""

# pylint: disable=redefined-outer-name

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
import pytest

from custom_components.zen_planner import const
from custom_components.zen_planner.store import ZenPlannerStore

pytestmark = pytest.mark.asyncio


async def test_load_without_file_returns_none(hass: HomeAssistant) -> None:
    """A fresh installation has nothing stored."""
    store = ZenPlannerStore(hass)
    assert await store.async_load() is None


async def test_load_fills_missing_collections(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    """Missing keys get defaults and unknown keys are dropped."""
    hass_storage[const.STORAGE_KEY] = {
        "version": const.STORAGE_VERSION,
        "key": const.STORAGE_KEY,
        "data": {
            const.DATA_TASKS: [{"id": "t1", "title": "Kept"}],
            const.DATA_SUBSCRIPTION: const.TIER_PRO,
            const.DATA_ACTIVE_TAB: "calendar",
        },
    }

    data = await ZenPlannerStore(hass).async_load()

    assert data is not None
    assert data[const.DATA_TASKS] == [{"id": "t1", "title": "Kept"}]
    assert data[const.DATA_SUBSCRIPTION] == const.TIER_PRO
    assert data[const.DATA_GOALS] == []
    assert len(data[const.DATA_CATEGORIES]) == len(const.DEFAULT_CATEGORIES)
    assert const.DATA_ACTIVE_TAB not in data


async def test_save_writes_only_persisted_keys(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    """UI-only keys handed to set_data never reach storage."""
    store = ZenPlannerStore(hass)
    snapshot = ZenPlannerStore.get_default_structure()
    snapshot[const.DATA_SELECTED_DATE] = "2025-04-07"
    snapshot[const.DATA_TASKS].append({"id": "t1", "title": "Saved"})

    store.set_data(snapshot)
    await store.async_save()

    saved = hass_storage[const.STORAGE_KEY]["data"]
    assert set(saved) == set(const.PERSISTED_KEYS)
    assert saved[const.DATA_TASKS] == [{"id": "t1", "title": "Saved"}]


async def test_delete_storage(
    hass: HomeAssistant, hass_storage: dict[str, Any]
) -> None:
    """Deleting removes the stored file and clears the snapshot."""
    store = ZenPlannerStore(hass)
    store.set_data(ZenPlannerStore.get_default_structure())
    await store.async_save()
    assert const.STORAGE_KEY in hass_storage

    await store.async_delete_storage()

    assert const.STORAGE_KEY not in hass_storage
    assert store.data == {}
