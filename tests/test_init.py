"""Test Harbor Conditions component setup."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

from homeassistant.const import Platform
from homeassistant.core import HomeAssistant

from custom_components.harbor_conditions import async_setup_entry, async_unload_entry
from custom_components.harbor_conditions.const import DOMAIN
from custom_components.harbor_conditions.coordinator import HarborConditionsCoordinator


async def test_setup_entry(hass: HomeAssistant, mock_config_entry) -> None:
    """Test setting up an entry."""
    with (
        patch(
            "custom_components.harbor_conditions.coordinator.HarborConditionsCoordinator.async_config_entry_first_refresh",
            return_value=None,
        ),
        patch(
            "homeassistant.config_entries.ConfigEntries.async_forward_entry_setups",
            return_value=AsyncMock(return_value=True),
        ) as mock_setup,
    ):
        assert await async_setup_entry(hass, mock_config_entry)
        await hass.async_block_till_done()

        # Verify platforms were set up
        assert mock_setup.called
        assert mock_setup.call_args[0][1] == [Platform.SENSOR, Platform.IMAGE]

    coordinator = hass.data[DOMAIN][mock_config_entry.entry_id]
    assert isinstance(coordinator, HarborConditionsCoordinator)
    assert coordinator.config.tide_station == "8518750"
    assert coordinator.config.currents_bin == 6


async def test_unload_entry(hass: HomeAssistant, mock_config_entry) -> None:
    """Test unloading an entry."""
    # First set up the entry
    with (
        patch(
            "custom_components.harbor_conditions.coordinator.HarborConditionsCoordinator.async_config_entry_first_refresh",
            return_value=None,
        ),
        patch(
            "homeassistant.config_entries.ConfigEntries.async_forward_entry_setups",
            return_value=AsyncMock(return_value=True),
        ),
    ):
        await async_setup_entry(hass, mock_config_entry)
        await hass.async_block_till_done()

    # Now unload it
    with patch(
        "homeassistant.config_entries.ConfigEntries.async_unload_platforms",
        return_value=True,
    ) as mock_unload:
        assert await async_unload_entry(hass, mock_config_entry)
        await hass.async_block_till_done()

        assert mock_unload.call_args[0][1] == [Platform.SENSOR, Platform.IMAGE]

    assert mock_config_entry.entry_id not in hass.data[DOMAIN]
