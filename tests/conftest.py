"""Fixtures for Harbor Conditions tests."""
from __future__ import annotations

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.harbor_conditions.const import (
    CONF_CURRENTS_BIN,
    CONF_CURRENTS_STATION,
    CONF_LATITUDE,
    CONF_LONGITUDE,
    CONF_STATION_TIMEZONE,
    CONF_TIDE_STATION,
    CONF_WIND_STATION,
    DOMAIN,
)

ENTRY_DATA = {
    CONF_LATITUDE: 40.6721,
    CONF_LONGITUDE: -74.0399,
    CONF_TIDE_STATION: "8518750",
    CONF_WIND_STATION: "8530973",
    CONF_CURRENTS_STATION: "n05010",
    CONF_CURRENTS_BIN: 6,
    CONF_STATION_TIMEZONE: "America/New_York",
}


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations."""
    yield


@pytest.fixture
def mock_config_entry(hass) -> MockConfigEntry:
    """A config entry for the default harbor, added to hass."""
    entry = MockConfigEntry(
        domain=DOMAIN,
        title="NY Harbor",
        data=dict(ENTRY_DATA),
        unique_id="8518750_n05010",
    )
    entry.add_to_hass(hass)
    return entry
