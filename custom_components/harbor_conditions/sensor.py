"""Sensor platform for Harbor Conditions integration."""
from __future__ import annotations

from dataclasses import asdict
import logging
from typing import Any

from homeassistant.components.sensor import SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    DOMAIN,
    FIELD_CURRENT_DIRECTION,
    FIELD_CURRENT_SPEED,
    FIELD_CURRENT_TIME,
    FIELD_CURRENT_TYPE,
    FIELD_FOLLOWING_TIDE,
    FIELD_FORECAST,
    FIELD_FORECAST_SUMMARY,
    FIELD_LAST_TIDE,
    FIELD_LAST_UPDATED,
    FIELD_LOCATION,
    FIELD_NEXT_TIDE,
    FIELD_NEXT_TIDE_SUMMARY,
    FIELD_TIDE_STATUS,
    FIELD_TIDE_SUMMARY,
    FIELD_WATER_TEMP,
    FIELD_WIND_CARDINAL,
    FIELD_WIND_DIRECTION,
    FIELD_WIND_GUSTS,
    FIELD_WIND_SPEED,
    FIELD_WIND_SUMMARY,
    FIELD_WIND_TIME,
)
from .coordinator import HarborConditionsCoordinator
from .tide_state import TideEvent

_LOGGER = logging.getLogger(__name__)

# field id, name, icon
FIELD_SENSORS: list[tuple[str, str, str]] = [
    (FIELD_LAST_UPDATED, "Last Updated", "mdi:clock-outline"),
    (FIELD_LOCATION, "Location", "mdi:map-marker"),
    (FIELD_WATER_TEMP, "Water Temperature", "mdi:thermometer-water"),
    (FIELD_TIDE_STATUS, "Tide Status", "mdi:waves"),
    (FIELD_TIDE_SUMMARY, "Tidal Flow", "mdi:waves-arrow-right"),
    (FIELD_LAST_TIDE, "Last Tide", "mdi:history"),
    (FIELD_NEXT_TIDE, "Next Tide", "mdi:arrow-right-bold"),
    (FIELD_FOLLOWING_TIDE, "Following Tide", "mdi:debug-step-over"),
    (FIELD_NEXT_TIDE_SUMMARY, "Next Tide Summary", "mdi:arrow-right-bold-outline"),
    (FIELD_CURRENT_TIME, "Current Prediction Time", "mdi:clock-fast"),
    (FIELD_CURRENT_SPEED, "Current Speed", "mdi:speedometer"),
    (FIELD_CURRENT_DIRECTION, "Current Direction", "mdi:compass"),
    (FIELD_CURRENT_TYPE, "Current Flow", "mdi:swap-horizontal"),
    (FIELD_WIND_SPEED, "Wind Speed", "mdi:weather-windy"),
    (FIELD_WIND_GUSTS, "Wind Gusts", "mdi:weather-windy-variant"),
    (FIELD_WIND_DIRECTION, "Wind Direction", "mdi:compass-outline"),
    (FIELD_WIND_CARDINAL, "Wind Cardinal Direction", "mdi:compass-rose"),
    (FIELD_WIND_TIME, "Wind Observation Time", "mdi:clock-outline"),
    (FIELD_WIND_SUMMARY, "Realtime Wind", "mdi:windsock"),
    (FIELD_FORECAST, "Wind Forecast", "mdi:weather-windy"),
    (FIELD_FORECAST_SUMMARY, "Forecast Wind Now", "mdi:windsock"),
]


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Harbor Conditions sensors based on a config entry."""
    coordinator: HarborConditionsCoordinator = hass.data[DOMAIN][entry.entry_id]

    sensors: list[HarborConditionsFieldSensor] = []
    for field_id, name, icon in FIELD_SENSORS:
        if field_id in (FIELD_LAST_TIDE, FIELD_NEXT_TIDE, FIELD_FOLLOWING_TIDE):
            sensors.append(HarborConditionsTideEventSensor(coordinator, entry, field_id, name, icon))
        elif field_id == FIELD_TIDE_STATUS:
            sensors.append(HarborConditionsTideStatusSensor(coordinator, entry, field_id, name, icon))
        elif field_id == FIELD_FORECAST:
            sensors.append(HarborConditionsForecastSensor(coordinator, entry, field_id, name, icon))
        else:
            sensors.append(HarborConditionsFieldSensor(coordinator, entry, field_id, name, icon))

    async_add_entities(sensors)


def device_info(coordinator: HarborConditionsCoordinator, entry: ConfigEntry) -> DeviceInfo:
    """Device shared by every entity of a config entry."""
    return DeviceInfo(
        identifiers={(DOMAIN, coordinator.device_id)},
        name=entry.title,
        manufacturer="NOAA / Open-Meteo",
        model="Harbor Conditions",
        configuration_url=(
            f"https://tidesandcurrents.noaa.gov/stationhome.html?id={coordinator.config.tide_station}"
        ),
    )


class HarborConditionsFieldSensor(CoordinatorEntity[HarborConditionsCoordinator], SensorEntity):
    """Sensor showing the text of one display field."""

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: HarborConditionsCoordinator,
        entry: ConfigEntry,
        field_id: str,
        name: str,
        icon: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self.field_id = field_id
        self._attr_name = name
        self._attr_icon = icon
        self._attr_unique_id = f"{DOMAIN}_{coordinator.device_id}_{field_id}"
        self._attr_device_info = device_info(coordinator, entry)

    @property
    def native_value(self) -> str | None:
        """Return the field text."""
        update = self.coordinator.get_field(self.field_id)
        if update is None:
            return None
        return update.text

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the error flag."""
        update = self.coordinator.get_field(self.field_id)
        if update is None:
            return {}
        return {"error": update.is_error}


class HarborConditionsTideStatusSensor(HarborConditionsFieldSensor):
    """Tide status sensor, also exposing the raw phase."""

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        attributes = super().extra_state_attributes
        state = (self.coordinator.data or {}).get("tide_state")
        if state is not None:
            attributes["phase"] = state.phase.value
            attributes["slack_window_minutes"] = self.coordinator.config.slack_window_minutes
        return attributes


class HarborConditionsTideEventSensor(HarborConditionsFieldSensor):
    """Last, next or following tide, with the event time and height."""

    def _event(self) -> TideEvent | None:
        state = (self.coordinator.data or {}).get("tide_state")
        if state is None:
            return None
        if self.field_id == FIELD_LAST_TIDE:
            return state.previous_event
        if self.field_id == FIELD_NEXT_TIDE:
            return state.next_event
        return state.following_event

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        attributes = super().extra_state_attributes
        event = self._event()
        if event is not None:
            attributes.update({
                "time": event.timestamp.isoformat(),
                "type": event.kind.value if event.kind is not None else None,
                "height": event.height,
                "unit": "ft",
            })
        return attributes


class HarborConditionsForecastSensor(HarborConditionsFieldSensor):
    """Wind forecast caption, with the table rows as an attribute."""

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        attributes = super().extra_state_attributes
        table = (self.coordinator.data or {}).get("forecast_table")
        if table is not None:
            attributes.update({
                "source": table.source,
                "date": table.date_label,
                "rows": [asdict(row) for row in table.rows],
            })
        return attributes
