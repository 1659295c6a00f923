"""Image platform for Harbor Conditions integration."""
from __future__ import annotations

import logging

from homeassistant.components.image import ImageEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import HarborConditionsCoordinator
from .sensor import device_info
from .svg_table import generate_forecast_table_svg

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Harbor Conditions forecast image based on a config entry."""
    coordinator: HarborConditionsCoordinator = hass.data[DOMAIN][entry.entry_id]

    async_add_entities([HarborConditionsForecastImage(coordinator, entry)])


class HarborConditionsForecastImage(CoordinatorEntity[HarborConditionsCoordinator], ImageEntity):
    """Image entity that displays the hourly wind forecast table."""

    _attr_has_entity_name = True
    _attr_name = "Wind Forecast Table"
    _attr_content_type = "image/svg+xml"

    def __init__(self, coordinator: HarborConditionsCoordinator, entry: ConfigEntry) -> None:
        """Initialize the image entity."""
        CoordinatorEntity.__init__(self, coordinator)
        ImageEntity.__init__(self, coordinator.hass)

        self._attr_unique_id = f"{DOMAIN}_{coordinator.device_id}_forecast_table"
        self._attr_device_info = device_info(coordinator, entry)
        self._attr_image_last_updated = coordinator.last_update_time
        self._cached_image: bytes | None = None

    @callback
    def _handle_coordinator_update(self) -> None:
        """Mark the image stale when new forecast data arrives."""
        self._cached_image = None
        self._attr_image_last_updated = self.coordinator.last_update_time
        super()._handle_coordinator_update()

    async def async_image(self) -> bytes | None:
        """Return the image."""
        if self._cached_image is not None:
            return self._cached_image

        table = (self.coordinator.data or {}).get("forecast_table")
        if table is None:
            _LOGGER.debug("No forecast table available, rendering placeholder")

        self._cached_image = generate_forecast_table_svg(table).encode("utf-8")
        return self._cached_image
