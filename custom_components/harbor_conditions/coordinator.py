"""Data update coordinator for Harbor Conditions."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import Any, Awaitable, Callable

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .api import HarborConditionsAPI, HarborConditionsApiError
from .config import HarborConfig
from .const import (
    CURRENT_FIELDS,
    DOMAIN,
    FORECAST_FIELDS,
    TIDE_FIELDS,
    WATER_TEMP_FIELDS,
    WIND_FIELDS,
)
from .render import (
    FieldUpdate,
    ForecastTable,
    error_updates,
    render_current,
    render_header,
    render_realtime_wind,
    render_tide_state,
    render_water_temperature,
    render_wind_forecast,
)
from .tide_state import ResolvedTideState, TideStateResolver

_LOGGER = logging.getLogger(__name__)


class HarborConditionsCoordinator(DataUpdateCoordinator):
    """Runs the five conditions pipelines on every refresh.

    Data is a dict with "fields" (field id -> FieldUpdate), "tide_state" and
    "forecast_table". Each pipeline writes only its own fields; a failure in
    one leaves the others untouched.
    """

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize the coordinator."""
        self.entry = entry
        self.config = HarborConfig.from_entry_data(entry.data, entry.options)
        self.api = HarborConditionsAPI(async_get_clientsession(hass), self.config)
        self.resolver = TideStateResolver(self.config.slack_window_minutes)
        self.last_update_time: datetime | None = None
        self._tide_state: ResolvedTideState | None = None
        self._forecast_table: ForecastTable | None = None

        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=f"{DOMAIN}_{self.config.tide_station}",
            update_interval=self.config.update_interval,
        )

    @property
    def device_id(self) -> str:
        return f"{self.config.tide_station}_{self.config.currents_station}"

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def _async_run_pipeline(
        self,
        name: str,
        field_ids: list[str],
        pipeline: Callable[[], Awaitable[list[FieldUpdate]]],
    ) -> list[FieldUpdate]:
        """Run one pipeline, turning its failures into error markers on its own fields."""
        try:
            return await pipeline()
        except HarborConditionsApiError as err:
            _LOGGER.error("Error fetching %s: %s", name, err)
            return error_updates(field_ids)
        except Exception:
            _LOGGER.exception("Unexpected error processing %s", name)
            return error_updates(field_ids)

    async def _async_water_temperature(self) -> list[FieldUpdate]:
        return render_water_temperature(await self.api.async_get_water_temperature())

    async def _async_tides(self, now: datetime) -> list[FieldUpdate]:
        events = await self.api.async_get_tide_events(now)
        state = self.resolver.resolve(events, now) if events is not None else None
        self._tide_state = state
        if state is not None:
            _LOGGER.debug(
                "Tide phase %s (previous: %s, next: %s)",
                state.phase.value,
                state.previous_event,
                state.next_event,
            )
        return render_tide_state(state, self.config.tz)

    async def _async_current(self, now: datetime) -> list[FieldUpdate]:
        sample = await self.api.async_get_current_sample(now)
        return render_current(sample, self.config.tz, self.config.flood_is_positive)

    async def _async_realtime_wind(self) -> list[FieldUpdate]:
        return render_realtime_wind(await self.api.async_get_realtime_wind(), self.config.tz)

    async def _async_wind_forecast(self, now: datetime) -> list[FieldUpdate]:
        updates, table = render_wind_forecast(await self.api.async_get_wind_forecast(), now, self.config.tz)
        self._forecast_table = table
        return updates

    async def _async_update_data(self) -> dict[str, Any]:
        """Fetch every feed concurrently and merge the field updates."""
        now = self._now()
        self._tide_state = None
        self._forecast_table = None

        results = await asyncio.gather(
            self._async_run_pipeline(
                "water temperature", WATER_TEMP_FIELDS, self._async_water_temperature
            ),
            self._async_run_pipeline("tide predictions", TIDE_FIELDS, lambda: self._async_tides(now)),
            self._async_run_pipeline("current predictions", CURRENT_FIELDS, lambda: self._async_current(now)),
            self._async_run_pipeline("realtime wind", WIND_FIELDS, self._async_realtime_wind),
            self._async_run_pipeline(
                "wind forecast", FORECAST_FIELDS, lambda: self._async_wind_forecast(now)
            ),
        )

        previous = self.data or {}
        fields: dict[str, FieldUpdate] = dict(previous.get("fields", {}))
        for update in render_header(now, self.config.tz, self.config.latitude, self.config.longitude):
            fields[update.field_id] = update
        for updates in results:
            for update in updates:
                fields[update.field_id] = update

        failed = sum(1 for update in fields.values() if update.is_error)
        _LOGGER.debug("Refreshed %d fields (%d with errors)", len(fields), failed)

        self.last_update_time = now

        return {
            "fields": fields,
            "tide_state": self._tide_state,
            "forecast_table": self._forecast_table,
        }

    def get_field(self, field_id: str) -> FieldUpdate | None:
        """Return the latest update for a display field."""
        if not self.data:
            return None
        return self.data["fields"].get(field_id)
