"""Runtime configuration for a Harbor Conditions config entry."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta, tzinfo
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from .const import (
    CONF_APPLICATION,
    CONF_CURRENTS_BIN,
    CONF_CURRENTS_STATION,
    CONF_FLOOD_IS_POSITIVE,
    CONF_LATITUDE,
    CONF_LONGITUDE,
    CONF_SLACK_WINDOW,
    CONF_STATION_TIMEZONE,
    CONF_TIDE_STATION,
    CONF_UPDATE_INTERVAL,
    CONF_USE_OPEN_METEO_FALLBACK,
    CONF_WIND_STATION,
    CONF_WINDY_API_KEY,
    DEFAULT_APPLICATION,
    DEFAULT_CURRENTS_BIN,
    DEFAULT_CURRENTS_STATION,
    DEFAULT_FLOOD_IS_POSITIVE,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DEFAULT_SLACK_WINDOW,
    DEFAULT_STATION_TIMEZONE,
    DEFAULT_TIDE_STATION,
    DEFAULT_UPDATE_INTERVAL,
    DEFAULT_USE_OPEN_METEO_FALLBACK,
    DEFAULT_WIND_STATION,
    DEFAULT_WINDY_API_KEY,
)


@dataclass(frozen=True)
class HarborConfig:
    """Settings shared by the API client, the pipelines and the tide resolver.

    Built once per config entry; nothing else reads entry data directly.
    """

    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    tide_station: str = DEFAULT_TIDE_STATION
    wind_station: str = DEFAULT_WIND_STATION
    currents_station: str = DEFAULT_CURRENTS_STATION
    currents_bin: int = DEFAULT_CURRENTS_BIN
    station_timezone: str = DEFAULT_STATION_TIMEZONE
    application: str = DEFAULT_APPLICATION
    update_interval_minutes: int = DEFAULT_UPDATE_INTERVAL
    slack_window_minutes: int = DEFAULT_SLACK_WINDOW
    windy_api_key: str = DEFAULT_WINDY_API_KEY
    use_open_meteo_fallback: bool = DEFAULT_USE_OPEN_METEO_FALLBACK
    flood_is_positive: bool = DEFAULT_FLOOD_IS_POSITIVE

    @classmethod
    def from_entry_data(
        cls,
        data: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> HarborConfig:
        """Build a config from config entry data and options."""
        options = options or {}
        return cls(
            latitude=float(data.get(CONF_LATITUDE, DEFAULT_LATITUDE)),
            longitude=float(data.get(CONF_LONGITUDE, DEFAULT_LONGITUDE)),
            tide_station=str(data.get(CONF_TIDE_STATION, DEFAULT_TIDE_STATION)),
            wind_station=str(data.get(CONF_WIND_STATION, DEFAULT_WIND_STATION)),
            currents_station=str(data.get(CONF_CURRENTS_STATION, DEFAULT_CURRENTS_STATION)),
            currents_bin=int(data.get(CONF_CURRENTS_BIN, DEFAULT_CURRENTS_BIN)),
            station_timezone=data.get(CONF_STATION_TIMEZONE, DEFAULT_STATION_TIMEZONE),
            application=data.get(CONF_APPLICATION, DEFAULT_APPLICATION),
            update_interval_minutes=int(options.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL)),
            slack_window_minutes=int(options.get(CONF_SLACK_WINDOW, DEFAULT_SLACK_WINDOW)),
            windy_api_key=(options.get(CONF_WINDY_API_KEY) or "").strip(),
            use_open_meteo_fallback=bool(
                options.get(CONF_USE_OPEN_METEO_FALLBACK, DEFAULT_USE_OPEN_METEO_FALLBACK)
            ),
            flood_is_positive=bool(options.get(CONF_FLOOD_IS_POSITIVE, DEFAULT_FLOOD_IS_POSITIVE)),
        )

    @property
    def tz(self) -> tzinfo:
        """Time zone the stations report local times in."""
        return ZoneInfo(self.station_timezone)

    @property
    def update_interval(self) -> timedelta:
        return timedelta(minutes=self.update_interval_minutes)

    @property
    def has_windy_key(self) -> bool:
        return bool(self.windy_api_key)
