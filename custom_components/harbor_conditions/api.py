"""Marine data API client for Harbor Conditions."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
import logging
import math
from typing import Any

import aiohttp

from .config import HarborConfig
from .const import (
    FORECAST_DAYS,
    FORECAST_SOURCE_OPEN_METEO,
    FORECAST_SOURCE_WINDY,
    MPS_TO_KNOTS,
    NOAA_API_BASE,
    NOAA_CURRENTS_BASE,
    OPEN_METEO_FORECAST_URL,
    REQUEST_TIMEOUT,
    WINDY_POINT_FORECAST_URL,
)
from .tide_state import TideEvent, TideKind

_LOGGER = logging.getLogger(__name__)

NOAA_TIME_FORMAT = "%Y-%m-%d %H:%M"
NOAA_DATE_FORMAT = "%Y%m%d"


class HarborConditionsApiError(Exception):
    """Raised when an upstream request fails at the transport level."""


@dataclass(frozen=True)
class CurrentSample:
    """A tidal current prediction for one depth bin."""

    time: datetime
    speed: float  # knots, signed by flood/ebb
    direction: float | None  # degrees true


@dataclass(frozen=True)
class WindObservation:
    """Latest observed wind at a station."""

    time: datetime | None
    speed: float
    gust: float | None
    direction: float


@dataclass(frozen=True)
class WindForecastHour:
    """One hour of a wind forecast."""

    time: datetime
    speed: float
    gust: float
    direction: float


@dataclass(frozen=True)
class WindForecast:
    """Hourly wind forecast and the provider it came from."""

    source: str
    hours: list[WindForecastHour]


def _to_float(value: Any) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def parse_local_time(value: Any, tz: tzinfo) -> datetime | None:
    """Parse a station-local timestamp ("2024-05-01 14:06" or ISO 8601)."""
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    try:
        parsed = datetime.strptime(value, NOAA_TIME_FORMAT)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _data_rows(payload: Any, key: str = "data") -> list[dict[str, Any]] | None:
    if not isinstance(payload, dict):
        return None
    rows = payload.get(key)
    if not isinstance(rows, list) or not rows:
        return None
    return [row for row in rows if isinstance(row, dict)] or None


def _series(values: dict[str, Any], key: str) -> list[Any]:
    series = values.get(key)
    return series if isinstance(series, list) else []


def parse_water_temperature(payload: Any) -> float | None:
    """Extract the latest water temperature from a data getter response."""
    rows = _data_rows(payload)
    if rows is None:
        return None
    return _to_float(rows[0].get("v"))


def parse_tide_predictions(payload: Any, tz: tzinfo) -> list[TideEvent] | None:
    """Convert hilo predictions into tide events.

    Entries with an unparsable time or height are dropped. Entries with an
    unknown type are kept with no kind.
    """
    rows = _data_rows(payload, "predictions")
    if rows is None:
        return None

    events = []
    for row in rows:
        timestamp = parse_local_time(row.get("t"), tz)
        height = _to_float(row.get("v"))
        if timestamp is None or height is None:
            _LOGGER.debug("Skipping unparsable tide prediction: %s", row)
            continue
        events.append(TideEvent(timestamp=timestamp, kind=TideKind.from_code(row.get("type")), height=height))

    return events or None


def parse_current_samples(payload: Any, tz: tzinfo) -> list[CurrentSample] | None:
    """Convert a currents response into samples, skipping unparsable rows."""
    rows = _data_rows(payload)
    if rows is None:
        return None

    samples = []
    for row in rows:
        time = parse_local_time(row.get("Time"), tz)
        speed = _to_float(row.get("Speed", row.get("Velocity_Major")))
        direction = _to_float(row.get("Dir", row.get("Direction")))
        if time is None or speed is None:
            continue
        samples.append(CurrentSample(time=time, speed=speed, direction=direction))

    return samples or None


def nearest_current_sample(samples: list[CurrentSample], now: datetime) -> CurrentSample | None:
    """Return the sample closest in time to now."""
    closest = None
    min_diff = None
    for sample in samples:
        diff = abs((sample.time - now).total_seconds())
        if min_diff is None or diff < min_diff:
            closest = sample
            min_diff = diff
    return closest


def parse_realtime_wind(payload: Any, tz: tzinfo) -> WindObservation | None:
    """Extract the latest wind observation from a data getter response."""
    rows = _data_rows(payload)
    if rows is None:
        return None

    row = rows[0]
    speed = _to_float(row.get("s"))
    direction = _to_float(row.get("d"))
    if speed is None or direction is None:
        return None

    gust = _to_float(row.get("g"))
    # Stations without a gust sensor report 0.0
    if gust is not None and round(gust, 1) == 0.0:
        gust = None

    return WindObservation(
        time=parse_local_time(row.get("t"), tz),
        speed=speed,
        gust=gust,
        direction=direction,
    )


def parse_open_meteo_forecast(payload: Any, tz: tzinfo) -> WindForecast | None:
    """Convert an Open-Meteo hourly response into a wind forecast."""
    if not isinstance(payload, dict):
        return None
    hourly = payload.get("hourly")
    if not isinstance(hourly, dict) or not isinstance(hourly.get("time"), list):
        return None

    times = hourly["time"]
    speeds = _series(hourly, "windspeed_10m")
    directions = _series(hourly, "winddirection_10m")
    gusts = _series(hourly, "windgusts_10m")

    hours = []
    for i, raw_time in enumerate(times):
        time = parse_local_time(raw_time, tz)
        speed = _to_float(speeds[i]) if i < len(speeds) else None
        direction = _to_float(directions[i]) if i < len(directions) else None
        gust = _to_float(gusts[i]) if i < len(gusts) else None
        if time is None or speed is None or direction is None or gust is None:
            continue
        hours.append(WindForecastHour(time=time, speed=speed, gust=gust, direction=direction))

    if not hours:
        return None
    return WindForecast(source=FORECAST_SOURCE_OPEN_METEO, hours=hours)


def wind_from_components(u: float, v: float) -> tuple[float, float]:
    """Return (speed, direction the wind blows from) for u/v components."""
    speed = math.hypot(u, v)
    direction = math.degrees(math.atan2(-u, -v)) % 360
    return speed, direction


def parse_windy_forecast(payload: Any, tz: tzinfo) -> WindForecast | None:
    """Convert a Windy point forecast (m/s u/v components) into knots."""
    if not isinstance(payload, dict):
        return None
    stamps = payload.get("ts")
    u_values = payload.get("wind_u-surface")
    v_values = payload.get("wind_v-surface")
    gust_values = payload.get("gust-surface")
    if not all(isinstance(series, list) for series in (stamps, u_values, v_values, gust_values)):
        return None

    hours = []
    for stamp, u, v, gust in zip(stamps, u_values, v_values, gust_values):
        stamp = _to_float(stamp)
        u = _to_float(u)
        v = _to_float(v)
        gust = _to_float(gust)
        if stamp is None or u is None or v is None or gust is None:
            continue
        try:
            time = datetime.fromtimestamp(stamp / 1000, tz=timezone.utc).astimezone(tz)
        except (OverflowError, OSError, ValueError):
            continue
        speed, direction = wind_from_components(u, v)
        hours.append(
            WindForecastHour(
                time=time,
                speed=speed * MPS_TO_KNOTS,
                gust=gust * MPS_TO_KNOTS,
                direction=direction,
            )
        )

    if not hours:
        return None
    return WindForecast(source=FORECAST_SOURCE_WINDY, hours=hours)


class HarborConditionsAPI:
    """Client for the NOAA CO-OPS, Open-Meteo and Windy APIs."""

    def __init__(self, session: aiohttp.ClientSession, config: HarborConfig) -> None:
        """Initialize the API client."""
        self.session = session
        self.config = config

    async def _async_request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Issue a request and decode the JSON body.

        Transport failures raise HarborConditionsApiError. A body that is not
        JSON is treated as an empty payload.
        """
        try:
            async with self.session.request(
                method,
                url,
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
                **kwargs,
            ) as response:
                if response.status != 200:
                    raise HarborConditionsApiError(f"HTTP error {response.status} from {url}")
                try:
                    return await response.json(content_type=None)
                except ValueError as err:
                    _LOGGER.warning("Invalid JSON from %s: %s", url, err)
                    return None
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise HarborConditionsApiError(f"Error requesting {url}: {err}") from err

    def _noaa_params(self, station: str, product: str, **extra: Any) -> dict[str, Any]:
        params = {
            "station": station,
            "product": product,
            "units": "english",
            "time_zone": "lst_ldt",
            "format": "json",
            "application": self.config.application,
        }
        params.update(extra)
        return params

    def _local_now(self, now: datetime | None = None) -> datetime:
        if now is None:
            now = datetime.now(timezone.utc)
        return now.astimezone(self.config.tz)

    async def async_get_water_temperature(self) -> float | None:
        """Get the latest water temperature (deg F)."""
        params = self._noaa_params(
            self.config.tide_station, "water_temperature", date="latest", datum="MLLW"
        )
        payload = await self._async_request_json("GET", NOAA_API_BASE, params=params)
        temperature = parse_water_temperature(payload)
        if temperature is None:
            _LOGGER.warning("Station %s: no water temperature in response", self.config.tide_station)
        return temperature

    async def async_get_tide_events(self, now: datetime | None = None) -> list[TideEvent] | None:
        """Get high/low predictions from yesterday through the day after tomorrow."""
        local_now = self._local_now(now)
        params = self._noaa_params(
            self.config.tide_station,
            "predictions",
            begin_date=(local_now - timedelta(days=1)).strftime(NOAA_DATE_FORMAT),
            end_date=(local_now + timedelta(days=2)).strftime(NOAA_DATE_FORMAT),
            datum="MLLW",
            interval="hilo",
        )
        payload = await self._async_request_json("GET", NOAA_API_BASE, params=params)
        events = parse_tide_predictions(payload, self.config.tz)
        if events is None:
            _LOGGER.warning("Station %s: no tide predictions in response", self.config.tide_station)
        else:
            _LOGGER.debug("Station %s: parsed %d tide events", self.config.tide_station, len(events))
        return events

    async def async_get_current_sample(self, now: datetime | None = None) -> CurrentSample | None:
        """Get today's current predictions and pick the one nearest now."""
        local_now = self._local_now(now)
        params = {
            "bin": self.config.currents_bin,
            "date": local_now.strftime(NOAA_DATE_FORMAT),
            "units": "english",
            "time_zone": "LST_LDT",
            "format": "json",
            "application": self.config.application,
        }
        url = f"{NOAA_CURRENTS_BASE}/{self.config.currents_station}"
        payload = await self._async_request_json("GET", url, params=params)
        samples = parse_current_samples(payload, self.config.tz)
        if samples is None:
            _LOGGER.warning("Station %s: no current predictions in response", self.config.currents_station)
            return None
        return nearest_current_sample(samples, local_now)

    async def async_get_realtime_wind(self) -> WindObservation | None:
        """Get the latest wind observation."""
        params = self._noaa_params(self.config.wind_station, "wind", date="latest")
        payload = await self._async_request_json("GET", NOAA_API_BASE, params=params)
        observation = parse_realtime_wind(payload, self.config.tz)
        if observation is None:
            _LOGGER.warning("Station %s: no wind observation in response", self.config.wind_station)
        return observation

    async def async_get_wind_forecast(self) -> WindForecast | None:
        """Get the hourly wind forecast, trying Windy first when a key is set."""
        if self.config.has_windy_key:
            try:
                forecast = await self._async_get_windy_forecast()
            except HarborConditionsApiError as err:
                if not self.config.use_open_meteo_fallback:
                    raise
                _LOGGER.warning("Windy forecast failed, falling back to Open-Meteo: %s", err)
            else:
                if forecast is not None or not self.config.use_open_meteo_fallback:
                    return forecast
                _LOGGER.warning("Windy forecast was empty, falling back to Open-Meteo")

        return await self._async_get_open_meteo_forecast()

    async def _async_get_open_meteo_forecast(self) -> WindForecast | None:
        params = {
            "latitude": self.config.latitude,
            "longitude": self.config.longitude,
            "hourly": "windspeed_10m,winddirection_10m,windgusts_10m",
            "windspeed_unit": "kn",
            "timeformat": "iso8601",
            "timezone": self.config.station_timezone,
            "forecast_days": FORECAST_DAYS,
        }
        payload = await self._async_request_json("GET", OPEN_METEO_FORECAST_URL, params=params)
        forecast = parse_open_meteo_forecast(payload, self.config.tz)
        if forecast is None:
            _LOGGER.warning("No Open-Meteo forecast data in response")
        return forecast

    async def _async_get_windy_forecast(self) -> WindForecast | None:
        body = {
            "lat": self.config.latitude,
            "lon": self.config.longitude,
            "model": "gfs",
            "parameters": ["wind", "windGust"],
            "levels": ["surface"],
            "key": self.config.windy_api_key,
        }
        payload = await self._async_request_json("POST", WINDY_POINT_FORECAST_URL, json=body)
        return parse_windy_forecast(payload, self.config.tz)

    async def async_verify_station(self) -> bool:
        """Verify that the tide station ID is valid by checking for predictions."""
        local_now = self._local_now()
        params = self._noaa_params(
            self.config.tide_station,
            "predictions",
            begin_date=local_now.strftime(NOAA_DATE_FORMAT),
            end_date=(local_now + timedelta(days=1)).strftime(NOAA_DATE_FORMAT),
            datum="MLLW",
            interval="hilo",
        )
        try:
            payload = await self._async_request_json("GET", NOAA_API_BASE, params=params)
        except HarborConditionsApiError as err:
            _LOGGER.error("Error verifying station: %s", err)
            return False
        return parse_tide_predictions(payload, self.config.tz) is not None
