"""Test the marine data API client and parsers."""
from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import aiohttp
import pytest

from custom_components.harbor_conditions.api import (
    CurrentSample,
    HarborConditionsAPI,
    HarborConditionsApiError,
    WindForecast,
    WindForecastHour,
    nearest_current_sample,
    parse_current_samples,
    parse_local_time,
    parse_open_meteo_forecast,
    parse_realtime_wind,
    parse_tide_predictions,
    parse_water_temperature,
    parse_windy_forecast,
    wind_from_components,
)
from custom_components.harbor_conditions.config import HarborConfig
from custom_components.harbor_conditions.const import (
    FORECAST_SOURCE_OPEN_METEO,
    FORECAST_SOURCE_WINDY,
    NOAA_API_BASE,
)
from custom_components.harbor_conditions.tide_state import TideKind

NEW_YORK = ZoneInfo("America/New_York")


def mock_session(payload=None, status=200) -> MagicMock:
    """Session whose request() context manager yields a canned response."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    session = MagicMock()
    session.request.return_value.__aenter__.return_value = response
    return session


def test_parse_local_time_formats():
    """Test NOAA and ISO timestamps get the station time zone."""
    noaa = parse_local_time("2024-06-01 15:12", NEW_YORK)
    iso = parse_local_time("2024-06-01T15:00", NEW_YORK)

    assert noaa == datetime(2024, 6, 1, 15, 12, tzinfo=NEW_YORK)
    assert iso == datetime(2024, 6, 1, 15, 0, tzinfo=NEW_YORK)
    assert parse_local_time("not a time", NEW_YORK) is None
    assert parse_local_time(None, NEW_YORK) is None


def test_parse_water_temperature():
    """Test water temperature extraction."""
    payload = {"metadata": {"id": "8518750"}, "data": [{"t": "2024-06-01 15:00", "v": "61.3", "f": "0,0,0"}]}

    assert parse_water_temperature(payload) == 61.3
    assert parse_water_temperature({"data": [{"v": ""}]}) is None
    assert parse_water_temperature({"error": {"message": "No data was found."}}) is None
    assert parse_water_temperature(None) is None


def test_parse_tide_predictions():
    """Test hilo predictions become tide events."""
    payload = {
        "predictions": [
            {"t": "2024-06-01 09:00", "v": "1.2", "type": "L"},
            {"t": "2024-06-01 15:12", "v": "5.8", "type": "H"},
            {"t": "garbage", "v": "3.0", "type": "H"},
            {"t": "2024-06-01 21:30", "v": "1.0", "type": "?"},
        ]
    }

    events = parse_tide_predictions(payload, NEW_YORK)

    assert len(events) == 3
    assert events[0].timestamp == datetime(2024, 6, 1, 9, 0, tzinfo=NEW_YORK)
    assert events[0].kind is TideKind.LOW
    assert events[1].kind is TideKind.HIGH
    assert events[1].height == 5.8
    assert events[2].kind is None


def test_parse_tide_predictions_empty():
    """Test payloads without predictions are no data."""
    assert parse_tide_predictions({"predictions": []}, NEW_YORK) is None
    assert parse_tide_predictions({"error": {"message": "bad station"}}, NEW_YORK) is None


def test_parse_current_samples_and_nearest():
    """Test the nearest current sample is picked, skipping bad timestamps."""
    payload = {
        "data": [
            {"Time": "2024-06-01 11:00", "Speed": "0.8", "Dir": "40"},
            {"Time": "?", "Speed": "9.9", "Dir": "0"},
            {"Time": "2024-06-01 12:06", "Speed": "-1.3", "Dir": "215"},
            {"Time": "2024-06-01 13:00", "Speed": "-1.6", "Dir": "214"},
        ]
    }

    samples = parse_current_samples(payload, NEW_YORK)
    nearest = nearest_current_sample(samples, datetime(2024, 6, 1, 12, 20, tzinfo=NEW_YORK))

    assert len(samples) == 3
    assert nearest == CurrentSample(
        time=datetime(2024, 6, 1, 12, 6, tzinfo=NEW_YORK), speed=-1.3, direction=215.0
    )
    assert nearest_current_sample([], datetime(2024, 6, 1, tzinfo=NEW_YORK)) is None


def test_parse_realtime_wind():
    """Test wind extraction, with zero gusts treated as missing."""
    payload = {"data": [{"t": "2024-06-01 15:00", "s": "12.25", "d": "225.00", "dr": "SW", "g": "0.00"}]}

    observation = parse_realtime_wind(payload, NEW_YORK)

    assert observation.speed == 12.25
    assert observation.direction == 225.0
    assert observation.gust is None
    assert observation.time == datetime(2024, 6, 1, 15, 0, tzinfo=NEW_YORK)

    payload["data"][0]["g"] = "15.2"
    assert parse_realtime_wind(payload, NEW_YORK).gust == 15.2
    assert parse_realtime_wind({"data": [{"s": "", "d": "10"}]}, NEW_YORK) is None


def test_parse_open_meteo_forecast():
    """Test Open-Meteo hourly arrays become forecast hours."""
    payload = {
        "hourly": {
            "time": ["2024-06-01T00:00", "2024-06-01T01:00", "2024-06-01T02:00"],
            "windspeed_10m": [8.2, None, 9.0],
            "winddirection_10m": [200, 210, 220],
            "windgusts_10m": [12.1, 13.0, 14.4],
        }
    }

    forecast = parse_open_meteo_forecast(payload, NEW_YORK)

    assert forecast.source == FORECAST_SOURCE_OPEN_METEO
    assert [hour.speed for hour in forecast.hours] == [8.2, 9.0]
    assert forecast.hours[1].time == datetime(2024, 6, 1, 2, 0, tzinfo=NEW_YORK)
    assert parse_open_meteo_forecast({"hourly": {}}, NEW_YORK) is None
    assert parse_open_meteo_forecast({"reason": "bad request"}, NEW_YORK) is None


def test_wind_from_components():
    """Test u/v components give speed and the direction wind blows from."""
    speed, direction = wind_from_components(5.0, 0.0)
    assert speed == pytest.approx(5.0)
    assert direction == pytest.approx(270.0)

    speed, direction = wind_from_components(0.0, 5.0)
    assert direction == pytest.approx(180.0)

    speed, _ = wind_from_components(3.0, 4.0)
    assert speed == pytest.approx(5.0)


def test_parse_windy_forecast():
    """Test Windy m/s components are converted to knots."""
    stamp = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc).timestamp() * 1000
    payload = {
        "ts": [stamp],
        "units": {"wind_u-surface": "m*s-1"},
        "wind_u-surface": [5.0],
        "wind_v-surface": [0.0],
        "gust-surface": [10.0],
    }

    forecast = parse_windy_forecast(payload, NEW_YORK)

    assert forecast.source == FORECAST_SOURCE_WINDY
    hour = forecast.hours[0]
    assert hour.time == datetime(2024, 6, 1, 8, 0, tzinfo=NEW_YORK)
    assert hour.speed == pytest.approx(9.72, abs=0.01)
    assert hour.gust == pytest.approx(19.44, abs=0.01)
    assert hour.direction == pytest.approx(270.0)
    assert parse_windy_forecast({"ts": [stamp]}, NEW_YORK) is None


async def test_get_tide_events_request():
    """Test the tide request covers yesterday through the day after tomorrow."""
    session = mock_session({"predictions": [{"t": "2024-06-01 15:12", "v": "5.8", "type": "H"}]})
    api = HarborConditionsAPI(session, HarborConfig(application="test-app"))

    events = await api.async_get_tide_events(datetime(2024, 6, 1, 16, 0, tzinfo=timezone.utc))

    assert len(events) == 1
    method, url = session.request.call_args.args
    params = session.request.call_args.kwargs["params"]
    assert (method, url) == ("GET", NOAA_API_BASE)
    assert params["station"] == "8518750"
    assert params["interval"] == "hilo"
    assert params["begin_date"] == "20240531"
    assert params["end_date"] == "20240603"
    assert params["application"] == "test-app"


async def test_get_current_sample_request():
    """Test the currents request targets the station and bin."""
    session = mock_session({"data": [{"Time": "2024-06-01 12:00", "Speed": "1.1", "Dir": "30"}]})
    api = HarborConditionsAPI(session, HarborConfig(currents_station="n05010", currents_bin=6))

    sample = await api.async_get_current_sample(datetime(2024, 6, 1, 16, 0, tzinfo=timezone.utc))

    assert sample.speed == 1.1
    _, url = session.request.call_args.args
    params = session.request.call_args.kwargs["params"]
    assert url.endswith("/currents/data/n05010")
    assert params["bin"] == 6
    assert params["date"] == "20240601"


async def test_http_error_raises():
    """Test a non-success status is a transport failure."""
    api = HarborConditionsAPI(mock_session({}, status=503), HarborConfig())

    with pytest.raises(HarborConditionsApiError):
        await api.async_get_water_temperature()


async def test_client_error_raises():
    """Test connection errors are wrapped."""
    session = MagicMock()
    session.request.side_effect = aiohttp.ClientConnectionError("connection refused")
    api = HarborConditionsAPI(session, HarborConfig())

    with pytest.raises(HarborConditionsApiError):
        await api.async_get_realtime_wind()


async def test_invalid_json_is_no_data():
    """Test an undecodable body is treated as no data."""
    session = mock_session()
    session.request.return_value.__aenter__.return_value.json = AsyncMock(side_effect=ValueError("not json"))
    api = HarborConditionsAPI(session, HarborConfig())

    assert await api.async_get_water_temperature() is None


FORECAST = WindForecast(
    source=FORECAST_SOURCE_OPEN_METEO,
    hours=[WindForecastHour(datetime(2024, 6, 1, 12, tzinfo=timezone.utc), 10.0, 14.0, 200.0)],
)


async def test_forecast_without_windy_key_uses_open_meteo():
    """Test Open-Meteo is used when no Windy key is configured."""
    api = HarborConditionsAPI(MagicMock(), HarborConfig())

    with (
        patch.object(api, "_async_get_windy_forecast", AsyncMock()) as mock_windy,
        patch.object(api, "_async_get_open_meteo_forecast", AsyncMock(return_value=FORECAST)),
    ):
        assert await api.async_get_wind_forecast() is FORECAST

    assert not mock_windy.called


async def test_forecast_falls_back_when_windy_fails():
    """Test a Windy failure falls back to Open-Meteo."""
    api = HarborConditionsAPI(MagicMock(), HarborConfig(windy_api_key="secret"))

    with (
        patch.object(api, "_async_get_windy_forecast", AsyncMock(side_effect=HarborConditionsApiError("401"))),
        patch.object(api, "_async_get_open_meteo_forecast", AsyncMock(return_value=FORECAST)),
    ):
        assert await api.async_get_wind_forecast() is FORECAST


async def test_forecast_windy_failure_without_fallback_raises():
    """Test a Windy failure propagates when the fallback is disabled."""
    api = HarborConditionsAPI(MagicMock(), HarborConfig(windy_api_key="secret", use_open_meteo_fallback=False))

    with (
        patch.object(api, "_async_get_windy_forecast", AsyncMock(side_effect=HarborConditionsApiError("401"))),
        patch.object(api, "_async_get_open_meteo_forecast", AsyncMock()) as mock_open_meteo,
        pytest.raises(HarborConditionsApiError),
    ):
        await api.async_get_wind_forecast()

    assert not mock_open_meteo.called


async def test_verify_station():
    """Test station verification."""
    good = HarborConditionsAPI(mock_session({"predictions": [{"t": "2024-06-01 09:00", "v": "1", "type": "L"}]}), HarborConfig())
    bad = HarborConditionsAPI(mock_session({"error": {"message": "No Predictions data was found."}}), HarborConfig())
    down = HarborConditionsAPI(mock_session({}, status=500), HarborConfig())

    assert await good.async_verify_station()
    assert not await bad.async_verify_station()
    assert not await down.async_verify_station()


def test_parse_current_samples_missing_direction():
    """Test a sample without a direction keeps it unknown."""
    payload = {"data": [{"Time": "2024-06-01 12:00", "Speed": "0.9", "Dir": ""}]}

    samples = parse_current_samples(payload, NEW_YORK)

    assert samples[0].speed == 0.9
    assert samples[0].direction is None


@pytest.mark.parametrize("value", ["Infinity", "-inf", "NaN"])
def test_parse_realtime_wind_non_finite(value):
    """Test non-finite numbers are treated as missing."""
    payload = {"data": [{"t": "2024-06-01 15:00", "s": "10.0", "d": value, "g": "12.0"}]}

    assert parse_realtime_wind(payload, NEW_YORK) is None


def test_parse_open_meteo_forecast_scalar_series():
    """Test a series that is not a list yields no forecast."""
    payload = {
        "hourly": {
            "time": ["2024-06-01T00:00"],
            "windspeed_10m": 5,
            "winddirection_10m": [200],
            "windgusts_10m": [9.0],
        }
    }

    assert parse_open_meteo_forecast(payload, NEW_YORK) is None


def test_parse_windy_forecast_out_of_range_timestamp():
    """Test hours with an unusable timestamp are skipped."""
    stamp = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc).timestamp() * 1000
    payload = {
        "ts": [1e300, stamp],
        "wind_u-surface": [1.0, 5.0],
        "wind_v-surface": [1.0, 0.0],
        "gust-surface": [2.0, 10.0],
    }

    forecast = parse_windy_forecast(payload, NEW_YORK)

    assert len(forecast.hours) == 1
    assert forecast.hours[0].direction == pytest.approx(270.0)
