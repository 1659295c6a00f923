"""Map pipeline results to display field updates."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Iterable

from .api import CurrentSample, WindForecast, WindObservation
from .const import (
    CURRENT_FIELDS,
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
    FORECAST_FIELDS,
    FORECAST_TABLE_HOURS,
    TEXT_EMPTY,
    TEXT_ERROR,
    TEXT_NOT_AVAILABLE,
    TEXT_OUT_OF_RANGE,
    TIDE_FIELDS,
    WIND_FIELDS,
)
from .tide_state import ResolvedTideState, TideEvent, tide_status_text, tide_summary_text

CARDINALS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW", "N",
]


@dataclass(frozen=True)
class FieldUpdate:
    """Text for one display field."""

    field_id: str
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ForecastRow:
    """One row of the forecast table."""

    time: str
    speed: str
    gust: str
    direction: str


@dataclass(frozen=True)
class ForecastTable:
    """Rendered forecast table."""

    source: str
    date_label: str
    rows: list[ForecastRow]


def field_update(field_id: str, text: str | None, is_error: bool = False) -> FieldUpdate:
    """Build an update, showing a placeholder for missing text."""
    if text is None or text == "":
        text = TEXT_EMPTY
    return FieldUpdate(field_id, text, is_error)


def error_updates(field_ids: Iterable[str]) -> list[FieldUpdate]:
    return [field_update(field_id, TEXT_ERROR, is_error=True) for field_id in field_ids]


def not_available_updates(field_ids: Iterable[str]) -> list[FieldUpdate]:
    return [field_update(field_id, TEXT_NOT_AVAILABLE) for field_id in field_ids]


def degrees_to_cardinal(degrees: float | None) -> str:
    """Convert a compass bearing to a 16-point cardinal name."""
    if degrees is None:
        return TEXT_EMPTY
    return CARDINALS[round((degrees % 360) / 22.5)]


def format_time(value: datetime | None, tz: tzinfo) -> str:
    """Format as a local 12-hour clock time, e.g. 03:12 PM."""
    if value is None:
        return TEXT_EMPTY
    return value.astimezone(tz).strftime("%I:%M %p")


def format_date(value: datetime | None, tz: tzinfo) -> str:
    """Format as a short local date, e.g. Oct 19."""
    if value is None:
        return TEXT_EMPTY
    local = value.astimezone(tz)
    return f"{local.strftime('%b')} {local.day}"


def format_direction(degrees: float | None) -> str:
    """Format a bearing as whole degrees plus cardinal, e.g. 215° (SW)."""
    if degrees is None:
        return TEXT_NOT_AVAILABLE
    whole = round(degrees)
    return f"{whole}° ({degrees_to_cardinal(whole)})"


def format_location(latitude: float, longitude: float) -> str:
    """Format coordinates with hemisphere letters, e.g. (40.6721° N, 74.0399° W)."""
    lat_hemisphere = "N" if latitude >= 0 else "S"
    lon_hemisphere = "E" if longitude >= 0 else "W"
    return f"({abs(latitude):.4f}° {lat_hemisphere}, {abs(longitude):.4f}° {lon_hemisphere})"


def render_header(now: datetime, tz: tzinfo, latitude: float, longitude: float) -> list[FieldUpdate]:
    return [
        field_update(FIELD_LAST_UPDATED, f"{format_date(now, tz)} {format_time(now, tz)}"),
        field_update(FIELD_LOCATION, format_location(latitude, longitude)),
    ]


def render_water_temperature(temperature: float | None) -> list[FieldUpdate]:
    if temperature is None:
        return not_available_updates([FIELD_WATER_TEMP])
    return [field_update(FIELD_WATER_TEMP, f"{temperature:.1f}")]


def _kind_label(event: TideEvent) -> str:
    return event.kind.value if event.kind is not None else "Tide"


def format_tide_event(event: TideEvent | None, tz: tzinfo) -> str:
    """Label an event with kind, time and height, e.g. High at 03:12 PM (5.80 ft)."""
    if event is None:
        return TEXT_OUT_OF_RANGE
    return f"{_kind_label(event)} at {format_time(event.timestamp, tz)} ({event.height:.2f} ft)"


def render_tide_state(state: ResolvedTideState | None, tz: tzinfo) -> list[FieldUpdate]:
    """Render the resolved tide state; None means the feed had no predictions."""
    if state is None:
        return not_available_updates(TIDE_FIELDS)

    next_event = state.next_event
    if next_event is not None:
        next_summary = f"{_kind_label(next_event)} at {format_time(next_event.timestamp, tz)}"
    else:
        next_summary = TEXT_NOT_AVAILABLE

    return [
        field_update(FIELD_TIDE_STATUS, tide_status_text(state.phase)),
        field_update(FIELD_TIDE_SUMMARY, tide_summary_text(state.phase)),
        field_update(FIELD_LAST_TIDE, format_tide_event(state.previous_event, tz)),
        field_update(FIELD_NEXT_TIDE, format_tide_event(next_event, tz)),
        field_update(FIELD_FOLLOWING_TIDE, format_tide_event(state.following_event, tz)),
        field_update(FIELD_NEXT_TIDE_SUMMARY, next_summary),
    ]


def current_flow_type(speed: float, flood_is_positive: bool = True) -> str:
    """Classify a signed current speed as Flood, Ebb or Slack."""
    if speed == 0:
        return "Slack"
    if (speed > 0) == flood_is_positive:
        return "Flood"
    return "Ebb"


def render_current(sample: CurrentSample | None, tz: tzinfo, flood_is_positive: bool = True) -> list[FieldUpdate]:
    if sample is None:
        return not_available_updates(CURRENT_FIELDS)
    return [
        field_update(FIELD_CURRENT_TIME, format_time(sample.time, tz)),
        field_update(FIELD_CURRENT_SPEED, f"{abs(sample.speed):.1f}"),
        field_update(FIELD_CURRENT_DIRECTION, format_direction(sample.direction)),
        field_update(FIELD_CURRENT_TYPE, current_flow_type(round(sample.speed, 1), flood_is_positive)),
    ]


def render_realtime_wind(observation: WindObservation | None, tz: tzinfo) -> list[FieldUpdate]:
    if observation is None:
        return not_available_updates(WIND_FIELDS)

    speed = f"{observation.speed:.1f}"
    gusts = f"{observation.gust:.1f}" if observation.gust is not None else TEXT_NOT_AVAILABLE
    direction = round(observation.direction)
    cardinal = degrees_to_cardinal(direction)
    return [
        field_update(FIELD_WIND_SPEED, speed),
        field_update(FIELD_WIND_GUSTS, gusts),
        field_update(FIELD_WIND_DIRECTION, str(direction)),
        field_update(FIELD_WIND_CARDINAL, cardinal),
        field_update(FIELD_WIND_TIME, format_time(observation.time, tz)),
        field_update(FIELD_WIND_SUMMARY, f"{speed} kts from {cardinal} (gusts {gusts} kts)"),
    ]


def build_forecast_table(forecast: WindForecast, tz: tzinfo) -> ForecastTable:
    """Build the table rows for the first FORECAST_TABLE_HOURS hours."""
    hours = forecast.hours[:FORECAST_TABLE_HOURS]
    rows = [
        ForecastRow(
            time=format_time(hour.time, tz),
            speed=f"{hour.speed:.1f}",
            gust=f"{hour.gust:.1f}",
            direction=format_direction(hour.direction),
        )
        for hour in hours
    ]
    date_label = format_date(hours[0].time, tz) if hours else TEXT_EMPTY
    return ForecastTable(source=forecast.source, date_label=date_label, rows=rows)


def render_wind_forecast(
    forecast: WindForecast | None,
    now: datetime,
    tz: tzinfo,
) -> tuple[list[FieldUpdate], ForecastTable | None]:
    """Render the forecast summary and table.

    The summary shows the first hour at or after now, or the last hour marked
    "(Past)" when the whole forecast is in the past.
    """
    if forecast is None or not forecast.hours:
        return not_available_updates(FORECAST_FIELDS), None

    table = build_forecast_table(forecast, tz)

    upcoming = next((hour for hour in forecast.hours if hour.time >= now), None)
    prefix = ""
    if upcoming is None:
        upcoming = forecast.hours[-1]
        prefix = "(Past) "
    summary = (
        f"{prefix}{upcoming.speed:.1f} kts from {degrees_to_cardinal(round(upcoming.direction))} "
        f"(gusts {upcoming.gust:.1f} kts)"
    )

    days = len(table.rows) / 24
    caption = f"Forecast from {table.source}. Displaying next ~{days:g} days."
    return [
        field_update(FIELD_FORECAST, caption),
        field_update(FIELD_FORECAST_SUMMARY, summary),
    ], table
