"""Config flow for Harbor Conditions integration."""
from __future__ import annotations

import logging
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.const import CONF_NAME
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import HarborConditionsAPI
from .config import HarborConfig
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
    DEFAULT_NAME,
    DEFAULT_SLACK_WINDOW,
    DEFAULT_STATION_TIMEZONE,
    DEFAULT_TIDE_STATION,
    DEFAULT_UPDATE_INTERVAL,
    DEFAULT_USE_OPEN_METEO_FALLBACK,
    DEFAULT_WIND_STATION,
    DEFAULT_WINDY_API_KEY,
    DOMAIN,
    MAX_SLACK_WINDOW,
    MAX_UPDATE_INTERVAL,
    MIN_UPDATE_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)

USER_SCHEMA = vol.Schema({
    vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
    vol.Required(CONF_LATITUDE, default=DEFAULT_LATITUDE): vol.All(vol.Coerce(float), vol.Range(min=-90, max=90)),
    vol.Required(CONF_LONGITUDE, default=DEFAULT_LONGITUDE): vol.All(vol.Coerce(float), vol.Range(min=-180, max=180)),
    vol.Required(CONF_TIDE_STATION, default=DEFAULT_TIDE_STATION): str,
    vol.Required(CONF_WIND_STATION, default=DEFAULT_WIND_STATION): str,
    vol.Required(CONF_CURRENTS_STATION, default=DEFAULT_CURRENTS_STATION): str,
    vol.Required(CONF_CURRENTS_BIN, default=DEFAULT_CURRENTS_BIN): vol.All(vol.Coerce(int), vol.Range(min=1)),
    vol.Required(CONF_STATION_TIMEZONE, default=DEFAULT_STATION_TIMEZONE): str,
    vol.Optional(CONF_APPLICATION, default=DEFAULT_APPLICATION): str,
})


def is_valid_timezone(name: str) -> bool:
    """Check that a name is a known IANA time zone."""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


async def validate_station(hass: HomeAssistant, config: HarborConfig) -> bool:
    """Validate the tide station ID."""
    session = async_get_clientsession(hass)
    api = HarborConditionsAPI(session, config)
    return await api.async_verify_station()


class HarborConditionsConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Harbor Conditions."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the initial step - location and station ids."""
        errors: dict[str, str] = {}

        if user_input is not None:
            tide_station = user_input[CONF_TIDE_STATION].strip()
            currents_station = user_input[CONF_CURRENTS_STATION].strip()

            await self.async_set_unique_id(f"{tide_station}_{currents_station}")
            self._abort_if_unique_id_configured()

            if not is_valid_timezone(user_input[CONF_STATION_TIMEZONE]):
                errors[CONF_STATION_TIMEZONE] = "invalid_timezone"
            else:
                data = {
                    CONF_LATITUDE: user_input[CONF_LATITUDE],
                    CONF_LONGITUDE: user_input[CONF_LONGITUDE],
                    CONF_TIDE_STATION: tide_station,
                    CONF_WIND_STATION: user_input[CONF_WIND_STATION].strip(),
                    CONF_CURRENTS_STATION: currents_station,
                    CONF_CURRENTS_BIN: user_input[CONF_CURRENTS_BIN],
                    CONF_STATION_TIMEZONE: user_input[CONF_STATION_TIMEZONE],
                    CONF_APPLICATION: user_input.get(CONF_APPLICATION) or DEFAULT_APPLICATION,
                }

                if not await validate_station(self.hass, HarborConfig.from_entry_data(data)):
                    errors["base"] = "invalid_station"
                else:
                    return self.async_create_entry(title=user_input[CONF_NAME], data=data)

        return self.async_show_form(
            step_id="user",
            data_schema=USER_SCHEMA,
            errors=errors,
        )

    @staticmethod
    def async_get_options_flow(config_entry: config_entries.ConfigEntry) -> HarborConditionsOptionsFlow:
        """Get the options flow for this handler."""
        return HarborConditionsOptionsFlow()


class HarborConditionsOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow for Harbor Conditions."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Manage the options."""
        if user_input is not None:
            update_interval = user_input.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL)
            if not MIN_UPDATE_INTERVAL <= update_interval <= MAX_UPDATE_INTERVAL:
                return self.async_show_form(
                    step_id="init",
                    data_schema=self._get_options_schema(),
                    errors={CONF_UPDATE_INTERVAL: "invalid_update_interval"},
                )

            slack_window = user_input.get(CONF_SLACK_WINDOW, DEFAULT_SLACK_WINDOW)
            if not 0 <= slack_window <= MAX_SLACK_WINDOW:
                return self.async_show_form(
                    step_id="init",
                    data_schema=self._get_options_schema(),
                    errors={CONF_SLACK_WINDOW: "invalid_slack_window"},
                )

            return self.async_create_entry(
                title="",
                data={
                    CONF_UPDATE_INTERVAL: update_interval,
                    CONF_SLACK_WINDOW: slack_window,
                    CONF_WINDY_API_KEY: user_input.get(CONF_WINDY_API_KEY, "").strip(),
                    CONF_USE_OPEN_METEO_FALLBACK: user_input.get(
                        CONF_USE_OPEN_METEO_FALLBACK, DEFAULT_USE_OPEN_METEO_FALLBACK
                    ),
                    CONF_FLOOD_IS_POSITIVE: user_input.get(CONF_FLOOD_IS_POSITIVE, DEFAULT_FLOOD_IS_POSITIVE),
                },
            )

        return self.async_show_form(
            step_id="init",
            data_schema=self._get_options_schema(),
        )

    def _get_options_schema(self) -> vol.Schema:
        """Get the options schema."""
        options = self.config_entry.options

        return vol.Schema({
            vol.Optional(
                CONF_UPDATE_INTERVAL,
                default=options.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL),
            ): int,
            vol.Optional(
                CONF_SLACK_WINDOW,
                default=options.get(CONF_SLACK_WINDOW, DEFAULT_SLACK_WINDOW),
            ): int,
            vol.Optional(
                CONF_WINDY_API_KEY,
                default=options.get(CONF_WINDY_API_KEY, DEFAULT_WINDY_API_KEY),
            ): str,
            vol.Optional(
                CONF_USE_OPEN_METEO_FALLBACK,
                default=options.get(CONF_USE_OPEN_METEO_FALLBACK, DEFAULT_USE_OPEN_METEO_FALLBACK),
            ): bool,
            vol.Optional(
                CONF_FLOOD_IS_POSITIVE,
                default=options.get(CONF_FLOOD_IS_POSITIVE, DEFAULT_FLOOD_IS_POSITIVE),
            ): bool,
        })
