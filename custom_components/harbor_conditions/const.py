"""Constants for the Harbor Conditions integration."""

DOMAIN = "harbor_conditions"

CONF_LATITUDE = "latitude"
CONF_LONGITUDE = "longitude"
CONF_TIDE_STATION = "tide_station"
CONF_WIND_STATION = "wind_station"
CONF_CURRENTS_STATION = "currents_station"
CONF_CURRENTS_BIN = "currents_bin"
CONF_STATION_TIMEZONE = "station_timezone"
CONF_APPLICATION = "application"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_SLACK_WINDOW = "slack_window"
CONF_WINDY_API_KEY = "windy_api_key"
CONF_USE_OPEN_METEO_FALLBACK = "use_open_meteo_fallback"
CONF_FLOOD_IS_POSITIVE = "flood_is_positive"

# Upper New York Bay, off Red Hook
DEFAULT_NAME = "NY Harbor"
DEFAULT_LATITUDE = 40.6721
DEFAULT_LONGITUDE = -74.0399
DEFAULT_TIDE_STATION = "8518750"  # The Battery (tides and water temperature)
DEFAULT_WIND_STATION = "8530973"  # Robbins Reef
DEFAULT_CURRENTS_STATION = "n05010"  # Gowanus Flats
DEFAULT_CURRENTS_BIN = 6  # 28 ft depth
DEFAULT_STATION_TIMEZONE = "America/New_York"
DEFAULT_APPLICATION = "HarborConditions/1.0"

DEFAULT_UPDATE_INTERVAL = 15  # minutes
DEFAULT_SLACK_WINDOW = 30  # minutes either side of a tide extreme
DEFAULT_WINDY_API_KEY = ""
DEFAULT_USE_OPEN_METEO_FALLBACK = True
DEFAULT_FLOOD_IS_POSITIVE = True

MIN_UPDATE_INTERVAL = 5
MAX_UPDATE_INTERVAL = 120
MAX_SLACK_WINDOW = 120

# API endpoints
NOAA_API_BASE = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
NOAA_CURRENTS_BASE = "https://api.tidesandcurrents.noaa.gov/currents/data"
OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
WINDY_POINT_FORECAST_URL = "https://api.windy.com/api/point-forecast/v2"

REQUEST_TIMEOUT = 30  # seconds

FORECAST_SOURCE_OPEN_METEO = "Open-Meteo"
FORECAST_SOURCE_WINDY = "Windy.com"
FORECAST_DAYS = 3
FORECAST_TABLE_HOURS = 48

MPS_TO_KNOTS = 1.943844

# Display text markers
TEXT_EMPTY = "--"
TEXT_NOT_AVAILABLE = "N/A"
TEXT_OUT_OF_RANGE = "N/A (data range)"
TEXT_ERROR = "Error loading data"

# Display field ids
FIELD_LAST_UPDATED = "last_updated"
FIELD_LOCATION = "location"
FIELD_WATER_TEMP = "water_temp"
FIELD_TIDE_STATUS = "tide_current_status"
FIELD_TIDE_SUMMARY = "summary_tidal_flow"
FIELD_LAST_TIDE = "last_tide"
FIELD_NEXT_TIDE = "next_tide"
FIELD_FOLLOWING_TIDE = "following_tide"
FIELD_NEXT_TIDE_SUMMARY = "summary_next_tide"
FIELD_CURRENT_TIME = "current_time_prediction"
FIELD_CURRENT_SPEED = "current_speed"
FIELD_CURRENT_DIRECTION = "current_direction"
FIELD_CURRENT_TYPE = "current_direction_type"
FIELD_WIND_SPEED = "wind_speed"
FIELD_WIND_GUSTS = "wind_gusts"
FIELD_WIND_DIRECTION = "wind_direction"
FIELD_WIND_CARDINAL = "wind_cardinal"
FIELD_WIND_TIME = "wind_time"
FIELD_WIND_SUMMARY = "summary_realtime_wind"
FIELD_FORECAST = "wind_forecast"
FIELD_FORECAST_SUMMARY = "summary_current_wind_forecast"

WATER_TEMP_FIELDS = [FIELD_WATER_TEMP]
TIDE_FIELDS = [
    FIELD_TIDE_STATUS,
    FIELD_LAST_TIDE,
    FIELD_NEXT_TIDE,
    FIELD_FOLLOWING_TIDE,
    FIELD_TIDE_SUMMARY,
    FIELD_NEXT_TIDE_SUMMARY,
]
CURRENT_FIELDS = [
    FIELD_CURRENT_TIME,
    FIELD_CURRENT_SPEED,
    FIELD_CURRENT_DIRECTION,
    FIELD_CURRENT_TYPE,
]
WIND_FIELDS = [
    FIELD_WIND_SPEED,
    FIELD_WIND_GUSTS,
    FIELD_WIND_DIRECTION,
    FIELD_WIND_CARDINAL,
    FIELD_WIND_TIME,
    FIELD_WIND_SUMMARY,
]
FORECAST_FIELDS = [FIELD_FORECAST, FIELD_FORECAST_SUMMARY]
