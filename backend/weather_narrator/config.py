from __future__ import annotations

import os
from dataclasses import dataclass

from weather_narrator.errors import ConfigurationError


# Monthly (high, low) averages for Washington, DC, January first.
DEFAULT_AVG_TEMPS: tuple[tuple[float, float], ...] = (
    (40.0, 30.0),
    (45.0, 30.0),
    (55.0, 40.0),
    (65.0, 45.0),
    (75.0, 55.0),
    (85.0, 65.0),
    (90.0, 70.0),
    (85.0, 70.0),
    (80.0, 65.0),
    (70.0, 50.0),
    (60.0, 40.0),
    (45.0, 35.0),
)

# Lower bounds in mm/h, highest first.
DEFAULT_RAIN_INTENSITY_WORDS: tuple[tuple[float, str], ...] = (
    (16.0, "extremely heavy"),
    (4.0, "heavy"),
    (1.0, "moderate"),
    (0.25, "light"),
    (0.0, "drizzling"),
)


@dataclass(frozen=True)
class Settings:
    app_name: str = "Weather Narrator API"
    app_version: str = "1.0.0"
    openweather_url: str = "https://api.openweathermap.org/data/3.0/onecall"
    api_key: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    units: str = "imperial"
    request_timeout_seconds: float = 12.0
    frontend_origins: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")


@dataclass(frozen=True)
class NarrationConfig:
    avg_temps: tuple[tuple[float, float], ...] = DEFAULT_AVG_TEMPS
    dew_point_break: float = 69.0
    humidity_break: float = 0.70
    wind_break: float = 15.0
    cloud_break: float = 0.8
    high_temp_break: float = 80.0
    low_temp_break: float = 50.0
    night_temp_break: float = 32.0

    speed_unit: str = "miles per hour"

    rain_narration_min_probability: float = 0.1
    rain_intensity_words: tuple[tuple[float, str], ...] = DEFAULT_RAIN_INTENSITY_WORDS
    rain_episode_min_probability: float = 0.3
    rain_episode_min_level: float = 1.0
    rain_trend_activity_floor: float = 0.05

    trend_slope_error_limit: float = 0.005
    trend_intercept_error_limit: float = 0.05
    trend_change_threshold: float = 0.4
    trend_steady_threshold: float = 0.3

    temp_climbing_after_hour: int = 17
    temp_falling_before_hour: int = 12
    temp_high_noted_before_hour: int = 11
    work_day_end_hour: int = 17
    work_day_cutoff_hour: int = 16
    evening_reading_hour: int = 21
    late_reading_hour: int = 23

    quiet_day_cutoff_hour: int = 12
    forecast_horizon_days: int = 7

    def avg_temps_for_month(self, month: int) -> tuple[float, float]:
        return self.avg_temps[(month - 1) % 12]


def get_settings() -> Settings:
    api_key_raw = os.getenv("OPENWEATHER_API_KEY", "").strip()
    units_raw = os.getenv("WEATHER_UNITS", "").strip()
    timeout_raw = os.getenv("REQUEST_TIMEOUT_SECONDS", "").strip()
    origins_raw = os.getenv("FRONTEND_ORIGINS", "").strip()

    parsed_origins = tuple(item.strip() for item in origins_raw.split(",") if item.strip())

    try:
        timeout_seconds = float(timeout_raw) if timeout_raw else 12.0
    except ValueError:
        timeout_seconds = 12.0

    return Settings(
        api_key=api_key_raw or None,
        latitude=_env_float("WEATHER_LATITUDE"),
        longitude=_env_float("WEATHER_LONGITUDE"),
        units=units_raw or Settings.units,
        request_timeout_seconds=max(1.0, timeout_seconds),
        frontend_origins=parsed_origins or Settings.frontend_origins,
    )


def get_narration_config() -> NarrationConfig:
    defaults = NarrationConfig()
    return NarrationConfig(
        dew_point_break=_env_override("DEW_POINT_BREAK", defaults.dew_point_break),
        humidity_break=_env_override("HUMIDITY_BREAK", defaults.humidity_break),
        wind_break=_env_override("WIND_BREAK", defaults.wind_break),
        cloud_break=_env_override("CLOUD_BREAK", defaults.cloud_break),
        high_temp_break=_env_override("HIGH_TEMP_BREAK", defaults.high_temp_break),
        low_temp_break=_env_override("LOW_TEMP_BREAK", defaults.low_temp_break),
        night_temp_break=_env_override("NIGHT_TEMP_BREAK", defaults.night_temp_break),
    )


def validate_settings(settings: Settings) -> None:
    if not settings.api_key:
        raise ConfigurationError("No API key for the weather provider provided")

    for value in (settings.latitude, settings.longitude):
        if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError("Latitude and longitude must be provided and be numeric")


def _env_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _env_override(name: str, default: float) -> float:
    value = _env_float(name)
    return default if value is None else value
