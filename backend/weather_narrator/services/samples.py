from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytz

from weather_narrator.errors import UpstreamDataError


@dataclass(frozen=True)
class WeatherSample:
    """One current, hourly or daily observation in normalized units.

    Humidity and precipitation probability are fractions in [0, 1], cloud
    cover is a percentage, rain and snow are millimetres over the sample's span
    (one hour for current/hourly samples, the whole day for daily ones).
    """

    time: int
    kind: str = "hourly"
    temperature: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    temp_morn: float | None = None
    temp_day: float | None = None
    temp_eve: float | None = None
    temp_night: float | None = None
    feels_like: float | None = None
    feels_like_min: float | None = None
    feels_like_max: float | None = None
    dew_point: float | None = None
    humidity: float | None = None
    precip_probability: float | None = None
    rain: float | None = None
    snow: float | None = None
    wind_speed: float | None = None
    clouds: float | None = None
    visibility: float | None = None
    moon_phase: float | None = None
    weather_codes: tuple[int, ...] = field(default_factory=tuple)
    precip_intensity_max: float | None = None
    precip_intensity_max_time: int | None = None

    @property
    def high_temperature(self) -> float | None:
        """Warmest of the air and feels-like temperatures."""
        temp = self.temp_max if self.temp_max is not None else self.temperature
        feels = self.feels_like_max if self.feels_like_max is not None else self.feels_like
        if temp is None:
            return None
        return max(temp, feels) if feels is not None else temp

    @property
    def low_temperature(self) -> float | None:
        temp = self.temp_min if self.temp_min is not None else self.temperature
        feels = self.feels_like_min if self.feels_like_min is not None else self.feels_like
        if temp is None:
            return None
        return min(temp, feels) if feels is not None else temp

    @property
    def is_daily(self) -> bool:
        return self.kind == "daily"


@dataclass(frozen=True)
class WeatherAlert:
    event: str
    start: int
    end: int
    description: str = ""

    def is_active(self, timestamp: int) -> bool:
        return self.start <= timestamp < self.end


def sample_from_openweather(raw: dict, kind: str) -> WeatherSample:
    if not isinstance(raw, dict):
        raise UpstreamDataError(f"Expected a {kind} weather record, got {type(raw).__name__}.")

    time = _as_int(raw.get("dt"))
    if time is None:
        raise UpstreamDataError(f"A {kind} weather record is missing its timestamp.")

    temperature = None
    temp_fields: dict[str, float | None] = {}
    raw_temp = raw.get("temp")
    if isinstance(raw_temp, dict):
        temp_fields = {
            "temp_min": _as_float(raw_temp.get("min")),
            "temp_max": _as_float(raw_temp.get("max")),
            "temp_morn": _as_float(raw_temp.get("morn")),
            "temp_day": _as_float(raw_temp.get("day")),
            "temp_eve": _as_float(raw_temp.get("eve")),
            "temp_night": _as_float(raw_temp.get("night")),
        }
    else:
        temperature = _as_float(raw_temp)

    feels_like = None
    feels_like_min = None
    feels_like_max = None
    raw_feels = raw.get("feels_like")
    if isinstance(raw_feels, dict):
        feels_values = [_as_float(value) for value in raw_feels.values()]
        feels_numbers = [value for value in feels_values if value is not None]
        if feels_numbers:
            feels_like_min = min(feels_numbers)
            feels_like_max = max(feels_numbers)
    else:
        feels_like = _as_float(raw_feels)

    weather_codes = tuple(
        code
        for code in (_as_int(item.get("id")) for item in raw.get("weather") or [] if isinstance(item, dict))
        if code is not None
    )

    return WeatherSample(
        time=time,
        kind=kind,
        temperature=temperature,
        feels_like=feels_like,
        feels_like_min=feels_like_min,
        feels_like_max=feels_like_max,
        dew_point=_as_float(raw.get("dew_point")),
        humidity=_percent_as_fraction(raw.get("humidity")),
        precip_probability=_as_probability(raw.get("pop")),
        rain=_precip_amount(raw.get("rain")),
        snow=_precip_amount(raw.get("snow")),
        wind_speed=_as_float(raw.get("wind_speed")),
        clouds=_as_float(raw.get("clouds")),
        visibility=_as_float(raw.get("visibility")),
        moon_phase=_as_float(raw.get("moon_phase")),
        weather_codes=weather_codes,
        **temp_fields,
    )


def alert_from_openweather(raw: dict) -> WeatherAlert | None:
    if not isinstance(raw, dict):
        return None
    event = raw.get("event") or raw.get("title")
    start = _as_int(raw.get("start"))
    end = _as_int(raw.get("end"))
    if not event or start is None or end is None:
        return None
    return WeatherAlert(event=str(event), start=start, end=end, description=str(raw.get("description") or ""))


def normalize_payload(raw: Any) -> dict:
    """Convert a One Call style payload into immutable samples.

    Returns ``{"timezone", "current", "hourly", "daily", "alerts"}``.
    """
    if not isinstance(raw, dict):
        raise UpstreamDataError("The weather API did not return valid data.")

    timezone_name = raw.get("timezone")
    if not isinstance(timezone_name, str) or not timezone_name:
        raise UpstreamDataError("The weather API response is missing its timezone.")
    try:
        pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as exc:
        raise UpstreamDataError(f"The weather API response has an unknown timezone ({timezone_name}).") from exc

    daily_raw = raw.get("daily")
    if not isinstance(daily_raw, list) or not daily_raw:
        raise UpstreamDataError("The weather API response has no daily forecast data.")

    hourly_raw = raw.get("hourly") or []
    if not isinstance(hourly_raw, list):
        raise UpstreamDataError("The weather API response has malformed hourly data.")

    current_raw = raw.get("current")
    current = sample_from_openweather(current_raw, "current") if current_raw is not None else None

    alerts = tuple(
        alert for alert in (alert_from_openweather(item) for item in raw.get("alerts") or []) if alert is not None
    )

    return {
        "timezone": timezone_name,
        "current": current,
        "hourly": tuple(sample_from_openweather(item, "hourly") for item in hourly_raw),
        "daily": tuple(sample_from_openweather(item, "daily") for item in daily_raw),
        "alerts": alerts,
    }


def _precip_amount(value: object) -> float | None:
    if isinstance(value, dict):
        return _as_float(value.get("1h", value.get("3h")))
    return _as_float(value)


def _as_probability(value: object) -> float | None:
    parsed = _as_float(value)
    if parsed is None:
        return None
    return max(0.0, min(1.0, parsed))


def _percent_as_fraction(value: object) -> float | None:
    # One Call reports humidity as a 0-100 percentage.
    parsed = _as_float(value)
    if parsed is None:
        return None
    return max(0.0, min(1.0, parsed / 100))


def _as_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
