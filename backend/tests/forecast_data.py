from __future__ import annotations

from datetime import datetime, timedelta

import pytz

from weather_narrator.services.samples import WeatherSample, sample_from_openweather


TZ = "America/New_York"
MAX_PRECIP_PROBABILITY = 0.9
MAX_PRECIP_INTENSITY = 3.0


def local_timestamp(year: int, month: int, day: int, hour: int = 0, tz: str = TZ) -> int:
    return int(pytz.timezone(tz).localize(datetime(year, month, day, hour)).timestamp())


def rain_shape(form: str, step: int, length: int) -> tuple[float, float]:
    """(probability, intensity) ``step`` hours into a rain episode of the given form."""
    progress = max(0.1, step / length)
    if form == "bell":
        intensity = abs(MAX_PRECIP_INTENSITY - abs(progress - 0.5) * 1.5 * MAX_PRECIP_INTENSITY)
        probability = MAX_PRECIP_PROBABILITY - abs(progress - 0.5)
    elif form == "increasing":
        intensity = progress * MAX_PRECIP_INTENSITY
        probability = progress * MAX_PRECIP_PROBABILITY
    elif form == "decreasing":
        intensity = (1.1 - progress) * MAX_PRECIP_INTENSITY
        probability = (1.1 - progress) * MAX_PRECIP_PROBABILITY
    else:
        intensity = MAX_PRECIP_INTENSITY
        probability = MAX_PRECIP_PROBABILITY
    return probability, intensity


def hourly_records(
    start: int,
    hours: int = 48,
    *,
    min_temp: float = 55.0,
    max_temp: float = 75.0,
    episodes: tuple[dict, ...] = (),
    tz: str = TZ,
) -> list[dict]:
    """Raw One Call hourly records; temperatures peak at 2pm local time."""
    zone = pytz.timezone(tz)
    records: list[dict] = []
    for index in range(hours):
        stamp = start + index * 3600
        local_hour = datetime.fromtimestamp(stamp, tz=zone).hour
        temp = min_temp + (max_temp - min_temp) * (1 - abs(local_hour - 14) / 14)
        record = {
            "dt": stamp,
            "temp": round(temp, 2),
            "feels_like": round(temp, 2),
            "dew_point": 50.0,
            "humidity": 60,
            "clouds": 0,
            "wind_speed": 5.0,
            "visibility": 10000,
            "pop": 0,
            "weather": [{"id": 800, "main": "Clear"}],
        }
        for episode in episodes:
            delay = episode["delay"]
            length = episode["length"]
            if delay <= index < delay + length:
                probability, intensity = rain_shape(episode.get("form", "even"), index - delay, length)
                record["pop"] = round(probability, 4)
                record["rain"] = {"1h": round(intensity, 4)}
                record["weather"] = [{"id": 500, "main": "Rain"}]
        records.append(record)
    return records


def daily_record(day_start: int, **overrides) -> dict:
    record = {
        "dt": day_start + 12 * 3600,
        "temp": {"min": 55.0, "max": 75.0, "morn": 58.0, "day": 73.0, "eve": 68.0, "night": 60.0},
        "feels_like": {"morn": 58.0, "day": 73.0, "eve": 68.0, "night": 60.0},
        "dew_point": 50.0,
        "humidity": 60,
        "clouds": 5,
        "wind_speed": 6.0,
        "pop": 0,
        "moon_phase": 0.25,
        "weather": [{"id": 800, "main": "Clear"}],
    }
    record.update(overrides)
    return record


def onecall_payload(
    start: int,
    *,
    hours: int = 48,
    days: int = 8,
    episodes: tuple[dict, ...] = (),
    daily_overrides: dict[int, dict] | None = None,
    current: dict | None = None,
    alerts: list[dict] | None = None,
    tz: str = TZ,
) -> dict:
    """A One Call payload whose hourly and daily series start at local midnight ``start``."""
    zone = pytz.timezone(tz)
    first_day = datetime.fromtimestamp(start, tz=zone).date()
    daily = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        day_start = int(zone.localize(datetime(day.year, day.month, day.day)).timestamp())
        daily.append(daily_record(day_start, **(daily_overrides or {}).get(offset, {})))

    payload = {
        "lat": 38.9,
        "lon": -77.04,
        "timezone": tz,
        "timezone_offset": int(datetime.fromtimestamp(start, tz=zone).utcoffset().total_seconds()),
        "current": current
        or {
            "dt": start,
            "temp": 68.0,
            "feels_like": 68.0,
            "dew_point": 50.0,
            "humidity": 60,
            "clouds": 0,
            "wind_speed": 5.0,
            "weather": [{"id": 800, "main": "Clear"}],
        },
        "hourly": hourly_records(start, hours, episodes=episodes, tz=tz),
        "daily": daily,
    }
    if alerts is not None:
        payload["alerts"] = alerts
    return payload


def hourly_samples(start: int, hours: int = 24, *, episodes: tuple[dict, ...] = (), tz: str = TZ) -> list[WeatherSample]:
    return [sample_from_openweather(record, "hourly") for record in hourly_records(start, hours, episodes=episodes, tz=tz)]


def explicit_rain_hours(start: int, values: dict[int, tuple[float, float]], hours: int = 24) -> list[WeatherSample]:
    """Hourly samples with ``{hour_index: (probability, intensity)}`` and dry hours elsewhere."""
    samples = []
    for index in range(hours):
        probability, intensity = values.get(index, (0.0, 0.0))
        samples.append(
            WeatherSample(
                time=start + index * 3600,
                temperature=65.0,
                precip_probability=probability,
                rain=intensity or None,
            )
        )
    return samples


def temperature_hours(start: int, temps: list[float]) -> list[WeatherSample]:
    return [
        WeatherSample(time=start + index * 3600, temperature=temp, feels_like=temp)
        for index, temp in enumerate(temps)
    ]
