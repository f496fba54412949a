from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from weather_narrator.config import NarrationConfig
from weather_narrator.services.condition_codes import ConditionCode, load_condition_codes
from weather_narrator.services.local_time import local_datetime
from weather_narrator.services.samples import WeatherSample


logger = logging.getLogger("weather_narrator.rank")

TOPICS = ("rain", "snow", "clouds", "wind", "temperature", "humidity", "atmosphere")


@dataclass(frozen=True)
class SeverityBucket:
    min: float
    max: float
    code: int


# Millimetres per day.
DAILY_RAIN_MAP = (
    SeverityBucket(0, 2, 311),
    SeverityBucket(2, 7, 500),
    SeverityBucket(7, 15, 501),
    SeverityBucket(15, 30, 503),
    SeverityBucket(30, 99, 504),
)
# Millimetres per hour.
HOURLY_RAIN_MAP = (
    SeverityBucket(0, 0.1, 311),
    SeverityBucket(0.1, 1, 500),
    SeverityBucket(1, 4, 501),
    SeverityBucket(4, 10, 503),
    SeverityBucket(10, 99, 504),
)
DAILY_SNOW_MAP = (
    SeverityBucket(0, 10, 600),
    SeverityBucket(10, 20, 601),
    SeverityBucket(20, 99, 602),
)
HOURLY_SNOW_MAP = (
    SeverityBucket(0, 1, 600),
    SeverityBucket(1, 3, 601),
    SeverityBucket(3, 99, 602),
)
# Cloud cover percentage.
CLOUD_MAP = (
    SeverityBucket(0, 10, 800),
    SeverityBucket(10, 25, 801),
    SeverityBucket(25, 50, 802),
    SeverityBucket(50, 84, 803),
    SeverityBucket(84, 100, 804),
)
# Wind speed above the configured wind break.
WIND_MAP = (
    SeverityBucket(0, 5, 9030),
    SeverityBucket(5, 15, 9031),
    SeverityBucket(15, 30, 9032),
    SeverityBucket(30, 99, 9033),
)

DAILY_RAIN_FALLBACK_CODE = 500
FULL_MOON_CODE = 9020
NEW_MOON_CODE = 9021
MUGGY_CODE = 9040


@dataclass(frozen=True)
class Condition:
    topic: str
    code: int
    probability: float
    level: float
    description: str = ""


def bucket_code(buckets: tuple[SeverityBucket, ...], value: float | None) -> int | None:
    """First bucket (ascending) whose max covers ``value``; the last bucket is open ended."""
    if value is None or not buckets or value <= buckets[0].min:
        return None
    for bucket in buckets:
        if bucket.min < value <= bucket.max:
            return bucket.code
    return buckets[-1].code


def rain_severity_level(sample: WeatherSample, codes: dict[int, ConditionCode] | None = None) -> float:
    code = bucket_code(HOURLY_RAIN_MAP, sample.rain)
    if code is None:
        return 0.0
    entry = (codes or load_condition_codes()).get(code)
    return entry.level if entry else 0.0


def classify(
    config: NarrationConfig,
    sample: WeatherSample,
    limit_topic: str | None = None,
    codes: dict[int, ConditionCode] | None = None,
    *,
    timezone_name: str | None = None,
) -> list[Condition]:
    """Rank the conditions worth narrating for one sample.

    Every topic rule is evaluated on its own, so several topics can fire for
    the same sample. A rule whose inputs are missing does not fire. The result
    is sorted by ``level`` (highest first) and keeps rule order for ties.
    Seasonal averages are looked up by the local month when ``timezone_name``
    is given, and by the UTC month otherwise.
    """
    codes = codes or load_condition_codes()
    conditions: list[Condition] = []
    reported: set[str] = set()

    def wants(topic: str) -> bool:
        return limit_topic is None or limit_topic == topic

    def add(topic: str, code: int | None, probability: float, bonus: float = 0.0) -> None:
        if code is None:
            return
        entry = codes.get(code)
        if entry is None:
            logger.debug("Unable to identify weather condition. Code: %s", code)
            return
        conditions.append(
            Condition(
                topic=topic,
                code=code,
                probability=probability,
                level=entry.level + bonus,
                description=entry.description,
            )
        )

    probability = sample.precip_probability or 1.0

    for code in sample.weather_codes:
        entry = codes.get(code)
        if entry is None:
            logger.debug("Unable to identify weather condition. Code: %s", code)
            continue
        if not wants(entry.category):
            continue
        add(entry.category, code, probability)
        reported.add(entry.category)

    # Precipitation
    if wants("rain") and "rain" not in reported and sample.rain:
        if sample.is_daily:
            if (sample.precip_probability or 0) > 0.05:
                code = bucket_code(DAILY_RAIN_MAP, sample.rain) or DAILY_RAIN_FALLBACK_CODE
                add("rain", code, sample.precip_probability or 0.0)
        else:
            pop = sample.precip_probability
            add("rain", bucket_code(HOURLY_RAIN_MAP, sample.rain), 1.0 if pop is None else pop)

    if wants("snow") and "snow" not in reported and sample.snow and sample.precip_probability:
        snow_map = DAILY_SNOW_MAP if sample.is_daily else HOURLY_SNOW_MAP
        add("snow", bucket_code(snow_map, sample.snow), sample.precip_probability)

    # Sky and wind
    if wants("clouds") and "clouds" not in reported and sample.clouds is not None:
        if sample.clouds / 100 > config.cloud_break:
            add("clouds", bucket_code(CLOUD_MAP, sample.clouds), 1.0)

    if wants("wind") and sample.wind_speed is not None and sample.wind_speed > config.wind_break:
        add("wind", bucket_code(WIND_MAP, sample.wind_speed - config.wind_break), 1.0)

    # Temperature and humidity
    avg_high, avg_low = config.avg_temps_for_month(_month_of(sample, timezone_name))
    high = sample.high_temperature
    low = sample.low_temperature
    humid = (
        sample.dew_point is not None
        and sample.humidity is not None
        and sample.dew_point > config.dew_point_break
        and sample.humidity > config.humidity_break
    )
    humid_bonus = 0.0
    if humid:
        humid_bonus = (
            (sample.dew_point - config.dew_point_break) / 5 + (sample.humidity - config.humidity_break) * 10
        ) / 2
    hot = high is not None and high > config.high_temp_break and high > avg_high * 1.05

    if wants("temperature") and high is not None:
        if hot:
            code = 9011 if high > avg_high * 1.15 else 9010
            bonus = (high - avg_high) / 10
            if humid:
                code = 9012
                bonus += humid_bonus
            add("temperature", code, 1.0, bonus)
        elif high < config.low_temp_break and high < avg_high * 0.9:
            code = 9016 if high < avg_high * 0.8 else 9015
            add("temperature", code, 1.0, (avg_high - high) / 10)

    if wants("temperature") and low is not None:
        if low < config.night_temp_break and low < avg_low:
            add("temperature", 9017, 1.0, (avg_low - low) / 10)

    if wants("humidity") and humid and not hot:
        add("humidity", MUGGY_CODE, 1.0, humid_bonus)

    # Moon phase only at the exact phase values.
    if wants("atmosphere") and sample.moon_phase is not None:
        if sample.moon_phase in (0, 1):
            add("atmosphere", NEW_MOON_CODE, 1.0)
        elif sample.moon_phase == 0.5:
            add("atmosphere", FULL_MOON_CODE, 1.0)

    ranked = [condition for condition in conditions if condition.level > 0]
    return sorted(ranked, key=lambda condition: condition.level, reverse=True)


def _month_of(sample: WeatherSample, timezone_name: str | None) -> int:
    if timezone_name:
        return local_datetime(sample.time, timezone_name).month
    return datetime.fromtimestamp(sample.time, tz=timezone.utc).month
