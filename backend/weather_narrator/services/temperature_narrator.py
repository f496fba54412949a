from __future__ import annotations

import logging
import random
from typing import Sequence

from weather_narrator.config import NarrationConfig
from weather_narrator.services.local_time import clock_hour_label, hour_label, local_hour
from weather_narrator.services.phrasing import join_sentences, whole
from weather_narrator.services.rank import Condition, classify
from weather_narrator.services.samples import WeatherSample
from weather_narrator.services.trend import CLIMBING, FALLING, classify_peak_hour


logger = logging.getLogger("weather_narrator.temperature")

HEADLINES = (
    "Keep an eye on the thermometer {day}.",
    "Temperatures are worth a mention {day}.",
    "Dress for the temperature {day}.",
)


def headline(rng: random.Random | None = None) -> str:
    return (rng or random).choice(HEADLINES)


def daily_text(
    condition: Condition,
    sample: WeatherSample,
    timezone_name: str,
    config: NarrationConfig | None = None,
) -> str:
    """One sentence for a notable temperature condition."""
    high = sample.temp_max if sample.temp_max is not None else sample.temperature
    low = sample.temp_min if sample.temp_min is not None else sample.temperature
    feels_high = sample.feels_like_max if sample.feels_like_max is not None else sample.feels_like
    feels_low = sample.feels_like_min if sample.feels_like_min is not None else sample.feels_like

    if condition.code in (9010, 9011, 9012) and high is not None:
        if condition.code == 9012:
            text = f"It'll be hot and humid {{day}}, with a high near {whole(high)} degrees"
            if sample.dew_point is not None:
                text += f" and a dew point around {whole(sample.dew_point)}"
        elif condition.code == 9011:
            text = f"It's going to be very hot {{day}}, reaching {whole(high)} degrees"
        else:
            text = f"It'll be warmer than usual {{day}}, with a high near {whole(high)} degrees"
        if feels_high is not None and feels_high > high + 5:
            text += f", but it might feel more like {whole(feels_high)}"
        return text + "."

    if condition.code in (9015, 9016) and high is not None:
        if condition.code == 9016:
            text = f"It's going to be very cold {{day}}. It might only hit {whole(high)} degrees"
        else:
            text = f"It'll be cooler than usual {{day}}, with temperatures only getting up to {whole(high)}"
        if feels_high is not None and feels_high < high - 5:
            text += f", but it might only feel like {whole(feels_high)}"
        return text + "."

    if condition.code == 9017 and low is not None:
        coldest = min(low, feels_low) if feels_low is not None else low
        return f"Bundle up overnight, it'll get down to about {whole(coldest)} degrees."

    if condition.description:
        return f"It'll be {condition.description} {{day}}."
    return ""


def hourly_text(
    samples: Sequence[WeatherSample],
    timezone_name: str,
    daily: WeatherSample | None = None,
    config: NarrationConfig | None = None,
) -> str:
    config = config or NarrationConfig()
    source = daily if daily is not None else (samples[0] if samples else None)
    if source is None:
        return ""
    conditions = classify(config, source, "temperature", timezone_name=timezone_name)
    if not conditions:
        return ""
    return daily_text(conditions[0], source, timezone_name, config)


def summary(
    timezone_name: str,
    daily: WeatherSample | None = None,
    hourly: Sequence[WeatherSample] | None = None,
    config: NarrationConfig | None = None,
) -> str:
    """How temperatures move through the day.

    Without hourly data this compares the daily readings. With hourly data the
    shape comes from the clock hour of the day's maximum, plus spot readings
    at the end of the work day and later in the evening.
    """
    config = config or NarrationConfig()
    readings = [sample for sample in (hourly or []) if sample.temperature is not None]

    if not readings:
        if daily is None:
            return ""
        return _simple_summary(daily)

    hours = [local_hour(sample.time, timezone_name) for sample in readings]
    temps = [sample.temperature for sample in readings]

    max_index = 0
    min_index = 0
    for index, temp in enumerate(temps):
        if temp > temps[max_index]:
            max_index = index
        if temp < temps[min_index]:
            min_index = index

    logger.debug(
        "max/min: %s at %s / %s at %s",
        temps[min_index],
        hours[min_index],
        temps[max_index],
        hours[max_index],
    )

    def reading_at(hour: int) -> int | None:
        for index, value in enumerate(hours):
            if value == hour:
                return whole(temps[index])
        return None

    work_day = reading_at(config.work_day_end_hour)
    work_day_sentence = f"It'll be about {work_day} at the end of the work day." if work_day is not None else ""

    max_temp = whole(temps[max_index])
    max_label = hour_label(readings[max_index].time, timezone_name, spaced=True)
    first_hour = hours[0]
    curve = classify_peak_hour(hours[max_index], config)
    text: list[str] = []

    if curve == CLIMBING:
        text.append(
            f"Temperatures will be climbing through the evening {{day}}, "
            f"peaking at about {max_temp} degrees around {max_label}."
        )
        if first_hour < config.work_day_cutoff_hour:
            text.append(work_day_sentence)

    elif curve == FALLING:
        min_label = hour_label(readings[min_index].time, timezone_name, spaced=True)
        text.append(
            f"Temperatures will be heading down through {{day}} "
            f"getting down to about {whole(temps[min_index])} degrees by {min_label}."
        )
        if first_hour < config.work_day_cutoff_hour:
            text.append(work_day_sentence)

    elif first_hour < config.temp_high_noted_before_hour:
        text.append(f"You'll see a high of {max_temp} degrees {{day}} around {max_label}.")
        text.append(work_day_sentence)

    elif first_hour < config.work_day_end_hour:
        evening = reading_at(config.evening_reading_hour)
        evening_label = clock_hour_label(config.evening_reading_hour, spaced=True)
        if work_day is not None and evening is not None:
            text.append(f"It'll be about {work_day} at the end of the work day and {evening} by {evening_label}.")
        elif work_day is not None:
            text.append(work_day_sentence)
        elif evening is not None:
            text.append(f"It'll be about {evening} by {evening_label}.")

    else:
        late = reading_at(config.late_reading_hour)
        if late is not None:
            text.append(
                f"It'll be {late} around {clock_hour_label(config.late_reading_hour)} to finish out your day."
            )

    output = join_sentences(text)
    logger.debug("temperature summary output: %s", output)
    return output


def _simple_summary(daily: WeatherSample) -> str:
    logger.debug("no hourly data, only getting general daily summary")
    if daily.temp_min is None or daily.temp_max is None:
        return ""

    if daily.temp_morn is not None and daily.temp_eve is not None and daily.temp_eve < daily.temp_morn:
        return (
            f"Temperatures will be heading down throughout {{day}}. "
            f"The high of {whole(daily.temp_max)} degrees will be hit early "
            f"and temps will get down to {whole(daily.temp_min)} later in the day."
        )
    return (
        f"The low {{day}} will be {whole(daily.temp_min)} degrees "
        f"and you should expect a high around {whole(daily.temp_max)} later in the day."
    )
