from __future__ import annotations

import random
from typing import Sequence

from weather_narrator.config import NarrationConfig
from weather_narrator.services.local_time import hour_label
from weather_narrator.services.phrasing import percent, whole
from weather_narrator.services.rank import Condition, classify
from weather_narrator.services.samples import WeatherSample


HEADLINES = {
    "snow": (
        "Get ready for some snow {day}.",
        "You might want to find your boots {day}.",
    ),
    "wind": (
        "Hold on to your hat {day}.",
        "It's going to be a blustery one {day}.",
    ),
    "clouds": (
        "Not much sun to speak of {day}.",
        "It'll be a gray one {day}.",
    ),
    "humidity": (
        "It's going to be sticky {day}.",
        "The air will be heavy {day}.",
    ),
    "atmosphere": (
        "Look up {day}.",
        "Something to watch for {day}.",
    ),
}


def headline_for(topic: str, rng: random.Random | None = None) -> str:
    return (rng or random).choice(HEADLINES[topic])


def daily_text(
    condition: Condition,
    sample: WeatherSample,
    timezone_name: str,
    config: NarrationConfig | None = None,
) -> str:
    config = config or NarrationConfig()
    description = condition.description
    if not description:
        return ""

    if condition.topic == "snow":
        return (
            f"You should expect {description} {{day}}. "
            f"There is a {percent(condition.probability)} percent chance overall."
        )

    if condition.topic == "wind":
        if sample.wind_speed is None:
            return f"It'll be {description} {{day}}."
        return f"It'll be {description} {{day}} with winds around {whole(sample.wind_speed)} {config.speed_unit}."

    if condition.topic == "clouds":
        if sample.clouds is None:
            return f"Expect {description} {{day}}."
        return f"Expect {description} {{day}}, with cloud cover near {whole(sample.clouds)} percent."

    if condition.topic == "humidity":
        if sample.dew_point is None:
            return f"It's going to feel {description} {{day}}."
        return f"It's going to feel {description} {{day}} with the dew point near {whole(sample.dew_point)} degrees."

    if condition.topic == "atmosphere":
        return f"Keep an eye out for {description} {{day}}."

    return f"Expect {description} {{day}}."


def hourly_text(
    topic: str,
    samples: Sequence[WeatherSample],
    timezone_name: str,
    daily: WeatherSample | None = None,
    config: NarrationConfig | None = None,
) -> str:
    """Name the strongest hour for a topic; falls back to the daily sample."""
    config = config or NarrationConfig()
    strongest: Condition | None = None
    strongest_sample: WeatherSample | None = None
    for sample in samples:
        ranked = classify(config, sample, topic, timezone_name=timezone_name)
        if ranked and (strongest is None or ranked[0].level > strongest.level):
            strongest = ranked[0]
            strongest_sample = sample

    if strongest is None or strongest_sample is None:
        if daily is None:
            return ""
        ranked = classify(config, daily, topic, timezone_name=timezone_name)
        return daily_text(ranked[0], daily, timezone_name, config) if ranked else ""

    when = hour_label(strongest_sample.time, timezone_name)
    if topic == "wind" and strongest_sample.wind_speed is not None:
        return (
            f"It'll be {strongest.description} around {when} "
            f"with winds near {whole(strongest_sample.wind_speed)} {config.speed_unit}."
        )
    if topic == "snow":
        return (
            f"Expect {strongest.description} around {when}, "
            f"with a {percent(strongest.probability)} percent chance."
        )
    return f"Expect {strongest.description} around {when}."
