from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from functools import partial
from typing import Callable, Mapping, Sequence

from weather_narrator.config import NarrationConfig
from weather_narrator.services import condition_narrator, rain_narrator, temperature_narrator
from weather_narrator.services.rank import Condition
from weather_narrator.services.samples import WeatherSample


logger = logging.getLogger("weather_narrator.narrators")

HeadlineFn = Callable[[random.Random | None], str]
DailyTextFn = Callable[[Condition, WeatherSample, str, NarrationConfig], str]
HourlyTextFn = Callable[[Sequence[WeatherSample], str, WeatherSample | None, NarrationConfig], str]


@dataclass(frozen=True)
class TopicNarrator:
    headline: HeadlineFn
    daily_text: DailyTextFn
    hourly_text: HourlyTextFn


def _generic(topic: str) -> TopicNarrator:
    return TopicNarrator(
        headline=partial(condition_narrator.headline_for, topic),
        daily_text=condition_narrator.daily_text,
        hourly_text=partial(condition_narrator.hourly_text, topic),
    )


NARRATORS: Mapping[str, TopicNarrator] = {
    "rain": TopicNarrator(
        headline=rain_narrator.headline,
        daily_text=rain_narrator.daily_text,
        hourly_text=rain_narrator.hourly_text,
    ),
    "temperature": TopicNarrator(
        headline=temperature_narrator.headline,
        daily_text=temperature_narrator.daily_text,
        hourly_text=temperature_narrator.hourly_text,
    ),
    "snow": _generic("snow"),
    "wind": _generic("wind"),
    "clouds": _generic("clouds"),
    "humidity": _generic("humidity"),
    "atmosphere": _generic("atmosphere"),
}


def narrator_for(topic: str, narrators: Mapping[str, TopicNarrator] | None = None) -> TopicNarrator | None:
    narrator = (NARRATORS if narrators is None else narrators).get(topic)
    if narrator is None:
        logger.warning("No narrator for condition topic %s; skipping it", topic)
    return narrator
