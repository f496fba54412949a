from __future__ import annotations

import logging
import random
from typing import Sequence

from weather_narrator.config import NarrationConfig
from weather_narrator.services.condition_codes import describe, load_condition_codes
from weather_narrator.services.episodes import Episode, detect_episodes
from weather_narrator.services.local_time import hour_axis, hour_label
from weather_narrator.services.phrasing import join_sentences, percent
from weather_narrator.services.rank import DAILY_RAIN_MAP, Condition, bucket_code, rain_severity_level
from weather_narrator.services.samples import WeatherSample
from weather_narrator.services.trend import DECREASING, INCREASING, STEADY, classify_trend, fit_trend


logger = logging.getLogger("weather_narrator.rain")

HEADLINES = (
    "Don't forget your umbrella {day}!",
    "Remember the umbrella {day}.",
    "Prepare for some wet weather {day}.",
    "It's going to be wet {day}.",
    "You'll need the umbrella {day}.",
)


def headline(rng: random.Random | None = None) -> str:
    return (rng or random).choice(HEADLINES)


def intensity_word(intensity: float | None, config: NarrationConfig) -> str:
    if intensity is None:
        return "no"
    for threshold, word in config.rain_intensity_words:
        if intensity > threshold:
            return word
    return "no"


def daily_text(
    condition: Condition,
    sample: WeatherSample,
    timezone_name: str,
    config: NarrationConfig | None = None,
) -> str:
    """Rain narration for a whole day, or "" when rain is unlikely."""
    config = config or NarrationConfig()
    probability = sample.precip_probability or 0.0
    logger.debug("getting rain text if probability is up: %s", probability)

    if probability < config.rain_narration_min_probability:
        return ""

    if sample.precip_intensity_max is not None:
        expectation = f"{intensity_word(sample.precip_intensity_max, config)} rain"
    else:
        expectation = (
            describe(bucket_code(DAILY_RAIN_MAP, sample.rain)) or condition.description or "some rain"
        )

    peak = ""
    if sample.precip_intensity_max_time is not None:
        peak = f" peaking around {hour_label(sample.precip_intensity_max_time, timezone_name)}"

    output = (
        f"You should expect {expectation}{peak}. "
        f"There is a {percent(probability)} percent chance overall."
    )
    logger.debug("rain daily output: %s", output)
    return output


def hourly_text(
    samples: Sequence[WeatherSample],
    timezone_name: str,
    daily: WeatherSample | None = None,
    config: NarrationConfig | None = None,
) -> str:
    config = config or NarrationConfig()
    samples = list(samples)
    if not samples:
        return ""

    text: list[str] = []
    trend_sentence = _trend_sentence(samples, timezone_name, config)
    if trend_sentence:
        text.append(trend_sentence)

    codes = load_condition_codes()

    def is_rainy(sample: WeatherSample) -> bool:
        return (
            (sample.precip_probability or 0) > config.rain_episode_min_probability
            and rain_severity_level(sample, codes) > config.rain_episode_min_level
        )

    episodes = detect_episodes(samples, is_rainy, timezone_name)
    if episodes:
        logger.debug("strong rain episodes: %s", episodes)
        if len(episodes) > 1:
            text.append("It looks like there will be multiple rain chances {day}.")

        heaviest: Episode | None = None
        for index, episode in enumerate(episodes):
            text.append(_describe_episode(episode, index, timezone_name))
            # Earlier episodes win ties.
            if heaviest is None or episode.peak_intensity > heaviest.peak_intensity:
                heaviest = episode
        text.append(
            f"The heaviest bit should be around {hour_label(heaviest.peak_intensity_time, timezone_name)}."
        )

    output = join_sentences(text)
    logger.debug("rain hourly output: %s", output)
    return output


def _trend_sentence(samples: list[WeatherSample], timezone_name: str, config: NarrationConfig) -> str | None:
    axis = hour_axis([sample.time for sample in samples], timezone_name)
    points = [
        (x, sample)
        for x, sample in zip(axis, samples)
        if (sample.precip_probability or 0) > config.rain_trend_activity_floor
    ]
    if not points:
        return None

    xs = [x for x, _ in points]
    ys = [sample.precip_probability for _, sample in points]
    fit = fit_trend(xs, ys)
    logger.debug("rain trend fit %s from %s to %s", fit, fit.value_at(xs[0]), fit.value_at(xs[-1]))

    trend = classify_trend(fit, xs[0], xs[-1], config)
    if trend == INCREASING:
        return "There is an increasing rain chance through {day}."
    if trend == DECREASING:
        return "Rain chances decrease through {day}."
    if trend == STEADY:
        start = hour_label(points[0][1].time, timezone_name)
        end = hour_label(points[-1][1].time, timezone_name)
        return f"Chances for rain are pretty steady from about {start} through {end}."
    return None


def _describe_episode(episode: Episode, index: int, timezone_name: str) -> str:
    peak_hour = hour_label(episode.peak_probability_time, timezone_name)
    if index > 0:
        return (
            f"There's another chance beginning about {episode.start_hour} "
            f"peaking at {peak_hour} with a {percent(episode.peak_probability)} percent chance."
        )

    description = (
        f"Chances are good for rain starting about {episode.start_hour} "
        f"with a {percent(episode.start_probability)} percent chance"
    )
    if episode.start_hour == peak_hour or episode.start_probability == episode.peak_probability:
        return description + "."
    return description + f" rising to {percent(episode.peak_probability)} percent at {peak_hour}."
