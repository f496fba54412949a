from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterable

from weather_narrator.services.local_time import hour_label
from weather_narrator.services.samples import WeatherSample


@dataclass(frozen=True)
class Episode:
    """A maximal run of consecutive active hours."""

    start_time: int
    start_hour: str
    start_intensity: float
    start_probability: float
    peak_intensity: float
    peak_intensity_time: int
    peak_probability: float
    peak_probability_time: int
    length_hours: int = 1

    @property
    def end_time(self) -> int:
        return self.start_time + (self.length_hours - 1) * 3600


def _open_episode(sample: WeatherSample, timezone_name: str, intensity: float, probability: float) -> Episode:
    return Episode(
        start_time=sample.time,
        start_hour=hour_label(sample.time, timezone_name),
        start_intensity=intensity,
        start_probability=probability,
        peak_intensity=intensity,
        peak_intensity_time=sample.time,
        peak_probability=probability,
        peak_probability_time=sample.time,
    )


def _extend_episode(episode: Episode, sample: WeatherSample, intensity: float, probability: float) -> Episode:
    # Ties go to the later hour.
    updated = replace(episode, length_hours=episode.length_hours + 1)
    if intensity >= updated.peak_intensity:
        updated = replace(updated, peak_intensity=intensity, peak_intensity_time=sample.time)
    if probability >= updated.peak_probability:
        updated = replace(updated, peak_probability=probability, peak_probability_time=sample.time)
    return updated


def detect_episodes(
    samples: Iterable[WeatherSample],
    is_active: Callable[[WeatherSample], bool],
    timezone_name: str,
    *,
    intensity: Callable[[WeatherSample], float | None] = lambda sample: sample.rain,
    probability: Callable[[WeatherSample], float | None] = lambda sample: sample.precip_probability,
) -> list[Episode]:
    """Group consecutive active hours into episodes, in one forward pass."""
    episodes: list[Episode] = []
    current: Episode | None = None

    for sample in samples:
        if not is_active(sample):
            if current is not None:
                episodes.append(current)
                current = None
            continue

        hour_intensity = intensity(sample) or 0.0
        hour_probability = probability(sample) or 0.0
        if current is None:
            current = _open_episode(sample, timezone_name, hour_intensity, hour_probability)
        else:
            current = _extend_episode(current, sample, hour_intensity, hour_probability)

    if current is not None:
        episodes.append(current)

    return episodes
