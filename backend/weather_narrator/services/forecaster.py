from __future__ import annotations

import logging
import random
from dataclasses import asdict, replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Protocol, Sequence

import pytz
from dateutil import parser as date_parser

from weather_narrator.config import NarrationConfig, Settings, validate_settings
from weather_narrator.errors import InputValidationError, UpstreamDataError
from weather_narrator.services import temperature_narrator
from weather_narrator.services.local_time import day_label, local_date
from weather_narrator.services.narrators import TopicNarrator, narrator_for
from weather_narrator.services.phrasing import join_sentences, join_words, render_day, whole
from weather_narrator.services.rank import Condition, classify
from weather_narrator.services.samples import WeatherAlert, WeatherSample, normalize_payload


logger = logging.getLogger("weather_narrator.forecaster")


class ForecastSource(Protocol):
    async def fetch_forecast(self, *, latitude: float, longitude: float) -> dict: ...


async def get_weather_for_date(
    requested: Any = None,
    *,
    settings: Settings,
    client: ForecastSource,
    config: NarrationConfig | None = None,
    now: datetime | None = None,
    narrators: Mapping[str, TopicNarrator] | None = None,
) -> dict:
    """Validate, fetch and narrate the forecast for one date (default: today).

    "Today" is the current date in the forecast's own timezone, so the range
    checks and the report modes agree wherever the location is.
    """
    validate_settings(settings)
    config = config or NarrationConfig()
    now = now or datetime.now(tz=timezone.utc)
    parsed = parse_requested_date(requested)

    raw_payload = await client.fetch_forecast(latitude=settings.latitude, longitude=settings.longitude)
    payload = normalize_payload(raw_payload)
    today = forecast_today(payload, now)
    target = resolve_requested_date(parsed, today, config)
    return build_forecast_report(payload, target, now=now, config=config, narrators=narrators)


def forecast_today(payload: dict, now: datetime) -> date:
    return now.astimezone(pytz.timezone(payload["timezone"])).date()


def parse_requested_date(requested: Any) -> date | None:
    """Parse a requested date; ``None`` means "today"."""
    if requested is None or (isinstance(requested, str) and not requested.strip()):
        return None
    if isinstance(requested, datetime):
        return requested.date()
    if isinstance(requested, date):
        return requested
    try:
        return date_parser.parse(str(requested)).date()
    except (ValueError, OverflowError) as exc:
        raise InputValidationError(
            f"Please provide a valid date to check the weather for! ({requested!r})"
        ) from exc


def resolve_requested_date(requested: Any, today: date, config: NarrationConfig | None = None) -> date:
    config = config or NarrationConfig()
    target = parse_requested_date(requested) or today

    if target < today:
        raise InputValidationError(
            f"Unable to get a weather forecast for a date in the past ({target.isoformat()})"
        )
    horizon = config.forecast_horizon_days
    if target > today + timedelta(days=horizon):
        raise InputValidationError(
            f"Only able to get weather for dates within {horizon} days of now ({target.isoformat()})"
        )
    return target


def build_forecast_report(
    payload: dict,
    requested: date,
    *,
    now: datetime,
    config: NarrationConfig | None = None,
    narrators: Mapping[str, TopicNarrator] | None = None,
    rng: random.Random | None = None,
) -> dict:
    """Assemble the current, daily and hour-by-hour reports for one date."""
    config = config or NarrationConfig()
    timezone_name = payload["timezone"]
    now_local = now.astimezone(pytz.timezone(timezone_name))
    today = now_local.date()
    day = day_label(requested, today)

    daily = next(
        (sample for sample in payload["daily"] if local_date(sample.time, timezone_name) == requested),
        None,
    )
    if daily is None:
        raise UpstreamDataError(f"No daily forecast data available for {requested.isoformat()}")

    hours = slice_hours_for_date(payload["hourly"], requested, timezone_name)
    if hours:
        daily = with_hourly_peak(daily, hours)

    if requested == today and now_local.hour >= config.quiet_day_cutoff_hour:
        quiet_text = "Looks like the rest of {day} will be pretty quiet."
    else:
        quiet_text = "Looks like {day} will be pretty quiet weather wise."

    currently = None
    if requested == today and payload.get("current") is not None:
        currently = build_current_report(payload["current"], payload.get("alerts") or (), timezone_name, config)

    daily_summary = _compose_report(
        data=asdict(daily),
        conditions=classify(config, daily, timezone_name=timezone_name),
        render=lambda narrator, condition: narrator.daily_text(condition, daily, timezone_name, config),
        temperature_text=temperature_narrator.summary(timezone_name, daily, None, config),
        quiet_text=quiet_text,
        day=day,
        narrators=narrators,
        rng=rng,
    )

    detail = None
    if requested <= today + timedelta(days=1):
        if hours:
            detail = _compose_report(
                data=[asdict(sample) for sample in hours],
                conditions=rank_hourly_conditions(hours, daily, config, timezone_name),
                render=lambda narrator, condition: narrator.hourly_text(hours, timezone_name, daily, config),
                temperature_text=temperature_narrator.summary(timezone_name, daily, hours, config),
                quiet_text=quiet_text,
                day=day,
                narrators=narrators,
                rng=rng,
            )
        else:
            logger.debug("No hourly data for %s; skipping the hour-by-hour report", requested)

    logger.info(
        "Built forecast for %s (%s): currently=%s detail=%s",
        requested.isoformat(),
        day,
        currently is not None,
        detail is not None,
    )
    return {
        "date": requested.isoformat(),
        "currently": currently,
        "daily_summary": daily_summary,
        "detail": detail,
    }


def slice_hours_for_date(hourly: Sequence[WeatherSample], target: date, timezone_name: str) -> list[WeatherSample]:
    """The contiguous run of hours whose local calendar date is ``target``."""
    selected: list[WeatherSample] = []
    for sample in hourly:
        if local_date(sample.time, timezone_name) == target:
            selected.append(sample)
        elif selected:
            break
    return selected


def with_hourly_peak(daily: WeatherSample, hours: Sequence[WeatherSample]) -> WeatherSample:
    peak: WeatherSample | None = None
    for sample in hours:
        if sample.rain and (peak is None or sample.rain > peak.rain):
            peak = sample
    if peak is None:
        return daily
    return replace(daily, precip_intensity_max=peak.rain, precip_intensity_max_time=peak.time)


def rank_hourly_conditions(
    hours: Sequence[WeatherSample],
    daily: WeatherSample,
    config: NarrationConfig,
    timezone_name: str | None = None,
) -> list[Condition]:
    """Strongest condition per topic across the day and each of its hours."""
    candidates = classify(config, daily, timezone_name=timezone_name)
    for sample in hours:
        candidates.extend(classify(config, sample, timezone_name=timezone_name))

    strongest: dict[str, Condition] = {}
    for condition in sorted(candidates, key=lambda item: item.level, reverse=True):
        strongest.setdefault(condition.topic, condition)
    return list(strongest.values())


def build_current_report(
    current: WeatherSample,
    alerts: Sequence[WeatherAlert],
    timezone_name: str,
    config: NarrationConfig,
) -> dict:
    conditions: dict[str, str] = {}
    for condition in classify(config, current, timezone_name=timezone_name):
        conditions.setdefault(condition.topic, condition.description)

    text: list[str] = []
    if current.temperature is not None:
        sentence = f"It's currently {whole(current.temperature)} degrees"
        if conditions:
            sentence += f" with {join_words(list(conditions.values()))}"
        text.append(sentence + ".")
        if current.feels_like is not None and abs(current.feels_like - current.temperature) >= 3:
            text.append(f"It feels more like {whole(current.feels_like)}.")
    elif conditions:
        text.append(f"Right now there's {join_words(list(conditions.values()))}.")

    events: list[str] = []
    for alert in alerts:
        if alert.is_active(current.time) and alert.event not in events:
            events.append(alert.event)
    if events:
        text.append(f"There's an active {join_words(events)} for your area.")

    return {
        "data": asdict(current),
        "conditions": conditions,
        "forecast": join_sentences(text),
    }


def _compose_report(
    *,
    data: Any,
    conditions: list[Condition],
    render: Callable[[TopicNarrator, Condition], str],
    temperature_text: str,
    quiet_text: str,
    day: str,
    narrators: Mapping[str, TopicNarrator] | None,
    rng: random.Random | None,
) -> dict:
    sentences: list[str] = []
    rendered: dict[str, list[str]] = {}

    for condition in conditions:
        narrator = narrator_for(condition.topic, narrators)
        if narrator is None:
            continue
        body = render(narrator, condition)
        if not body:
            logger.debug("Nothing to say for %s (code %s)", condition.topic, condition.code)
            continue
        if not sentences:
            sentences.append(narrator.headline(rng))
        sentences.append(body)
        rendered.setdefault(condition.topic, []).append(body)

    if not sentences:
        sentences.append(quiet_text)
    sentences.append(temperature_text)

    return {
        "data": data,
        "conditions": {topic: render_day(join_sentences(parts), day) for topic, parts in rendered.items()},
        "forecast": render_day(join_sentences(sentences), day),
    }
