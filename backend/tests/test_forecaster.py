import asyncio
import random
from datetime import date, datetime, timezone

import pytest
from forecast_data import TZ, local_timestamp, onecall_payload

from weather_narrator.config import Settings
from weather_narrator.errors import ConfigurationError, InputValidationError, UpstreamDataError
from weather_narrator.services import rain_narrator
from weather_narrator.services.forecaster import (
    build_forecast_report,
    get_weather_for_date,
    resolve_requested_date,
    slice_hours_for_date,
    with_hourly_peak,
)
from weather_narrator.services.narrators import NARRATORS
from weather_narrator.services.phrasing import render_day
from weather_narrator.services.samples import WeatherSample, normalize_payload


START = local_timestamp(2026, 6, 10)
TODAY = date(2026, 6, 10)
MORNING = datetime.fromtimestamp(START + 8 * 3600, tz=timezone.utc)
AFTERNOON = datetime.fromtimestamp(START + 14 * 3600, tz=timezone.utc)

RAINY_DAY = {
    "episodes": ({"delay": 13, "length": 4, "form": "even"},),
    "daily_overrides": {0: {"pop": 0.7, "rain": 10.0, "weather": [{"id": 501, "main": "Rain"}]}},
}


class _FakeForecastClient:
    def __init__(self, payload: dict) -> None:
        self.payload = payload
        self.calls: list[dict] = []

    async def fetch_forecast(self, **kwargs):  # noqa: ANN003
        self.calls.append(kwargs)
        return self.payload


def _settings(**overrides) -> Settings:
    values = {"api_key": "test-key", "latitude": 38.9, "longitude": -77.04}
    values.update(overrides)
    return Settings(**values)


@pytest.mark.parametrize("requested", [None, "", "  "])
def test_resolve_requested_date_defaults_to_today(requested) -> None:
    assert resolve_requested_date(requested, TODAY) == TODAY


@pytest.mark.parametrize(
    "requested",
    ["2026-06-12", "June 12, 2026", date(2026, 6, 12), datetime(2026, 6, 12, 18, 30)],
)
def test_resolve_requested_date_accepts_loose_formats(requested) -> None:
    assert resolve_requested_date(requested, TODAY) == date(2026, 6, 12)


def test_resolve_requested_date_accepts_last_day_of_horizon() -> None:
    assert resolve_requested_date("2026-06-17", TODAY) == date(2026, 6, 17)


def test_resolve_requested_date_rejects_far_future() -> None:
    with pytest.raises(InputValidationError, match="7 days"):
        resolve_requested_date("2026-06-18", TODAY)


def test_resolve_requested_date_rejects_past() -> None:
    with pytest.raises(InputValidationError, match="past"):
        resolve_requested_date("2026-06-09", TODAY)


def test_resolve_requested_date_rejects_garbage() -> None:
    with pytest.raises(InputValidationError, match="valid date"):
        resolve_requested_date("not a date at all", TODAY)


def test_slice_hours_for_date_returns_contiguous_run() -> None:
    payload = normalize_payload(onecall_payload(START))

    hours = slice_hours_for_date(payload["hourly"], date(2026, 6, 11), TZ)

    assert len(hours) == 24
    assert hours[0].time == START + 24 * 3600


def test_slice_hours_for_date_stops_after_first_run() -> None:
    samples = [
        WeatherSample(time=START + 22 * 3600),
        WeatherSample(time=START + 23 * 3600),
        WeatherSample(time=START + 24 * 3600),
        WeatherSample(time=START + 1 * 3600),
    ]

    hours = slice_hours_for_date(samples, TODAY, TZ)

    assert [sample.time for sample in hours] == [START + 22 * 3600, START + 23 * 3600]


def test_with_hourly_peak_fills_peak_from_wettest_hour() -> None:
    daily = WeatherSample(time=START + 12 * 3600, kind="daily")
    hours = [
        WeatherSample(time=START + 9 * 3600, rain=0.4),
        WeatherSample(time=START + 10 * 3600, rain=1.8),
        WeatherSample(time=START + 11 * 3600, rain=1.8),
    ]

    updated = with_hourly_peak(daily, hours)

    assert updated.precip_intensity_max == 1.8
    assert updated.precip_intensity_max_time == START + 10 * 3600
    assert with_hourly_peak(daily, [WeatherSample(time=START)]) is daily


def test_quiet_day_still_gets_temperature_narrative() -> None:
    payload = normalize_payload(onecall_payload(START))

    report = build_forecast_report(payload, TODAY, now=MORNING)

    daily = report["daily_summary"]
    assert report["date"] == "2026-06-10"
    assert daily["conditions"] == {}
    assert daily["forecast"] == (
        "Looks like today will be pretty quiet weather wise. "
        "The low today will be 55 degrees and you should expect a high around 75 later in the day."
    )
    assert daily["data"]["temp_max"] == 75.0
    assert report["detail"]["forecast"] == (
        "Looks like today will be pretty quiet weather wise. "
        "You'll see a high of 75 degrees today around 2 pm. It'll be about 71 at the end of the work day."
    )
    assert len(report["detail"]["data"]) == 24
    assert report["currently"]["forecast"] == "It's currently 68 degrees."


def test_quiet_afternoon_mentions_rest_of_day() -> None:
    payload = normalize_payload(onecall_payload(START))

    report = build_forecast_report(payload, TODAY, now=AFTERNOON)

    assert report["daily_summary"]["forecast"].startswith("Looks like the rest of today will be pretty quiet.")


def test_tomorrow_has_detail_but_no_current_conditions() -> None:
    payload = normalize_payload(onecall_payload(START))

    report = build_forecast_report(payload, date(2026, 6, 11), now=MORNING)

    assert report["currently"] is None
    assert report["detail"] is not None
    assert "tomorrow" in report["daily_summary"]["forecast"]


def test_later_in_the_week_is_daily_only_with_weekday_label() -> None:
    payload = normalize_payload(onecall_payload(START))

    report = build_forecast_report(payload, date(2026, 6, 13), now=MORNING)

    assert report["currently"] is None
    assert report["detail"] is None
    assert "Looks like Saturday will be pretty quiet weather wise." in report["daily_summary"]["forecast"]
    assert "{day}" not in report["daily_summary"]["forecast"]


def test_rainy_day_leads_with_rain_headline() -> None:
    payload = normalize_payload(onecall_payload(START, **RAINY_DAY))

    report = build_forecast_report(payload, TODAY, now=MORNING, rng=random.Random(7))

    daily = report["daily_summary"]
    rain_text = "You should expect moderate rain peaking around 1pm. There is a 70 percent chance overall."
    headlines = [render_day(headline, "today") for headline in rain_narrator.HEADLINES]
    assert any(daily["forecast"].startswith(headline + " " + rain_text) for headline in headlines)
    assert daily["conditions"] == {"rain": rain_text}
    assert daily["data"]["precip_intensity_max"] == 3.0

    detail = report["detail"]
    assert "Chances for rain are pretty steady from about 1pm through 4pm." in detail["forecast"]
    assert "The heaviest bit should be around 4pm." in detail["conditions"]["rain"]


def test_current_report_lists_conditions_and_active_alerts() -> None:
    now_ts = START + 8 * 3600
    current = {
        "dt": now_ts,
        "temp": 72.4,
        "feels_like": 76.0,
        "dew_point": 50.0,
        "humidity": 60,
        "weather": [{"id": 501, "main": "Rain"}],
    }
    alerts = [
        {"event": "Flood Watch", "start": START, "end": START + 86400, "description": "Flooding possible."},
        {"event": "Flood Watch", "start": START, "end": START + 86400, "description": "Flooding possible."},
        {"event": "Heat Advisory", "start": START + 3600, "end": START + 20 * 3600, "description": ""},
        {"event": "Wind Advisory", "start": START + 20 * 3600, "end": START + 30 * 3600, "description": ""},
    ]
    payload = normalize_payload(onecall_payload(START, current=current, alerts=alerts))

    currently = build_forecast_report(payload, TODAY, now=MORNING)["currently"]

    assert currently["conditions"] == {"rain": "moderate rain"}
    assert currently["forecast"] == (
        "It's currently 72 degrees with moderate rain. It feels more like 76. "
        "There's an active Flood Watch and Heat Advisory for your area."
    )


def test_topic_without_narrator_is_skipped() -> None:
    payload = normalize_payload(onecall_payload(START, **RAINY_DAY))

    report = build_forecast_report(
        payload,
        TODAY,
        now=MORNING,
        narrators={"temperature": NARRATORS["temperature"]},
    )

    assert report["daily_summary"]["conditions"] == {}
    assert report["daily_summary"]["forecast"].startswith("Looks like today will be pretty quiet weather wise.")


def test_missing_daily_sample_is_an_upstream_error() -> None:
    payload = normalize_payload(onecall_payload(START, days=1))

    with pytest.raises(UpstreamDataError):
        build_forecast_report(payload, date(2026, 6, 11), now=MORNING)


def test_get_weather_for_date_fetches_configured_location() -> None:
    client = _FakeForecastClient(onecall_payload(START))

    report = asyncio.run(get_weather_for_date("2026-06-11", settings=_settings(), client=client, now=MORNING))

    assert report["date"] == "2026-06-11"
    assert client.calls == [{"latitude": 38.9, "longitude": -77.04}]


def test_get_weather_for_date_validates_before_fetching() -> None:
    client = _FakeForecastClient(onecall_payload(START))

    with pytest.raises(ConfigurationError, match="API key"):
        asyncio.run(get_weather_for_date(settings=_settings(api_key=None), client=client, now=MORNING))
    with pytest.raises(ConfigurationError, match="Latitude and longitude"):
        asyncio.run(get_weather_for_date(settings=_settings(latitude=None), client=client, now=MORNING))
    with pytest.raises(InputValidationError, match="valid date"):
        asyncio.run(get_weather_for_date("someday", settings=_settings(), client=client, now=MORNING))

    assert client.calls == []


def test_get_weather_for_date_rejects_past_dates() -> None:
    client = _FakeForecastClient(onecall_payload(START))

    with pytest.raises(InputValidationError, match="past"):
        asyncio.run(get_weather_for_date("2026-06-01", settings=_settings(), client=client, now=MORNING))


def test_default_date_is_today_in_the_forecast_timezone_west_of_utc() -> None:
    # 9pm in Washington is already the next day in UTC.
    evening = datetime.fromtimestamp(START + 21 * 3600, tz=timezone.utc)
    client = _FakeForecastClient(onecall_payload(START))

    report = asyncio.run(get_weather_for_date(settings=_settings(), client=client, now=evening))

    assert report["date"] == "2026-06-10"
    assert report["currently"] is not None
    assert report["detail"] is not None
    assert report["daily_summary"]["forecast"].startswith("Looks like the rest of today will be pretty quiet.")


def test_default_date_is_today_in_the_forecast_timezone_east_of_utc() -> None:
    tokyo_start = local_timestamp(2026, 6, 11, tz="Asia/Tokyo")
    # 5am in Tokyo is still the previous day in UTC.
    early = datetime.fromtimestamp(tokyo_start + 5 * 3600, tz=timezone.utc)
    client = _FakeForecastClient(onecall_payload(tokyo_start, tz="Asia/Tokyo"))

    report = asyncio.run(get_weather_for_date(settings=_settings(), client=client, now=early))

    assert report["date"] == "2026-06-11"
    assert report["currently"] is not None
    assert "today" in report["daily_summary"]["forecast"]

    with pytest.raises(InputValidationError, match="past"):
        asyncio.run(get_weather_for_date("2026-06-10", settings=_settings(), client=client, now=early))
    last_day = asyncio.run(get_weather_for_date("2026-06-18", settings=_settings(), client=client, now=early))
    assert last_day["date"] == "2026-06-18"
