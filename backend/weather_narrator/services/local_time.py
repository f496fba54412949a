from __future__ import annotations

from datetime import date, datetime, timedelta

import pytz


DAYS_OF_WEEK = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def local_datetime(timestamp: int | float, timezone_name: str) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=pytz.timezone(timezone_name))


def local_date(timestamp: int | float, timezone_name: str) -> date:
    return local_datetime(timestamp, timezone_name).date()


def local_hour(timestamp: int | float, timezone_name: str) -> int:
    return local_datetime(timestamp, timezone_name).hour


def hour_label(timestamp: int | float, timezone_name: str, *, spaced: bool = False) -> str:
    """Format a timestamp as a spoken clock hour: "3pm", or "3 pm" when spaced."""
    return clock_hour_label(local_hour(timestamp, timezone_name), spaced=spaced)


def clock_hour_label(hour: int, *, spaced: bool = False) -> str:
    display = hour % 12 or 12
    suffix = "am" if hour % 24 < 12 else "pm"
    return f"{display} {suffix}" if spaced else f"{display}{suffix}"


def hour_axis(timestamps: list[int], timezone_name: str) -> list[float]:
    """Hour-of-day values for a series, kept increasing across midnight."""
    if not timestamps:
        return []
    first = local_hour(timestamps[0], timezone_name)
    return [first + (stamp - timestamps[0]) / 3600 for stamp in timestamps]


def day_label(target: date, today: date) -> str:
    if target == today:
        return "today"
    if target == today + timedelta(days=1):
        return "tomorrow"
    if today <= target < today + timedelta(days=7):
        return DAYS_OF_WEEK[target.weekday()]
    return "that day"
