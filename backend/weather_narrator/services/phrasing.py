from __future__ import annotations

import math
import re
from typing import Iterable


DAY_PLACEHOLDER = "{day}"

_WHITESPACE = re.compile(r"\s+")


def render_day(text: str, day: str) -> str:
    """Substitute the one placeholder narrative templates carry."""
    return text.replace(DAY_PLACEHOLDER, day)


def whole(value: float) -> int:
    """Round half up, the way spoken numbers are expected to round."""
    return int(math.floor(value + 0.5))


def percent(probability: float) -> int:
    return whole(probability * 100)


def join_sentences(parts: Iterable[str]) -> str:
    text = " ".join(part.strip() for part in parts if part and part.strip())
    return _WHITESPACE.sub(" ", text).strip()


def join_words(items: list[str]) -> str:
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"
