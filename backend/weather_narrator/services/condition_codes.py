from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


CONDITION_CODES_PATH = Path(__file__).resolve().parent / "condition_codes.json"


@dataclass(frozen=True)
class ConditionCode:
    category: str
    level: float
    description: str


@lru_cache(maxsize=4)
def load_condition_codes(path: str | None = None) -> dict[int, ConditionCode]:
    """Read the condition table once; the result is shared read-only."""
    source = Path(path) if path else CONDITION_CODES_PATH
    raw = json.loads(source.read_text(encoding="utf-8"))
    return {
        int(code): ConditionCode(
            category=str(entry["category"]),
            level=float(entry["level"]),
            description=str(entry["description"]),
        )
        for code, entry in raw.items()
    }


def describe(code: int | None, codes: dict[int, ConditionCode] | None = None) -> str | None:
    if code is None:
        return None
    entry = (codes or load_condition_codes()).get(code)
    return entry.description if entry else None
