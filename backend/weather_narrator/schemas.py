from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class NarrativeReport(BaseModel):
    data: Any = Field(default=None, description="Normalized sample(s) the narrative was built from.")
    conditions: dict[str, str] = Field(default_factory=dict)
    forecast: str = ""


class ForecastReportResponse(BaseModel):
    date: str = Field(description="Requested local date, YYYY-MM-DD.")
    currently: NarrativeReport | None = None
    daily_summary: NarrativeReport
    detail: NarrativeReport | None = None
