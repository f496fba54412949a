from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from weather_narrator.config import NarrationConfig


INCREASING = "increasing"
DECREASING = "decreasing"
STEADY = "steady"

CLIMBING = "climbing"
FALLING = "falling"
MIDDAY_PEAK = "midday_peak"


@dataclass(frozen=True)
class TrendFit:
    slope: float
    intercept: float
    slope_error: float
    intercept_error: float

    def value_at(self, x: float) -> float:
        return self.intercept + self.slope * x


def fit_trend(xs: Sequence[float], ys: Sequence[float]) -> TrendFit:
    """Ordinary least-squares line through ``(xs, ys)`` with standard errors.

    With fewer than three points the errors are infinite, since the residual
    variance cannot be estimated.
    """
    if len(xs) != len(ys):
        raise ValueError("x and y series must be the same length")
    if not xs:
        raise ValueError("at least one point is required to fit a trend")

    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    n = x.size

    if n == 1 or np.ptp(x) == 0:
        return TrendFit(slope=0.0, intercept=float(y.mean()), slope_error=math.inf, intercept_error=math.inf)

    sum_x = x.sum()
    sum_xx = (x * x).sum()
    delta = n * sum_xx - sum_x * sum_x
    slope = (n * (x * y).sum() - sum_x * y.sum()) / delta
    intercept = (y.sum() - slope * sum_x) / n

    if n < 3:
        return TrendFit(slope=float(slope), intercept=float(intercept), slope_error=math.inf, intercept_error=math.inf)

    residuals = y - (intercept + slope * x)
    variance = float((residuals * residuals).sum()) / (n - 2)
    return TrendFit(
        slope=float(slope),
        intercept=float(intercept),
        slope_error=math.sqrt(n * variance / delta),
        intercept_error=math.sqrt(variance * sum_xx / delta),
    )


def classify_trend(
    fit: TrendFit,
    domain_min: float,
    domain_max: float,
    config: NarrationConfig | None = None,
) -> str | None:
    """Direction of the fitted line across the domain, or None when unsure.

    A loose fit never yields a trend. Changes between the steady and the
    change thresholds are left unclassified.
    """
    config = config or NarrationConfig()
    if fit.slope_error >= config.trend_slope_error_limit or fit.intercept_error >= config.trend_intercept_error_limit:
        return None

    start = fit.value_at(domain_min)
    end = fit.value_at(domain_max)
    if end > start and end - start > config.trend_change_threshold:
        return INCREASING
    if start > end and start - end > config.trend_change_threshold:
        return DECREASING
    if abs(start - end) < config.trend_steady_threshold:
        return STEADY
    return None


def classify_peak_hour(peak_hour: int, config: NarrationConfig | None = None) -> str:
    """Temperature curve shape from the clock hour of the day's maximum."""
    config = config or NarrationConfig()
    if peak_hour > config.temp_climbing_after_hour:
        return CLIMBING
    if peak_hour < config.temp_falling_before_hour:
        return FALLING
    return MIDDAY_PEAK
