"""Remaining-useful-life estimation from the RMS vibration velocity trend.

The monitored value is the RMS vibration velocity in mm/s (ISO 10816 scale),
estimated from the windowed peak velocity. It is assumed to grow as

    V(Δt) = V0 · exp(λ · 0.1 · Δt)

so the time to reach the critical limit has the closed form

    t = ln(limit / V0) / (λ · 0.1)

Degenerate cases never yield a negative or NaN time: V0 at or above the limit
gives 0, and λ <= 0, too little history, or a crossing beyond the horizon
give RUL_STABLE.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from spindlesim.analytics.health import HealthStatistics
from spindlesim.config.constants import (
    FORECAST_STEP_SECONDS,
    FORECAST_STEPS,
    REFERENCE_TEMPERATURE,
    REFERENCE_VISCOSITY,
    RMS_FROM_PEAK,
    RUL_CRITICAL_LIMIT,
    RUL_MAX_SECONDS,
    RUL_MIN_HISTORY,
    RUL_MIN_START_VALUE,
    RUL_STABLE,
    RUL_TIME_SCALE,
    TREND_CAPACITY,
    TREND_INTERVAL,
)
from spindlesim.prognostics.degradation_model import decay_rate
from spindlesim.simulation.integrator import TelemetrySample
from spindlesim.storage.ring_buffer import TrendHistory


@dataclass(frozen=True)
class Forecast:
    times: np.ndarray          # s from now
    values: np.ndarray         # mm/s
    time_to_failure: float     # first forecast time at or over the limit, else RUL_STABLE


@dataclass(frozen=True)
class RulEstimate:
    current_value: float       # mm/s
    decay_rate: float          # λ
    rul_seconds: float         # closed-form estimate, RUL_STABLE if none
    forecast: Optional[Forecast]

    @property
    def is_stable(self) -> bool:
        return math.isinf(self.rul_seconds)


def rms_velocity_mm_s(peak_velocity: float) -> float:
    """RMS velocity (mm/s) from a peak velocity (m/s), sinusoidal assumption."""
    return peak_velocity * 1000.0 * RMS_FROM_PEAK


def remaining_useful_life(
    current_value: float,
    rate: float,
    limit: float = RUL_CRITICAL_LIMIT,
    max_seconds: float = RUL_MAX_SECONDS,
) -> float:
    """Closed-form time until the value crosses ``limit``."""
    if current_value >= limit:
        return 0.0
    if not rate > 0:
        return RUL_STABLE
    start = max(RUL_MIN_START_VALUE, current_value)
    t = math.log(limit / start) / (rate * RUL_TIME_SCALE)
    if t > max_seconds:
        return RUL_STABLE
    return max(0.0, t)


def forecast_curve(
    current_value: float,
    rate: float,
    limit: float = RUL_CRITICAL_LIMIT,
    steps: int = FORECAST_STEPS,
    step_seconds: float = FORECAST_STEP_SECONDS,
) -> Forecast:
    """Evaluate V(Δt) at ``steps`` future points and find the first crossing."""
    times = np.arange(steps + 1, dtype=np.float64) * step_seconds
    # Same start floor as remaining_useful_life so the two agree
    start = max(RUL_MIN_START_VALUE, current_value)
    if not rate > 0:
        values = np.full_like(times, start)
    else:
        exponent = np.minimum(rate * RUL_TIME_SCALE * times, 700.0)
        values = start * np.exp(exponent)
    crossed = values >= limit

    if current_value >= limit:
        time_to_failure = 0.0
    elif rate > 0 and crossed.any():
        time_to_failure = float(times[np.argmax(crossed)])
    else:
        time_to_failure = RUL_STABLE
    return Forecast(times=times, values=values, time_to_failure=time_to_failure)


class RulEstimator:
    """Keeps the trend history and turns health statistics into an RUL."""

    def __init__(
        self,
        limit: float = RUL_CRITICAL_LIMIT,
        interval: float = TREND_INTERVAL,
        capacity: int = TREND_CAPACITY,
        min_history: int = RUL_MIN_HISTORY,
    ):
        self.limit = limit
        self.interval = interval
        self.min_history = min_history
        self.history = TrendHistory(capacity)

    def record(self, t: float, stats: HealthStatistics) -> bool:
        """Append a trend record when ``t`` enters a new time bucket.

        Returns True if a record was added.
        """
        bucket = math.floor(t / self.interval) * self.interval
        last = self.history.last_time
        if last is not None and bucket <= last:
            return False
        self.history.append(bucket, rms_velocity_mm_s(stats.peak_velocity))
        return True

    def estimate(
        self,
        stats: HealthStatistics,
        latest: Optional[TelemetrySample] = None,
        with_forecast: bool = True,
    ) -> RulEstimate:
        viscosity = latest.viscosity if latest is not None else REFERENCE_VISCOSITY
        temperature = latest.temperature if latest is not None else REFERENCE_TEMPERATURE

        v0 = rms_velocity_mm_s(stats.peak_velocity)
        rate = decay_rate(stats.status, stats.rms_acceleration, viscosity, temperature)

        # Over the limit is failure regardless of how much history exists
        if v0 < self.limit and len(self.history) < self.min_history:
            return RulEstimate(current_value=v0, decay_rate=rate, rul_seconds=RUL_STABLE, forecast=None)

        rul = remaining_useful_life(v0, rate, self.limit)
        forecast = forecast_curve(v0, rate, self.limit) if with_forecast else None
        return RulEstimate(current_value=v0, decay_rate=rate, rul_seconds=rul, forecast=forecast)


def format_rul(rul_seconds: float) -> str:
    """Operator display: '> 48h' when stable, otherwise minutes."""
    if math.isinf(rul_seconds):
        return "> 48h"
    return f"{rul_seconds / 60.0:.1f} min"
