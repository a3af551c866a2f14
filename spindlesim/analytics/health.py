"""Rolling-window health statistics and status classification.

Computed on demand from a telemetry snapshot; nothing here is stored.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from spindlesim.config.constants import (
    DISPLACEMENT_CRITICAL,
    DISPLACEMENT_WARNING,
    HEALTH_WINDOW,
    LOAD_CRITICAL,
    LOAD_WARNING,
    STATUS_CRITICAL,
    STATUS_OPTIMAL,
    STATUS_WARNING,
    VIBRATION_CRITICAL_MM_S,
    VIBRATION_WARNING_MM_S,
    WEAR_REPLACE,
    WEAR_WARN,
)
from spindlesim.config.schema import ControllerCommand


@dataclass(frozen=True)
class HealthStatistics:
    rms_displacement: float    # m
    peak_velocity: float       # m/s
    rms_acceleration: float    # m/s²
    dominant_frequency: float  # Hz, from the commanded speed
    avg_load: float            # %
    status: str


def classify_status(
    vibration: float,
    load: float,
    vibration_limits: Tuple[float, float] = (DISPLACEMENT_WARNING, DISPLACEMENT_CRITICAL),
    load_limits: Tuple[float, float] = (LOAD_WARNING, LOAD_CRITICAL),
) -> str:
    """Two-tier classification: CRITICAL if either metric passes its high
    limit, WARNING if either passes its low limit, otherwise OPTIMAL."""
    vib_warn, vib_crit = vibration_limits
    load_warn, load_crit = load_limits
    if vibration > vib_crit or load > load_crit:
        return STATUS_CRITICAL
    if vibration > vib_warn or load > load_warn:
        return STATUS_WARNING
    return STATUS_OPTIMAL


def classify_cycle_status(max_vibration_mm_s: float, avg_load: float) -> str:
    """Classification for cycle-lifetime peaks (velocity in mm/s)."""
    return classify_status(
        max_vibration_mm_s,
        avg_load,
        vibration_limits=(VIBRATION_WARNING_MM_S, VIBRATION_CRITICAL_MM_S),
    )


def compute_health_statistics(
    snapshot: np.ndarray,
    command: Optional[ControllerCommand] = None,
    window: int = HEALTH_WINDOW,
) -> HealthStatistics:
    """Aggregate the newest ``window`` samples of a telemetry snapshot.

    Args:
        snapshot: Structured telemetry array, oldest first.
        command: Current command; supplies the dominant (1x) frequency.
        window: Number of most recent samples to aggregate.

    Returns:
        HealthStatistics. An empty snapshot gives all-zero metrics and OPTIMAL.
    """
    recent = snapshot[-window:] if window > 0 else snapshot[:0]
    if len(recent) == 0:
        return HealthStatistics(
            rms_displacement=0.0,
            peak_velocity=0.0,
            rms_acceleration=0.0,
            dominant_frequency=0.0,
            avg_load=0.0,
            status=STATUS_OPTIMAL,
        )

    dominant = command.rpm / 60.0 if command is not None else 0.0
    rms_disp = float(np.sqrt(np.mean(recent["displacement"] ** 2)))
    peak_vel = float(np.max(np.abs(recent["velocity"])))
    rms_acc = float(np.sqrt(np.mean(recent["acceleration"] ** 2)))
    avg_load = float(np.mean(recent["motor_load"]))

    return HealthStatistics(
        rms_displacement=rms_disp,
        peak_velocity=peak_vel,
        rms_acceleration=rms_acc,
        dominant_frequency=dominant,
        avg_load=avg_load,
        status=classify_status(rms_disp, avg_load),
    )


def wear_band(wear: float) -> str:
    """Tool-wear band shown to the operator."""
    if wear > WEAR_REPLACE:
        return "REPLACE"
    if wear > WEAR_WARN:
        return "WARN"
    return "GOOD"


def tool_life_remaining_pct(wear: float) -> float:
    return (1.0 - wear) * 100.0
