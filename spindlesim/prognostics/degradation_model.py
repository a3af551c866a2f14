"""Exponential degradation rate for the spindle bearing.

    λ = stress(status) × (1 + a_rms / 10) × sqrt(ν_ref / max(ν_floor, ν)) × max(1, T / T_ref)

Thin oil (high temperature, low viscosity) and a hot bearing both speed up
degradation; neither factor can slow it below the status-driven baseline
except viscosity above the reference grade.
"""

import math

from spindlesim.config.constants import (
    ACCELERATION_STRESS_SCALE,
    REFERENCE_TEMPERATURE,
    REFERENCE_VISCOSITY,
    STRESS_FACTORS,
    VISCOSITY_FLOOR,
)


def stress_factor(status: str) -> float:
    return STRESS_FACTORS[status]


def viscosity_factor(viscosity: float) -> float:
    return math.sqrt(REFERENCE_VISCOSITY / max(VISCOSITY_FLOOR, viscosity))


def temperature_factor(temperature: float) -> float:
    return max(1.0, temperature / REFERENCE_TEMPERATURE)


def decay_rate(
    status: str,
    rms_acceleration: float,
    viscosity: float,
    temperature: float,
) -> float:
    """Growth rate λ (per scaled second) of the monitored vibration level."""
    return (
        stress_factor(status)
        * (1.0 + rms_acceleration / ACCELERATION_STRESS_SCALE)
        * viscosity_factor(viscosity)
        * temperature_factor(temperature)
    )
