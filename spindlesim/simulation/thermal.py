"""Bearing/oil temperature and lubricant viscosity.

Temperature follows a first-order lag toward a load-dependent target:

    T += (T_target - T) * rate

Coolant on pins the target near ambient and closes the gap much faster.
"""

import math

from spindlesim.config.constants import (
    AMBIENT_TEMP,
    COOLANT_TARGET_OFFSET,
    CUTTING_LOAD_PCT,
    CUTTING_LOAD_REF_FORCE,
    HEAT_PER_LOAD_PCT,
    IDLE_LOAD_PCT,
    REFERENCE_RPM,
    THERMAL_RATE_COOLANT,
    THERMAL_RATE_DRY,
    VISCOSITY_AT_25C,
    VISCOSITY_TEMP_COEFF,
)


def motor_load(rpm: float, cutting_force: float, jitter: float = 0.0) -> float:
    """Spindle motor load in percent, clamped to [0, 100]."""
    base_load = (rpm / REFERENCE_RPM) * IDLE_LOAD_PCT
    cutting_load = (cutting_force / CUTTING_LOAD_REF_FORCE) * CUTTING_LOAD_PCT
    return min(100.0, max(0.0, base_load + cutting_load + jitter))


def target_temperature(load_pct: float, coolant_active: bool) -> float:
    if coolant_active:
        return AMBIENT_TEMP + COOLANT_TARGET_OFFSET
    return AMBIENT_TEMP + load_pct * HEAT_PER_LOAD_PCT


def relax_temperature(temperature: float, load_pct: float, coolant_active: bool) -> float:
    """Advance the temperature by one tick."""
    target = target_temperature(load_pct, coolant_active)
    rate = THERMAL_RATE_COOLANT if coolant_active else THERMAL_RATE_DRY
    return temperature + (target - temperature) * rate


def oil_viscosity(temperature: float) -> float:
    """Kinematic viscosity (cSt) of the spindle oil at a temperature (°C)."""
    return VISCOSITY_AT_25C * math.exp(-VISCOSITY_TEMP_COEFF * (temperature - 25.0))
