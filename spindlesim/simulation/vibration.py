"""Lumped single-DOF vibration model of the spindle head.

Displacement is the quasi-static response of the forcing against an effective
stiffness, attenuated by a closed-form damping factor:

    x = F / k_eff * 1 / (1 + c_eff * 0.001) + noise

k_eff falls with wear and with axis extension (a longer overhang is softer).
Velocity and acceleration are steady-state harmonic estimates, x*ω and x*ω²,
not numerical derivatives.
"""

import math
from dataclasses import dataclass

import numpy as np

from spindlesim.config.constants import (
    CHATTER_FORCE_THRESHOLD,
    CHATTER_FRACTION,
    CHATTER_STIFFNESS_THRESHOLD,
    COOLANT_DAMPING_FACTOR,
    CUTTING_HARMONIC,
    CUTTING_VIB_FRACTION,
    DAMPING_REDUCTION_GAIN,
    EXTENSION_FLOOR,
    PHASE_CUTTING,
    PHASE_RETRACT,
    REFERENCE_RPM,
    RETRACT_NOISE_FACTOR,
    UNBALANCE_GAIN,
    UNBALANCE_WEAR_GAIN,
    WEAR_STIFFNESS_FLOOR,
    WEAR_STIFFNESS_LOSS,
)


@dataclass(frozen=True)
class VibrationResponse:
    displacement: float   # m
    velocity: float       # m/s
    acceleration: float   # m/s²
    effective_stiffness: float
    natural_frequency: float
    chatter: bool


def angular_rate(rpm: float) -> float:
    """Spindle angular rate (rad/s) for a speed in rev/min."""
    return 2.0 * math.pi * rpm / 60.0


def effective_stiffness(stiffness: float, wear: float, z_pos: float) -> float:
    """Stiffness after wear loss and extension softening."""
    wear_mult = max(WEAR_STIFFNESS_FLOOR, 1.0 - wear * WEAR_STIFFNESS_LOSS)
    extension = max(EXTENSION_FLOOR, z_pos)
    return stiffness * wear_mult / extension


def natural_frequency(k_eff: float, mass: float) -> float:
    """Undamped natural frequency in Hz."""
    return math.sqrt(k_eff / mass) / (2.0 * math.pi)


def damping_reduction(damping: float, coolant_active: bool) -> float:
    """Attenuation factor in (0, 1]; the coolant film adds 20% damping."""
    c_eff = damping * (COOLANT_DAMPING_FACTOR if coolant_active else 1.0)
    return 1.0 / (1.0 + c_eff * DAMPING_REDUCTION_GAIN)


def vibration_response(
    t: float,
    phase: str,
    cycle_active: bool,
    rpm: float,
    cutting_force: float,
    wear: float,
    z_pos: float,
    mass: float,
    stiffness: float,
    damping: float,
    noise_level: float,
    coolant_active: bool,
    rng: np.random.Generator,
) -> VibrationResponse:
    """Compute the vibration sample for one tick."""
    k_eff = effective_stiffness(stiffness, wear, z_pos)
    f_n = natural_frequency(k_eff, mass)
    omega = angular_rate(rpm)

    # Unbalance at 1x, grows with wear
    unbalance_amp = (rpm / REFERENCE_RPM) * UNBALANCE_GAIN * (1.0 + wear * UNBALANCE_WEAR_GAIN)
    force = unbalance_amp * math.sin(omega * t)

    chatter = False
    if phase == PHASE_CUTTING and cycle_active:
        force += cutting_force * CUTTING_VIB_FRACTION * math.sin(CUTTING_HARMONIC * omega * t)
        # Self-excited chatter near the natural frequency
        if cutting_force > CHATTER_FORCE_THRESHOLD and k_eff < CHATTER_STIFFNESS_THRESHOLD:
            force += cutting_force * CHATTER_FRACTION * math.sin(2.0 * math.pi * f_n * t)
            chatter = True

    noise = rng.uniform(-0.5, 0.5) * noise_level

    # Tool disengaged: no forced response, only the sensor floor
    if phase == PHASE_RETRACT:
        force = 0.0
        noise *= RETRACT_NOISE_FACTOR

    displacement = force / k_eff * damping_reduction(damping, coolant_active) + noise
    velocity = displacement * omega
    acceleration = velocity * omega

    return VibrationResponse(
        displacement=displacement,
        velocity=velocity,
        acceleration=acceleration,
        effective_stiffness=k_eff,
        natural_frequency=f_n,
        chatter=chatter,
    )
