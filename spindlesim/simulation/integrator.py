"""Fixed-step integrator for the spindle digital twin.

One call to ``step`` advances the machine by DT:

1. Cycle state machine -> axis target velocity and cutting force.
2. Vibration response from the prior wear and axis position.
3. Motor load, temperature lag, oil viscosity.
4. Axis kinematics (exponential approach to the target velocity).
5. Wear accumulation while cutting hard.

The state is an immutable value owned by the caller. ``step`` returns a new
state plus the telemetry sample for the tick and never mutates its inputs.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from spindlesim.config.constants import (
    AXIS_KP,
    AXIS_TRACKING_GAIN,
    BOTTOM_Z,
    DT,
    INITIAL_TEMP,
    LOAD_JITTER_PCT,
    PHASE_IDLE,
    RPM_JITTER,
    SCREW_PITCH,
    WEAR_FORCE_THRESHOLD,
    WEAR_INCREMENT,
)
from spindlesim.config.schema import ControllerCommand, MachineParameters
from spindlesim.simulation.cycle_state import advance_cycle
from spindlesim.simulation.thermal import motor_load, oil_viscosity, relax_temperature
from spindlesim.simulation.vibration import vibration_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationState:
    t: float = 0.0
    z_pos: float = 0.0          # m, 0 = top of travel
    z_vel: float = 0.0          # m/s
    phase: str = PHASE_IDLE
    temperature: float = INITIAL_TEMP
    wear: float = 0.0           # 0 (new) to 1 (worn out)
    vibration: float = 0.0      # last displacement (m)


@dataclass(frozen=True)
class TelemetrySample:
    timestamp: float
    displacement: float   # m
    velocity: float       # m/s
    acceleration: float   # m/s²
    z_pos: float          # m
    torque: float         # Nm
    rpm: float
    motor_load: float     # %
    temperature: float    # °C
    viscosity: float      # cSt


TELEMETRY_FIELDS = [
    "timestamp", "displacement", "velocity", "acceleration", "z_pos",
    "torque", "rpm", "motor_load", "temperature", "viscosity",
]


def initial_state() -> SimulationState:
    return SimulationState()


def step(
    state: SimulationState,
    params: MachineParameters,
    command: ControllerCommand,
    rng: np.random.Generator,
    dt: float = DT,
) -> Tuple[SimulationState, TelemetrySample]:
    """Advance the simulation by one tick.

    Args:
        state: State at the start of the tick.
        params: Machine parameters (validated upstream).
        command: Controller command in force for this tick.
        rng: Random number generator for force jitter and sensor noise.
        dt: Tick length in seconds.

    Returns:
        (new_state, sample) for the end of the tick.
    """
    rpm = command.rpm
    demand = advance_cycle(state.phase, state.z_pos, command, params, rng)
    if demand.phase != state.phase:
        logger.debug(f"t={state.t:.3f}s z={state.z_pos:.4f}m: {state.phase} -> {demand.phase}")

    # Vibration reads the wear and extension from the start of the tick
    vib = vibration_response(
        t=state.t,
        phase=demand.phase,
        cycle_active=command.cycle_active,
        rpm=rpm,
        cutting_force=demand.cutting_force,
        wear=state.wear,
        z_pos=state.z_pos,
        mass=params.mass,
        stiffness=params.stiffness,
        damping=params.damping,
        noise_level=params.noise_level,
        coolant_active=command.coolant_active,
        rng=rng,
    )

    load = motor_load(rpm, demand.cutting_force, rng.uniform(0.0, LOAD_JITTER_PCT))
    temperature = relax_temperature(state.temperature, load, command.coolant_active)
    viscosity = oil_viscosity(temperature)

    if command.cycle_active:
        error = demand.target_velocity - state.z_vel
        z_vel = state.z_vel + error * AXIS_TRACKING_GAIN
        z_pos = min(BOTTOM_Z, max(0.0, state.z_pos + z_vel * dt))
    else:
        # Feed hold: the axis is stopped where it stands
        error = 0.0
        z_vel = 0.0
        z_pos = state.z_pos
    motor_force = error * AXIS_KP * params.mass
    torque = motor_force * SCREW_PITCH / (2.0 * math.pi)

    wear = state.wear
    if demand.cutting_force > WEAR_FORCE_THRESHOLD:
        wear = min(1.0, wear + WEAR_INCREMENT)

    t = state.t + dt
    new_state = replace(
        state,
        t=t,
        z_pos=z_pos,
        z_vel=z_vel,
        phase=demand.phase,
        temperature=temperature,
        wear=wear,
        vibration=vib.displacement,
    )
    sample = TelemetrySample(
        timestamp=t,
        displacement=vib.displacement,
        velocity=vib.velocity,
        acceleration=vib.acceleration,
        z_pos=z_pos,
        torque=torque,
        rpm=rpm + rng.uniform(0.0, RPM_JITTER),
        motor_load=load,
        temperature=temperature,
        viscosity=viscosity,
    )
    return new_state, sample
