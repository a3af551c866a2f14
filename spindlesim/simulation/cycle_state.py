"""Work-cycle state machine: IDLE -> RAPID_DOWN -> CUTTING -> RETRACT -> RAPID_DOWN."""

from dataclasses import dataclass

import numpy as np

from spindlesim.config.constants import (
    BOTTOM_Z,
    CUT_VELOCITY,
    CUTTING_FORCE_JITTER,
    PHASE_CUTTING,
    PHASE_IDLE,
    PHASE_RAPID_DOWN,
    PHASE_RETRACT,
    RAPID_VELOCITY,
    RETRACT_VELOCITY,
    RETRACT_Z,
    WORKPIECE_Z,
)
from spindlesim.config.schema import ControllerCommand, MachineParameters


@dataclass(frozen=True)
class AxisDemand:
    """What the cycle asks of the axis and the tool for one tick."""

    phase: str               # phase after this tick's transition check
    target_velocity: float   # m/s, positive downward
    cutting_force: float     # N


def advance_cycle(
    phase: str,
    z_pos: float,
    command: ControllerCommand,
    params: MachineParameters,
    rng: np.random.Generator,
) -> AxisDemand:
    """Evaluate the cycle for one tick.

    The transition check uses the position at the start of the tick, and the
    target velocity belongs to the phase the tick started in. With the cycle
    inactive (feed hold) the phase is kept and nothing moves or cuts.
    """
    if not command.cycle_active:
        return AxisDemand(phase=phase, target_velocity=0.0, cutting_force=0.0)

    feed = command.feed_override
    target_velocity = 0.0
    cutting_force = 0.0
    next_phase = phase

    if phase == PHASE_IDLE:
        next_phase = PHASE_RAPID_DOWN
    elif phase == PHASE_RAPID_DOWN:
        target_velocity = RAPID_VELOCITY * feed
        if z_pos >= WORKPIECE_Z:
            next_phase = PHASE_CUTTING
    elif phase == PHASE_CUTTING:
        target_velocity = CUT_VELOCITY * feed
        # Force rises with feed rate
        cutting_force = params.base_force * feed * (1.0 + rng.uniform(0.0, CUTTING_FORCE_JITTER))
        if z_pos >= BOTTOM_Z:
            next_phase = PHASE_RETRACT
    elif phase == PHASE_RETRACT:
        target_velocity = RETRACT_VELOCITY
        if z_pos <= RETRACT_Z:
            next_phase = PHASE_RAPID_DOWN
    else:
        raise ValueError(f"Unknown cycle phase {phase!r}")

    return AxisDemand(
        phase=next_phase,
        target_velocity=target_velocity,
        cutting_force=cutting_force,
    )
