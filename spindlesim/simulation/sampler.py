"""Drives the integrator at the fixed logical rate and keeps the telemetry buffer."""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

import numpy as np

from spindlesim.config.constants import (
    DT,
    SENSOR_HEALTH_DEFAULT,
    SENSOR_STATUS_DEFAULT,
    TELEMETRY_CAPACITY,
)
from spindlesim.config.schema import ControllerCommand, MachineParameters
from spindlesim.simulation.integrator import (
    SimulationState,
    TelemetrySample,
    initial_state,
    step,
)
from spindlesim.storage.ring_buffer import TelemetryBuffer

# Readout published before the first sample exists
GATEWAY_DEFAULTS: Dict[str, float] = {
    "rpm": 0.0,
    "motor_load": 0.0,
    "temperature": 25.0,
    "displacement": 0.0,
    "viscosity": 68.0,
}


@dataclass(frozen=True)
class MachineStateView:
    """Published machine state for consumers (displays, gateways)."""

    t: float
    z_pos: float
    vibration: float
    phase: str
    wear: float
    sensor_health: float = SENSOR_HEALTH_DEFAULT
    sensor_status: str = SENSOR_STATUS_DEFAULT


class TelemetrySampler:
    """Single writer for the simulation state and the telemetry ring buffer.

    Commands and parameters set between ticks take effect on the next tick;
    a tick is never interrupted.
    """

    def __init__(
        self,
        params: MachineParameters,
        command: Optional[ControllerCommand] = None,
        seed: int = 0,
        capacity: int = TELEMETRY_CAPACITY,
        dt: float = DT,
    ):
        self.params = params
        self.dt = dt
        self.buffer = TelemetryBuffer(capacity)
        self._command = (command or ControllerCommand()).clamped()
        self._state = initial_state()
        self._rng = np.random.default_rng(seed)
        self.tick_count = 0

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def command(self) -> ControllerCommand:
        return self._command

    @property
    def sample_rate(self) -> float:
        return 1.0 / self.dt

    def set_command(self, command: ControllerCommand) -> None:
        self._command = command.clamped()

    def update_command(self, **changes) -> None:
        self.set_command(replace(self._command, **changes))

    def tick(self) -> TelemetrySample:
        """Advance one step and append the resulting sample."""
        self._state, sample = step(self._state, self.params, self._command, self._rng, self.dt)
        self.buffer.append(sample)
        self.tick_count += 1
        return sample

    def run(self, n_ticks: int) -> List[TelemetrySample]:
        return [self.tick() for _ in range(n_ticks)]

    def snapshot(self, last: Optional[int] = None) -> np.ndarray:
        return self.buffer.snapshot(last)

    def machine_state(self) -> MachineStateView:
        return MachineStateView(
            t=self._state.t,
            z_pos=self._state.z_pos,
            vibration=self._state.vibration,
            phase=self._state.phase,
            wear=self._state.wear,
        )

    def gateway_snapshot(self) -> Dict[str, float]:
        return gateway_snapshot(self.buffer)


def gateway_snapshot(buffer: TelemetryBuffer) -> Dict[str, float]:
    """Latest rpm, load, temperature, displacement and viscosity.

    Falls back to GATEWAY_DEFAULTS when the buffer is empty.
    """
    latest = buffer.latest_sample()
    if latest is None:
        return dict(GATEWAY_DEFAULTS)
    return {name: getattr(latest, name) for name in GATEWAY_DEFAULTS}
