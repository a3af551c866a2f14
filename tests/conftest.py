"""Shared test fixtures."""

import numpy as np
import pytest

from spindlesim.config.schema import ControllerCommand, MachineParameters
from spindlesim.simulation.integrator import TelemetrySample


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def default_params():
    return MachineParameters.default()


@pytest.fixture
def quiet_params():
    """Default machine with the sensor noise switched off."""
    return MachineParameters(noise_level=0.0)


@pytest.fixture
def running_command():
    return ControllerCommand(cycle_active=True)


@pytest.fixture
def held_command():
    return ControllerCommand(cycle_active=False)


@pytest.fixture
def make_sample():
    """Factory for telemetry samples with neutral defaults."""
    def _make(timestamp=0.005, velocity=0.0, motor_load=20.0, temperature=45.0, **kwargs):
        values = dict(
            timestamp=timestamp, displacement=0.0, velocity=velocity, acceleration=0.0,
            z_pos=0.0, torque=0.0, rpm=3000.0, motor_load=motor_load,
            temperature=temperature, viscosity=68.0,
        )
        values.update(kwargs)
        return TelemetrySample(**values)
    return _make
