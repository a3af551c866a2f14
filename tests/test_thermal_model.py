"""Tests for motor load, temperature lag and oil viscosity."""

import math

import pytest

from spindlesim.simulation.thermal import (
    motor_load,
    oil_viscosity,
    relax_temperature,
    target_temperature,
)


class TestMotorLoad:
    def test_idle_load(self):
        assert motor_load(3000.0, 0.0) == pytest.approx(20.0)

    def test_cutting_load(self):
        assert motor_load(3000.0, 500.0) == pytest.approx(80.0)

    def test_jitter_added(self):
        assert motor_load(3000.0, 0.0, jitter=1.5) == pytest.approx(21.5)

    def test_clamped(self):
        assert motor_load(4500.0, 2000.0) == 100.0
        assert motor_load(0.0, 0.0) == 0.0


class TestTemperature:
    def test_dry_target_follows_load(self):
        assert target_temperature(50.0, coolant_active=False) == pytest.approx(62.0)

    def test_coolant_target(self):
        assert target_temperature(90.0, coolant_active=True) == pytest.approx(27.0)

    def test_first_order_lag(self):
        t = relax_temperature(45.0, 50.0, coolant_active=False)
        assert t == pytest.approx(45.0 + (62.0 - 45.0) * 0.002)

    def test_coolant_cools_faster(self):
        dry = relax_temperature(60.0, 20.0, coolant_active=False)
        wet = relax_temperature(60.0, 20.0, coolant_active=True)
        assert 60.0 - wet > 60.0 - dry

    def test_converges(self):
        t = 45.0
        for _ in range(500):
            t = relax_temperature(t, 90.0, coolant_active=True)
        assert t == pytest.approx(27.0, abs=1e-6)


class TestViscosity:
    def test_reference_point(self):
        assert oil_viscosity(25.0) == pytest.approx(150.0)

    def test_at_40c(self):
        assert oil_viscosity(40.0) == pytest.approx(150.0 * math.exp(-0.525))

    def test_thins_with_heat(self):
        assert oil_viscosity(80.0) < oil_viscosity(45.0) < oil_viscosity(25.0)
        assert oil_viscosity(200.0) > 0.0
