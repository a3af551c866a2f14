"""Tests for machine parameters, presets and command schedules."""

import json

import pytest

from spindlesim.config.schema import (
    MACHINE_PRESETS,
    ConfigurationError,
    ControllerCommand,
    MachineParameters,
    command_at,
    load_machine_parameters,
    save_machine_parameters,
)


class TestMachineParameters:
    def test_defaults(self):
        p = MachineParameters.default()
        assert p.mass == 150.0
        assert p.stiffness == 12000.0
        assert p.damping == 200.0
        assert p.base_force == 300.0
        assert p.noise_level == 0.0001

    @pytest.mark.parametrize("field,value", [
        ("mass", 0.0), ("mass", -1.0), ("stiffness", 0.0),
        ("damping", -5.0), ("base_force", -1.0), ("noise_level", -0.1),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ConfigurationError):
            MachineParameters(**{field: value})

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            MachineParameters(mass=0.0)

    def test_presets_all_valid(self):
        for name in MACHINE_PRESETS:
            p = MachineParameters.preset(name)
            assert p.mass > 0 and p.stiffness > 0

    def test_preset_case_insensitive(self):
        assert MachineParameters.preset("chatter") == MachineParameters.preset("CHATTER")

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            MachineParameters.preset("BROKEN")

    def test_frozen(self):
        p = MachineParameters.default()
        with pytest.raises(AttributeError):
            p.mass = 10.0


class TestParameterFiles:
    def test_save_and_load(self, tmp_path):
        path = tmp_path / "machine.json"
        p = MachineParameters.preset("LOOSE")
        save_machine_parameters(path, p)
        assert load_machine_parameters(path) == p

    def test_missing_keys_use_defaults(self, tmp_path):
        path = tmp_path / "machine.json"
        path.write_text(json.dumps({"mass": 50}))
        p = load_machine_parameters(path)
        assert p.mass == 50.0
        assert p.stiffness == 12000.0

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "machine.json"
        path.write_text(json.dumps({"mass": 50, "colour": 3}))
        with pytest.raises(ConfigurationError, match="colour"):
            load_machine_parameters(path)

    def test_invalid_value_rejected(self, tmp_path):
        path = tmp_path / "machine.json"
        path.write_text(json.dumps({"stiffness": -1}))
        with pytest.raises(ConfigurationError):
            load_machine_parameters(path)

    def test_non_object_rejected(self, tmp_path):
        path = tmp_path / "machine.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            load_machine_parameters(path)


class TestControllerCommand:
    def test_rpm_applies_override(self):
        cmd = ControllerCommand(target_rpm=3000.0, spindle_override=1.2)
        assert cmd.rpm == pytest.approx(3600.0)

    def test_clamped(self):
        cmd = ControllerCommand(feed_override=2.0, spindle_override=-0.5, target_rpm=-10.0).clamped()
        assert cmd.feed_override == 1.5
        assert cmd.spindle_override == 0.0
        assert cmd.target_rpm == 0.0

    def test_clamped_returns_copy(self):
        cmd = ControllerCommand(feed_override=2.0)
        cmd.clamped()
        assert cmd.feed_override == 2.0


class TestCommandSchedule:
    def test_command_at(self):
        run = ControllerCommand(cycle_active=True)
        hold = ControllerCommand(cycle_active=False)
        schedule = [(0, run), (100, hold), (150, run)]
        assert command_at(schedule, 0) is run
        assert command_at(schedule, 99) is run
        assert command_at(schedule, 100) is hold
        assert command_at(schedule, 149) is hold
        assert command_at(schedule, 150) is run
        assert command_at(schedule, 10_000) is run
