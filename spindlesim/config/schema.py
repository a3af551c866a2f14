"""Dataclass records for machine parameters and controller commands."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Dict, List, Tuple


class ConfigurationError(ValueError):
    """Raised when machine parameters violate a physical invariant."""


@dataclass(frozen=True)
class MachineParameters:
    """Lumped spindle-head parameters, fixed for the duration of a run."""

    mass: float = 150.0          # kg
    stiffness: float = 12000.0   # N/m, axial stiffness of the ball screw
    damping: float = 200.0       # Ns/m
    base_force: float = 300.0    # N, material resistance at 100% feed
    noise_level: float = 0.0001  # sensor noise amplitude (m)

    def __post_init__(self):
        if not self.mass > 0:
            raise ConfigurationError(f"mass must be > 0, got {self.mass}")
        if not self.stiffness > 0:
            raise ConfigurationError(f"stiffness must be > 0, got {self.stiffness}")
        for name in ("damping", "base_force", "noise_level"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")

    @classmethod
    def default(cls) -> MachineParameters:
        return cls()

    @classmethod
    def preset(cls, name: str) -> MachineParameters:
        """Look up a named parameter preset (case-insensitive)."""
        key = name.upper()
        if key not in MACHINE_PRESETS:
            raise ValueError(
                f"Unknown preset {name!r}, expected one of {sorted(MACHINE_PRESETS)}"
            )
        return cls(**MACHINE_PRESETS[key])

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> MachineParameters:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown machine parameters: {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in data.items()})

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


# Parameter sets for common machine conditions. CHATTER pairs a soft head with
# almost no damping so the effective stiffness drops under the chatter limit.
MACHINE_PRESETS: Dict[str, Dict[str, float]] = {
    "DEFAULT":   {"mass": 150.0, "stiffness": 12000.0, "damping": 200.0, "base_force": 300.0, "noise_level": 0.0001},
    "NORMAL":    {"mass": 20.0,  "stiffness": 3000.0,  "damping": 60.0,  "base_force": 300.0, "noise_level": 0.001},
    "LOOSE":     {"mass": 20.0,  "stiffness": 800.0,   "damping": 40.0,  "base_force": 300.0, "noise_level": 0.005},
    "IMBALANCE": {"mass": 20.0,  "stiffness": 3000.0,  "damping": 60.0,  "base_force": 300.0, "noise_level": 0.002},
    "CHATTER":   {"mass": 20.0,  "stiffness": 3000.0,  "damping": 5.0,   "base_force": 300.0, "noise_level": 0.001},
}


def _clip(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


@dataclass
class ControllerCommand:
    """Operator-side controller state, read once per tick."""

    cycle_active: bool = False
    feed_override: float = 1.0      # 0 to 1.5 (150%)
    spindle_override: float = 1.0   # 0 to 1.5 (150%)
    target_rpm: float = 3000.0      # base spindle speed setpoint
    coolant_active: bool = False    # M08 / M09

    @property
    def rpm(self) -> float:
        """Commanded spindle speed after override."""
        return self.target_rpm * self.spindle_override

    def clamped(self) -> ControllerCommand:
        """Copy with overrides and speed clamped to their legal ranges."""
        return replace(
            self,
            feed_override=_clip(self.feed_override, 0.0, 1.5),
            spindle_override=_clip(self.spindle_override, 0.0, 1.5),
            target_rpm=max(0.0, self.target_rpm),
        )


# (start_tick, command) pairs, sorted by start_tick
CommandSchedule = List[Tuple[int, ControllerCommand]]


def command_at(schedule: CommandSchedule, tick: int) -> ControllerCommand:
    """Return the command in force at a given tick of a schedule."""
    active = schedule[0][1]
    for start, command in schedule:
        if start > tick:
            break
        active = command
    return active


def load_machine_parameters(path: Path) -> MachineParameters:
    """Load machine parameters from a JSON file.

    Missing keys keep their defaults; unknown keys and invariant violations
    raise ConfigurationError.
    """
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a JSON object")
    return MachineParameters.from_dict(data)


def save_machine_parameters(path: Path, params: MachineParameters) -> None:
    Path(path).write_text(json.dumps(params.to_dict(), indent=2) + "\n")
