"""PyArrow schemas for the per-run Parquet files."""

import pyarrow as pa

from spindlesim.simulation.integrator import TELEMETRY_FIELDS

TELEMETRY_COLUMNS = (
    ["tick"] + TELEMETRY_FIELDS + ["cycle_active", "phase", "wear", "program_line"]
)

HEALTH_COLUMNS = [
    "timestamp", "rms_displacement", "peak_velocity", "rms_acceleration",
    "dominant_frequency", "avg_load", "status", "rms_velocity", "decay_rate",
    "rul_seconds", "time_to_failure", "spectral_peak_frequency",
    "spectral_peak_magnitude", "wear_band",
]

CYCLE_REPORT_COLUMNS = [
    "cycle", "timestamp", "duration", "max_vibration", "max_temperature",
    "avg_load", "wear_delta", "final_status",
]

_STRING_COLUMNS = {"phase", "status", "wear_band", "final_status"}


def _field(name: str) -> pa.Field:
    if name in ("tick", "program_line", "cycle"):
        return pa.field(name, pa.int32())
    if name == "cycle_active":
        return pa.field(name, pa.bool_())
    if name in _STRING_COLUMNS:
        return pa.field(name, pa.string())
    return pa.field(name, pa.float64())


def build_telemetry_schema() -> pa.Schema:
    """One row per tick: the telemetry sample plus phase, wear and program line."""
    return pa.schema([_field(c) for c in TELEMETRY_COLUMNS])


def build_health_schema() -> pa.Schema:
    """One row per trend bucket. Stable RUL values are written as -1."""
    return pa.schema([_field(c) for c in HEALTH_COLUMNS])


def build_cycle_report_schema() -> pa.Schema:
    return pa.schema([_field(c) for c in CYCLE_REPORT_COLUMNS])


TELEMETRY_SCHEMA = build_telemetry_schema()
HEALTH_SCHEMA = build_health_schema()
CYCLE_REPORT_SCHEMA = build_cycle_report_schema()
