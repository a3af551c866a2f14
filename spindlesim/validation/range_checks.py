"""Physical range and consistency checks on written telemetry."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
import pyarrow.parquet as pq

from spindlesim.config.constants import BOTTOM_Z
from spindlesim.simulation.integrator import TELEMETRY_FIELDS

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    check: str
    column: str
    expected_range: Tuple[float, float]
    actual_range: Tuple[float, float]
    run: str
    passed: bool
    message: str = ""


@dataclass
class ValidationReport:
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def n_passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def n_failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    def summary(self) -> str:
        lines = [f"Validation: {self.n_passed} passed, {self.n_failed} failed"]
        for r in self.results:
            status = "PASS" if r.passed else "FAIL"
            lines.append(
                f"  [{status}] {r.run}/{r.check}/{r.column}: "
                f"expected {r.expected_range}, got {r.actual_range} {r.message}"
            )
        return "\n".join(lines)


def _actual(values: pd.Series) -> Tuple[float, float]:
    if len(values) == 0:
        return (0.0, 0.0)
    return (float(values.min()), float(values.max()))


def _check_range(
    values: pd.Series,
    expected: Tuple[float, float],
    column: str,
    run: str,
) -> ValidationResult:
    """Every value must lie in the closed interval ``expected``."""
    lo, hi = expected
    outside = int(((values < lo) | (values > hi)).sum())
    return ValidationResult(
        check="range",
        column=column,
        expected_range=expected,
        actual_range=_actual(values),
        run=run,
        passed=outside == 0,
        message=f"{outside} values out of range" if outside else "",
    )


def _check_finite(values: pd.Series, column: str, run: str) -> ValidationResult:
    bad = int((~np.isfinite(values.to_numpy(dtype=np.float64))).sum())
    return ValidationResult(
        check="finite",
        column=column,
        expected_range=(-np.inf, np.inf),
        actual_range=_actual(values),
        run=run,
        passed=bad == 0,
        message=f"{bad} non-finite values" if bad else "",
    )


def _check_positive(values: pd.Series, column: str, run: str) -> ValidationResult:
    bad = int((values <= 0).sum())
    return ValidationResult(
        check="positive",
        column=column,
        expected_range=(0.0, np.inf),
        actual_range=_actual(values),
        run=run,
        passed=bad == 0,
        message=f"{bad} non-positive values" if bad else "",
    )


def _check_increasing(values: pd.Series, column: str, run: str, strict: bool) -> ValidationResult:
    diffs = np.diff(values.to_numpy(dtype=np.float64))
    bad = int((diffs <= 0).sum()) if strict else int((diffs < 0).sum())
    return ValidationResult(
        check="strictly_increasing" if strict else "non_decreasing",
        column=column,
        expected_range=(0.0, np.inf),
        actual_range=_actual(pd.Series(diffs)),
        run=run,
        passed=bad == 0,
        message=f"{bad} violations" if bad else "",
    )


def validate_telemetry(df: pd.DataFrame, run: str = "") -> ValidationReport:
    """Run all checks on one telemetry DataFrame."""
    report = ValidationReport()

    for col in TELEMETRY_FIELDS:
        report.results.append(_check_finite(df[col], col, run))

    report.results.append(_check_range(df["wear"], (0.0, 1.0), "wear", run))
    report.results.append(_check_increasing(df["wear"], "wear", run, strict=False))
    report.results.append(_check_range(df["z_pos"], (0.0, BOTTOM_Z), "z_pos", run))
    report.results.append(_check_range(df["motor_load"], (0.0, 100.0), "motor_load", run))
    report.results.append(_check_positive(df["viscosity"], "viscosity", run))
    report.results.append(_check_increasing(df["timestamp"], "timestamp", run, strict=True))

    for r in report.results:
        if not r.passed:
            logger.warning(f"{run}: {r.check} check failed on {r.column}: {r.message}")
    return report


def validate_output_dir(data_dir: Path, runs: Optional[List[str]] = None) -> ValidationReport:
    """Validate every run_*/telemetry.parquet under ``data_dir``.

    Args:
        data_dir: Output directory of a run or batch.
        runs: If set, only validate these run directory names.

    Returns:
        ValidationReport with pass/fail for each check of each run.
    """
    report = ValidationReport()
    files = sorted(Path(data_dir).glob("run_*/telemetry.parquet"))
    if runs:
        files = [f for f in files if f.parent.name in runs]

    if not files:
        logger.warning(f"No telemetry files found in {data_dir}")
        return report

    for f in files:
        df = pq.read_table(f).to_pandas()
        report.results.extend(validate_telemetry(df, run=f.parent.name).results)
    return report
