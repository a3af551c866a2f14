"""Write per-run Parquet files."""

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List

import numpy as np
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from spindlesim.analytics.cycle_report import CycleReport
from spindlesim.storage.schema_definition import (
    CYCLE_REPORT_COLUMNS,
    CYCLE_REPORT_SCHEMA,
    HEALTH_COLUMNS,
    HEALTH_SCHEMA,
    TELEMETRY_COLUMNS,
    TELEMETRY_SCHEMA,
)

logger = logging.getLogger(__name__)


def run_dir_name(name: str) -> str:
    return f"run_{name.lower()}"


class ParquetWriter:
    """Writes one run (telemetry, health trace, cycle reports) to a directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def _write(self, df: pd.DataFrame, columns: List[str], schema: pa.Schema, path: Path) -> Path:
        df = df.reindex(columns=columns)
        table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
        pq.write_table(table, path, compression="snappy")
        return path

    def write_run(
        self,
        name: str,
        telemetry: List[Dict[str, float]],
        health: List[Dict[str, float]],
        reports: List[CycleReport],
    ) -> Dict[str, Path]:
        """Write the three Parquet files of a run.

        Args:
            name: Run name; files go to ``run_<name>/``.
            telemetry: Per-tick rows from RunGenerator.
            health: Per-bucket health rows from RunGenerator.
            reports: Cycle reports.

        Returns:
            Mapping of "telemetry", "health", "cycle_reports" to written paths.
        """
        run_dir = self.output_dir / run_dir_name(name)
        run_dir.mkdir(parents=True, exist_ok=True)

        health_df = pd.DataFrame(health, columns=HEALTH_COLUMNS)
        # inf (stable) is not meaningful downstream; store -1 instead
        for col in ("rul_seconds", "time_to_failure"):
            values = health_df[col].astype(np.float64)
            health_df[col] = values.where(np.isfinite(values), -1.0)

        report_rows = [
            {"cycle": i, **asdict(report)} for i, report in enumerate(reports)
        ]
        reports_df = pd.DataFrame(report_rows, columns=CYCLE_REPORT_COLUMNS)

        paths = {
            "telemetry": self._write(
                pd.DataFrame(telemetry, columns=TELEMETRY_COLUMNS),
                TELEMETRY_COLUMNS, TELEMETRY_SCHEMA, run_dir / "telemetry.parquet",
            ),
            "health": self._write(
                health_df, HEALTH_COLUMNS, HEALTH_SCHEMA, run_dir / "health.parquet",
            ),
            "cycle_reports": self._write(
                reports_df, CYCLE_REPORT_COLUMNS, CYCLE_REPORT_SCHEMA,
                run_dir / "cycle_reports.parquet",
            ),
        }
        logger.info(
            f"Wrote {run_dir}: {len(telemetry)} ticks, {len(health)} health rows, "
            f"{len(reports)} cycle reports"
        )
        return paths
