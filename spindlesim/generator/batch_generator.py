"""Parallel batch runs across machine presets.

Each preset is simulated in its own worker process; nothing is shared
between runs.
"""

import json
import logging
from datetime import datetime
from multiprocessing import Pool
from pathlib import Path
from typing import Dict, List, Optional

from spindlesim.config.schema import MachineParameters
from spindlesim.generator.run_generator import RunGenerator, build_schedule
from spindlesim.storage.parquet_writer import ParquetWriter, run_dir_name

logger = logging.getLogger(__name__)


def _generate_preset_run(
    preset: str,
    output_dir: Path,
    n_ticks: int,
    seed: int,
    feed_hold_at: Optional[int],
    feed_hold_ticks: int,
    skip_existing: bool,
) -> Dict[str, object]:
    """Simulate and write one preset (called in worker process).

    Seed flow: master seed -> run seed = master * 1000 + preset index (set by
    the caller) -> np.random.default_rng(run seed) inside the sampler. No RNG
    state crosses a process boundary.
    """
    run_path = output_dir / run_dir_name(preset) / "telemetry.parquet"
    if skip_existing and run_path.exists():
        logger.info(f"{preset}: output exists, skipping")
        return {"preset": preset, "seed": seed, "skipped": True}

    params = MachineParameters.preset(preset)
    schedule = build_schedule(feed_hold_at=feed_hold_at, feed_hold_ticks=feed_hold_ticks)
    telemetry, health, reports = RunGenerator(params).generate(schedule, n_ticks, seed)
    ParquetWriter(output_dir).write_run(preset, telemetry, health, reports)

    final_status = health[-1]["status"] if health else None
    logger.info(f"{preset}: completed {n_ticks} ticks, {len(reports)} cycles, status {final_status}")
    return {
        "preset": preset,
        "seed": seed,
        "skipped": False,
        "cycles": len(reports),
        "final_status": final_status,
        "final_wear": telemetry[-1]["wear"] if telemetry else 0.0,
    }


class BatchGenerator:
    """Runs a list of presets and writes a manifest."""

    def __init__(
        self,
        presets: List[str],
        output_dir: Path,
        n_ticks: int,
        seed: int = 42,
        n_workers: int = 4,
        feed_hold_at: Optional[int] = None,
        feed_hold_ticks: int = 0,
        skip_existing: bool = False,
    ):
        # Fail on a bad preset name before any worker starts
        for preset in presets:
            MachineParameters.preset(preset)
        self.presets = [p.upper() for p in presets]
        self.output_dir = Path(output_dir)
        self.n_ticks = n_ticks
        self.seed = seed
        self.n_workers = n_workers
        self.feed_hold_at = feed_hold_at
        self.feed_hold_ticks = feed_hold_ticks
        self.skip_existing = skip_existing

    def generate_all(self) -> List[Dict[str, object]]:
        """Run every preset and return the per-run summaries."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            f"Starting batch: {len(self.presets)} presets × {self.n_ticks} ticks "
            f"({self.n_workers} workers)"
        )

        args = [
            (preset, self.output_dir, self.n_ticks, self.seed * 1000 + i,
             self.feed_hold_at, self.feed_hold_ticks, self.skip_existing)
            for i, preset in enumerate(self.presets)
        ]

        if self.n_workers <= 1:
            # Sequential mode (useful for debugging)
            summaries = [_generate_preset_run(*arg) for arg in args]
        else:
            with Pool(self.n_workers) as pool:
                summaries = pool.starmap(_generate_preset_run, args)

        self._write_manifest(summaries)
        logger.info("Batch complete.")
        return summaries

    def _write_manifest(self, summaries: List[Dict[str, object]]) -> Path:
        manifest = {
            "generation_date": datetime.now().isoformat(),
            "master_seed": self.seed,
            "n_ticks": self.n_ticks,
            "feed_hold": {"at": self.feed_hold_at, "ticks": self.feed_hold_ticks},
            "runs": summaries,
        }
        path = self.output_dir / "batch_manifest.json"
        path.write_text(json.dumps(manifest, indent=2) + "\n")
        return path
