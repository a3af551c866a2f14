"""Command-line interface for the spindle digital twin."""

import logging
import sys
from pathlib import Path

import click

from spindlesim.config.schema import MACHINE_PRESETS, MachineParameters, load_machine_parameters
from spindlesim.generator.batch_generator import BatchGenerator
from spindlesim.generator.run_generator import RunGenerator, build_schedule
from spindlesim.prognostics.rul_estimator import format_rul
from spindlesim.storage.parquet_writer import ParquetWriter
from spindlesim.validation.range_checks import validate_output_dir

PRESET_NAMES = sorted(MACHINE_PRESETS)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def main(verbose):
    """Spindle digital twin: simulation and health analytics."""
    _configure_logging(verbose)


@main.command()
@click.option("--preset", default="DEFAULT", type=click.Choice(PRESET_NAMES, case_sensitive=False),
              help="Machine parameter preset.")
@click.option("--params", "params_file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="JSON file of machine parameters (overrides --preset).")
@click.option("--ticks", default=2000, help="Number of 5 ms ticks to simulate.")
@click.option("--seed", default=42, help="RNG seed.")
@click.option("--feed", default=1.0, help="Feed override (0-1.5).")
@click.option("--spindle", default=1.0, help="Spindle override (0-1.5).")
@click.option("--rpm", default=3000.0, help="Target spindle speed.")
@click.option("--coolant/--no-coolant", default=False, help="Coolant on (M08) or off (M09).")
@click.option("--feed-hold-at", default=None, type=int, help="Tick at which to apply feed hold.")
@click.option("--feed-hold-ticks", default=0, help="Length of the feed hold in ticks.")
@click.option("--output-dir", default="output/", help="Output directory.")
def run(preset, params_file, ticks, seed, feed, spindle, rpm, coolant,
        feed_hold_at, feed_hold_ticks, output_dir):
    """Simulate one machine and write telemetry, health and cycle reports."""
    logger = logging.getLogger(__name__)

    if params_file:
        params = load_machine_parameters(Path(params_file))
        name = Path(params_file).stem
    else:
        params = MachineParameters.preset(preset)
        name = preset
    logger.info(f"Running {name}: {params} for {ticks} ticks (seed={seed})")

    schedule = build_schedule(
        feed_hold_at=feed_hold_at,
        feed_hold_ticks=feed_hold_ticks,
        feed_override=feed,
        spindle_override=spindle,
        target_rpm=rpm,
        coolant=coolant,
    )
    telemetry, health, reports = RunGenerator(params).generate(schedule, ticks, seed)
    ParquetWriter(Path(output_dir)).write_run(name, telemetry, health, reports)

    if health:
        last = health[-1]
        logger.info(
            f"Final health: {last['status']}, RMS velocity {last['rms_velocity']:.2f} mm/s, "
            f"RUL {format_rul(last['rul_seconds'])}, tool {last['wear_band']}"
        )
    logger.info("Done.")


@main.command()
@click.option("--presets", default=",".join(p for p in PRESET_NAMES if p != "DEFAULT"),
              help="Comma-separated preset names.")
@click.option("--ticks", default=2000, help="Number of ticks per run.")
@click.option("--seed", default=42, help="Master RNG seed.")
@click.option("--workers", default=1, help="Number of parallel workers.")
@click.option("--feed-hold-at", default=None, type=int, help="Tick at which to apply feed hold.")
@click.option("--feed-hold-ticks", default=0, help="Length of the feed hold in ticks.")
@click.option("--skip-existing/--no-skip-existing", default=False, help="Skip runs already written.")
@click.option("--output-dir", default="output/", help="Output directory.")
def batch(presets, ticks, seed, workers, feed_hold_at, feed_hold_ticks, skip_existing, output_dir):
    """Simulate several presets in parallel."""
    names = [p.strip() for p in presets.split(",") if p.strip()]
    gen = BatchGenerator(
        presets=names,
        output_dir=Path(output_dir),
        n_ticks=ticks,
        seed=seed,
        n_workers=workers,
        feed_hold_at=feed_hold_at,
        feed_hold_ticks=feed_hold_ticks,
        skip_existing=skip_existing,
    )
    gen.generate_all()


@main.command()
@click.argument("data_dir", type=click.Path(exists=True, file_okay=False))
def validate(data_dir):
    """Check written telemetry for physical consistency."""
    report = validate_output_dir(Path(data_dir))
    click.echo(report.summary())
    sys.exit(0 if report.passed else 1)


if __name__ == "__main__":
    main()
