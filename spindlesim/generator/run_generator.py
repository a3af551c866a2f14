"""Orchestrate one simulation run: integrator, health, prognostics, cycle reports."""

import logging
from typing import Dict, List, Optional, Tuple

from spindlesim.analytics.cycle_report import CycleReport, CycleReporter
from spindlesim.analytics.health import compute_health_statistics, wear_band
from spindlesim.analytics.spectrum import displacement_spectrum
from spindlesim.config.constants import HEALTH_WINDOW, RUL_STABLE
from spindlesim.config.schema import (
    CommandSchedule,
    ControllerCommand,
    MachineParameters,
    command_at,
)
from spindlesim.controller.gcode_program import active_line
from spindlesim.prognostics.rul_estimator import RulEstimator
from spindlesim.simulation.integrator import TELEMETRY_FIELDS
from spindlesim.simulation.sampler import TelemetrySampler

logger = logging.getLogger(__name__)


def build_schedule(
    feed_hold_at: Optional[int] = None,
    feed_hold_ticks: int = 0,
    feed_override: float = 1.0,
    spindle_override: float = 1.0,
    target_rpm: float = 3000.0,
    coolant: bool = False,
) -> CommandSchedule:
    """Cycle running from tick 0, with an optional feed hold window."""
    running = ControllerCommand(
        cycle_active=True,
        feed_override=feed_override,
        spindle_override=spindle_override,
        target_rpm=target_rpm,
        coolant_active=coolant,
    ).clamped()
    schedule: CommandSchedule = [(0, running)]
    if feed_hold_at is not None and feed_hold_ticks > 0:
        held = ControllerCommand(
            cycle_active=False,
            feed_override=running.feed_override,
            spindle_override=running.spindle_override,
            target_rpm=running.target_rpm,
            coolant_active=running.coolant_active,
        )
        schedule.append((feed_hold_at, held))
        schedule.append((feed_hold_at + feed_hold_ticks, running))
    return schedule


class RunGenerator:
    """Runs the twin for a fixed number of ticks under a command schedule."""

    def __init__(self, params: MachineParameters, health_window: int = HEALTH_WINDOW):
        self.params = params
        self.health_window = health_window

    def generate(
        self,
        schedule: CommandSchedule,
        n_ticks: int,
        seed: int,
    ) -> Tuple[List[Dict[str, float]], List[Dict[str, float]], List[CycleReport]]:
        """Simulate ``n_ticks`` ticks.

        Args:
            schedule: (start_tick, command) pairs, first entry at tick 0.
            n_ticks: Number of integrator steps.
            seed: RNG seed for this run.

        Returns:
            (telemetry_rows, health_rows, reports) where:
            - telemetry_rows: one dict per tick (sample fields plus phase,
              wear, cycle_active and program line)
            - health_rows: one dict per trend bucket (every 0.5 s)
            - reports: CycleReports emitted on each cycle_active falling edge
        """
        assert schedule and schedule[0][0] == 0, "Schedule must start at tick 0"

        sampler = TelemetrySampler(self.params, command=schedule[0][1], seed=seed)
        reporter = CycleReporter(dt=sampler.dt)
        estimator = RulEstimator()

        telemetry_rows = []
        health_rows = []
        reports = []

        for tick in range(n_ticks):
            sampler.set_command(command_at(schedule, tick))
            command = sampler.command

            wear_before = sampler.state.wear
            sample = sampler.tick()
            state = sampler.state

            row = {"tick": tick}
            row.update({name: getattr(sample, name) for name in TELEMETRY_FIELDS})
            row["cycle_active"] = command.cycle_active
            row["phase"] = state.phase
            row["wear"] = state.wear
            row["program_line"] = active_line(command.cycle_active, state.phase, state.z_pos)
            telemetry_rows.append(row)

            report = reporter.observe(command.cycle_active, sample, state.wear, wear_before)
            if report is not None:
                reports.append(report)

            snapshot = sampler.snapshot()
            stats = compute_health_statistics(snapshot, command, self.health_window)
            if not estimator.record(sample.timestamp, stats):
                continue

            estimate = estimator.estimate(stats, sample)
            peak_freq, peak_mag = displacement_spectrum(
                snapshot, sample_rate=sampler.sample_rate,
            ).peak()
            forecast = estimate.forecast
            health_rows.append({
                "timestamp": sample.timestamp,
                "rms_displacement": stats.rms_displacement,
                "peak_velocity": stats.peak_velocity,
                "rms_acceleration": stats.rms_acceleration,
                "dominant_frequency": stats.dominant_frequency,
                "avg_load": stats.avg_load,
                "status": stats.status,
                "rms_velocity": estimate.current_value,
                "decay_rate": estimate.decay_rate,
                "rul_seconds": estimate.rul_seconds,
                "time_to_failure": forecast.time_to_failure if forecast else RUL_STABLE,
                "spectral_peak_frequency": peak_freq,
                "spectral_peak_magnitude": peak_mag,
                "wear_band": wear_band(state.wear),
            })

        logger.debug(
            f"Run finished: {n_ticks} ticks, {len(health_rows)} health records, "
            f"{len(reports)} cycle reports"
        )
        return telemetry_rows, health_rows, reports
