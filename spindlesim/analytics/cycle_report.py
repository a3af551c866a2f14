"""Reduce one operating cycle (cycle_active rising edge to falling edge) to a report."""

import logging
from dataclasses import dataclass
from typing import Optional

from spindlesim.analytics.health import classify_cycle_status
from spindlesim.config.constants import DT
from spindlesim.simulation.integrator import TelemetrySample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    timestamp: float        # simulated time the cycle ended (s)
    duration: float         # s of active ticks
    max_vibration: float    # peak |velocity|, mm/s
    max_temperature: float  # °C
    avg_load: float         # %
    wear_delta: float
    final_status: str


class CycleReporter:
    """Watches the cycle_active edge and accumulates per-tick samples.

    Call ``observe`` once per tick, after the tick, with the command's
    cycle_active flag, the tick's sample and the wear after the tick. Pass
    ``wear_before`` (the wear at the start of the tick) so a cycle that
    resumes mid-cut counts the wear of its first tick.
    """

    def __init__(self, dt: float = DT):
        self.dt = dt
        self._was_active = False
        self._reset(0.0)

    def _reset(self, wear: float) -> None:
        self._start_wear = wear
        self._max_vibration = 0.0
        self._max_temperature = float("-inf")
        self._load_sum = 0.0
        self._count = 0

    @property
    def in_cycle(self) -> bool:
        return self._was_active

    def observe(
        self,
        cycle_active: bool,
        sample: TelemetrySample,
        wear: float,
        wear_before: Optional[float] = None,
    ) -> Optional[CycleReport]:
        """Feed one tick. Returns a CycleReport on the falling edge, else None."""
        report = None
        if cycle_active and not self._was_active:
            self._reset(wear if wear_before is None else wear_before)
        elif not cycle_active and self._was_active:
            report = self._emit(sample.timestamp, wear)
        self._was_active = cycle_active

        if cycle_active:
            self._max_vibration = max(self._max_vibration, abs(sample.velocity) * 1000.0)
            self._max_temperature = max(self._max_temperature, sample.temperature)
            self._load_sum += sample.motor_load
            self._count += 1
        return report

    def _emit(self, timestamp: float, wear: float) -> CycleReport:
        avg_load = self._load_sum / self._count if self._count else 0.0
        max_temperature = self._max_temperature if self._count else 0.0
        report = CycleReport(
            timestamp=timestamp,
            duration=self._count * self.dt,
            max_vibration=self._max_vibration,
            max_temperature=max_temperature,
            avg_load=avg_load,
            wear_delta=wear - self._start_wear,
            final_status=classify_cycle_status(self._max_vibration, avg_load),
        )
        logger.info(
            f"Cycle complete at t={timestamp:.2f}s: {report.duration:.2f}s, "
            f"max vib {report.max_vibration:.2f} mm/s, load {avg_load:.1f}%, "
            f"wear +{report.wear_delta:.4f} -> {report.final_status}"
        )
        return report
