"""Fixed-capacity ring buffers backed by preallocated numpy arrays.

Writes go to ``cursor`` and wrap; nothing grows after construction. Readers
never see the arena itself: ``snapshot()`` returns an ordered copy (oldest
first), so a computation holds a consistent view while the writer moves on.
"""

from typing import Optional

import numpy as np

from spindlesim.config.constants import TELEMETRY_CAPACITY, TREND_CAPACITY
from spindlesim.simulation.integrator import TELEMETRY_FIELDS, TelemetrySample

TELEMETRY_DTYPE = np.dtype([(name, np.float64) for name in TELEMETRY_FIELDS])
TREND_DTYPE = np.dtype([("time", np.float64), ("rms_velocity", np.float64)])


class _RingArena:
    """Cursor-indexed circular storage for records of one structured dtype."""

    def __init__(self, capacity: int, dtype: np.dtype):
        assert capacity > 0, f"Ring capacity must be positive, got {capacity}"
        self.capacity = capacity
        self._data = np.zeros(capacity, dtype=dtype)
        self._cursor = 0   # next slot to write
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def is_full(self) -> bool:
        return self._count == self.capacity

    def _write(self, record: tuple) -> None:
        self._data[self._cursor] = record
        self._cursor = (self._cursor + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)

    def snapshot(self, last: Optional[int] = None) -> np.ndarray:
        """Copy of the newest ``last`` records (all if None), oldest first."""
        n = self._count if last is None else max(0, min(last, self._count))
        if n == 0:
            return np.zeros(0, dtype=self._data.dtype)
        idx = (self._cursor - n + np.arange(n)) % self.capacity
        return self._data[idx].copy()

    def latest(self) -> Optional[np.void]:
        if self._count == 0:
            return None
        return self._data[(self._cursor - 1) % self.capacity].copy()

    def clear(self) -> None:
        self._cursor = 0
        self._count = 0


class TelemetryBuffer(_RingArena):
    """The last K telemetry samples (K = 1 s of samples by default)."""

    def __init__(self, capacity: int = TELEMETRY_CAPACITY):
        super().__init__(capacity, TELEMETRY_DTYPE)

    def append(self, sample: TelemetrySample) -> None:
        self._write(tuple(getattr(sample, name) for name in TELEMETRY_FIELDS))

    def latest_sample(self) -> Optional[TelemetrySample]:
        row = self.latest()
        if row is None:
            return None
        return TelemetrySample(**{name: float(row[name]) for name in TELEMETRY_FIELDS})


class TrendHistory(_RingArena):
    """Capped (time, rms_velocity) trace used by the prognostics estimator."""

    def __init__(self, capacity: int = TREND_CAPACITY):
        super().__init__(capacity, TREND_DTYPE)

    def append(self, time: float, rms_velocity: float) -> None:
        self._write((time, rms_velocity))

    @property
    def last_time(self) -> Optional[float]:
        row = self.latest()
        return None if row is None else float(row["time"])
