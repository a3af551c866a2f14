"""Windowed DFT of the displacement signal.

The newest N samples (N <= 128) are Hann-windowed and transformed. Bins
1..N/2 are returned (DC excluded) as (frequency, magnitude) with magnitude
normalized by 2/N, so a full-scale sinusoid reads amplitude * 0.5 (the
Hann coherent gain).

The direct transform is O(N²); ``method="fft"`` uses numpy's real FFT and
gives the same bins to rounding error.
"""

from dataclasses import dataclass

import numpy as np

from spindlesim.config.constants import (
    SAMPLE_RATE_HZ,
    SPECTRUM_MIN_SAMPLES,
    SPECTRUM_WINDOW,
)


@dataclass(frozen=True)
class Spectrum:
    frequencies: np.ndarray   # Hz, bins 1..N/2
    magnitudes: np.ndarray    # m

    def __len__(self) -> int:
        return len(self.frequencies)

    @property
    def is_empty(self) -> bool:
        return len(self.frequencies) == 0

    def peak(self) -> tuple:
        """(frequency, magnitude) of the strongest bin, or (0.0, 0.0) if empty."""
        if self.is_empty:
            return 0.0, 0.0
        i = int(np.argmax(self.magnitudes))
        return float(self.frequencies[i]), float(self.magnitudes[i])


EMPTY_SPECTRUM = Spectrum(frequencies=np.zeros(0), magnitudes=np.zeros(0))


def hann_window(n: int) -> np.ndarray:
    """Periodic Hann window: 0.5 * (1 - cos(2πk/N))."""
    k = np.arange(n)
    return 0.5 * (1.0 - np.cos(2.0 * np.pi * k / n))


def _direct_dft(x: np.ndarray, n_bins: int) -> np.ndarray:
    n = len(x)
    k = np.arange(1, n_bins + 1)[:, None]
    t = np.arange(n)[None, :]
    basis = np.exp(-2j * np.pi * k * t / n)
    return basis @ x


def compute_spectrum(
    signal: np.ndarray,
    sample_rate: float = SAMPLE_RATE_HZ,
    window: int = SPECTRUM_WINDOW,
    min_samples: int = SPECTRUM_MIN_SAMPLES,
    method: str = "direct",
) -> Spectrum:
    """Magnitude spectrum of the most recent ``window`` points of a signal.

    Args:
        signal: 1-D samples, oldest first.
        sample_rate: Samples per second (1 / DT).
        window: Maximum analysis length N.
        min_samples: Below this many samples the result is empty.
        method: "direct" (O(N²) DFT) or "fft".

    Returns:
        Spectrum with floor(N/2) bins, or EMPTY_SPECTRUM on too little data.
    """
    signal = np.asarray(signal, dtype=np.float64)
    if len(signal) < min_samples:
        return EMPTY_SPECTRUM

    x = signal[-window:]
    n = len(x)
    n_bins = n // 2
    xw = x * hann_window(n)

    if method == "direct":
        coeffs = _direct_dft(xw, n_bins)
    elif method == "fft":
        coeffs = np.fft.rfft(xw)[1:n_bins + 1]
    else:
        raise ValueError(f"Unknown spectrum method {method!r}")

    magnitudes = np.abs(coeffs) * 2.0 / n
    frequencies = np.arange(1, n_bins + 1) * sample_rate / n
    return Spectrum(frequencies=frequencies, magnitudes=magnitudes)


def displacement_spectrum(snapshot: np.ndarray, **kwargs) -> Spectrum:
    """Spectrum of the displacement column of a telemetry snapshot."""
    return compute_spectrum(snapshot["displacement"], **kwargs)
