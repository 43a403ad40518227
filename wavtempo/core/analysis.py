# wavtempo/core/analysis.py

"""
Lightweight signal measurements: dominant frequency and level statistics.

Used by the ``info`` command and to check that stretching leaves pitch alone.
"""

import logging
from typing import Any, Dict, Union

import numpy as np
from numpy.typing import ArrayLike
from scipy.fft import rfft, rfftfreq
from scipy.signal import get_window

logger = logging.getLogger(__name__)


def dominant_frequency(samples: ArrayLike, sample_rate: Union[int, float]) -> float:
    """
    Estimates the strongest frequency component of a signal (Hz).

    Applies a Hann window, takes the magnitude spectrum with scipy.fft and
    refines the peak bin by parabolic interpolation on log magnitudes.
    The DC bin is ignored.

    Returns:
        Frequency in Hz, or 0.0 for empty or silent input.
    """
    data = np.asarray(samples, dtype=np.float64)
    if data.ndim != 1:
        raise ValueError("Input samples must be a 1D array.")
    if data.size < 2:
        return 0.0
    data = data - data.mean()
    if not np.any(data):
        return 0.0

    spectrum = np.abs(rfft(data * get_window("hann", len(data), fftbins=False)))
    spectrum[0] = 0.0
    peak = int(np.argmax(spectrum))
    if spectrum[peak] <= 0.0:
        return 0.0

    shift = 0.0
    if 0 < peak < len(spectrum) - 1:
        alpha, beta, gamma = np.log(spectrum[peak - 1:peak + 2] + 1e-300)
        denom = alpha - 2.0 * beta + gamma
        if denom != 0.0:
            shift = 0.5 * (alpha - gamma) / denom
    bin_width = rfftfreq(len(data), d=1.0 / sample_rate)[1]
    return float((peak + shift) * bin_width)


def describe_signal(samples: ArrayLike, sample_rate: Union[int, float]) -> Dict[str, Any]:
    """Summary statistics for a mono signal."""
    data = np.asarray(samples)
    as_float = data.astype(np.float64)
    return {
        "samples": int(data.size),
        "duration_seconds": float(data.size / sample_rate) if sample_rate else 0.0,
        "peak": float(np.max(np.abs(as_float))) if data.size else 0.0,
        "rms": float(np.sqrt(np.mean(as_float ** 2))) if data.size else 0.0,
        "dominant_frequency_hz": dominant_frequency(as_float, sample_rate),
    }
