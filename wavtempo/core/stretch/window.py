# wavtempo/core/stretch/window.py

"""
Taper window used to fade frame edges before overlap-add.

The window is a Hann shape computed over ``length + 2`` points with the two
zero-valued end points dropped, so every coefficient is strictly positive.
That keeps the accumulated weight of any sample covered by a frame above
zero, which the synthesizer relies on when it normalises the output.
"""

import logging
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray
from scipy.signal import windows

logger = logging.getLogger(__name__)


@lru_cache(maxsize=16)
def _cached_taper(length: int) -> NDArray[np.float64]:
    win = windows.hann(length + 2, sym=True)[1:-1].astype(np.float64)
    win.flags.writeable = False
    return win


def taper_window(length: int) -> NDArray[np.float64]:
    """
    Returns a symmetric Hann-shaped taper of ``length`` coefficients.

    Args:
        length: Number of coefficients (the frame length). Must be positive.

    Returns:
        Read-only float64 array with values in (0, 1], symmetric, peaking at the
        centre and approaching 0 at both ends.

    Raises:
        ValueError: If length is not positive.
    """
    if length <= 0:
        raise ValueError(f"Window length must be positive, got {length}.")
    return _cached_taper(int(length))


def overlap_add_gain(window: NDArray[np.float64], hop: int) -> NDArray[np.float64]:
    """
    Steady-state sum of copies of ``window`` shifted by multiples of ``hop``.

    Returns one hop period of the summed gain; a perfectly crossfading
    window yields a constant array.
    """
    if hop <= 0:
        raise ValueError(f"Hop must be positive, got {hop}.")
    gain = np.zeros(hop, dtype=np.float64)
    for start in range(0, len(window), hop):
        chunk = window[start:start + hop]
        gain[:len(chunk)] += chunk
    return gain


def is_constant_overlap_add(window: NDArray[np.float64], hop: int, atol: float = 1e-6) -> bool:
    """Checks whether hop-shifted copies of ``window`` sum to a constant 1."""
    gain = overlap_add_gain(window, hop)
    result = bool(np.allclose(gain, 1.0, atol=atol))
    logger.debug(
        f"Overlap-add gain for window length {len(window)}, hop {hop}: "
        f"min={gain.min():.6f}, max={gain.max():.6f}, constant={result}"
    )
    return result
