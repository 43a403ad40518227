# wavtempo/core/stretch/frames.py

"""
Windowed frame extraction with zero padding at both buffer edges.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Frame:
    """
    A windowed slice of input, consumed by one overlap-add step.

    Attributes:
        offset: Input position of the first sample (may be negative or run past the end).
        samples: Input samples multiplied by the window; zero where padded.
        weights: Window coefficients where input existed, zero where padded.
    """
    offset: int
    samples: NDArray[np.float64]
    weights: NDArray[np.float64]

    def __len__(self) -> int:
        return len(self.samples)


def extract_frame(
    signal: NDArray[np.float64],
    offset: int,
    window: NDArray[np.float64],
) -> Frame:
    """
    Copies ``len(window)`` samples starting at ``offset`` and applies the window.

    Positions before index 0 or past the end of ``signal`` read as silence,
    so the frame always has exactly ``len(window)`` samples.

    Args:
        signal: Input samples (1D float64).
        offset: Start position in ``signal``.
        window: Taper coefficients; its length is the frame length.

    Returns:
        The windowed Frame.
    """
    length = len(window)
    offset = int(offset)
    raw = np.zeros(length, dtype=np.float64)
    mask = np.zeros(length, dtype=np.float64)

    src_start = max(offset, 0)
    src_end = min(offset + length, len(signal))
    if src_end > src_start:
        dst_start = src_start - offset
        dst_end = dst_start + (src_end - src_start)
        raw[dst_start:dst_end] = signal[src_start:src_end]
        mask[dst_start:dst_end] = 1.0

    weights = window * mask
    return Frame(offset=offset, samples=raw * window, weights=weights)
