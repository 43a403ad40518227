# wavtempo/core/stretch/synthesis.py

"""
Overlap-add synthesizer: owns the output buffer for one stretch call.
"""

import logging

import numpy as np
from numpy.typing import NDArray

from .frames import Frame

logger = logging.getLogger(__name__)


class OverlapAddSynthesizer:
    """
    Accumulates windowed frames into a growing output buffer.

    Alongside the summed samples it keeps the summed window weight for
    every output position. ``render`` divides one by the other, so the
    result is amplitude-consistent whether or not the window crossfades
    perfectly, and stays so at the buffer edges where fewer frames overlap.
    """

    def __init__(self, target_length: int, frame_length: int):
        if target_length < 0:
            raise ValueError(f"target_length must be non-negative, got {target_length}.")
        if frame_length <= 0:
            raise ValueError(f"frame_length must be positive, got {frame_length}.")
        self.target_length = int(target_length)
        self.frame_length = int(frame_length)
        capacity = self.target_length + self.frame_length
        self._output = np.zeros(capacity, dtype=np.float64)
        self._weights = np.zeros(capacity, dtype=np.float64)
        self.frames_mixed = 0

    @property
    def capacity(self) -> int:
        return len(self._output)

    def mix(self, frame: Frame, position: int) -> None:
        """Adds ``frame`` into the output starting at ``position``."""
        position = int(position)
        if position < 0:
            raise ValueError(f"Synthesis position must be non-negative, got {position}.")
        end = min(position + len(frame), self.capacity)
        n = end - position
        if n <= 0:
            return
        self._output[position:end] += frame.samples[:n]
        self._weights[position:end] += frame.weights[:n]
        self.frames_mixed += 1

    def _normalized(self, start: int, end: int) -> NDArray[np.float64]:
        weights = self._weights[start:end]
        out = np.zeros(end - start, dtype=np.float64)
        covered = weights > 0.0
        out[covered] = self._output[start:end][covered] / weights[covered]
        return out

    def written_region(self, position: int, length: int) -> NDArray[np.float64]:
        """
        Read-only, normalized view of output already written at
        ``[position, position + length)``.

        Used as the similarity reference for the next frame; positions that
        no frame has reached yet read as zero.
        """
        start = min(max(int(position), 0), self.capacity)
        end = min(start + max(int(length), 0), self.capacity)
        region = self._normalized(start, end)
        region.flags.writeable = False
        return region

    def render(self) -> NDArray[np.float64]:
        """Normalizes by the accumulated weight and trims to ``target_length``."""
        uncovered = int(np.count_nonzero(self._weights[:self.target_length] <= 0.0))
        if uncovered:
            logger.warning(f"{uncovered} output samples were not covered by any frame; left silent.")
        logger.debug(f"Rendering {self.target_length} samples from {self.frames_mixed} frames.")
        return self._normalized(0, self.target_length)
