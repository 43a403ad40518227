# wavtempo/core/stretch/controller.py

"""
Tempo controller: drives the analysis/synthesis loop of the stretch engine.

Each step reads a frame from the input near the nominal analysis position,
aligned by the similarity search against the output already written, and
overlap-adds it at the synthesis position. The synthesis position advances
by a fixed hop; the nominal analysis position advances by the hop scaled by
the tempo factor, independently of where each frame was actually read, so
search corrections never accumulate into drift.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .frames import extract_frame
from .search import find_best_offset
from .synthesis import OverlapAddSynthesizer
from .window import is_constant_overlap_add, taper_window

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 16000


def expected_output_length(input_length: int, tempo: float) -> int:
    """Number of output samples for ``input_length`` input samples at ``tempo``: ceil(N / tempo)."""
    if input_length <= 0:
        return 0
    # Guard against ratios like 16000 / 0.8 landing a hair above an integer.
    return max(int(math.ceil(input_length / tempo - 1e-9)), 1)


@dataclass(frozen=True)
class StretchParameters:
    """
    Fixed frame geometry of the engine, in samples.

    Defaults correspond to 64 ms frames, half-frame hops and a 20 ms search
    tolerance at 16 kHz.

    Attributes:
        frame_length: Samples per frame.
        synthesis_hop: Output advance per step.
        tolerance: Maximum distance of a read offset from the nominal analysis position.
        search_stride: Step between similarity search candidates.
    """
    frame_length: int = 1024
    synthesis_hop: int = 512
    tolerance: int = 320
    search_stride: int = 1

    def __post_init__(self):
        if self.frame_length < 2:
            raise ValueError(f"frame_length must be at least 2, got {self.frame_length}.")
        if self.synthesis_hop <= 0:
            raise ValueError(f"synthesis_hop must be positive, got {self.synthesis_hop}.")
        if self.overlap_length < self.synthesis_hop:
            raise ValueError(
                f"Frames must overlap by at least one hop: frame_length={self.frame_length}, "
                f"synthesis_hop={self.synthesis_hop}."
            )
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}.")
        if self.search_stride < 1:
            raise ValueError(f"search_stride must be at least 1, got {self.search_stride}.")

    @property
    def overlap_length(self) -> int:
        """Samples shared by two consecutive frames."""
        return self.frame_length - self.synthesis_hop

    @classmethod
    def from_durations(
        cls,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        frame_ms: float = 64.0,
        tolerance_ms: float = 20.0,
        search_stride: int = 1,
        overlap_ratio: float = 0.5,
    ) -> "StretchParameters":
        """
        Builds parameters from durations in milliseconds.

        Args:
            sample_rate: Sampling rate of the signal (Hz).
            frame_ms: Frame duration.
            tolerance_ms: Similarity search tolerance on each side of the nominal position.
            search_stride: Step between search candidates, in samples.
            overlap_ratio: Fraction of a frame shared with the next one, in [0.5, 1.0).
        """
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}.")
        if not 0.5 <= overlap_ratio < 1.0:
            raise ValueError(f"overlap_ratio must be in [0.5, 1.0), got {overlap_ratio}.")
        frame_length = max(int(round(sample_rate * frame_ms / 1000.0)), 2)
        synthesis_hop = max(int(round(frame_length * (1.0 - overlap_ratio))), 1)
        # Rounding can leave the hop a sample longer than the overlap.
        synthesis_hop = min(synthesis_hop, frame_length // 2)
        tolerance = max(int(round(sample_rate * tolerance_ms / 1000.0)), 0)
        return cls(
            frame_length=frame_length,
            synthesis_hop=synthesis_hop,
            tolerance=tolerance,
            search_stride=int(search_stride),
        )


class LoopState(Enum):
    INIT = "init"
    LOOPING = "looping"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class _LoopCursor:
    analysis_position: float = 0.0
    synthesis_position: int = 0
    frames: int = 0


class TempoController:
    """
    Runs the overlap-add loop for one tempo factor.

    The controller expects a validated tempo and an input at least one frame
    long; the engine facade in ``engine.py`` handles the degenerate cases.
    """

    def __init__(self, tempo: float, parameters: Optional[StretchParameters] = None):
        if not math.isfinite(tempo) or tempo <= 0:
            raise ValueError(f"Tempo must be finite and positive, got {tempo}.")
        self.tempo = float(tempo)
        self.parameters = parameters or StretchParameters()
        self.window = taper_window(self.parameters.frame_length)
        self.constant_overlap_add = is_constant_overlap_add(self.window, self.parameters.synthesis_hop)
        self.state = LoopState.INIT

    @property
    def nominal_analysis_hop(self) -> float:
        """Input advance per step before search correction."""
        return self.parameters.synthesis_hop * self.tempo

    def target_length(self, input_length: int) -> int:
        return expected_output_length(input_length, self.tempo)

    def _choose_offset(
        self,
        signal: NDArray[np.float64],
        cursor: _LoopCursor,
        synthesizer: OverlapAddSynthesizer,
        limit: int,
    ) -> int:
        # Past the end of the input the search is centred on the last full
        # frame, so draining frames stay aligned with the output.
        nominal = min(max(int(round(cursor.analysis_position)), 0), limit)
        if cursor.frames == 0:
            return nominal
        p = self.parameters
        reference = synthesizer.written_region(cursor.synthesis_position, p.overlap_length)
        return find_best_offset(
            signal,
            nominal,
            p.tolerance,
            reference,
            stride=p.search_stride,
            limit=limit,
        )

    def run(self, signal: ArrayLike) -> NDArray[np.float64]:
        """
        Stretches ``signal`` and returns ``ceil(len(signal) / tempo)`` float64 samples.

        Looping lasts while a whole frame fits at the nominal analysis
        position. Draining then keeps placing whole frames read from the end
        of the input, aligned by the similarity search, until the output is
        covered up to its target length.
        """
        samples = np.asarray(signal, dtype=np.float64)
        p = self.parameters
        n = len(samples)
        target = self.target_length(n)
        if n < p.frame_length:
            raise ValueError(f"Input of {n} samples is shorter than one frame ({p.frame_length}).")

        synthesizer = OverlapAddSynthesizer(target, p.frame_length)
        # Last start of a frame lying entirely inside the input.
        limit = n - p.frame_length
        cursor = _LoopCursor()

        logger.debug(
            f"Stretching {n} samples at tempo {self.tempo:.4f} -> {target} samples "
            f"(frame={p.frame_length}, hop={p.synthesis_hop}, "
            f"analysis hop={self.nominal_analysis_hop:.2f}, tolerance={p.tolerance})"
        )

        self.state = LoopState.LOOPING
        max_deviation = 0
        while self.state is not LoopState.DONE:
            if cursor.synthesis_position >= target:
                self.state = LoopState.DONE
                break
            nominal = int(round(cursor.analysis_position))
            if self.state is LoopState.LOOPING and nominal + p.frame_length > n:
                logger.debug(f"Input exhausted at analysis position {nominal}; draining.")
                self.state = LoopState.DRAINING

            offset = self._choose_offset(samples, cursor, synthesizer, limit)
            max_deviation = max(max_deviation, abs(offset - min(nominal, limit)))
            synthesizer.mix(extract_frame(samples, offset, self.window), cursor.synthesis_position)

            cursor.frames += 1
            cursor.synthesis_position += p.synthesis_hop
            cursor.analysis_position += self.nominal_analysis_hop

        logger.debug(f"Mixed {cursor.frames} frames; largest search correction {max_deviation} samples.")
        return synthesizer.render()
