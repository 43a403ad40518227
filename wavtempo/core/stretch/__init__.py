# wavtempo/core/stretch/__init__.py

"""
Pitch-preserving time-stretching engine (waveform-similarity overlap-add).

Components, leaf first:
- window: taper applied to frame edges
- search: normalized cross-correlation offset search
- frames: windowed, zero-padded frame extraction
- synthesis: overlap-add output buffer
- controller: tempo-driven analysis/synthesis loop
- engine: ``stretch(samples, tempo)`` facade
"""

from .window import taper_window, overlap_add_gain, is_constant_overlap_add
from .search import find_best_offset, normalized_cross_correlation
from .frames import Frame, extract_frame
from .synthesis import OverlapAddSynthesizer
from .controller import (
    DEFAULT_SAMPLE_RATE,
    LoopState,
    StretchParameters,
    TempoController,
    expected_output_length,
)
from .engine import IDENTITY_EPSILON, stretch, validate_tempo

__all__ = [
    "taper_window",
    "overlap_add_gain",
    "is_constant_overlap_add",
    "find_best_offset",
    "normalized_cross_correlation",
    "Frame",
    "extract_frame",
    "OverlapAddSynthesizer",
    "DEFAULT_SAMPLE_RATE",
    "LoopState",
    "StretchParameters",
    "TempoController",
    "expected_output_length",
    "IDENTITY_EPSILON",
    "stretch",
    "validate_tempo",
]
