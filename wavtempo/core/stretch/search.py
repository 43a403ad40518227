# wavtempo/core/stretch/search.py

"""
Waveform similarity search.

Finds the input offset, near a nominal analysis position, whose waveform
best continues the output already synthesized. This is the step that keeps
successive overlap-add frames in phase on voiced and tonal material.
"""

import logging
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)

# Segments whose standard deviation is below this fraction of their peak
# amplitude (floored at 1.0) are treated as flat.
_FLAT_TOLERANCE = 1e-6
# Scores within this distance of the maximum count as ties.
_TIE_TOLERANCE = 1e-12


def _flat_energy_threshold(segment_length: int, peak: float) -> float:
    scale = max(float(peak), 1.0)
    return segment_length * (_FLAT_TOLERANCE * scale) ** 2


def normalized_cross_correlation(
    region: NDArray[np.float64],
    reference: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Zero-mean normalized cross-correlation of ``reference`` against every
    full-length window of ``region``.

    Windows (or a reference) with no variance score NaN; callers must mask
    them out before comparing.

    Args:
        region: Samples to slide over (1D float64).
        reference: Segment to match (1D float64, not longer than region).

    Returns:
        Array of ``len(region) - len(reference) + 1`` scores in [-1, 1].
    """
    m = len(reference)
    if m == 0 or len(region) < m:
        return np.empty(0, dtype=np.float64)

    ref_centered = reference - reference.mean()
    ref_energy = float(np.dot(ref_centered, ref_centered))

    # Removing the region mean does not change the result but keeps the
    # cumulative sums small.
    centered = region - region.mean()
    numerators = np.correlate(centered, ref_centered, mode="valid")

    csum = np.concatenate(([0.0], np.cumsum(centered)))
    csq = np.concatenate(([0.0], np.cumsum(centered * centered)))
    seg_sum = csum[m:] - csum[:-m]
    seg_sq = csq[m:] - csq[:-m]
    energies = np.maximum(seg_sq - seg_sum * seg_sum / m, 0.0)

    threshold = _flat_energy_threshold(m, np.max(np.abs(region)))
    scores = np.full(len(numerators), np.nan, dtype=np.float64)
    if ref_energy <= _flat_energy_threshold(m, np.max(np.abs(reference))):
        return scores
    valid = energies > threshold
    scores[valid] = numerators[valid] / np.sqrt(energies[valid] * ref_energy)
    return scores


def find_best_offset(
    signal: ArrayLike,
    nominal_position: int,
    tolerance: int,
    reference_segment: ArrayLike,
    stride: int = 1,
    limit: Optional[int] = None,
) -> int:
    """
    Picks the offset near ``nominal_position`` that best matches ``reference_segment``.

    Candidates span ``[nominal_position - tolerance, nominal_position + tolerance]``
    stepped by ``stride`` and clipped to ``[0, limit]``. Each candidate is scored by
    normalized cross-correlation between ``signal[c:c + len(reference_segment)]``
    and the reference; the best score wins and ties go to the candidate closest
    to the nominal position.

    A flat candidate segment (silence or DC) has no defined correlation and is
    dropped from the comparison; the remaining candidates still compete. Only
    when the reference is flat, or every candidate is, does the search fall
    back to the nominal position (clipped).

    Args:
        signal: Input samples.
        nominal_position: Ideal read position for the next frame.
        tolerance: Maximum distance, in samples, from the nominal position.
        reference_segment: Tail of the output already synthesized.
        stride: Step between candidates. The nominal position is always tried.
        limit: Largest offset that may be returned. Defaults to the last
               position where a full reference-length segment fits.

    Returns:
        Offset in ``[0, limit]``.
    """
    samples = np.asarray(signal, dtype=np.float64)
    reference = np.asarray(reference_segment, dtype=np.float64)
    m = len(reference)

    last_start = len(samples) - m
    if limit is None:
        limit = last_start
    limit = max(int(limit), 0)
    nominal = int(nominal_position)
    fallback = min(max(nominal, 0), limit)

    lo = max(nominal - tolerance, 0)
    hi = min(nominal + tolerance, limit, last_start)
    if m == 0 or lo > hi:
        return fallback

    scores = normalized_cross_correlation(samples[lo:hi + m], reference)
    offsets = np.arange(lo, hi + 1)

    if stride > 1:
        keep = ((offsets - lo) % stride == 0) | (offsets == fallback)
        scores = scores[keep]
        offsets = offsets[keep]

    valid = ~np.isnan(scores)
    if not valid.any():
        logger.debug(f"Flat reference or candidates near {nominal}; using nominal position.")
        return fallback

    scores = scores[valid]
    offsets = offsets[valid]
    best = scores.max()
    tied = np.flatnonzero(scores >= best - _TIE_TOLERANCE)
    choice = tied[np.argmin(np.abs(offsets[tied] - nominal))]
    return int(offsets[choice])
