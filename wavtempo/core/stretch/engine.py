# wavtempo/core/stretch/engine.py

"""
Engine facade: a single batch call that changes duration without changing pitch.
"""

import logging
import math
from typing import Any, Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from wavtempo.core.errors import EmptyInputError, InvalidTempoError
from .controller import (
    DEFAULT_SAMPLE_RATE,
    StretchParameters,
    TempoController,
    expected_output_length,
)

logger = logging.getLogger(__name__)

# Tempo factors this close to 1.0 take the exact-copy path.
IDENTITY_EPSILON = 1e-9


def validate_tempo(tempo: Any) -> float:
    """
    Returns ``tempo`` as a float, or raises InvalidTempoError if it is not a
    finite number strictly greater than zero.
    """
    if isinstance(tempo, (bool, np.bool_)):
        raise InvalidTempoError(tempo)
    try:
        value = float(tempo)
    except (TypeError, ValueError):
        raise InvalidTempoError(tempo) from None
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidTempoError(tempo)
    return value


def _fit_length(data: NDArray, target: int) -> NDArray:
    """Trims, or pads by repeating the last sample, to ``target`` samples."""
    if target <= len(data):
        return data[:target].copy()
    return np.pad(data, (0, target - len(data)), mode="edge")


def _to_sample_type(stretched: NDArray[np.float64], dtype: np.dtype) -> NDArray:
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return np.clip(np.rint(stretched), info.min, info.max).astype(dtype)
    if np.issubdtype(dtype, np.floating):
        return stretched.astype(dtype, copy=False)
    return stretched


def stretch(
    samples: ArrayLike,
    tempo: float,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    parameters: Optional[StretchParameters] = None,
    allow_empty: bool = True,
) -> NDArray:
    """
    Changes the duration of a mono signal by ``tempo`` while keeping its pitch.

    ``tempo`` > 1 shortens the signal, ``tempo`` < 1 lengthens it. The output
    has ``ceil(len(samples) / tempo)`` samples of the same dtype as the input;
    integer outputs are rounded and clipped to the dtype's range.

    Args:
        samples: 1D sequence of samples (e.g. int16 PCM).
        tempo: Tempo factor, finite and > 0.
        sample_rate: Sampling rate (Hz), used to derive the default frame geometry.
        parameters: Explicit frame geometry; overrides the sample-rate defaults.
        allow_empty: If False, empty input raises EmptyInputError instead of
                     returning an empty array.

    Returns:
        The stretched samples.

    Raises:
        InvalidTempoError: If tempo is non-finite, zero, negative or not numeric.
        EmptyInputError: If samples is empty and allow_empty is False.
        ValueError: If samples is not one-dimensional.
    """
    rate = validate_tempo(tempo)
    data = np.asarray(samples)
    if data.ndim != 1:
        raise ValueError(f"Input samples must be a 1D array, got shape {data.shape}.")

    if data.size == 0:
        if not allow_empty:
            raise EmptyInputError()
        logger.debug("Empty input; returning empty output.")
        return data.copy()

    if abs(rate - 1.0) <= IDENTITY_EPSILON:
        logger.debug("Tempo is 1.0; returning an exact copy.")
        return data.copy()

    if parameters is None:
        parameters = StretchParameters.from_durations(sample_rate)

    target = expected_output_length(len(data), rate)
    if len(data) < parameters.frame_length:
        logger.debug(
            f"Input of {len(data)} samples is shorter than one frame ({parameters.frame_length}); "
            f"fitting to {target} samples without stretching."
        )
        return _fit_length(data, target)

    controller = TempoController(rate, parameters)
    stretched = controller.run(data.astype(np.float64))
    return _to_sample_type(stretched, data.dtype)
