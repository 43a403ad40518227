# wavtempo/core/errors.py

"""
Exception types raised by wavtempo.

Engine errors derive from StretchError so callers can tell an invalid
request apart from I/O or format problems in the surrounding batch tooling.
"""

from pathlib import Path
from typing import Any, Optional


class WavTempoError(Exception):
    """Base class for all wavtempo errors."""


class StretchError(WavTempoError):
    """Base class for errors reported by the time-stretching engine."""


class InvalidTempoError(StretchError, ValueError):
    """Tempo factor is non-finite, zero, negative or not a number at all."""

    def __init__(self, tempo: Any):
        self.tempo = tempo
        super().__init__(f"Tempo factor must be a finite number greater than zero, got {tempo!r}.")


class EmptyInputError(StretchError):
    """Input buffer holds no samples (only raised when empty input is disallowed)."""

    def __init__(self):
        super().__init__("Input contains no samples.")


class AudioFormatError(WavTempoError, ValueError):
    """Audio file header does not match the expected channel count, rate or sample type."""

    def __init__(self, path: Path, mismatches: dict):
        self.path = path
        self.mismatches = mismatches
        details = ", ".join(
            f"{field}={actual!r} (expected {expected!r})"
            for field, (actual, expected) in mismatches.items()
        )
        super().__init__(f"Unsupported audio format in '{path}': {details}")


class BatchAbortedError(WavTempoError):
    """A batch run stopped at the first failing file (abort policy)."""

    def __init__(self, path: Path, cause: BaseException, report: Optional[Any] = None):
        self.path = path
        self.cause = cause
        self.report = report
        super().__init__(f"Batch aborted while processing '{path}': {cause}")
