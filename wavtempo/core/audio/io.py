# wavtempo/core/audio/io.py

"""
Handles inspecting, loading and saving PCM WAV files using soundfile.

Samples are kept as signed integers end to end; no float normalisation
round trip is applied, so unchanged audio stays bit-exact.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

import numpy as np
import soundfile as sf
from numpy.typing import NDArray

from wavtempo.core.errors import AudioFormatError

logger = logging.getLogger(__name__)

# soundfile subtype -> numpy dtype used to read and write it
_SUBTYPE_DTYPES = {
    "PCM_16": "int16",
    "PCM_32": "int32",
}


@dataclass(frozen=True)
class AudioFormat:
    """Expected layout of every file handed to the engine."""
    channels: int = 1
    sample_rate: int = 16000
    subtype: str = "PCM_16"

    @property
    def dtype(self) -> str:
        try:
            return _SUBTYPE_DTYPES[self.subtype]
        except KeyError:
            raise ValueError(
                f"Unsupported subtype '{self.subtype}'. Supported: {sorted(_SUBTYPE_DTYPES)}"
            ) from None


def inspect_audio(file_path: Union[str, Path]):
    """
    Reads the header of an audio file.

    Raises:
        FileNotFoundError: If the file does not exist.
        RuntimeError: soundfile's error for unreadable or non-audio files.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Audio input file not found: {path}")
    return sf.info(str(path))


def validate_format(file_path: Union[str, Path], expected: AudioFormat = AudioFormat()):
    """
    Checks the channel count, sample rate and sample subtype of a file.

    Returns:
        The soundfile info object when the file matches.

    Raises:
        AudioFormatError: Listing every field that differs from ``expected``.
    """
    path = Path(file_path)
    info = inspect_audio(path)
    mismatches = {}
    if info.channels != expected.channels:
        mismatches["channels"] = (info.channels, expected.channels)
    if info.samplerate != expected.sample_rate:
        mismatches["sample_rate"] = (info.samplerate, expected.sample_rate)
    if info.subtype != expected.subtype:
        mismatches["subtype"] = (info.subtype, expected.subtype)
    if mismatches:
        raise AudioFormatError(path, mismatches)
    return info


def read_pcm(
    file_path: Union[str, Path],
    expected: AudioFormat = AudioFormat(),
) -> Tuple[NDArray, int]:
    """
    Validates and decodes a PCM file into a 1D integer array.

    Args:
        file_path: Path to the audio file.
        expected: Required format.

    Returns:
        A tuple of (samples, sample_rate), samples with the dtype matching
        ``expected.subtype``.

    Raises:
        FileNotFoundError: If the file does not exist.
        AudioFormatError: If the header does not match ``expected``.
    """
    path = Path(file_path)
    validate_format(path, expected)
    logger.debug(f"Reading PCM samples from: {path}")
    data, sample_rate = sf.read(str(path), dtype=expected.dtype, always_2d=False)
    if data.ndim != 1:
        data = data.reshape(-1)
    logger.debug(f"Read {len(data)} samples at {sample_rate} Hz from {path.name}")
    return data, sample_rate


def write_pcm(
    file_path: Union[str, Path],
    samples: NDArray,
    sample_rate: int,
    subtype: str = "PCM_16",
) -> None:
    """
    Writes a 1D integer sample array as a WAV file, creating parent directories.

    Raises:
        ValueError: If samples is not one-dimensional.
    """
    path = Path(file_path)
    data = np.asarray(samples)
    if data.ndim != 1:
        raise ValueError(f"Only mono output is supported, got shape {data.shape}.")
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(path), data, sample_rate, subtype=subtype, format="WAV")
    logger.debug(f"Wrote {len(data)} samples at {sample_rate} Hz to {path}")
