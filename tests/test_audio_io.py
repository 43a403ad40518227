# tests/test_audio_io.py

"""
Tests for PCM WAV inspection, validation and I/O in wavtempo.core.audio.io.
"""

import pytest
import numpy as np
import soundfile as sf
from pathlib import Path
from numpy.testing import assert_array_equal

from wavtempo.core.audio.io import (
    AudioFormat,
    inspect_audio,
    read_pcm,
    validate_format,
    write_pcm,
)
from wavtempo.core.errors import AudioFormatError, WavTempoError

# --- Test Fixtures ---

@pytest.fixture
def pcm_samples() -> np.ndarray:
    rng = np.random.default_rng(3)
    return rng.integers(-32768, 32767, size=4000, endpoint=True).astype(np.int16)

@pytest.fixture
def mono_wav(tmp_path: Path, pcm_samples) -> Path:
    path = tmp_path / "mono.wav"
    sf.write(str(path), pcm_samples, 16000, subtype="PCM_16")
    return path

# --- Test Cases ---

def test_round_trip_is_bit_exact(tmp_path: Path, pcm_samples):
    path = tmp_path / "out.wav"
    write_pcm(path, pcm_samples, 16000)
    data, sr = read_pcm(path)
    assert sr == 16000
    assert data.dtype == np.int16
    assert data.ndim == 1
    assert_array_equal(data, pcm_samples)


def test_inspect_reports_header(mono_wav: Path):
    info = inspect_audio(mono_wav)
    assert info.channels == 1
    assert info.samplerate == 16000
    assert info.subtype == "PCM_16"
    assert info.frames == 4000


def test_validate_accepts_expected_format(mono_wav: Path):
    assert validate_format(mono_wav).frames == 4000


def test_stereo_file_rejected(tmp_path: Path):
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.zeros((100, 2), dtype=np.int16), 16000, subtype="PCM_16")
    with pytest.raises(AudioFormatError) as excinfo:
        read_pcm(path)
    assert excinfo.value.mismatches == {"channels": (2, 1)}
    assert "channels" in str(excinfo.value)


def test_wrong_rate_and_subtype_rejected(tmp_path: Path):
    path = tmp_path / "float44k.wav"
    sf.write(str(path), np.zeros(100, dtype=np.float32), 44100, subtype="FLOAT")
    with pytest.raises(AudioFormatError) as excinfo:
        validate_format(path)
    err = excinfo.value
    assert isinstance(err, WavTempoError)
    assert isinstance(err, ValueError)
    assert set(err.mismatches) == {"sample_rate", "subtype"}
    assert err.mismatches["sample_rate"] == (44100, 16000)
    assert err.path == path


def test_custom_expected_format(tmp_path: Path):
    path = tmp_path / "pcm32.wav"
    samples = np.array([0, 1 << 20, -(1 << 20)], dtype=np.int32)
    write_pcm(path, samples, 8000, subtype="PCM_32")
    expected = AudioFormat(sample_rate=8000, subtype="PCM_32")
    data, sr = read_pcm(path, expected)
    assert sr == 8000
    assert data.dtype == np.int32
    assert_array_equal(data, samples)


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_pcm(tmp_path / "nope.wav")
    with pytest.raises(FileNotFoundError):
        inspect_audio(tmp_path / "nope.wav")


def test_audio_format_dtype():
    assert AudioFormat().dtype == "int16"
    assert AudioFormat(subtype="PCM_32").dtype == "int32"
    with pytest.raises(ValueError, match="Unsupported subtype"):
        AudioFormat(subtype="PCM_24").dtype


def test_write_rejects_multichannel(tmp_path: Path):
    with pytest.raises(ValueError, match="mono"):
        write_pcm(tmp_path / "x.wav", np.zeros((10, 2), dtype=np.int16), 16000)
    assert not (tmp_path / "x.wav").exists()


def test_write_creates_parent_directories(tmp_path: Path, pcm_samples):
    path = tmp_path / "a" / "b" / "c.wav"
    write_pcm(path, pcm_samples, 16000)
    assert path.is_file()
    assert sf.info(str(path)).frames == len(pcm_samples)
