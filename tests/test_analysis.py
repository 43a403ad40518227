# tests/test_analysis.py

"""
Tests for signal measurements in wavtempo.core.analysis.
"""

import pytest
import numpy as np

from wavtempo.core.analysis import describe_signal, dominant_frequency

SR = 16000


def _tone(freq: float, n: int = SR, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(n) / SR
    return amplitude * np.sin(2 * np.pi * freq * t)


@pytest.mark.parametrize("freq", [100.0, 440.0, 1234.5, 5000.0])
def test_dominant_frequency_of_tone(freq):
    assert dominant_frequency(_tone(freq), SR) == pytest.approx(freq, abs=1.0)


def test_dominant_frequency_short_window_interpolates():
    # 2048 samples gives ~7.8 Hz bins; interpolation should land well inside one bin
    assert dominant_frequency(_tone(440.0, n=2048), SR) == pytest.approx(440.0, abs=3.0)


def test_dominant_frequency_ignores_dc_offset():
    assert dominant_frequency(_tone(300.0) + 0.4, SR) == pytest.approx(300.0, abs=1.0)


@pytest.mark.parametrize("signal", [np.array([]), np.zeros(1000), np.full(1000, 7.0), np.array([1.0])])
def test_dominant_frequency_degenerate(signal):
    assert dominant_frequency(signal, SR) == 0.0


def test_dominant_frequency_rejects_2d():
    with pytest.raises(ValueError):
        dominant_frequency(np.zeros((2, 100)), SR)


def test_describe_signal():
    samples = np.round(1000 * _tone(500.0, amplitude=1.0)).astype(np.int16)
    info = describe_signal(samples, SR)
    assert info["samples"] == SR
    assert info["duration_seconds"] == pytest.approx(1.0)
    assert info["peak"] == pytest.approx(1000.0)
    assert info["rms"] == pytest.approx(1000 / np.sqrt(2), rel=1e-3)
    assert info["dominant_frequency_hz"] == pytest.approx(500.0, abs=1.0)


def test_describe_empty_signal():
    info = describe_signal(np.array([], dtype=np.int16), SR)
    assert info["samples"] == 0
    assert info["peak"] == 0.0
    assert info["rms"] == 0.0
    assert info["dominant_frequency_hz"] == 0.0
