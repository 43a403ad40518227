# tests/test_cli.py

"""
Tests for the wavtempo command line interface.
"""

import json

import pytest
import numpy as np
import soundfile as sf
from pathlib import Path
from click.testing import CliRunner

from wavtempo.cli.main import cli
from wavtempo.config import WavTempoConfig
from wavtempo.config.models import EngineConfig
from wavtempo.core.batch_processor import BatchReport, FileResult
from wavtempo.core.errors import AudioFormatError, BatchAbortedError
from wavtempo.version import __version__

SR = 16000

# --- Test Fixtures ---

@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()

@pytest.fixture
def obj() -> dict:
    """Pre-loaded config so the CLI skips reading files from the environment."""
    return {"config": WavTempoConfig()}

@pytest.fixture
def tone_wav(tmp_path: Path) -> Path:
    t = np.arange(SR) / SR
    data = np.round(8000 * np.sin(2 * np.pi * 440.0 * t)).astype(np.int16)
    path = tmp_path / "in" / "tone.wav"
    path.parent.mkdir(parents=True)
    sf.write(str(path), data, SR, subtype="PCM_16")
    return path

# --- Group ---

def test_help(runner, obj):
    result = runner.invoke(cli, ["--help"], obj=obj)
    assert result.exit_code == 0
    assert "stretch" in result.output
    assert "info" in result.output


def test_version(runner, obj):
    result = runner.invoke(cli, ["--version"], obj=obj)
    assert result.exit_code == 0
    assert f"wavtempo, version {__version__}" in result.output

# --- stretch ---

def test_stretch_end_to_end(runner, obj, tone_wav: Path, tmp_path: Path):
    out = tmp_path / "out"
    result = runner.invoke(
        cli, ["-q", "stretch", "-i", str(tone_wav.parent), "-o", str(out), "-t", "1.2"], obj=obj
    )
    assert result.exit_code == 0, result.output
    assert "Processed 1 file(s), 0 failed." in result.output
    assert sf.info(str(out / "tone.wav")).frames == 13334


def test_stretch_default_tempo_copies(runner, obj, tone_wav: Path, tmp_path: Path):
    out = tmp_path / "out"
    result = runner.invoke(cli, ["-q", "stretch", "-i", str(tone_wav.parent), "-o", str(out)], obj=obj)
    assert result.exit_code == 0, result.output
    original, _ = sf.read(str(tone_wav), dtype="int16")
    copied, _ = sf.read(str(out / "tone.wav"), dtype="int16")
    assert np.array_equal(original, copied)


@pytest.mark.parametrize("tempo", ["0", "-1.5", "nan", "inf", "fast"])
def test_stretch_invalid_tempo_is_usage_error(runner, obj, tone_wav: Path, tmp_path: Path, tempo):
    out = tmp_path / "out"
    result = runner.invoke(
        cli, ["stretch", "-i", str(tone_wav.parent), "-o", str(out), f"--tempo={tempo}"], obj=obj
    )
    assert result.exit_code == 2
    assert not out.exists()


def test_stretch_missing_input_dir(runner, obj, tmp_path: Path):
    result = runner.invoke(
        cli, ["stretch", "-i", str(tmp_path / "missing"), "-o", str(tmp_path / "out")], obj=obj
    )
    assert result.exit_code == 2


def test_stretch_passes_options_to_batch(runner, obj, mocker, tmp_path: Path):
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    report = BatchReport(in_dir, tmp_path / "out", 1.5)
    mock_batch = mocker.patch("wavtempo.cli.stretch_cmd.process_batch", return_value=report)

    result = runner.invoke(
        cli,
        ["-q", "stretch", "-i", str(in_dir), "-o", str(tmp_path / "out"), "-t", "1.5",
         "--workers", "4", "--on-error", "abort"],
        obj=obj,
    )
    assert result.exit_code == 0, result.output
    mock_batch.assert_called_once()
    args, kwargs = mock_batch.call_args
    assert args == (in_dir, tmp_path / "out", 1.5)
    assert kwargs["workers"] == 4
    assert kwargs["on_error"] == "abort"
    assert kwargs["parameters"].frame_length == 1024
    assert kwargs["expected"].sample_rate == SR


def test_stretch_uses_configured_batch_defaults(runner, mocker, tmp_path: Path):
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    config = WavTempoConfig(batch={"workers": 3, "on_error": "abort"})
    mock_batch = mocker.patch(
        "wavtempo.cli.stretch_cmd.process_batch",
        return_value=BatchReport(in_dir, tmp_path / "out", 2.0),
    )
    result = runner.invoke(
        cli, ["-q", "stretch", "-i", str(in_dir), "-o", str(tmp_path / "out"), "-t", "2"],
        obj={"config": config},
    )
    assert result.exit_code == 0, result.output
    _, kwargs = mock_batch.call_args
    assert kwargs["workers"] == 3
    assert kwargs["on_error"] == "abort"


def test_stretch_reports_skipped_failures(runner, obj, tone_wav: Path, tmp_path: Path):
    sf.write(str(tone_wav.parent / "stereo.wav"), np.zeros((2000, 2), dtype=np.int16), SR, subtype="PCM_16")
    out = tmp_path / "out"
    result = runner.invoke(
        cli, ["-q", "stretch", "-i", str(tone_wav.parent), "-o", str(out), "-t", "0.9"], obj=obj
    )
    assert result.exit_code == 0, result.output
    assert "Processed 1 file(s), 1 failed." in result.output


def test_stretch_abort_exits_nonzero(runner, obj, mocker, tmp_path: Path):
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    bad = in_dir / "b.wav"
    report = BatchReport(in_dir, tmp_path / "out", 1.5)
    report.results.append(FileResult(bad, tmp_path / "out" / "b.wav", ok=False, error="bad header"))
    cause = AudioFormatError(bad, {"channels": (2, 1)})
    mocker.patch(
        "wavtempo.cli.stretch_cmd.process_batch",
        side_effect=BatchAbortedError(bad, cause, report),
    )
    result = runner.invoke(
        cli, ["-q", "stretch", "-i", str(in_dir), "-o", str(tmp_path / "out"), "-t", "1.5", "--on-error", "abort"],
        obj=obj,
    )
    assert result.exit_code == 1
    assert "Aborted" in result.output

# --- info ---

def test_info_on_supported_file(runner, obj, tone_wav: Path):
    result = runner.invoke(cli, ["-q", "info", str(tone_wav)], obj=obj)
    assert result.exit_code == 0, result.output
    info = json.loads(result.output)
    assert info["supported"] is True
    assert info["channels"] == 1
    assert info["sample_rate"] == SR
    assert info["subtype"] == "PCM_16"
    assert info["frames"] == SR
    assert info["duration_seconds"] == pytest.approx(1.0)
    assert info["dominant_frequency_hz"] == pytest.approx(440.0, abs=1.0)


def test_info_on_unsupported_file(runner, obj, tmp_path: Path):
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.zeros((100, 2), dtype=np.int16), 44100, subtype="PCM_16")
    result = runner.invoke(cli, ["-q", "info", str(path)], obj=obj)
    assert result.exit_code == 0, result.output
    info = json.loads(result.output)
    assert info["supported"] is False
    assert info["channels"] == 2
    assert "sample_rate" in info["problem"]


def test_info_on_non_audio_file(runner, obj, tmp_path: Path):
    path = tmp_path / "notes.wav"
    path.write_text("not audio at all")
    result = runner.invoke(cli, ["-q", "info", str(path)], obj=obj)
    assert result.exit_code == 2


def test_stretch_impossible_engine_geometry_is_usage_error(runner, tmp_path: Path, mocker):
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    mock_batch = mocker.patch("wavtempo.cli.stretch_cmd.process_batch")
    # Built without validation, as a hand-edited config object could be
    engine = EngineConfig.model_construct(frame_ms=64.0, tolerance_ms=20.0, search_stride=0, overlap_ratio=0.5)
    config = WavTempoConfig(engine=engine)
    result = runner.invoke(
        cli, ["-q", "stretch", "-i", str(in_dir), "-o", str(tmp_path / "out"), "-t", "1.5"],
        obj={"config": config},
    )
    assert result.exit_code == 2
    assert "Invalid engine configuration" in result.output
    mock_batch.assert_not_called()
