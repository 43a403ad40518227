# wavtempo/cli/info_cmd.py

"""
CLI command for inspecting a single audio file.
"""

import json
import logging
from pathlib import Path

import click

from wavtempo.config.models import WavTempoConfig
from wavtempo.core.analysis import describe_signal
from wavtempo.core.audio.io import inspect_audio, read_pcm, validate_format
from wavtempo.core.errors import AudioFormatError

logger = logging.getLogger(__name__)


@click.command("info")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def info_cmd(ctx, file: Path):
    """Show format details, duration and dominant frequency of a WAV file."""
    config: WavTempoConfig = ctx.obj['config'] if isinstance(ctx.obj, dict) and 'config' in ctx.obj else WavTempoConfig()
    expected = config.format.to_audio_format()

    try:
        header = inspect_audio(file)
    except RuntimeError as e:
        raise click.UsageError(f"Could not read '{file.name}' as audio: {e}")

    info = {
        "file_path": str(file),
        "channels": header.channels,
        "sample_rate": header.samplerate,
        "subtype": header.subtype,
        "frames": header.frames,
    }
    try:
        validate_format(file, expected)
    except AudioFormatError as e:
        info["supported"] = False
        info["problem"] = str(e)
    else:
        samples, sample_rate = read_pcm(file, expected)
        info["supported"] = True
        info.update(describe_signal(samples, sample_rate))

    click.echo(json.dumps(info, indent=2))
