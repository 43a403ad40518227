# wavtempo/cli/stretch_cmd.py

"""
CLI command for stretching every WAV file in a directory tree.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from wavtempo.config.models import WavTempoConfig
from wavtempo.core.batch_processor import BatchReport, ON_ERROR_POLICIES, process_batch
from wavtempo.core.errors import BatchAbortedError, InvalidTempoError
from wavtempo.core.stretch import validate_tempo

logger = logging.getLogger(__name__)


def _validate_tempo_option(ctx, param, value):
    try:
        return validate_tempo(value)
    except InvalidTempoError as e:
        raise click.BadParameter(str(e)) from e


def _print_report(report: BatchReport, console: Console) -> None:
    table = Table(title=f"Tempo {report.tempo:g}: {report.input_dir} -> {report.output_dir}")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Samples", justify="right")
    for result in report.results:
        try:
            name = str(result.input_path.relative_to(report.input_dir))
        except ValueError:
            name = str(result.input_path)
        if result.ok:
            table.add_row(name, "ok", f"{result.input_samples} -> {result.output_samples}")
        else:
            table.add_row(name, f"failed: {result.error}", "-")
    console.print(table)


@click.command("stretch")
@click.option("-i", "--input-dir", type=click.Path(exists=True, file_okay=False, path_type=Path), required=True,
              help="Input directory containing WAV files (processed recursively).")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False, path_type=Path), required=True,
              help="Output directory for processed files (preserves relative paths).")
@click.option("-t", "--tempo", type=float, default=1.0, show_default=True, callback=_validate_tempo_option,
              help="Tempo multiplier (e.g. 1.2 for 120% speed; 1.0 = no change).")
@click.option("--workers", type=click.IntRange(min=0), default=None,
              help="Worker processes (1 = in-process, 0 = one per CPU). Defaults to the configured value.")
@click.option("--on-error", type=click.Choice(ON_ERROR_POLICIES), default=None,
              help="Skip failing files and continue, or abort the run. Defaults to the configured policy.")
@click.pass_context
def stretch_cmd(ctx, input_dir: Path, output_dir: Path, tempo: float,
                workers: Optional[int], on_error: Optional[str]):
    """Change the tempo of WAV files without changing their pitch."""
    config: WavTempoConfig = ctx.obj['config'] if isinstance(ctx.obj, dict) and 'config' in ctx.obj else WavTempoConfig()
    workers = config.batch.workers if workers is None else workers
    on_error = on_error or config.batch.on_error
    logger.info(f"Running 'stretch' on: {input_dir} -> {output_dir} (tempo={tempo})")

    try:
        parameters = config.engine.to_parameters(config.format.sample_rate)
    except ValueError as e:
        raise click.UsageError(f"Invalid engine configuration at {config.format.sample_rate} Hz: {e}")

    try:
        report = process_batch(
            input_dir,
            output_dir,
            tempo,
            parameters=parameters,
            expected=config.format.to_audio_format(),
            extensions=config.batch.extensions,
            excluded_dirs=config.batch.excluded_dirs,
            workers=workers,
            on_error=on_error,
        )
    except BatchAbortedError as e:
        if e.report is not None:
            _print_report(e.report, Console())
        click.echo(f"Aborted: {e}", err=True)
        ctx.exit(1)
    except FileNotFoundError as e:
        raise click.UsageError(str(e))

    _print_report(report, Console())
    click.echo(
        f"Processed {len(report.processed)} file(s), {len(report.failed)} failed. "
        f"Results saved in {output_dir}"
    )
