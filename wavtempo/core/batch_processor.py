# wavtempo/core/batch_processor.py

"""
Applies the stretch engine to every audio file under a directory tree.

Each file's decode -> stretch -> encode pipeline is independent, so files are
processed either one after another or on a process pool. Relative paths
under the input directory are mirrored under the output directory.
"""

import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Literal, Optional, Sequence, Tuple, Union

from wavtempo.core.audio.io import AudioFormat, read_pcm, write_pcm
from wavtempo.core.errors import AudioFormatError, BatchAbortedError
from wavtempo.core.stretch import StretchParameters, stretch, validate_tempo

logger = logging.getLogger(__name__)

OnErrorPolicy = Literal["skip", "abort"]
ON_ERROR_POLICIES = ("skip", "abort")
DEFAULT_EXTENSIONS = (".wav",)


@dataclass
class FileResult:
    """Outcome of one file in a batch run."""
    input_path: Path
    output_path: Path
    ok: bool
    input_samples: int = 0
    output_samples: int = 0
    error: Optional[str] = None


@dataclass
class BatchReport:
    """Per-file outcomes of a batch run, in completion order."""
    input_dir: Path
    output_dir: Path
    tempo: float
    results: List[FileResult] = field(default_factory=list)

    @property
    def processed(self) -> List[FileResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if not r.ok]


# (input_path, output_path, tempo, parameters, expected format)
_Job = Tuple[Path, Path, float, Optional[StretchParameters], AudioFormat]


def discover_audio_files(
    input_dir: Union[str, Path],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = (),
    excluded_paths: Iterable[Union[str, Path]] = (),
) -> List[Path]:
    """
    Recursively lists files under ``input_dir`` with a matching extension.

    Args:
        input_dir: Root directory to search.
        extensions: Extensions to accept, compared case-insensitively (e.g. '.wav').
        excluded_dirs: Directory names to skip at any depth.
        excluded_paths: Directories to skip entirely (e.g. an output directory
                        nested inside the input tree).

    Returns:
        Sorted list of file paths.
    """
    root = Path(input_dir)
    wanted = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    skip_names = set(excluded_dirs)
    skip_paths = {Path(p).resolve() for p in excluded_paths}

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        # Prune in place so os.walk does not descend into excluded directories
        dirnames[:] = [
            d for d in dirnames
            if d not in skip_names and (current / d).resolve() not in skip_paths
        ]
        for name in filenames:
            if Path(name).suffix.lower() in wanted:
                found.append(current / name)
    found.sort()
    logger.debug(f"Discovered {len(found)} audio files under {root}")
    return found


def process_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    tempo: float,
    parameters: Optional[StretchParameters] = None,
    expected: AudioFormat = AudioFormat(),
) -> FileResult:
    """
    Reads, validates, stretches and writes a single file.

    Raises:
        FileNotFoundError: If the input file does not exist.
        AudioFormatError: If the file does not match ``expected``.
        InvalidTempoError: If tempo is invalid.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    samples, sample_rate = read_pcm(input_path, expected)
    stretched = stretch(samples, tempo, sample_rate=sample_rate, parameters=parameters)
    write_pcm(output_path, stretched, sample_rate, subtype=expected.subtype)
    return FileResult(
        input_path=input_path,
        output_path=output_path,
        ok=True,
        input_samples=len(samples),
        output_samples=len(stretched),
    )


def _run_job(job: _Job) -> FileResult:
    return process_file(*job)


def _record_failure(
    report: BatchReport,
    job: _Job,
    exc: BaseException,
    on_error: OnErrorPolicy,
) -> None:
    input_path, output_path = job[0], job[1]
    if isinstance(exc, (FileNotFoundError, AudioFormatError)):
        logger.error(f"Skipping {input_path}: {exc}")
    else:
        logger.error(f"Unexpected error processing {input_path}: {exc}", exc_info=True)
    report.results.append(FileResult(input_path, output_path, ok=False, error=str(exc)))
    if on_error == "abort":
        raise BatchAbortedError(input_path, exc, report) from exc


def _record_success(report: BatchReport, result: FileResult) -> None:
    logger.info(
        f"Processed {result.input_path.name}: {result.input_samples} -> "
        f"{result.output_samples} samples -> {result.output_path}"
    )
    report.results.append(result)


def _resolve_workers(workers: int, job_count: int) -> int:
    if workers <= 0:
        workers = os.cpu_count() or 1
    return max(1, min(workers, job_count))


def process_batch(
    input_dir: Union[str, Path],
    output_dir: Union[str, Path],
    tempo: float,
    parameters: Optional[StretchParameters] = None,
    expected: AudioFormat = AudioFormat(),
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Sequence[str] = (),
    workers: int = 1,
    on_error: OnErrorPolicy = "skip",
) -> BatchReport:
    """
    Stretches every matching file under ``input_dir`` into ``output_dir``.

    Args:
        input_dir: Directory searched recursively for input files.
        output_dir: Root of the mirrored output tree (created if missing).
        tempo: Tempo factor applied to every file.
        parameters: Engine frame geometry; derived from each file's sample
                    rate when None.
        expected: Format every input must have.
        extensions: File extensions to process.
        excluded_dirs: Directory names to skip.
        workers: Number of worker processes; 1 runs in-process, 0 uses one per CPU.
        on_error: 'skip' records a failing file and continues; 'abort' stops
                  at the first failure and raises BatchAbortedError.

    Returns:
        BatchReport with one FileResult per discovered file (fewer on abort).

    Raises:
        FileNotFoundError: If the input directory does not exist.
        InvalidTempoError: If tempo is invalid (checked before any file is touched).
        ValueError: If on_error is not a known policy.
        BatchAbortedError: On the first failure when on_error is 'abort'.
    """
    input_root = Path(input_dir)
    output_root = Path(output_dir)
    if not input_root.is_dir():
        raise FileNotFoundError(f"Input directory not found: {input_root}")
    if on_error not in ON_ERROR_POLICIES:
        raise ValueError(f"Invalid on_error policy: '{on_error}'. Supported: {ON_ERROR_POLICIES}.")
    rate = validate_tempo(tempo)

    output_root.mkdir(parents=True, exist_ok=True)
    files = discover_audio_files(
        input_root, extensions, excluded_dirs, excluded_paths=[output_root]
    )
    jobs: List[_Job] = [
        (path, output_root / path.relative_to(input_root), rate, parameters, expected)
        for path in files
    ]
    report = BatchReport(input_dir=input_root, output_dir=output_root, tempo=rate)
    pool_size = _resolve_workers(workers, len(jobs))
    logger.info(
        f"Starting batch: {len(jobs)} files from '{input_root}' to '{output_root}' "
        f"(tempo={rate}, workers={pool_size}, on_error={on_error})"
    )

    if pool_size <= 1:
        for job in jobs:
            try:
                result = _run_job(job)
            except Exception as e:
                _record_failure(report, job, e, on_error)
            else:
                _record_success(report, result)
    else:
        with ProcessPoolExecutor(max_workers=pool_size) as executor:
            futures = {executor.submit(_run_job, job): job for job in jobs}
            try:
                for future in as_completed(futures):
                    job = futures[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        _record_failure(report, job, e, on_error)
                    else:
                        _record_success(report, result)
            except BatchAbortedError:
                for pending in futures:
                    pending.cancel()
                raise

    logger.info(
        f"Batch processing finished. Processed: {len(report.processed)}, "
        f"Failed: {len(report.failed)}"
    )
    return report
