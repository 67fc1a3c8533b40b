"""
Runs the external converter for a single book.

The converter (Calibre's `ebook-convert`) is invoked as
`<converter> <source> <destination> <extra args...>` and waited for. Failures
are classified into `Skipped` outcomes instead of raised, because DRM
protected or unsupported books are expected in any real library and must not
abort the rest of the batch.
"""

from pathlib import Path
from typing import Callable
import subprocess

from constants import DEDRM_HINT
from core.models import ConversionOutcome, Converted, PipelineConfig, Skipped
from models import SkipReason
from utils import error, info, warn


def build_command(source: Path, destination: Path, config: PipelineConfig) -> list[str]:
    return [str(config.converter), str(source), str(destination), *config.converter_args]


def _failure_detail(e: OSError | subprocess.SubprocessError) -> str:
    """
    Describe a failed run, including what the converter wrote to stderr.

    `str()` of a CalledProcessError only carries the exit status.
    """
    stderr = getattr(e, "stderr", None)
    if isinstance(stderr, str) and stderr.strip():
        return f"{e} {stderr.strip()}"
    return str(e)


def convert(
    source: Path,
    destination: Path,
    config: PipelineConfig,
    runner: Callable | None = None,
) -> ConversionOutcome:
    """
    Convert `source` to plain text at `destination`.

    Args:
        source: The book to convert.
        destination: Where the converter should write the text.
        config: Converter path and extra arguments.
        runner: Optional replacement for `subprocess.run`. Useful for testing.

    Returns:
        Converted(destination) if the converter exited cleanly and wrote a
        non-empty file, otherwise Skipped with CONVERSION_FAILED or EMPTY_OUTPUT.
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # The converter will fail to write and the failure is classified below
        warn(f"Could not create cache folder '{destination.parent}'", e)

    info(f"Converting '{source}' to text...")

    run = runner if runner else subprocess.run
    try:
        completed = run(
            build_command(source, destination, config),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        error(f"Can't convert '{source}' to '{destination}'", _failure_detail(e))
        warn(f"skipping '{source}'", DEDRM_HINT)
        return Skipped(SkipReason.CONVERSION_FAILED)

    if completed.stderr:
        # Diagnostic only, the output file decides the outcome
        error(f"Error converting '{source}'", completed.stderr.strip())

    try:
        size = destination.stat().st_size
    except OSError as e:
        warn(f"Could not create output for '{source}'", e)
        return Skipped(SkipReason.EMPTY_OUTPUT)

    if size < 1:
        warn(f"Output is empty for '{destination}'. Please check '{source}'")
        return Skipped(SkipReason.EMPTY_OUTPUT)

    return Converted(destination)
