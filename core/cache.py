"""
Decides whether a previously converted text file can be reused.

A cached artifact is only trusted when it is strictly newer than the book it
was converted from and is not empty. Nothing is written or deleted here; a
stale artifact is simply overwritten by the next conversion.
"""

from pathlib import Path

from core.models import Invalid, SourceFile, Usable, ValidationResult
from models import SkipReason


def validate_cache(source: SourceFile, artifact: Path) -> ValidationResult:
    """
    Check a candidate cache path against its source file.

    Args:
        source: The source document and its metadata.
        artifact: Where the converted text for `source` would live.

    Returns:
        Usable(artifact) if the cached text is newer than the source and
        non-empty, otherwise Invalid with the reason the cache was rejected.
    """
    if not source.is_file:
        return Invalid(SkipReason.NOT_A_FILE.value)

    try:
        stat = artifact.stat()
    except OSError:
        return Invalid("cache is invalid, never converted")

    if stat.st_mtime <= source.mtime:
        return Invalid("cache is invalid, source changed since conversion")

    if stat.st_size < 1:
        return Invalid("cached output is empty")

    return Usable(artifact)
