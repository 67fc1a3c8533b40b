"""
Sequential conversion pipeline for one input folder.

The folder is listed once, every entry is turned into a work item with its
cache path, and a single loop then processes the items strictly one after the
other: a valid cache entry is reused, anything else goes through the
converter. Only entries that end up with a non-empty text artifact are added
to the resulting FileSet, in listing order, and that order becomes the index
space used by the comparison and the report.
"""

import os
from pathlib import Path
from typing import Callable

from rich import print as pr
from rich.markup import escape

from constants import CACHE_SUFFIX
from core.cache import validate_cache
from core.conversion import convert
from core.exceptions import FolderNotFoundError
from core.models import (
    CacheHit,
    ConversionOutcome,
    FileSet,
    FileSetEntry,
    PipelineConfig,
    Skipped,
    SourceFile,
    Usable,
    WorkItem,
)
from models import SkipReason
from ui.progress import ProgressDisplay, RichProgressDisplay
from utils import info, resolve_against_cwd, warn

Converter = Callable[[Path, Path, PipelineConfig], ConversionOutcome]


def cache_path_for(folder: Path, cache_folder: str, file_name: str) -> Path:
    """
    Build `<folder>/<cache_folder>/<name without extension>.txt`.

    Only the last extension is dropped, so "book.v2.epub" caches as "book.v2.txt".
    """
    return folder / cache_folder / (Path(file_name).stem + CACHE_SUFFIX)


def ensure_folder(folder: Path) -> Path:
    """
    Resolve `folder` against the working directory and check it is a directory.

    Raises:
        FolderNotFoundError: If the folder does not exist or is not a directory.
    """
    resolved = resolve_against_cwd(folder)
    if not resolved.is_dir():
        raise FolderNotFoundError(str(folder))
    return resolved


def build_work_items(folder: Path, cache_folder: str) -> list[WorkItem]:
    """
    List `folder` once and pair every entry with its cache path.

    The listing order is kept as returned by the filesystem.
    """
    return [
        WorkItem(folder / name, cache_path_for(folder, cache_folder, name))
        for name in os.listdir(folder)
    ]


def process_item(
    item: WorkItem,
    config: PipelineConfig,
    converter: Converter = convert,
) -> ConversionOutcome:
    """
    Produce the text artifact for one work item.

    The cache is consulted first; the converter only runs when the cache is
    missing, stale or empty. Sub folders are skipped without conversion.
    """
    try:
        source = SourceFile.from_path(item.source)
    except OSError as e:
        warn(f"skipping '{item.source}'", e)
        return Skipped(SkipReason.NOT_A_FILE)

    if not source.is_file:
        return Skipped(SkipReason.NOT_A_FILE)

    validation = validate_cache(source, item.artifact)
    if isinstance(validation, Usable):
        info(f"Found cached version of '{item.source}'")
        return CacheHit(validation.artifact)

    if item.artifact.exists():
        info(f"Cached version of '{item.source}' is unusable ({validation.reason})")

    return converter(item.source, item.artifact, config)


def run_pipeline(
    folder: Path,
    config: PipelineConfig,
    converter: Converter = convert,
    progress_display: ProgressDisplay | None = None,
) -> FileSet:
    """
    Convert every book in `folder`, one at a time, reusing valid cache entries.

    Args:
        folder: The input folder. Relative paths are resolved against the
            current working directory before anything else happens.
        config: Converter and cache settings.
        converter: Callable performing a single conversion. Defaults to
            `core.conversion.convert`; tests pass a fake.
        progress_display: Optional progress display. Defaults to a Rich bar.

    Returns:
        FileSet of (file name, artifact path) for every entry that produced
        usable text, in folder listing order.

    Raises:
        FolderNotFoundError: If `folder` does not exist or is not a directory.
    """
    resolved = ensure_folder(folder)
    items = build_work_items(resolved, config.cache_folder)
    file_set = FileSet(resolved)

    pr(f"\n[bold magenta]📚 Converting books in {escape(str(resolved))}...[/bold magenta]")

    display = progress_display if progress_display is not None else RichProgressDisplay()
    skipped = 0

    with display as rpd:
        rpd.on_start(f"Scanning {len(items)} entries...", len(items))

        for item in items:
            outcome = process_item(item, config, converter)

            if isinstance(outcome, Skipped):
                if outcome.reason != SkipReason.NOT_A_FILE:
                    skipped += 1
            else:
                file_set.append(FileSetEntry(item.source.name, outcome.artifact))

            rpd.on_advance(item.source.name)

        rpd.on_complete(
            f"✅ {len(file_set)} books ready, {skipped} skipped.", warnings=skipped
        )

    return file_set

