"""
Core data models for the conversion and comparison pipeline.

This module defines the data structures passed between the cache validator,
the conversion runner, the sequential pipeline, the comparison step and the
report aggregator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterator

from constants import (
    DEFAULT_CACHE_FOLDER,
    DEFAULT_CONVERTER_ARGS,
    DEFAULT_MISMATCH_TOLERANCE,
    DEFAULT_PHRASE_LENGTH,
    DEFAULT_WORD_THRESHOLD,
)
from models import SkipReason


@dataclass(frozen=True)
class SourceFile:
    """
    An input document and the filesystem metadata the cache decision needs.

    Attributes:
        path: Absolute path to the document.
        is_file: True if the path is a regular file (sub folders are False).
        mtime: Modification time in seconds since the epoch.
        size: Size in bytes.
    """

    path: Path
    is_file: bool
    mtime: float
    size: int

    @classmethod
    def from_path(cls, path: Path) -> "SourceFile":
        stat = path.stat()
        return cls(path, path.is_file(), stat.st_mtime, stat.st_size)


@dataclass(frozen=True)
class Usable:
    """The cached artifact can be reused as is."""

    artifact: Path


@dataclass(frozen=True)
class Invalid:
    """The cached artifact cannot be used; `reason` says why."""

    reason: str


ValidationResult = Usable | Invalid


@dataclass(frozen=True)
class CacheHit:
    artifact: Path


@dataclass(frozen=True)
class Converted:
    artifact: Path


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason


ConversionOutcome = CacheHit | Converted | Skipped


@dataclass(frozen=True)
class PipelineConfig:
    """
    Settings for converting one folder.

    Attributes:
        converter: Path to the converter executable.
        converter_args: Extra arguments appended after source and destination.
        cache_folder: Name of the cache sub folder created in each input folder.
    """

    converter: Path
    converter_args: tuple[str, ...] = DEFAULT_CONVERTER_ARGS
    cache_folder: str = DEFAULT_CACHE_FOLDER


@dataclass(frozen=True)
class WorkItem:
    """One entry of a folder listing, with the cache path it converts into."""

    source: Path
    artifact: Path


@dataclass(frozen=True)
class FileSetEntry:
    name: str
    artifact_path: Path


class FileSet:
    """
    Ordered (display name, artifact path) pairs produced for one folder.

    The index of an entry is the index used for every later lookup (texts,
    match table, report anchors), so entries are only ever appended.
    """

    def __init__(self, folder: Path) -> None:
        self.folder: Path = folder
        self.entries: list[FileSetEntry] = []

    def append(self, entry: FileSetEntry) -> None:
        self.entries.append(entry)

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    @property
    def artifact_paths(self) -> list[Path]:
        return [entry.artifact_path for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[FileSetEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> FileSetEntry:
        return self.entries[index]


@dataclass(frozen=True)
class ComparisonOptions:
    """
    Options handed to the comparison engine and listed in the report.

    Attributes:
        phrase_length: Minimum matching phrase length, in words.
        word_threshold: Minimum total matched words for a pair to be reported.
        ignore_case: Compare words case-insensitively.
        ignore_punctuation: Strip punctuation from words before comparing.
        mismatch_tolerance: Mismatched words allowed inside one phrase.
        build_report: Whether the engine should render the detailed HTML fragment.
    """

    phrase_length: int = DEFAULT_PHRASE_LENGTH
    word_threshold: int = DEFAULT_WORD_THRESHOLD
    ignore_case: bool = True
    ignore_punctuation: bool = True
    mismatch_tolerance: int = DEFAULT_MISMATCH_TOLERANCE
    build_report: bool = True


@dataclass(frozen=True)
class MatchSpan:
    """A run of words on one side of a match: `start` is a word index."""

    start: int
    word_count: int


@dataclass(frozen=True)
class MatchRecord:
    left: MatchSpan
    right: MatchSpan


@dataclass
class ComparisonResult:
    """
    Output of a comparison engine.

    Attributes:
        execution_time: Seconds the comparison took.
        matches: `matches[left_index][right_index]` lists the match records
            found for that pair.
        html: Pre-rendered detailed comparison fragment.
    """

    execution_time: float
    matches: list[list[list[MatchRecord]]]
    html: str = ""


@dataclass(frozen=True)
class MatchStatistic:
    left_index: int
    right_index: int
    incident_count: int
    word_count: int


@dataclass
class ReportDocument:
    """
    The assembled comparison report.

    `content` holds the complete rendered HTML; the other fields keep the
    pieces it was rendered from.
    """

    left_folder: Path
    right_folder: Path
    left_names: list[str]
    right_names: list[str]
    statistics: list[MatchStatistic]
    options: ComparisonOptions
    generated_at: datetime
    detail_html: str
    content: str = field(default="", repr=False)
