"""
Loading converted texts and running the comparison engine.

The engine itself is pluggable: anything implementing `ComparisonEngine` can
be used. This module only loads and normalizes the artifact texts in FileSet
order and turns engine failures into `AggregationError`.
"""

from typing import Protocol

from core.exceptions import AggregationError
from core.file_io import FileReader, FilesystemFileReader
from core.models import ComparisonOptions, ComparisonResult, FileSet
from core.normalize import normalize_text


class ComparisonEngine(Protocol):
    """
    Interface of a text matching engine.

    `compare` receives two ordered lists of normalized texts and must return a
    ComparisonResult whose `matches[l][r]` is indexed by the positions in those
    lists.
    """

    def compare(
        self,
        left: list[str],
        right: list[str],
        options: ComparisonOptions,
    ) -> ComparisonResult:
        """Compare every left text against every right text."""


def load_file_set_texts(
    file_set: FileSet, file_reader: FileReader | None = None
) -> list[str]:
    """
    Read and normalize every artifact of `file_set`, keeping entry order.

    All texts are held in memory at once.

    Raises:
        FileReadError: If an artifact cannot be read.
    """
    reader = file_reader if file_reader is not None else FilesystemFileReader()
    return [normalize_text(reader.read_file(path)) for path in file_set.artifact_paths]


def run_comparison(
    engine: ComparisonEngine,
    left: list[str],
    right: list[str],
    options: ComparisonOptions,
) -> ComparisonResult:
    """
    Run `engine` over both text lists.

    Raises:
        AggregationError: If the engine raises, with the engine's message.
    """
    try:
        return engine.compare(left, right, options)
    except AggregationError:
        raise
    except Exception as e:  # noqa: BLE001
        # Engines are third-party code; any failure aborts the report
        raise AggregationError(
            message=f"Failed to compare: {e}", original_exception=e
        ) from e
