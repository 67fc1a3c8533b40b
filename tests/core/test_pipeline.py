"""
Tests for the sequential conversion pipeline.

Tests cover:
- cache_path_for / ensure_folder / build_work_items: path construction and
  folder checks
- process_item: cache hits, conversions and skipped entries
- run_pipeline: ordering, failure isolation and the cache hit / failed /
  empty output scenarios
"""

from functools import partial
from pathlib import Path

import pytest

from constants import DEDRM_HINT
from core.conversion import convert
from core.exceptions import ConfigurationError, FolderNotFoundError
from core.models import CacheHit, Converted, Skipped, WorkItem
from core.pipeline import (
    build_work_items,
    cache_path_for,
    ensure_folder,
    process_item,
    run_pipeline,
)
from models import SkipReason


class RecordingConverter:
    """Converter stand-in that records calls and returns a fixed outcome."""

    def __init__(self, outcome=None):
        self.outcome = outcome
        self.calls: list[tuple[Path, Path]] = []

    def __call__(self, source, destination, config):
        self.calls.append((source, destination))
        if self.outcome is not None:
            return self.outcome
        destination.parent.mkdir(exist_ok=True)
        destination.write_text("converted", encoding="utf-8")
        return Converted(destination)


# ============================================================================
# Tests for path helpers
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "file_name,expected",
    [
        ("a.epub", "a.txt"),
        ("gazing into the eternal.epub", "gazing into the eternal.txt"),
        ("book.v2.mobi", "book.v2.txt"),
        ("README", "README.txt"),
    ],
)
def test_cache_path_for(file_name, expected):
    """Should replace only the last extension and place the file in the cache folder."""
    result = cache_path_for(Path("/books"), "cache", file_name)

    assert result == Path("/books/cache") / expected


@pytest.mark.unit
def test_ensure_folder_missing(tmp_path):
    """Should raise FolderNotFoundError for a folder that does not exist."""
    with pytest.raises(FolderNotFoundError) as exc_info:
        ensure_folder(tmp_path / "missing")

    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.path == str(tmp_path / "missing")


@pytest.mark.unit
def test_ensure_folder_rejects_file(tmp_path):
    """Should raise FolderNotFoundError when the path is a regular file."""
    file_path = tmp_path / "a.epub"
    file_path.write_bytes(b"x")

    with pytest.raises(FolderNotFoundError):
        ensure_folder(file_path)


@pytest.mark.unit
def test_ensure_folder_resolves_relative_paths(tmp_path, monkeypatch):
    """Should resolve relative folders against the current working directory."""
    (tmp_path / "left").mkdir()
    monkeypatch.chdir(tmp_path)

    result = ensure_folder(Path("left"))

    assert result == tmp_path / "left"
    assert result.is_absolute()


@pytest.mark.unit
@pytest.mark.mock
def test_build_work_items_keeps_listing_order(mocker):
    """Should keep the filesystem listing order instead of sorting."""
    mocker.patch(
        "core.pipeline.os.listdir", return_value=["z.epub", "a.epub", "m.epub"]
    )

    items = build_work_items(Path("/books"), "cache")

    assert items == [
        WorkItem(Path("/books/z.epub"), Path("/books/cache/z.txt")),
        WorkItem(Path("/books/a.epub"), Path("/books/cache/a.txt")),
        WorkItem(Path("/books/m.epub"), Path("/books/cache/m.txt")),
    ]


# ============================================================================
# Tests for process_item
# ============================================================================


@pytest.mark.unit
def test_process_item_cache_hit_skips_converter(
    library, write_book, write_cache, pipeline_config
):
    """Should return CacheHit and never call the converter for a fresh cache."""
    book = write_book(library, "a.epub")
    artifact = write_cache(library, "a.txt")
    converter = RecordingConverter()

    outcome = process_item(WorkItem(book, artifact), pipeline_config, converter)

    assert outcome == CacheHit(artifact)
    assert converter.calls == []


@pytest.mark.unit
def test_process_item_stale_cache_converts_once(
    library, write_book, write_cache, pipeline_config, mtimes
):
    """Should call the converter exactly once when the cache predates the book."""
    book = write_book(library, "a.epub")
    artifact = write_cache(library, "a.txt", mtime=mtimes.stale)
    converter = RecordingConverter()

    outcome = process_item(WorkItem(book, artifact), pipeline_config, converter)

    assert outcome == Converted(artifact)
    assert converter.calls == [(book, artifact)]


@pytest.mark.unit
def test_process_item_sub_folder_is_skipped(library, pipeline_config):
    """Should skip sub folders without converting them."""
    sub_folder = library / "extras"
    sub_folder.mkdir()
    converter = RecordingConverter()

    outcome = process_item(
        WorkItem(sub_folder, library / "cache" / "extras.txt"), pipeline_config, converter
    )

    assert outcome == Skipped(SkipReason.NOT_A_FILE)
    assert converter.calls == []


@pytest.mark.unit
@pytest.mark.mock
def test_process_item_vanished_source_is_skipped(library, pipeline_config, mocker):
    """Should warn and skip an entry that disappeared after listing."""
    mock_warn = mocker.patch("core.pipeline.warn")
    converter = RecordingConverter()
    source = library / "gone.epub"

    outcome = process_item(
        WorkItem(source, library / "cache" / "gone.txt"), pipeline_config, converter
    )

    assert outcome == Skipped(SkipReason.NOT_A_FILE)
    assert str(source) in mock_warn.call_args[0][0]
    assert converter.calls == []


# ============================================================================
# Tests for run_pipeline
# ============================================================================


@pytest.mark.unit
def test_run_pipeline_cache_hit_scenario(
    library, write_book, write_cache, pipeline_config, progress_display, fake_run_factory
):
    """A fresh 120 byte cache is reused and the converter process is never spawned."""
    write_book(library, "a.epub")
    artifact = write_cache(library, "a.txt", text="x" * 120)
    run = fake_run_factory()

    file_set = run_pipeline(
        library,
        pipeline_config,
        partial(convert, runner=run),
        progress_display,
    )

    assert [(entry.name, entry.artifact_path) for entry in file_set] == [
        ("a.epub", artifact)
    ]
    assert run.calls == []


@pytest.mark.unit
@pytest.mark.mock
def test_run_pipeline_failed_conversion_scenario(
    library, write_book, pipeline_config, progress_display, fake_run_factory, mocker
):
    """A failing conversion leaves the set empty and warns with DRM guidance."""
    mock_warn = mocker.patch("core.conversion.warn")
    mocker.patch("core.conversion.error")
    book = write_book(library, "b.epub")
    run = fake_run_factory(fail_for=("b.epub",))

    file_set = run_pipeline(
        library, pipeline_config, partial(convert, runner=run), progress_display
    )

    assert len(file_set) == 0
    assert run.converted_names == ["b.epub"]
    message, hint = mock_warn.call_args[0]
    assert "b.epub" in message
    assert str(book) in message
    assert hint == DEDRM_HINT


@pytest.mark.unit
@pytest.mark.mock
def test_run_pipeline_empty_output_scenario(
    library, write_book, pipeline_config, progress_display, fake_run_factory, mocker
):
    """A zero-byte conversion result is excluded with an empty output warning."""
    mock_warn = mocker.patch("core.conversion.warn")
    write_book(library, "c.epub")

    file_set = run_pipeline(
        library,
        pipeline_config,
        partial(convert, runner=fake_run_factory(output="")),
        progress_display,
    )

    assert len(file_set) == 0
    assert "Output is empty" in mock_warn.call_args[0][0]


@pytest.mark.unit
@pytest.mark.mock
def test_run_pipeline_failure_does_not_stop_later_files(
    library, write_book, pipeline_config, progress_display, fake_run_factory, mocker
):
    """A failure for one book must not prevent the following books from converting."""
    mocker.patch("core.conversion.warn")
    mocker.patch("core.conversion.error")
    for name in ("x.epub", "y.epub", "z.epub"):
        write_book(library, name)
    mocker.patch(
        "core.pipeline.os.listdir", return_value=["x.epub", "y.epub", "z.epub"]
    )
    run = fake_run_factory(fail_for=("x.epub",))

    file_set = run_pipeline(
        library, pipeline_config, partial(convert, runner=run), progress_display
    )

    assert run.converted_names == ["x.epub", "y.epub", "z.epub"]
    assert file_set.names == ["y.epub", "z.epub"]


@pytest.mark.unit
@pytest.mark.mock
def test_run_pipeline_preserves_listing_order(
    library, write_book, write_cache, pipeline_config, progress_display, mocker
):
    """Should index entries in listing order, mixing cache hits and conversions."""
    for name in ("m.epub", "a.epub", "q.epub"):
        write_book(library, name)
    write_cache(library, "a.txt")
    mocker.patch(
        "core.pipeline.os.listdir", return_value=["m.epub", "a.epub", "q.epub"]
    )
    converter = RecordingConverter()

    file_set = run_pipeline(library, pipeline_config, converter, progress_display)

    assert file_set.names == ["m.epub", "a.epub", "q.epub"]
    assert [source.name for source, _ in converter.calls] == ["m.epub", "q.epub"]
    assert file_set[1].artifact_path == library / "cache" / "a.txt"


@pytest.mark.unit
def test_run_pipeline_ignores_cache_folder_and_sub_folders(
    library, write_book, write_cache, pipeline_config, progress_display
):
    """Should not treat the cache folder or other sub folders as books."""
    write_book(library, "a.epub")
    write_cache(library, "a.txt")
    (library / "drafts").mkdir()
    converter = RecordingConverter()

    file_set = run_pipeline(library, pipeline_config, converter, progress_display)

    assert file_set.names == ["a.epub"]
    assert converter.calls == []


@pytest.mark.unit
def test_run_pipeline_missing_folder_converts_nothing(
    tmp_path, pipeline_config, progress_display
):
    """Should fail before any conversion when the folder does not exist."""
    converter = RecordingConverter()

    with pytest.raises(FolderNotFoundError):
        run_pipeline(tmp_path / "left", pipeline_config, converter, progress_display)

    assert converter.calls == []


@pytest.mark.unit
def test_run_pipeline_relative_folder_gives_absolute_paths(
    tmp_path, write_book, pipeline_config, progress_display, monkeypatch
):
    """Should resolve a relative folder so artifact paths survive a later chdir."""
    folder = tmp_path / "left"
    folder.mkdir()
    write_book(folder, "a.epub")
    monkeypatch.chdir(tmp_path)
    converter = RecordingConverter()

    file_set = run_pipeline(Path("left"), pipeline_config, converter, progress_display)

    assert file_set.folder == folder
    assert file_set[0].artifact_path == folder / "cache" / "a.txt"
    assert converter.calls == [(folder / "a.epub", folder / "cache" / "a.txt")]


@pytest.mark.unit
def test_run_pipeline_custom_cache_folder(
    library, write_book, progress_display, tmp_path
):
    """Should write artifacts into the configured cache folder name."""
    from core.models import PipelineConfig

    write_book(library, "a.epub")
    config = PipelineConfig(converter=Path("/opt/ebook-convert"), cache_folder=".texts")
    converter = RecordingConverter()

    file_set = run_pipeline(library, config, converter, progress_display)

    assert file_set[0].artifact_path == library / ".texts" / "a.txt"


@pytest.mark.unit
def test_run_pipeline_reports_progress_per_entry(
    library, write_book, pipeline_config, mocker
):
    """Should start once, advance once per entry and complete once."""
    for name in ("a.epub", "b.epub"):
        write_book(library, name)
    display = mocker.MagicMock()
    display.__enter__.return_value = display

    run_pipeline(library, pipeline_config, RecordingConverter(), display)

    display.on_start.assert_called_once()
    assert display.on_start.call_args[0][1] == 2
    assert display.on_advance.call_count == 2
    display.on_complete.assert_called_once()
