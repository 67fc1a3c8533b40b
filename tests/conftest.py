"""
Shared fixtures for the test suite.

This module provides reusable pytest fixtures: book and cache file builders
with controlled modification times, a fake `subprocess.run` that behaves like
ebook-convert, and common configuration objects.
"""

import os
from pathlib import Path
import subprocess
from types import SimpleNamespace

import pytest

from core.models import PipelineConfig
from ui.progress import NoOpProgressDisplay

# Books are dated well before anything the tests convert "now"
BOOK_MTIME = 1_000_000.0
FRESH_CACHE_MTIME = 2_000_000.0
STALE_CACHE_MTIME = 500_000.0


class FakeConverterRun:
    """
    Stand-in for `subprocess.run` that mimics ebook-convert.

    It writes `output` to the destination argument, or raises
    CalledProcessError for source names listed in `fail_for`.

    Attributes (for test inspection):
        calls: Every command it was called with, in order.
    """

    def __init__(
        self,
        output: str | None = "converted text",
        stderr: str = "",
        fail_for: tuple[str, ...] = (),
        outputs: dict[str, str] | None = None,
    ):
        self.output = output
        self.stderr = stderr
        self.fail_for = fail_for
        self.outputs = outputs or {}
        self.calls: list[list[str]] = []

    def __call__(self, cmd: list[str], **kwargs) -> subprocess.CompletedProcess:
        self.calls.append(cmd)
        source, destination = Path(cmd[1]), Path(cmd[2])

        if source.name in self.fail_for:
            raise subprocess.CalledProcessError(
                1, cmd, output="", stderr="DRM protected book"
            )

        text = self.outputs.get(source.name, self.output)
        if text is not None:
            destination.write_text(text, encoding="utf-8")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr=self.stderr)

    @property
    def converted_names(self) -> list[str]:
        return [Path(cmd[1]).name for cmd in self.calls]


@pytest.fixture
def mtimes():
    """Modification times used for books, fresh caches and stale caches."""
    return SimpleNamespace(
        book=BOOK_MTIME, fresh=FRESH_CACHE_MTIME, stale=STALE_CACHE_MTIME
    )


@pytest.fixture
def library(tmp_path):
    """An empty input folder."""
    folder = tmp_path / "library"
    folder.mkdir()
    return folder


@pytest.fixture
def write_book():
    """Factory writing a book file with a fixed, old modification time."""

    def _factory(
        folder: Path, name: str, content: bytes = b"PK ebook", mtime: float = BOOK_MTIME
    ) -> Path:
        path = folder / name
        path.write_bytes(content)
        os.utime(path, (mtime, mtime))
        return path

    return _factory


@pytest.fixture
def write_cache():
    """Factory writing a cached text artifact in `<folder>/cache/`."""

    def _factory(
        folder: Path,
        name: str,
        text: str = "cached text",
        mtime: float = FRESH_CACHE_MTIME,
        cache_folder: str = "cache",
    ) -> Path:
        cache_dir = folder / cache_folder
        cache_dir.mkdir(exist_ok=True)
        path = cache_dir / name
        path.write_text(text, encoding="utf-8")
        os.utime(path, (mtime, mtime))
        return path

    return _factory


@pytest.fixture
def fake_run_factory():
    """Factory for FakeConverterRun instances."""
    return FakeConverterRun


@pytest.fixture
def pipeline_config():
    """Pipeline settings pointing at a converter that is never really executed."""
    return PipelineConfig(converter=Path("/opt/calibre/ebook-convert"))


@pytest.fixture
def progress_display():
    """Progress display for testing."""
    return NoOpProgressDisplay()
