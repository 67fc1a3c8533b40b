"""
Tests for the console helpers and path resolution.
"""

from pathlib import Path

import pytest
from rich import get_console

from ui.progress import create_progress
from utils import console, error, resolve_against_cwd, warn


@pytest.mark.unit
def test_resolve_against_cwd_relative(tmp_path, monkeypatch):
    """Should anchor relative paths at the working directory."""
    monkeypatch.chdir(tmp_path)

    assert resolve_against_cwd(Path("books/../left")) == tmp_path / "left"


@pytest.mark.unit
def test_resolve_against_cwd_absolute():
    """Should only normalize absolute paths."""
    assert resolve_against_cwd(Path("/books/./left/")) == Path("/books/left")


@pytest.mark.unit
def test_warn_prints_message_and_detail(capsys):
    """Should print the warning followed by its detail."""
    warn("skipping 'b.epub'", "DRM")

    assert "Warning, skipping 'b.epub': DRM" in capsys.readouterr().out


@pytest.mark.unit
def test_error_keeps_brackets_literal(capsys):
    """Should not interpret brackets in paths as markup."""
    error("Can't convert '[draft] a.epub'")

    assert "[draft] a.epub" in capsys.readouterr().out


@pytest.mark.unit
def test_messages_share_the_progress_console():
    """Should print through the same console that draws the progress bars."""
    assert console is get_console()
    assert create_progress().console is console
