"""
Calibre `ebook-convert` location and sanity checks.

This module finds the converter executable for the current platform when the
user did not configure one, and verifies that a configured path can actually
be executed before the pipeline starts.
"""

import os
import platform
import shutil
from pathlib import Path

from constants import CALIBRE_FOLDERS, CONVERTER_NAME
from core.exceptions import ConverterNotFoundError


def _normalize_system() -> str:
    """
    Normalize the platform system name ("Darwin" becomes "macos").

    Returns:
        str: "macos", "linux", "windows" or whatever else platform reports, lowercased.
    """
    raw_system = platform.system().lower()
    return "macos" if raw_system == "darwin" else raw_system


def _executable_name(system: str) -> str:
    return f"{CONVERTER_NAME}.exe" if system == "windows" else CONVERTER_NAME


def default_converter_path() -> Path:
    """
    Guess where Calibre's converter lives on this machine.

    Windows and macOS use Calibre's default install folder. Elsewhere the
    converter is looked up on PATH, falling back to the bare name so the
    error message still says what was searched for.

    Returns:
        Path: The expected location of `ebook-convert`.
    """
    system = _normalize_system()
    name = _executable_name(system)

    folder = CALIBRE_FOLDERS.get(system)
    if folder is not None:
        return folder / name

    found = shutil.which(name)
    return Path(found) if found else Path(name)


def check_executable(path: Path) -> Path:
    """
    Verify `path` is a file the current user may read and execute.

    Bare names (no directory part) are looked up on PATH first.

    Returns:
        Path: The checked, absolute location of the executable.

    Raises:
        ConverterNotFoundError: If the file is missing or not executable.
    """
    candidate = path
    if not path.is_absolute() and path.parent == Path("."):
        found = shutil.which(str(path))
        if found:
            candidate = Path(found)

    if not candidate.is_file() or not os.access(candidate, os.R_OK | os.X_OK):
        raise ConverterNotFoundError(str(path))

    return candidate.absolute()
