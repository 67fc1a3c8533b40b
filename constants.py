"""
Application-wide constants and defaults.

This module defines the default locations, converter arguments and comparison
settings used throughout the ebook-crosscheck CLI. Everything here can be
overridden from the command line; these values only apply when nothing else
is given.
"""

from pathlib import Path
from typing import Final, Mapping

APP_NAME: Final[str] = "ebook-crosscheck"

DEFAULT_REPORT_NAME: Final[str] = "results.html"

# Sub folder, created inside each input folder, that holds converted text
DEFAULT_CACHE_FOLDER: Final[str] = "cache"

CACHE_SUFFIX: Final[str] = ".txt"

# Name of Calibre's command line converter, without platform suffix.
# See https://manual.calibre-ebook.com/generated/en/ebook-convert.html
CONVERTER_NAME: Final[str] = "ebook-convert"

# Where Calibre installs its console tools by default, keyed by the normalized
# platform name. Linux installs put ebook-convert on PATH instead.
CALIBRE_FOLDERS: Final[Mapping[str, Path]] = {
    "windows": Path("C:\\Program Files (x86)\\Calibre2"),
    "macos": Path("/Applications/calibre.app/Contents/console.app/Contents/MacOS"),
}

# --asciiize transliterates unicode so both sides compare on the same alphabet,
# --unsmarten-punctuation turns curly quotes and dashes back into plain ones.
DEFAULT_CONVERTER_ARGS: Final[tuple[str, ...]] = (
    "--asciiize",
    "--unsmarten-punctuation",
)

DEDRM_HINT: Final[str] = (
    "This is most likely due to DRM issues. Try using the DeDRM plugin "
    "(https://apprenticealf.wordpress.com/2012/09/10/calibre-plugins-the-simplest-option-for-removing-most-ebook-drm/) "
    "for calibre and manually import the book"
)

# Comparison defaults
DEFAULT_PHRASE_LENGTH: Final[int] = 34
DEFAULT_WORD_THRESHOLD: Final[int] = 100
DEFAULT_MISMATCH_TOLERANCE: Final[int] = 6

# Anchor ids shared by the summary links and the detailed comparison fragment.
# The dash keeps pairs such as (1, 11) and (11, 1) apart.
DETAIL_ANCHOR_TEMPLATE: Final[str] = "doc{left}-{right}{side}"

CONFIG_DIR: Final[Path] = Path.home() / f".{APP_NAME}"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "settings.json"
