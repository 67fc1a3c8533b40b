"""
Type definitions and data models shared across the ebook-crosscheck CLI.

This module contains small enums and TypedDict structures that are used by the
core pipeline, the adapters and the CLI alike.
"""

from enum import StrEnum
from typing import TypedDict


class SkipReason(StrEnum):
    """
    Reasons why a source file did not produce a usable text artifact.

    The values are the human-readable tags printed next to skipped files and
    stored on `Skipped` outcomes.
    """

    NOT_A_FILE = "not-a-file"
    CONVERSION_FAILED = "conversion-failed"
    EMPTY_OUTPUT = "empty-output"


class ReportSide(StrEnum):
    """
    Side of a comparison, used as the suffix of detail anchors in the report.
    """

    LEFT = "L"
    RIGHT = "R"


class SettingsData(TypedDict, total=False):
    """
    Shape of the persisted settings file.

    Attributes:
        converter: Absolute path to the `ebook-convert` executable.
        converter_args: Extra arguments appended after source and destination.
    """

    converter: str
    converter_args: list[str]
