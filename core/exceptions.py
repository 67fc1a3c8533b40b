"""
Custom exception classes for the ebook-crosscheck CLI.

This module defines the application-specific exceptions raised while
validating the configuration, reading converted artifacts, comparing the two
file sets and writing the report. Per-file conversion problems are not
exceptions: they are reported as `Skipped` outcomes so one bad book never
aborts a batch. Everything defined here is fatal for the run.
"""

import os
from typing import Optional


class ConfigurationError(Exception):
    """
    Base exception for invalid run configuration.

    Raised before or during the conversion stage when the inputs the run
    depends on are unusable: a folder that does not exist or is not a folder,
    a converter that cannot be executed, or two input folders that resolve to
    the same directory.

    Attributes:
        message: A human-readable error message describing what went wrong.
        path: The offending path, if the error concerns one.
    """

    def __init__(self, message: Optional[str] = None, path: Optional[str] = None):
        self.message = message or "Invalid configuration"
        super().__init__(self.message)
        self.path = path


class FolderNotFoundError(ConfigurationError):
    """
    Raised when an input folder does not exist or is not a directory.
    """

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(
            message=message or f'"{path}" is not a folder.',
            path=path,
        )


class ConverterNotFoundError(ConfigurationError):
    """
    Raised when the converter executable is missing or not executable.
    """

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(
            message=message or f'Cannot open "{path}" as an executable.',
            path=path,
        )


class AggregationError(Exception):
    """
    Base exception for failures while comparing file sets or building the report.

    Attributes:
        message: A human-readable error message describing what went wrong.
        original_exception: The underlying exception that caused this error, if any.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "Failed to compare"
        super().__init__(self.message)
        self.original_exception = original_exception


class EmptyFileSetError(AggregationError):
    """
    Raised when a side of the comparison has no converted files.

    Attributes:
        folder: The folder that did not yield any usable text.
    """

    def __init__(self, folder: str, message: Optional[str] = None):
        super().__init__(
            message=message
            or f"Did not find any files to compare against in '{folder}'"
        )
        self.folder = folder


class FileIOError(Exception):
    """
    Base exception for file read/write errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        file_path: The path of the file involved, if known.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: Exception type, details and OS name, for bug reports.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "A file operation failed"
        super().__init__(self.message)
        self.file_path = file_path
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }


class InvalidFilePathError(FileIOError):
    """
    Raised when a path cannot be used for writing (missing or read-only parent).
    """


class FileReadError(FileIOError):
    """
    Raised when a converted artifact cannot be read.
    """


class FileWriteError(FileIOError):
    """
    Raised when the report (or a settings file) cannot be written.
    """
