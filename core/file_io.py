import os
from pathlib import Path
import tempfile
from typing import Callable, Protocol

from core.exceptions import FileReadError, FileWriteError, InvalidFilePathError


class FileReader(Protocol):
    """
    Protocol defining the interface for reading converted text artifacts.

    This protocol allows different implementations for production (filesystem)
    and testing (mocks).
    """

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content as a string.
        """


class FileWriter(Protocol):
    """
    Protocol defining the interface for writing the report.
    """

    def write_file(self, data: str) -> None:
        """
        Replace the whole content of the target file with `data`.

        Args:
            data: String data to write.
        """


class FilesystemFileReader:

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Invalid UTF-8 bytes are silently dropped (errors="ignore"), converter
        output is not always clean.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content as a string.

        Raises:
            FileReadError: If the file is missing or an I/O error occurs.
        """
        try:
            with file_path.open("r", encoding="utf-8", errors="ignore") as f:
                return f.read()
        except OSError as e:
            raise FileReadError(
                message=f"Failed to read file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e


class FilesystemFileWriter:
    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path

    @classmethod
    def from_path(cls, file_path: Path) -> "FilesystemFileWriter":
        """
        Create a writer instance with an explicit file path.

        Args:
            file_path: The path to the file to manage.

        Returns:
            FilesystemFileWriter instance configured for the given path.

        Raises:
            InvalidFilePathError: If the parent directory doesn't exist or is
                not writable.
        """
        parent = file_path.parent
        if not parent.is_dir():
            raise InvalidFilePathError(
                message=f"Parent directory does not exist: {parent}",
                file_path=str(file_path),
            )
        if not os.access(parent, os.W_OK):
            raise InvalidFilePathError(
                message=f"Parent directory is not writable: {parent}",
                file_path=str(file_path),
            )

        return cls(file_path)

    def write_file(self, data: str) -> None:
        """
        Atomically replace the output file with `data`.

        The content goes to a temporary file next to the target, which is then
        renamed over it, so readers see either the old file or the new one.

        Args:
            data: String data to write.

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails. No partial file is left.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.file_path.parent,
                prefix=f".{self.file_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
            os.replace(tmp_name, self.file_path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e


class MockFileReader:
    """
    Mock implementation of FileReader for testing.

    Returns configurable file contents, allowing tests to control file reading
    behavior without touching the filesystem.
    """

    def __init__(
        self,
        return_value: str | None = None,
        read_file_fn: Callable[[Path], str] | None = None,
    ):
        """
        Args:
            return_value: If provided, always returned regardless of input.
                Takes precedence over read_file_fn.
            read_file_fn: Optional callable mapping a path to its content.

        Attributes (for test inspection):
            read_file_calls: List of file paths passed to read_file()
        """
        self.return_value = return_value
        self.read_file_fn = read_file_fn
        self.read_file_calls: list[Path] = []

    def read_file(self, file_path: Path) -> str:
        self.read_file_calls.append(file_path)
        if self.return_value is not None:
            return self.return_value
        if self.read_file_fn is not None:
            return self.read_file_fn(file_path)
        return ""


class MockFileWriter:
    """
    Mock implementation of FileWriter for testing.

    Attributes (for test inspection):
        write_file_calls: Every string passed to write_file(), in order.
        written_data: The last content written.
    """

    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path
        self.write_file_calls: list[str] = []
        self.written_data: str = ""

    def write_file(self, data: str) -> None:
        self.write_file_calls.append(data)
        self.written_data = data
