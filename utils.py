"""
General utility functions for the CLI application.
"""

import os
from pathlib import Path

from rich import get_console
from rich.console import Console
from rich.markup import escape

# Rich's global console, shared with `pr` and the progress bars
console: Console = get_console()


def info(message: str) -> None:
    """Print a plain progress message to stdout."""
    console.print(escape(message))


def warn(message: str, detail: object | None = None) -> None:
    """
    Print a yellow warning.

    Args:
        message: What happened, including the path of the file concerned.
        detail: Optional extra information (an exception, a hint) printed
            after the message.
    """
    text = f"[yellow]⚠ Warning, {escape(message)}[/yellow]"
    if detail is not None:
        text += f"[yellow]: {escape(str(detail))}[/yellow]"
    console.print(text)


def error(message: str, detail: object | None = None) -> None:
    """
    Print a red error without stopping the run.

    Args:
        message: What happened, including the path of the file concerned.
        detail: Optional extra information printed after the message.
    """
    text = f"[red]**ERROR, {escape(message)}"
    if detail is not None:
        text += f": {escape(str(detail))}"
    console.print(text + "[/red]")


def resolve_against_cwd(path: Path) -> Path:
    """
    Make `path` absolute using the current working directory.

    The result is normalized (``..`` segments collapsed) but symlinks are not
    followed, so the folder names printed to the user stay recognizable.
    """
    if path.is_absolute():
        return Path(os.path.normpath(path))
    return Path(os.path.normpath(Path.cwd() / path))
