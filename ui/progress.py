"""
Progress bars for the conversion stage, built on Rich.

The pipeline reports progress through the `ProgressDisplay` protocol so the
core never imports Rich directly and tests can pass `NoOpProgressDisplay`.
"""

from enum import StrEnum
from types import TracebackType
from typing import Protocol

from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from utils import console


class ProgressState(StrEnum):
    """
    Progress bar states, valued by the Rich color used to draw them.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    WARNING = "yellow"


def create_progress() -> Progress:
    """
    Create a Rich Progress with the columns used by every stage.

    Returns:
        Progress: spinner, description, bar, "n/total" and elapsed time.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def styled(state: ProgressState, description: str) -> str:
    return f"[{state}]{escape(description)}[/{state}]"


class ProgressDisplay(Protocol):
    """
    Protocol for reporting progress over a list of files.

    Lifecycle: enter the context, call on_start() once, on_advance() once per
    file, on_complete() once, then exit.
    """

    def __enter__(self) -> "ProgressDisplay":
        """Enter the progress context."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the progress context."""

    def on_start(self, description: str, total: int) -> None:
        """Start a task of `total` steps."""

    def on_advance(self, description: str) -> None:
        """Advance one step and show `description` (usually the file name)."""

    def on_complete(self, description: str, warnings: int = 0) -> None:
        """Finish the task; the bar turns yellow when `warnings` is non-zero."""


class RichProgressDisplay:
    """
    Rich implementation of ProgressDisplay.

    Must be used as a context manager: `with RichProgressDisplay() as rpd:`.
    """

    def __init__(self) -> None:
        self._progress: Progress | None = None
        self._task: TaskID | None = None
        self._total: int = 0

    def __enter__(self) -> "RichProgressDisplay":
        self._progress = create_progress()
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def on_start(self, description: str, total: int) -> None:
        progress = self._require_progress()
        self._total = total
        self._task = progress.add_task(
            styled(ProgressState.IN_PROGRESS, description), total=total
        )

    def on_advance(self, description: str) -> None:
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_advance()")
        progress.update(
            self._task,
            advance=1,
            description=styled(ProgressState.IN_PROGRESS, description),
        )

    def on_complete(self, description: str, warnings: int = 0) -> None:
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_complete()")
        state = ProgressState.WARNING if warnings else ProgressState.COMPLETE
        progress.update(
            self._task,
            completed=self._total,
            description=styled(state, description),
        )

    def _require_progress(self) -> Progress:
        if not self._progress:
            raise RuntimeError(
                "RichProgressDisplay must be used as a context manager. "
                "Use: with RichProgressDisplay() as rpd:"
            )
        return self._progress


class NoOpProgressDisplay:
    """
    ProgressDisplay that draws nothing, for tests and non-interactive runs.
    """

    def __enter__(self) -> "NoOpProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        pass

    def on_start(self, description: str, total: int) -> None:
        pass

    def on_advance(self, description: str) -> None:
        pass

    def on_complete(self, description: str, warnings: int = 0) -> None:
        pass
