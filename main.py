"""
ebook-crosscheck CLI Entry Point.

This module implements the command-line interface that cross-compares two
folders of ebooks for overlapping text. It orchestrates the whole run:

1.  **Validation**: Resolves both input folders, rejects missing folders or a
    folder compared with itself, and checks that Calibre's `ebook-convert`
    can be executed.
2.  **Conversion**: Converts every book of the left folder, then every book of
    the right folder, to plain text, one book at a time. Text already cached
    in each folder's cache sub folder is reused when it is newer than the book.
    Books that cannot be converted (usually DRM protected ones) are skipped
    with a warning.
3.  **Comparison**: Loads and normalizes all converted texts and runs the
    phrase matching engine over every left/right pair.
4.  **Report**: Writes a single self-contained HTML report with a summary of
    every pair and the highlighted matches.

Usage:
    $ python main.py ./originals ./submissions results.html
    $ python main.py --configure

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors, and progress visualization.
    - Inquirer: Interactive prompts for `--configure`.
    - Calibre: External `ebook-convert` used for the conversions.
"""

from pathlib import Path
from typing import Annotated, Optional

from rich import print as pr
from rich.markup import escape
import typer

from adapters.calibre import check_executable, default_converter_path
from adapters.copyfind import CopyfindEngine
from constants import (
    DEFAULT_CACHE_FOLDER,
    DEFAULT_CONVERTER_ARGS,
    DEFAULT_MISMATCH_TOLERANCE,
    DEFAULT_PHRASE_LENGTH,
    DEFAULT_REPORT_NAME,
    DEFAULT_WORD_THRESHOLD,
)
from core.comparison import load_file_set_texts, run_comparison
from core.exceptions import (
    AggregationError,
    ConfigurationError,
    EmptyFileSetError,
    FileIOError,
)
from core.models import ComparisonOptions, FileSet, PipelineConfig
from core.pipeline import ensure_folder, run_pipeline
from core.report import aggregate, write_report
from core.settings import get_config_file, save_config
from ui.progress import NoOpProgressDisplay, ProgressDisplay, RichProgressDisplay
from ui.prompts import prompt_converter_settings

app = typer.Typer()


@app.command()
def main(
    left: Annotated[
        Optional[Path],
        typer.Argument(help="Folder with the original books to compare against."),
    ] = None,
    right: Annotated[
        Optional[Path],
        typer.Argument(help="Folder with the books to test."),
    ] = None,
    report: Annotated[
        Path,
        typer.Argument(help="Where to write the HTML report."),
    ] = Path(DEFAULT_REPORT_NAME),
    calibre: Annotated[
        Optional[Path],
        typer.Option(
            envvar="EBOOK_CONVERT",
            help="Full path to calibre's ebook-convert.",
        ),
    ] = None,
    cache: Annotated[
        str,
        typer.Option(help="Sub folder of each input folder holding converted books."),
    ] = DEFAULT_CACHE_FOLDER,
    converter_arg: Annotated[
        Optional[list[str]],
        typer.Option(
            "--converter-arg",
            help="Extra argument for ebook-convert (repeatable). Replaces the defaults.",
        ),
    ] = None,
    phrase_length: Annotated[
        int, typer.Option(min=1, help="Shortest matching phrase, in words.")
    ] = DEFAULT_PHRASE_LENGTH,
    word_threshold: Annotated[
        int, typer.Option(min=0, help="Fewest matched words for a pair to be reported.")
    ] = DEFAULT_WORD_THRESHOLD,
    mismatch_tolerance: Annotated[
        int, typer.Option(min=0, help="Mismatched words allowed inside a phrase.")
    ] = DEFAULT_MISMATCH_TOLERANCE,
    ignore_case: Annotated[
        bool, typer.Option("--ignore-case/--match-case")
    ] = True,
    ignore_punctuation: Annotated[
        bool, typer.Option("--ignore-punctuation/--match-punctuation")
    ] = True,
    progress: Annotated[
        bool, typer.Option("--progress/--no-progress", help="Show progress bars.")
    ] = True,
    configure: Annotated[
        bool,
        typer.Option(
            "--configure",
            "-c",
            help="Edit the saved converter path and arguments.",
        ),
    ] = False,
):
    """
    Cross-compare the books in LEFT against the books in RIGHT.

    Every book is converted to text with calibre (cached inside each folder),
    all pairs are compared and the results are written to REPORT.
    """
    if configure:
        edit_converter_config()
        raise typer.Exit(0)

    if left is None or right is None:
        pr("[red]Error:[/red] Both a source folder and a test folder are required.")
        pr("Run with [green]--help[/green] for usage.")
        raise typer.Exit(code=2)

    options = ComparisonOptions(
        phrase_length=phrase_length,
        word_threshold=word_threshold,
        ignore_case=ignore_case,
        ignore_punctuation=ignore_punctuation,
        mismatch_tolerance=mismatch_tolerance,
    )

    try:
        left_folder, right_folder = validate_folders(left, right)
        config = build_pipeline_config(calibre, converter_arg, cache)

        left_set = run_pipeline(left_folder, config, progress_display=_display(progress))
        right_set = run_pipeline(right_folder, config, progress_display=_display(progress))

        pr("\n[green]Finished conversions. Ready for comparisons.[/green]")
        require_files(left_set)
        require_files(right_set)

        compare_and_report(left_set, right_set, options, report)
    except ConfigurationError as e:
        print_configuration_err(e)
    except AggregationError as e:
        print_aggregation_err(e)
    except FileIOError as e:
        print_file_io_err(e)
    except Exception as e:  # noqa: BLE001
        # Catch-all for any unexpected errors - ensures users always see
        # a friendly message instead of a raw Python stack trace
        print_unexpected_err(e)


def _display(progress: bool) -> ProgressDisplay:
    return RichProgressDisplay() if progress else NoOpProgressDisplay()


def validate_folders(left: Path, right: Path) -> tuple[Path, Path]:
    """
    Resolve both input folders and make sure they are distinct directories.

    Both folders share the cache sub folder name, so comparing a folder with
    itself would make both sides read and write the same cache.

    Raises:
        FolderNotFoundError: If either folder is missing or not a directory.
        ConfigurationError: If both resolve to the same directory.
    """
    left_folder = ensure_folder(left)
    right_folder = ensure_folder(right)
    if left_folder.resolve() == right_folder.resolve():
        raise ConfigurationError(
            f'Source and test folders are the same folder: "{left_folder}"',
            path=str(left_folder),
        )
    return left_folder, right_folder


def build_pipeline_config(
    calibre: Path | None,
    converter_args: list[str] | None,
    cache: str,
) -> PipelineConfig:
    """
    Work out which converter to run and with which arguments.

    The converter comes from `--calibre` (or EBOOK_CONVERT), then the saved
    settings, then calibre's default install location. Arguments come from
    `--converter-arg`, then the saved settings, then the defaults.

    Raises:
        ConverterNotFoundError: If the chosen converter is not executable.
        ConfigurationError: If the cache folder name is not a single folder name.
    """
    if cache in ("", ".", "..") or Path(cache).name != cache:
        raise ConfigurationError(
            f'Cache folder must be a plain folder name, got "{cache}"', path=cache
        )

    settings = get_config_file()

    if calibre is not None:
        converter = calibre
    elif settings.get("converter"):
        converter = Path(settings["converter"])
    else:
        converter = default_converter_path()

    if converter_args:
        args = tuple(converter_args)
    elif "converter_args" in settings:
        args = tuple(settings["converter_args"])
    else:
        args = DEFAULT_CONVERTER_ARGS

    return PipelineConfig(
        converter=check_executable(converter),
        converter_args=args,
        cache_folder=cache,
    )


def require_files(file_set: FileSet) -> None:
    """
    Raises:
        EmptyFileSetError: If no book of the folder could be converted.
    """
    if len(file_set) < 1:
        raise EmptyFileSetError(str(file_set.folder))


def compare_and_report(
    left_set: FileSet,
    right_set: FileSet,
    options: ComparisonOptions,
    report: Path,
) -> Path:
    """
    Load both file sets, compare them and write the report.

    Returns:
        The absolute path of the written report.
    """
    pr("[magenta]Loading files into memory...[/magenta]")
    left_texts = load_file_set_texts(left_set)
    right_texts = load_file_set_texts(right_set)

    pr(
        f"[magenta]Beginning comparison of {len(left_set)} files "
        f"against {len(right_set)} files...[/magenta]"
    )
    result = run_comparison(CopyfindEngine(), left_texts, right_texts, options)
    pr(f"Comparison ran in {result.execution_time:.3f}s\n")

    document = aggregate(left_set, right_set, result, options)
    target = write_report(document, report)
    pr(f"[green]Report is available in '{escape(str(target))}'[/green]")
    return target


def edit_converter_config() -> None:
    """
    Interactively edit the saved converter path and arguments.

    Current values (or the defaults) are prefilled. On cancel or invalid
    input, exits.
    """
    try:
        settings = get_config_file()
    except FileIOError as e:
        print_file_io_err(e)
        return

    current_converter = settings.get("converter") or str(default_converter_path())
    current_args = settings.get("converter_args", list(DEFAULT_CONVERTER_ARGS))

    converter, converter_args = prompt_converter_settings(current_converter, current_args)

    try:
        check_executable(Path(converter))
    except ConfigurationError as e:
        pr(f"[yellow]⚠ Warning:[/yellow] {escape(e.message)} Saving it anyway.")

    try:
        save_config(converter, converter_args)
    except FileIOError as e:
        print_file_io_err(e)

    pr("[green]Config saved.[/green]\n")


def print_configuration_err(e: ConfigurationError) -> None:
    """
    Displays a user-friendly error message for an unusable configuration.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Configuration Error[/bold red]")
    pr(f"[red]**ERROR, {escape(e.message)}[/red]")
    if e.path:
        pr(f"Path: [yellow]{escape(e.path)}[/yellow]")

    pr(
        "\n[yellow]Quick Fix:[/yellow] Check both folders exist and that calibre's "
        "ebook-convert is installed (see --calibre and --configure)."
    )
    raise typer.Exit(code=1) from e


def print_aggregation_err(e: AggregationError) -> None:
    """
    Displays a user-friendly error message when the comparison cannot be reported.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Comparison Error[/bold red]")
    pr(f"[red]**ERROR, {escape(e.message)}[/red]")
    if e.original_exception:
        pr(f"\nTechnical details: {escape(str(e.original_exception))}")
    pr("\nNo report was written.")
    raise typer.Exit(code=1) from e


def print_file_io_err(e: FileIOError) -> None:
    """
    Displays a user-friendly error message for file I/O operation failures.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]File I/O Error[/bold red]")
    pr(f"The app encountered an error while working with files: {escape(e.message)}")
    if e.file_path:
        pr(f"File path: [yellow]{escape(e.file_path)}[/yellow]")

    pr("\n[yellow]Quick Fix:[/yellow] Check file permissions and available disk space.")
    if e.original_exception:
        pr(f"\nTechnical details: {escape(str(e.original_exception))}")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Diagnostics: {escape(str(e.diagnostic_info))}")
    raise typer.Exit(code=1) from e


def print_unexpected_err(e: Exception) -> None:
    """
    Displays a user-friendly error message for unexpected errors.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Unexpected Error[/bold red]")
    pr("An unexpected error occurred while processing your request.")
    pr(f"\n[yellow]Error Type:[/yellow] {type(e).__name__}")
    pr(f"[yellow]Error Message:[/yellow] {escape(str(e))}")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Error Type: {type(e).__name__}")
    pr(f"Error Message: {escape(str(e))}")
    if e.__cause__:
        pr(f"Caused by: {escape(str(e.__cause__))}")

    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
