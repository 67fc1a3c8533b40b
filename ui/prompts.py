"""
Interactive prompts for the ebook-crosscheck CLI.

Only the `--configure` flow is interactive: it asks for the converter path and
its extra arguments, prefilled with the current values, and hands the answers
back to the caller for saving. Regular comparison runs never prompt, so they
can be scripted.

Dependencies:
    - inquirer: Interactive terminal prompts
    - rich: Terminal formatting and colors
    - typer: CLI framework integration
"""

import shlex

import inquirer  # type: ignore
from inquirer.themes import GreenPassion  # type: ignore
from rich import print as pr
import typer


def prompt_converter_settings(
    current_converter: str, current_args: list[str]
) -> tuple[str, list[str]]:
    """
    Ask for the converter executable and its extra arguments.

    Args:
        current_converter: Value shown as the default for the converter path.
        current_args: Arguments shown as the default, space separated.

    Returns:
        The converter path and the parsed list of extra arguments.

    Raises:
        typer.Exit: If the prompt is cancelled or the converter path is empty.
    """
    pr("\n[bold green]Configure the ebook converter.[/bold green]\n")

    questions = [
        inquirer.Text(
            "converter",
            message="Path to calibre's ebook-convert",
            default=current_converter,
        ),
        inquirer.Text(
            "converter_args",
            message="Extra converter arguments",
            default=shlex.join(current_args),
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())

    if not answers:
        raise typer.Exit(code=1)

    converter = (answers.get("converter") or "").strip()
    if not converter:
        pr("\n[bold][red]Error:[/bold] The converter path is required.")
        raise typer.Exit(code=1)

    try:
        converter_args = shlex.split(answers.get("converter_args") or "")
    except ValueError as e:
        pr(f"\n[bold][red]Error:[/bold] Could not parse the converter arguments: {e}")
        raise typer.Exit(code=1) from e

    return converter, converter_args
