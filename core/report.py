"""
Assembles the HTML comparison report.

The report aggregator turns the comparison engine's match table into one
summary entry per (left, right) pair, embeds the engine's detailed fragment
unchanged, and adds the run metadata: both folders, the ordered file lists,
the generation time and the options used. The output is a single HTML file
with inline CSS and no external resources.
"""

from dataclasses import asdict
from datetime import datetime, timezone
from html import escape
from pathlib import Path

from constants import APP_NAME, DETAIL_ANCHOR_TEMPLATE
from core.exceptions import AggregationError, EmptyFileSetError
from core.file_io import FilesystemFileWriter, FileWriter
from core.models import (
    ComparisonOptions,
    ComparisonResult,
    FileSet,
    MatchRecord,
    MatchStatistic,
    ReportDocument,
)
from models import ReportSide
from utils import resolve_against_cwd

REPORT_CSS = """\
* { box-sizing: border-box; }
html, body { height: 100%; font-family: sans-serif; }
body { margin: 1em; }
.summary { margin: 1em; border: 1px solid #aaa; text-align: center; display: inline-block; padding: 3em; text-decoration: none; }
.summary span { color: #aaa; }
.summary .stats { color: red; padding-top: 0.6em; }
div.summary .stats { color: #0A0; }
.doc { display: inline-block; width: 49%; overflow: scroll; height: 60%; max-height: 800px; border: 1px solid #aaa; padding: 1em; }
.doc > a[data-match]::before { content: "# " attr(data-match); border: 1px solid #00a; background-color: #aaf; position: relative; top: -1em; font-size: 0.6em; border-radius: 4px; padding: 0.1em 1em; white-space: nowrap; }
.doc > a { text-decoration: none; }
.doc > a:hover { text-decoration: underline; }
.match { color: #e33; }
.match-partial { color: #007F00; }
.match-removed { color: #333; background-color: #eee; font-size: 0.9em; font-style: italic; }
.match-removed::before { content: "..."; padding: 0 1em 0 0; }
.match-removed::after { content: "..."; padding: 0 0 0 1em; }
@media screen and (max-width: 700px) { .doc { display: block; width: 90%; } }
"""


def detail_anchor(left_index: int, right_index: int, side: ReportSide) -> str:
    return DETAIL_ANCHOR_TEMPLATE.format(
        left=left_index, right=right_index, side=side.value
    )


def compute_statistic(
    left_index: int, right_index: int, records: list[MatchRecord]
) -> MatchStatistic:
    return MatchStatistic(
        left_index=left_index,
        right_index=right_index,
        incident_count=len(records),
        word_count=sum(record.left.word_count for record in records),
    )


def compute_statistics(
    left_count: int,
    right_count: int,
    matches: list[list[list[MatchRecord]]],
) -> list[MatchStatistic]:
    """
    Compute one MatchStatistic per (left, right) pair, row by row.

    Raises:
        AggregationError: If `matches` is not a left_count x right_count table.
    """
    if len(matches) != left_count or any(len(row) != right_count for row in matches):
        raise AggregationError(
            f"Comparison returned a match table that does not fit "
            f"{left_count} x {right_count} files"
        )

    return [
        compute_statistic(left_index, right_index, matches[left_index][right_index])
        for left_index in range(left_count)
        for right_index in range(right_count)
    ]


def render_summary_entry(stat: MatchStatistic, left_name: str, right_name: str) -> str:
    """
    Render the summary box for one pair.

    Pairs with at least one incident link to the left document of their
    detailed comparison; pairs without any are plain boxes.
    """
    body = (
        f'<div class="left">#{stat.left_index}. {escape(left_name)}</div>'
        "<span>vs.</span>"
        f'<div class="right">#{stat.right_index}. {escape(right_name)}</div>'
        f'<div class="stats">{stat.word_count} Words in {stat.incident_count} incidents</div>'
    )
    if stat.incident_count == 0:
        return f'<div class="summary">{body}</div>'

    anchor = detail_anchor(stat.left_index, stat.right_index, ReportSide.LEFT)
    return f'<a href="#{anchor}" class="summary">{body}</a>'


def _render_file_list(folder: Path, names: list[str]) -> str:
    items = "".join(f"<li>{escape(name)}</li>" for name in names)
    return f"<p>Files in <code>{escape(str(folder))}</code>:\n<ol start=0>{items}</ol></p>"


def render_options(options: ComparisonOptions) -> str:
    lines = [f"{name}: {value}" for name, value in asdict(options).items()]
    return "<p>" + ",<br>\n".join(escape(line) for line in lines) + "</p>"


def render_report(document: ReportDocument) -> str:
    summary = "\n".join(
        render_summary_entry(
            stat,
            document.left_names[stat.left_index],
            document.right_names[stat.right_index],
        )
        for stat in document.statistics
    )
    generated = document.generated_at.astimezone(timezone.utc).strftime(
        "%a, %d %b %Y %H:%M:%S GMT"
    )

    return (
        "<!DOCTYPE html>\n"
        f"<html><!-- Generated by {APP_NAME} -->\n"
        '<head><meta charset="UTF-8">\n'
        "<title>Comparison results</title>\n"
        f"<style>\n{REPORT_CSS}</style>\n"
        "</head><body>\n"
        "<h1>Comparison results</h1>\n"
        f"{_render_file_list(document.left_folder, document.left_names)}\n"
        f"{_render_file_list(document.right_folder, document.right_names)}\n"
        f"<p>Date: {generated}</p>\n"
        "\n<h2>Summary</h2>\n"
        f"{summary}\n"
        "\n<h1>Detailed Comparison</h1>\n"
        f"{document.detail_html}\n"
        "\n<h2>Options Used</h2>\n"
        f"{render_options(document.options)}\n"
        "</body></html>\n"
    )


def aggregate(
    left: FileSet,
    right: FileSet,
    comparison: ComparisonResult,
    options: ComparisonOptions,
    generated_at: datetime | None = None,
) -> ReportDocument:
    """
    Build the report for a finished comparison.

    Args:
        left: The converted left (original) files.
        right: The converted right (submitted) files.
        comparison: The engine's output for exactly these two file sets.
        options: The options the engine was run with.
        generated_at: Report timestamp. Defaults to now, in UTC.

    Returns:
        ReportDocument with its rendered `content`.

    Raises:
        EmptyFileSetError: If either file set is empty.
        AggregationError: If the match table does not fit the file sets.
    """
    if len(left) < 1:
        raise EmptyFileSetError(str(left.folder))
    if len(right) < 1:
        raise EmptyFileSetError(str(right.folder))

    statistics = compute_statistics(len(left), len(right), comparison.matches)

    document = ReportDocument(
        left_folder=left.folder,
        right_folder=right.folder,
        left_names=left.names,
        right_names=right.names,
        statistics=statistics,
        options=options,
        generated_at=generated_at or datetime.now(timezone.utc),
        detail_html=comparison.html,
    )
    document.content = render_report(document)
    return document


def write_report(
    document: ReportDocument,
    output: Path,
    file_writer: FileWriter | None = None,
) -> Path:
    """
    Write the rendered report to `output` in one piece.

    Relative paths are resolved against the current working directory.

    Returns:
        The absolute path written.

    Raises:
        InvalidFilePathError: If the destination folder is missing or read-only.
        FileWriteError: If the write fails.
    """
    target = resolve_against_cwd(output)
    writer = file_writer if file_writer is not None else FilesystemFileWriter.from_path(target)
    writer.write_file(document.content)
    return target
