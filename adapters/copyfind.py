"""
Bundled phrase matching engine in the style of Copyfind.

Texts are split into words, compared through short exact "seed" runs found
with a word n-gram index, and neighbouring runs separated by at most
`mismatch_tolerance` words are merged into one phrase. Phrases shorter than
`phrase_length` are dropped, and a pair whose matched words add up to less
than `word_threshold` reports no matches at all.

The engine satisfies `core.comparison.ComparisonEngine`; any other engine can
be used instead.
"""

from collections import defaultdict
from dataclasses import dataclass
from html import escape
import re
import time

from core.models import ComparisonOptions, ComparisonResult, MatchRecord, MatchSpan
from core.report import detail_anchor
from models import ReportSide

# Longest exact run required before a phrase is considered
MAX_SEED_LENGTH = 8

_PUNCTUATION = re.compile(r"[^\w]+")


@dataclass(frozen=True)
class _Run:
    left_start: int
    right_start: int
    length: int

    @property
    def left_end(self) -> int:
        return self.left_start + self.length

    @property
    def right_end(self) -> int:
        return self.right_start + self.length


def tokenize(text: str, options: ComparisonOptions) -> tuple[list[str], list[str]]:
    """
    Split `text` into words.

    Returns:
        The original words (for display) and their comparison keys, after
        case and punctuation folding as requested by `options`.
    """
    words = text.split()
    keys = []
    for word in words:
        key = word.lower() if options.ignore_case else word
        if options.ignore_punctuation:
            key = _PUNCTUATION.sub("", key)
        keys.append(key)
    return words, keys


def _seed_length(options: ComparisonOptions) -> int:
    return max(1, min(options.phrase_length, MAX_SEED_LENGTH))


def _index_ngrams(keys: list[str], size: int) -> dict[tuple[str, ...], list[int]]:
    index: dict[tuple[str, ...], list[int]] = defaultdict(list)
    for start in range(len(keys) - size + 1):
        index[tuple(keys[start : start + size])].append(start)
    return index


def _run_length(
    left: list[str], right: list[str], left_start: int, right_start: int, seed: int
) -> int:
    """Extend a `seed` word match at the given positions as far as both sides agree."""
    length = seed
    while (
        left_start + length < len(left)
        and right_start + length < len(right)
        and left[left_start + length] == right[right_start + length]
    ):
        length += 1
    return length


def _find_runs(left: list[str], right: list[str], seed: int) -> list[_Run]:
    """
    Find maximal exact runs of at least `seed` words, ordered by left position.

    For each left position the longest run among the candidate right positions
    wins, and scanning continues after that run.
    """
    index = _index_ngrams(right, seed)
    runs: list[_Run] = []
    position = 0

    while position <= len(left) - seed:
        candidates = index.get(tuple(left[position : position + seed]))
        if not candidates:
            position += 1
            continue

        # max() keeps the first of equally long runs
        best = max(
            (
                _Run(position, right_start, _run_length(left, right, position, right_start, seed))
                for right_start in candidates
            ),
            key=lambda run: run.length,
        )
        runs.append(best)
        position = best.left_end

    return runs


def _merge_runs(runs: list[_Run], tolerance: int) -> list[MatchRecord]:
    """Join runs that follow each other on both sides within `tolerance` words."""
    records: list[MatchRecord] = []
    current: list[_Run] = []

    def flush() -> None:
        if current:
            first, last = current[0], current[-1]
            records.append(
                MatchRecord(
                    left=MatchSpan(first.left_start, last.left_end - first.left_start),
                    right=MatchSpan(first.right_start, last.right_end - first.right_start),
                )
            )

    for run in runs:
        if current:
            previous = current[-1]
            left_gap = run.left_start - previous.left_end
            right_gap = run.right_start - previous.right_end
            if 0 <= left_gap <= tolerance and 0 <= right_gap <= tolerance:
                current.append(run)
                continue
            flush()
        current = [run]
    flush()

    return records


def find_matches(
    left_keys: list[str], right_keys: list[str], options: ComparisonOptions
) -> list[MatchRecord]:
    """
    Find the matching phrases between two tokenized texts.

    Returns:
        Match records of at least `phrase_length` words, or an empty list when
        their total falls below `word_threshold`.
    """
    runs = _find_runs(left_keys, right_keys, _seed_length(options))
    records = [
        record
        for record in _merge_runs(runs, options.mismatch_tolerance)
        if record.left.word_count >= options.phrase_length
    ]
    if sum(record.left.word_count for record in records) < options.word_threshold:
        return []
    return records


def _render_document(
    words: list[str],
    spans: list[tuple[int, MatchSpan]],
    left_index: int,
    right_index: int,
    side: ReportSide,
) -> str:
    """
    Render one side of a pair, wrapping every matched span in a link to the
    same match number on the other side.
    """
    own = detail_anchor(left_index, right_index, side)
    other_side = ReportSide.RIGHT if side == ReportSide.LEFT else ReportSide.LEFT
    other = detail_anchor(left_index, right_index, other_side)

    parts: list[str] = []
    cursor = 0
    for number, span in sorted(spans, key=lambda item: item[1].start):
        # Right side spans of different matches may overlap, show the first only
        if span.start < cursor:
            continue
        if span.start > cursor:
            parts.append(escape(" ".join(words[cursor : span.start])))
        matched = escape(" ".join(words[span.start : span.start + span.word_count]))
        parts.append(
            f'<a id="{own}-{number}" href="#{other}-{number}" '
            f'data-match="{number}" class="match">{matched}</a>'
        )
        cursor = span.start + span.word_count
    if cursor < len(words):
        parts.append(escape(" ".join(words[cursor:])))

    return f'<div class="doc" id="{own}">{" ".join(parts)}</div>'


def render_pair(
    left_words: list[str],
    right_words: list[str],
    records: list[MatchRecord],
    left_index: int,
    right_index: int,
) -> str:
    heading = f"<h2>#{left_index} vs. #{right_index}</h2>"
    left_doc = _render_document(
        left_words,
        [(number, record.left) for number, record in enumerate(records)],
        left_index,
        right_index,
        ReportSide.LEFT,
    )
    right_doc = _render_document(
        right_words,
        [(number, record.right) for number, record in enumerate(records)],
        left_index,
        right_index,
        ReportSide.RIGHT,
    )
    return f"{heading}\n{left_doc}\n{right_doc}"


class CopyfindEngine:
    """
    Default ComparisonEngine.

    Compares every left text with every right text and, when
    `options.build_report` is set, renders both texts of each matching pair
    side by side with the matched phrases highlighted.
    """

    def compare(
        self,
        left: list[str],
        right: list[str],
        options: ComparisonOptions,
    ) -> ComparisonResult:
        started = time.perf_counter()

        left_tokens = [tokenize(text, options) for text in left]
        right_tokens = [tokenize(text, options) for text in right]

        matches: list[list[list[MatchRecord]]] = []
        fragments: list[str] = []

        for left_index, (left_words, left_keys) in enumerate(left_tokens):
            row: list[list[MatchRecord]] = []
            for right_index, (right_words, right_keys) in enumerate(right_tokens):
                records = find_matches(left_keys, right_keys, options)
                row.append(records)
                if records and options.build_report:
                    fragments.append(
                        render_pair(
                            left_words, right_words, records, left_index, right_index
                        )
                    )
            matches.append(row)

        return ComparisonResult(
            execution_time=time.perf_counter() - started,
            matches=matches,
            html="\n".join(fragments),
        )
