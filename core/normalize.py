"""
Whitespace clean-up applied to converted text before comparison.
"""

import re

_CARRIAGE_RETURNS = re.compile(r"\r")
_SPACE_RUNS = re.compile(r" {2,}")
_NEWLINE_RUNS = re.compile(r"\n{3,}")
_TAB_RUNS = re.compile(r"\t{2,}")


def normalize_text(raw: str) -> str:
    """
    Normalize line endings and whitespace runs.

    Carriage returns are removed, runs of spaces and of tabs collapse to one,
    three or more newlines collapse to a single blank line, and the result is
    stripped. Applying it twice gives the same text as applying it once.
    """
    text = _CARRIAGE_RETURNS.sub("", raw)
    text = _SPACE_RUNS.sub(" ", text)
    text = _NEWLINE_RUNS.sub("\n\n", text)
    text = _TAB_RUNS.sub("\t", text)
    return text.strip()
