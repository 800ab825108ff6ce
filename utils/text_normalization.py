"""Text preprocessing applied before similarity scoring."""
from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """
    Collapse runs of whitespace into single spaces and strip the ends.

    Examples:
        >>> collapse_whitespace("  Multiple   Spaces\\n here ")
        'Multiple Spaces here'
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def prepare_text(text: str | None, ignore_whitespace: bool = True, ignore_case: bool = False) -> str:
    """
    Apply the comparison options to a text block.

    Args:
        text: Raw element text (None is treated as empty)
        ignore_whitespace: Collapse whitespace runs
        ignore_case: Lower-case the text

    Returns:
        Preprocessed text
    """
    prepared = text or ""
    if ignore_whitespace:
        prepared = collapse_whitespace(prepared)
    if ignore_case:
        prepared = prepared.lower()
    return prepared
