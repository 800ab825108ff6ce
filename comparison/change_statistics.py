"""Change counts and character-level statistics."""
from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Sequence

from comparison.models import (
    ChangeSignificance,
    ChangeStatistics,
    ChangeSummary,
    ChangeType,
    ElementChange,
)


def summarize_changes(changes: Sequence[ElementChange]) -> ChangeSummary:
    """Count changes by type and by significance."""
    by_type = Counter(change.type for change in changes)
    by_significance = Counter(change.significance for change in changes)
    return ChangeSummary(
        total=len(changes),
        added=by_type[ChangeType.ADDED],
        removed=by_type[ChangeType.REMOVED],
        modified=by_type[ChangeType.MODIFIED],
        moved=by_type[ChangeType.MOVED],
        unchanged=by_type[ChangeType.UNCHANGED],
        major=by_significance[ChangeSignificance.MAJOR],
        minor=by_significance[ChangeSignificance.MINOR],
        trivial=by_significance[ChangeSignificance.TRIVIAL],
    )


def calculate_char_statistics(changes: Iterable[ElementChange], processing_time: float = 0.0) -> ChangeStatistics:
    """
    Estimate added, removed and changed character counts.

    For a MODIFIED record the length difference goes to added or removed,
    and ``min(len) * (1 - similarity)`` is added to the changed estimate.
    This is a proxy; no character-level diff is computed.
    """
    added_chars = 0
    removed_chars = 0
    changed_chars = 0.0

    for change in changes:
        if change.type == ChangeType.ADDED:
            added_chars += len(change.content_after or "")
        elif change.type == ChangeType.REMOVED:
            removed_chars += len(change.content_before or "")
        elif change.type == ChangeType.MODIFIED:
            before_len = len(change.content_before or "")
            after_len = len(change.content_after or "")
            if before_len > after_len:
                removed_chars += before_len - after_len
            else:
                added_chars += after_len - before_len
            changed_chars += min(before_len, after_len) * (1 - (change.similarity or 0.0))

    return ChangeStatistics(
        added_chars=added_chars,
        removed_chars=removed_chars,
        changed_chars=int(math.floor(changed_chars + 0.5)),
        processing_time=processing_time,
    )
