"""Classify change records into MAJOR / MINOR / TRIVIAL significance."""
from __future__ import annotations

import re
from typing import Optional

from comparison.models import ChangeSignificance, ChangeType
from comparison.options import SignificanceThresholds

CRITICAL_TERMS_RE = re.compile(
    r"\b(warning|caution|danger|important|critical|safety|emergency|required|mandatory|must|never|always)\b",
    re.IGNORECASE,
)

CRITICAL_THRESHOLD_BOOST = 0.1


def classify_significance(
    change_type: ChangeType,
    similarity: Optional[float],
    thresholds: SignificanceThresholds,
) -> ChangeSignificance:
    """
    Map a change to its significance bucket.

    Added and removed elements are always MAJOR. Otherwise the boundaries
    are strict: a similarity equal to ``thresholds.major`` is MINOR, not MAJOR.
    """
    if change_type in (ChangeType.ADDED, ChangeType.REMOVED):
        return ChangeSignificance.MAJOR
    return _bucket(similarity if similarity is not None else 0.0, thresholds)


def contains_critical_terms(text: Optional[str]) -> bool:
    return bool(text) and CRITICAL_TERMS_RE.search(text) is not None


def classify_text_significance(
    before: str,
    after: str,
    similarity: float,
    thresholds: SignificanceThresholds,
) -> ChangeSignificance:
    """
    Significance for a free-standing text block change.

    Text mentioning warnings, safety or obligations is judged more strictly:
    both thresholds move up by 0.1.
    """
    if contains_critical_terms(before) or contains_critical_terms(after):
        thresholds = thresholds.raised(CRITICAL_THRESHOLD_BOOST)
    return _bucket(similarity, thresholds)


def _bucket(similarity: float, thresholds: SignificanceThresholds) -> ChangeSignificance:
    if similarity < thresholds.major:
        return ChangeSignificance.MAJOR
    if similarity < thresholds.minor:
        return ChangeSignificance.MINOR
    return ChangeSignificance.TRIVIAL
