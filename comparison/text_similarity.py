"""Bag-of-words text similarity and element/shape similarity scores."""
from __future__ import annotations

import math
import re
from collections import Counter
from typing import List

from comparison.models import DocumentElement, DocumentStructure
from utils.text_normalization import prepare_text

_NON_WORD_RE = re.compile(r"\W+")

TYPE_MISMATCH_FACTOR = 0.5


def tokenize(text: str) -> List[str]:
    """Lower-case ``text`` and split it on non-word characters, dropping empty tokens."""
    return [token for token in _NON_WORD_RE.split(text.lower()) if token]


def text_similarity(text1: str | None, text2: str | None) -> float:
    """
    Cosine similarity of word-frequency vectors.

    No stemming or stop-word removal is applied here; callers that need
    domain tuning preprocess the text first.

    Returns:
        1.0 when both texts are empty, 0.0 when exactly one is empty,
        otherwise the cosine similarity in [0, 1]
    """
    if not text1 and not text2:
        return 1.0
    if not text1 or not text2:
        return 0.0

    freqs1 = Counter(tokenize(text1))
    freqs2 = Counter(tokenize(text2))

    dot_product = sum(count * freqs2[word] for word, count in freqs1.items() if word in freqs2)
    norm1_sq = sum(count * count for count in freqs1.values())
    norm2_sq = sum(count * count for count in freqs2.values())

    if norm1_sq == 0 or norm2_sq == 0:
        return 0.0
    # sqrt of the integer product keeps identical bags at exactly 1.0
    return min(1.0, dot_product / math.sqrt(norm1_sq * norm2_sq))


def element_similarity(
    before: DocumentElement,
    after: DocumentElement,
    ignore_whitespace: bool = True,
    ignore_case: bool = False,
) -> float:
    """
    Similarity of two tree nodes in [0, 1].

    Differing element types cap the score at 0.5 even for identical text.
    """
    score = text_similarity(
        prepare_text(before.text, ignore_whitespace, ignore_case),
        prepare_text(after.text, ignore_whitespace, ignore_case),
    )
    if before.type != after.type:
        return TYPE_MISMATCH_FACTOR * score
    return score


def structural_similarity(before: DocumentStructure, after: DocumentStructure) -> float:
    """
    Coarse shape similarity of two document roots, ignoring text.

    Looks only at the root types and the types of their direct children
    (index-aligned).
    """
    root_a = before.hierarchy
    root_b = after.hierarchy
    children_a = before.children(root_a)
    children_b = after.children(root_b)

    similarity = 0.5 if root_a.type == root_b.type else 0.3

    if children_a and children_b:
        if len(children_a) == len(children_b):
            similarity += 0.3
            matching = _matching_types(children_a, children_b)
            similarity += 0.2 * (matching / len(children_a))
        else:
            similarity += 0.1
            overlap = min(len(children_a), len(children_b))
            matching = _matching_types(children_a, children_b)
            similarity += 0.1 * (matching / overlap)
    elif not children_a and not children_b:
        similarity += 0.5
    else:
        similarity += 0.1

    # drop float noise so identical shapes score exactly 1.0
    return round(min(similarity, 1.0), 10)


def _matching_types(children_a: List[DocumentElement], children_b: List[DocumentElement]) -> int:
    return sum(1 for a, b in zip(children_a, children_b) if a.type == b.type)
