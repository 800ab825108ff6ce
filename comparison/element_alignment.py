"""Sibling list alignment: pair child elements of two matched parents."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from comparison.models import DocumentElement
from comparison.options import ComparisonOptions
from utils.logging import logger
from utils.performance import Deadline
from utils.validation import check_sibling_width

SimilarityFn = Callable[[DocumentElement, DocumentElement], float]
ScoredPair = Tuple[int, int, float]  # (before position, after position, similarity)


@dataclass(frozen=True)
class SiblingMatch:
    """Positions are indices into the sibling lists handed to ``match_siblings``."""
    matched_pairs: Tuple[ScoredPair, ...]
    unmatched_before: Tuple[int, ...]
    unmatched_after: Tuple[int, ...]
    strategy: str = "greedy"


def match_siblings(
    before: Sequence[DocumentElement],
    after: Sequence[DocumentElement],
    similarity_fn: SimilarityFn,
    options: ComparisonOptions,
    deadline: Optional[Deadline] = None,
) -> SiblingMatch:
    """
    Pair elements of two sibling lists by content, ignoring their positions.

    The default greedy strategy repeatedly commits the highest-scoring
    remaining pair while it clears ``options.similarity_threshold``. It is
    not globally optimal; ``matching_strategy="optimal"`` solves the
    maximum-weight assignment instead at O(n^3) cost.

    Lists wider than ``options.max_sibling_width`` raise ResourceLimitError,
    or are paired by position when ``options.sibling_overflow`` is
    ``"positional"``.

    Args:
        before: Ordered children of the "before" parent
        after: Ordered children of the "after" parent
        similarity_fn: Pairwise element similarity in [0, 1]
        options: Comparison options (threshold, strategy, width guard)
        deadline: Optional deadline checked while scoring

    Returns:
        SiblingMatch with matched pairs and ascending unmatched positions
    """
    deadline = deadline or Deadline()
    n, m = len(before), len(after)

    if n == 0 or m == 0:
        return SiblingMatch((), tuple(range(n)), tuple(range(m)), options.matching_strategy)

    if max(n, m) > options.max_sibling_width:
        if options.sibling_overflow == "error":
            check_sibling_width(n, m, options.max_sibling_width)
        logger.warning(
            "Sibling lists of %d/%d elements exceed width %d, pairing by position",
            n,
            m,
            options.max_sibling_width,
        )
        return _positional_match(before, after, similarity_fn, deadline)

    matrix = similarity_matrix(before, after, similarity_fn, deadline)
    if options.matching_strategy == "optimal":
        pairs = _optimal_pairs(matrix, options.similarity_threshold)
    else:
        pairs = _greedy_pairs(matrix, options.similarity_threshold)

    matched_before = {i for i, _, _ in pairs}
    matched_after = {j for _, j, _ in pairs}
    result = SiblingMatch(
        matched_pairs=tuple(pairs),
        unmatched_before=tuple(i for i in range(n) if i not in matched_before),
        unmatched_after=tuple(j for j in range(m) if j not in matched_after),
        strategy=options.matching_strategy,
    )
    logger.debug(
        "Matched %d of %d/%d siblings (%s)",
        len(pairs),
        n,
        m,
        options.matching_strategy,
    )
    return result


def similarity_matrix(
    before: Sequence[DocumentElement],
    after: Sequence[DocumentElement],
    similarity_fn: SimilarityFn,
    deadline: Optional[Deadline] = None,
) -> np.ndarray:
    """Score every (before[i], after[j]) pair."""
    matrix = np.zeros((len(before), len(after)), dtype=float)
    for i, elem_a in enumerate(before):
        if deadline is not None:
            deadline.check("sibling scoring")
        for j, elem_b in enumerate(after):
            matrix[i, j] = similarity_fn(elem_a, elem_b)
    return matrix


def _greedy_pairs(matrix: np.ndarray, threshold: float) -> List[ScoredPair]:
    # argmax returns the first maximum in row-major order, so ties go to the
    # lowest before position and then the lowest after position
    work = matrix.copy()
    pairs: List[ScoredPair] = []
    for _ in range(min(work.shape)):
        i, j = divmod(int(np.argmax(work)), work.shape[1])
        if work[i, j] < threshold:
            break
        pairs.append((i, j, float(matrix[i, j])))
        work[i, :] = -1.0
        work[:, j] = -1.0
    pairs.sort(key=lambda pair: pair[0])
    return pairs


def _optimal_pairs(matrix: np.ndarray, threshold: float) -> List[ScoredPair]:
    from scipy.optimize import linear_sum_assignment

    # Cells under the threshold can never be committed, so they carry no weight
    weights = np.where(matrix >= threshold, matrix, 0.0)
    rows, cols = linear_sum_assignment(weights, maximize=True)
    return [
        (int(i), int(j), float(matrix[i, j]))
        for i, j in zip(rows, cols)
        if matrix[i, j] >= threshold
    ]


def _positional_match(
    before: Sequence[DocumentElement],
    after: Sequence[DocumentElement],
    similarity_fn: SimilarityFn,
    deadline: Deadline,
) -> SiblingMatch:
    common = min(len(before), len(after))
    pairs: List[ScoredPair] = []
    for k in range(common):
        deadline.check("positional pairing")
        pairs.append((k, k, similarity_fn(before[k], after[k])))
    return SiblingMatch(
        matched_pairs=tuple(pairs),
        unmatched_before=tuple(range(common, len(before))),
        unmatched_after=tuple(range(common, len(after))),
        strategy="positional",
    )
