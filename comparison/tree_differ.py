"""Structural diff of two document trees, walked with an explicit work stack."""
from __future__ import annotations

from typing import List, Optional, Tuple

from comparison.element_alignment import match_siblings
from comparison.models import (
    ChangeSignificance,
    ChangeType,
    DocumentElement,
    DocumentStructure,
    ElementChange,
)
from comparison.options import ComparisonOptions
from comparison.significance import classify_significance
from comparison.text_similarity import element_similarity
from utils.logging import logger
from utils.performance import Deadline

_COMPARE = "compare"
_REMOVED = "removed"
_ADDED = "added"

# (kind, before element, after element, precomputed similarity)
_WorkItem = Tuple[str, Optional[DocumentElement], Optional[DocumentElement], Optional[float]]


class TreeDiffer:
    """
    Walk two document trees from their roots and emit one change per visited node.

    Matched pairs become UNCHANGED (similarity exactly 1.0) or MODIFIED
    records, and their children are aligned with ``match_siblings``.
    Unmatched subtrees are emitted node by node as REMOVED or ADDED.

    Records come out in pre-order over the "before" tree, with each
    parent's unmatched "after" children following its "before" children.
    MOVED is never produced: sibling matching ignores positions, so a moved
    element is indistinguishable from one matched in place.
    """

    def __init__(
        self,
        before: DocumentStructure,
        after: DocumentStructure,
        options: Optional[ComparisonOptions] = None,
        deadline: Optional[Deadline] = None,
    ):
        self.before = before
        self.after = after
        self.options = options or ComparisonOptions()
        self.deadline = deadline or Deadline()
        self._changes: List[ElementChange] = []

    def similarity(self, elem_a: DocumentElement, elem_b: DocumentElement) -> float:
        return element_similarity(
            elem_a,
            elem_b,
            ignore_whitespace=self.options.ignore_whitespace,
            ignore_case=self.options.ignore_case,
        )

    def diff(self) -> List[ElementChange]:
        """Compare the two hierarchies and return the ordered change records."""
        self._changes = []
        # Work items are popped in emission order, so children are pushed reversed
        stack: List[_WorkItem] = [(_COMPARE, self.before.hierarchy, self.after.hierarchy, None)]
        while stack:
            kind, elem_a, elem_b, similarity = stack.pop()
            if kind == _REMOVED:
                self._emit_removed(elem_a)
            elif kind == _ADDED:
                self._emit_added(elem_b)
            else:
                stack.extend(reversed(self._compare(elem_a, elem_b, similarity)))
        logger.debug("Tree diff produced %d change records", len(self._changes))
        return list(self._changes)

    def _compare(
        self,
        elem_a: DocumentElement,
        elem_b: DocumentElement,
        similarity: Optional[float] = None,
    ) -> List[_WorkItem]:
        """Emit the record for a matched pair and return the follow-up work for its children."""
        self.deadline.check("tree diff")
        if similarity is None:
            similarity = self.similarity(elem_a, elem_b)

        change_type = ChangeType.UNCHANGED if similarity == 1.0 else ChangeType.MODIFIED
        self._changes.append(ElementChange(
            type=change_type,
            significance=classify_significance(
                change_type, similarity, self.options.significance_thresholds
            ),
            element_type=elem_a.type,
            before=elem_a,
            after=elem_b,
            similarity=similarity,
            content_before=elem_a.text,
            content_after=elem_b.text,
            metadata={"before_index": elem_a.index, "after_index": elem_b.index},
        ))

        children_a = self.before.children(elem_a)
        children_b = self.after.children(elem_b)

        if children_a and children_b:
            return self._compare_children(children_a, children_b)
        if children_a:
            return [(_REMOVED, child, None, None) for child in children_a]
        return [(_ADDED, None, child, None) for child in children_b]

    def _compare_children(
        self,
        children_a: List[DocumentElement],
        children_b: List[DocumentElement],
    ) -> List[_WorkItem]:
        match = match_siblings(children_a, children_b, self.similarity, self.options, self.deadline)
        pairs = {i: (j, score) for i, j, score in match.matched_pairs}

        work: List[_WorkItem] = []
        for position, child in enumerate(children_a):
            if position in pairs:
                j, score = pairs[position]
                work.append((_COMPARE, child, children_b[j], score))
            else:
                work.append((_REMOVED, child, None, None))

        for position in match.unmatched_after:
            work.append((_ADDED, None, children_b[position], None))
        return work

    def _emit_removed(self, element: DocumentElement) -> None:
        for node in self.before.iter_subtree(element):
            self._changes.append(ElementChange(
                type=ChangeType.REMOVED,
                significance=ChangeSignificance.MAJOR,
                element_type=node.type,
                before=node,
                content_before=node.text,
                metadata={"before_index": node.index},
            ))

    def _emit_added(self, element: DocumentElement) -> None:
        for node in self.after.iter_subtree(element):
            self._changes.append(ElementChange(
                type=ChangeType.ADDED,
                significance=ChangeSignificance.MAJOR,
                element_type=node.type,
                after=node,
                content_after=node.text,
                metadata={"after_index": node.index},
            ))


def diff_trees(
    before: DocumentStructure,
    after: DocumentStructure,
    options: Optional[ComparisonOptions] = None,
    deadline: Optional[Deadline] = None,
) -> List[ElementChange]:
    """Convenience wrapper around ``TreeDiffer(...).diff()``."""
    return TreeDiffer(before, after, options, deadline).diff()
