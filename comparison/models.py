"""Shared data models for document structures and comparison results."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class StructureType(str, Enum):
    SECTION = "section"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "list_item"
    TABLE = "table"
    TABLE_CELL = "table_cell"
    KEY_VALUE = "key_value"
    FORM_FIELD = "form_field"
    REFERENCE = "reference"
    CITATION = "citation"
    FOOTNOTE = "footnote"
    IMAGE = "image"


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    MOVED = "moved"  # reserved, never emitted by the differ
    UNCHANGED = "unchanged"


class ChangeSignificance(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    TRIVIAL = "trivial"


_EMPTY_METADATA: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class DocumentElement:
    """
    One node of a document tree, stored in a ``DocumentStructure`` arena.

    Children are referenced by arena index. ``parent_index`` exists for
    lookups only; traversal always goes downward through ``children_indices``.
    """
    type: StructureType
    text: str = ""
    level: Optional[int] = None
    metadata: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_METADATA)
    children_indices: Tuple[int, ...] = ()
    parent_index: Optional[int] = None
    index: int = 0

    @property
    def has_children(self) -> bool:
        return bool(self.children_indices)

    def to_dict(self) -> Dict[str, Any]:
        """Flat, JSON-ready view of the node (children omitted)."""
        return {
            "index": self.index,
            "type": self.type.value,
            "text": self.text,
            "level": self.level,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class StructureMetadata:
    processing_time: float = 0.0
    confidence: float = 1.0
    page_count: Optional[int] = None
    format: Optional[str] = None
    language: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "StructureMetadata":
        payload = payload or {}
        confidence = payload.get("confidence")
        return cls(
            processing_time=float(payload.get("processing_time", payload.get("processingTime", 0.0)) or 0.0),
            confidence=1.0 if confidence is None else float(confidence),
            page_count=payload.get("page_count", payload.get("pageCount")),
            format=payload.get("format"),
            language=payload.get("language"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processingTime": self.processing_time,
            "confidence": self.confidence,
            "pageCount": self.page_count,
            "format": self.format,
            "language": self.language,
        }


@dataclass(frozen=True)
class DocumentStructure:
    """
    Comparison input: an immutable arena of elements rooted at ``root_index``.

    ``elements`` is derived from the arena (pre-order over the root's
    descendants), so it cannot diverge from ``hierarchy``.
    """
    nodes: Tuple[DocumentElement, ...]
    root_index: int = 0
    title: Optional[str] = None
    metadata: StructureMetadata = field(default_factory=StructureMetadata)

    @property
    def hierarchy(self) -> Optional[DocumentElement]:
        if not self.nodes:
            return None
        return self.nodes[self.root_index]

    @property
    def elements(self) -> List[DocumentElement]:
        root = self.hierarchy
        if root is None:
            return []
        flattened = list(self.iter_subtree(root))
        return flattened[1:]

    def element(self, index: int) -> DocumentElement:
        return self.nodes[index]

    def children(self, element: DocumentElement) -> List[DocumentElement]:
        return [self.nodes[i] for i in element.children_indices]

    def parent(self, element: DocumentElement) -> Optional[DocumentElement]:
        if element.parent_index is None:
            return None
        return self.nodes[element.parent_index]

    def iter_subtree(self, element: DocumentElement) -> Iterator[DocumentElement]:
        """Yield ``element`` and all of its descendants in pre-order."""
        stack = [element.index]
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children_indices))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DocumentStructure":
        """
        Build a structure from its nested JSON form.

        Expected keys: ``title``, ``hierarchy`` (nested ``type``/``text``/
        ``level``/``metadata``/``children``) and ``metadata``. Any ``elements``
        key is ignored because the flat view is derived from the hierarchy.

        Raises:
            InvalidInputError: if ``hierarchy`` is missing or malformed
        """
        from comparison.structure_builder import structure_from_dict

        return structure_from_dict(payload)

    def to_dict(self) -> Dict[str, Any]:
        root = self.hierarchy
        return {
            "title": self.title,
            "hierarchy": self._nested_dict(root) if root is not None else None,
            "elements": [el.to_dict() for el in self.elements],
            "metadata": self.metadata.to_dict(),
        }

    def _nested_dict(self, root: DocumentElement) -> Dict[str, Any]:
        top = {"children": []}
        slots: Dict[int, List[Dict[str, Any]]] = {root.index: top["children"]}
        # pre-order visits a parent before its children, in sibling order
        for element in self.iter_subtree(root):
            node = element.to_dict()
            del node["index"]
            node["children"] = []
            slots[element.index].append(node)
            for child_index in element.children_indices:
                slots[child_index] = node["children"]
        return top["children"][0]


@dataclass(frozen=True)
class ExtractionHeading:
    text: str
    level: int = 1
    page_index: Optional[int] = None


@dataclass(frozen=True)
class ExtractionMetadata:
    title: Optional[str] = None
    format: Optional[str] = None
    page_count: Optional[int] = None
    language: Optional[str] = None
    extraction_engine: Optional[str] = None
    confidence: Optional[float] = None


@dataclass(frozen=True)
class ExtractionResult:
    """Raw text plus detected headings, as produced by a text extractor."""
    text: str = ""
    headings: Tuple[ExtractionHeading, ...] = ()
    metadata: ExtractionMetadata = field(default_factory=ExtractionMetadata)


@dataclass(frozen=True)
class ElementChange:
    """
    One diff record.

    ``content_before``/``content_after`` are string snapshots taken when the
    record is created; ``before``/``after`` are the immutable arena nodes.
    """
    type: ChangeType
    significance: ChangeSignificance
    element_type: StructureType
    before: Optional[DocumentElement] = None
    after: Optional[DocumentElement] = None
    similarity: Optional[float] = None
    content_before: Optional[str] = None
    content_after: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_METADATA)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        content: Dict[str, str] = {}
        if self.content_before is not None:
            content["before"] = self.content_before
        if self.content_after is not None:
            content["after"] = self.content_after
        return {
            "type": self.type.value,
            "significance": self.significance.value,
            "elementType": self.element_type.value,
            "before": self.before.to_dict() if self.before is not None else None,
            "after": self.after.to_dict() if self.after is not None else None,
            "similarity": self.similarity,
            "content": content,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class ChangeSummary:
    total: int = 0
    added: int = 0
    removed: int = 0
    modified: int = 0
    moved: int = 0
    unchanged: int = 0
    major: int = 0
    minor: int = 0
    trivial: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "added": self.added,
            "removed": self.removed,
            "modified": self.modified,
            "moved": self.moved,
            "unchanged": self.unchanged,
            "major": self.major,
            "minor": self.minor,
            "trivial": self.trivial,
        }


@dataclass(frozen=True)
class ChangeStatistics:
    added_chars: int = 0
    removed_chars: int = 0
    changed_chars: int = 0
    processing_time: float = 0.0  # milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "addedChars": self.added_chars,
            "removedChars": self.removed_chars,
            "changedChars": self.changed_chars,
            "processingTime": self.processing_time,
        }


@dataclass(frozen=True)
class ImpactAnalysis:
    category: str
    severity: str  # "low", "medium", "high"
    affected_areas: Tuple[str, ...]
    recommendations: Tuple[str, ...]
    regulatory_impact: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "severity": self.severity,
            "affectedAreas": list(self.affected_areas),
            "recommendations": list(self.recommendations),
            "regulatoryImpact": self.regulatory_impact,
        }


@dataclass(frozen=True)
class DocumentComparison:
    overall_similarity: float
    structure_similarity: float
    content_similarity: float
    changes: Tuple[ElementChange, ...]
    summary: ChangeSummary
    statistics: ChangeStatistics
    impact_analysis: Optional[ImpactAnalysis] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON contract consumed by storage and reporting."""
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "overallSimilarity": self.overall_similarity,
            "structureSimilarity": self.structure_similarity,
            "contentSimilarity": self.content_similarity,
            "changes": [change.to_dict() for change in self.changes],
            "summary": self.summary.to_dict(),
            "statistics": self.statistics.to_dict(),
        }
        if self.impact_analysis is not None:
            payload["impactAnalysis"] = self.impact_analysis.to_dict()
        return payload
