"""Builder-style construction of immutable document structures."""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from comparison.errors import InvalidInputError
from comparison.models import (
    DocumentElement,
    DocumentStructure,
    ExtractionMetadata,
    ExtractionResult,
    StructureMetadata,
    StructureType,
)
from utils.logging import logger

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")

DEFAULT_ROOT_TEXT = "Document Root"


class StructureBuilder:
    """
    Accumulates elements and freezes them into a ``DocumentStructure``.

    The root is created up front at index 0. Elements are appended to a
    private arena; nothing built by ``build()`` is ever touched again, so a
    builder can keep growing after one snapshot without affecting it.
    """

    def __init__(
        self,
        root_type: StructureType | str = StructureType.SECTION,
        root_text: str = "",
        root_level: Optional[int] = 0,
        root_metadata: Optional[Mapping[str, Any]] = None,
        title: Optional[str] = None,
        metadata: Optional[StructureMetadata] = None,
    ):
        self.title = title
        self.metadata = metadata or StructureMetadata()
        self._nodes: List[Dict[str, Any]] = []
        self._add_node(_coerce_type(root_type), root_text, root_level, root_metadata, None)

    @property
    def root(self) -> int:
        return 0

    def __len__(self) -> int:
        return len(self._nodes)

    def add(
        self,
        element_type: StructureType | str,
        text: str = "",
        parent: Optional[int] = None,
        level: Optional[int] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """
        Append an element under ``parent`` (the root when omitted).

        Returns:
            Arena index of the new element
        """
        parent_index = self.root if parent is None else parent
        if not 0 <= parent_index < len(self._nodes):
            raise InvalidInputError(f"Unknown parent index: {parent_index}")
        return self._add_node(_coerce_type(element_type), text, level, metadata, parent_index)

    def _add_node(
        self,
        element_type: StructureType,
        text: Optional[str],
        level: Optional[int],
        metadata: Optional[Mapping[str, Any]],
        parent_index: Optional[int],
    ) -> int:
        index = len(self._nodes)
        self._nodes.append({
            "type": element_type,
            "text": text or "",
            "level": level,
            "metadata": dict(metadata or {}),
            "children": [],
            "parent": parent_index,
        })
        if parent_index is not None:
            self._nodes[parent_index]["children"].append(index)
        return index

    def build(self) -> DocumentStructure:
        nodes = tuple(
            DocumentElement(
                type=node["type"],
                text=node["text"],
                level=node["level"],
                metadata=MappingProxyType(dict(node["metadata"])),
                children_indices=tuple(node["children"]),
                parent_index=node["parent"],
                index=index,
            )
            for index, node in enumerate(self._nodes)
        )
        return DocumentStructure(nodes=nodes, root_index=self.root, title=self.title, metadata=self.metadata)


def _coerce_type(value: Any) -> StructureType:
    if isinstance(value, StructureType):
        return value
    if isinstance(value, str):
        try:
            return StructureType(value.strip().lower())
        except ValueError:
            pass
    raise InvalidInputError(f"Unknown element type: {value!r}")


def structure_from_dict(payload: Optional[Mapping[str, Any]]) -> DocumentStructure:
    """
    Build a ``DocumentStructure`` from its nested dictionary form.

    Raises:
        InvalidInputError: if the payload or its ``hierarchy`` is missing or malformed
    """
    if not isinstance(payload, Mapping):
        raise InvalidInputError("Document structure must be a mapping")

    hierarchy = payload.get("hierarchy")
    if hierarchy is None:
        raise InvalidInputError("Document structure has no hierarchy")
    if not isinstance(hierarchy, Mapping):
        raise InvalidInputError("Document hierarchy must be a mapping")

    builder = StructureBuilder(
        root_type=_node_type(hierarchy),
        root_text=hierarchy.get("text") or "",
        root_level=hierarchy.get("level"),
        root_metadata=hierarchy.get("metadata"),
        title=payload.get("title"),
        metadata=StructureMetadata.from_dict(payload.get("metadata")),
    )
    _add_children(builder, builder.root, hierarchy.get("children"))
    return builder.build()


def _node_type(node: Mapping[str, Any]) -> StructureType:
    if "type" not in node:
        raise InvalidInputError("Document element has no type")
    return _coerce_type(node["type"])


def _add_children(builder: StructureBuilder, parent: int, children: Any) -> None:
    # Explicit stack keeps arbitrarily deep trees off the interpreter call stack
    stack = _child_entries(parent, children)
    while stack:
        parent_index, child = stack.pop()
        if not isinstance(child, Mapping):
            raise InvalidInputError("Document element must be a mapping")
        index = builder.add(
            _node_type(child),
            text=child.get("text") or "",
            parent=parent_index,
            level=child.get("level"),
            metadata=child.get("metadata"),
        )
        stack.extend(_child_entries(index, child.get("children")))


def _child_entries(parent: int, children: Any) -> List[Tuple[int, Any]]:
    """Children of ``parent`` in reverse order, ready to be pushed on the work stack."""
    if not children:
        return []
    if not isinstance(children, (list, tuple)):
        raise InvalidInputError("Element children must be a list")
    return [(parent, child) for child in reversed(children)]


def extraction_from_text(text: str, title: str) -> ExtractionResult:
    """Wrap plain text as an extraction result with no detected headings."""
    return ExtractionResult(
        text=text or "",
        metadata=ExtractionMetadata(title=title, format="TEXT", extraction_engine="direct"),
    )


def structure_from_extraction(result: ExtractionResult) -> DocumentStructure:
    """
    Build a flat structure from an extraction result.

    The root is a SECTION titled after the document; headings come first,
    then one PARAGRAPH per blank-line separated block of the raw text.
    """
    meta = result.metadata
    builder = StructureBuilder(
        root_type=StructureType.SECTION,
        root_text=meta.title or DEFAULT_ROOT_TEXT,
        root_level=0,
        title=meta.title,
        metadata=StructureMetadata(
            confidence=1.0,
            page_count=meta.page_count,
            format=meta.format,
            language=meta.language,
        ),
    )

    for heading in result.headings:
        builder.add(
            StructureType.HEADING,
            text=heading.text,
            level=heading.level,
            metadata={"page_number": heading.page_index},
        )

    paragraphs = [p for p in _PARAGRAPH_BREAK_RE.split(result.text or "") if p.strip()]
    for paragraph in paragraphs:
        builder.add(StructureType.PARAGRAPH, text=paragraph)

    logger.debug(
        "Built structure from extraction: %d headings, %d paragraphs",
        len(result.headings),
        len(paragraphs),
    )
    return builder.build()

