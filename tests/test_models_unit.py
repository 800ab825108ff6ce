from __future__ import annotations

import dataclasses

import pytest

from comparison.errors import InvalidInputError
from comparison.models import (
    ChangeSignificance,
    ChangeType,
    DocumentElement,
    DocumentStructure,
    ElementChange,
    ExtractionHeading,
    ExtractionMetadata,
    ExtractionResult,
    StructureMetadata,
    StructureType,
)
from comparison.structure_builder import DEFAULT_ROOT_TEXT, StructureBuilder, structure_from_extraction


def _make_manual():
    builder = StructureBuilder(root_text="Manual", title="Flight Manual")
    intro = builder.add(StructureType.HEADING, text="Introduction", level=1)
    builder.add("paragraph", text="Read before flight", parent=intro, metadata={"page": 1})
    builder.add(StructureType.HEADING, text="Limitations", level=1)
    return builder.build()


def test_builder_links_parents_and_children():
    doc = _make_manual()

    root = doc.hierarchy
    assert root.index == 0
    assert root.type == StructureType.SECTION
    assert [child.text for child in doc.children(root)] == ["Introduction", "Limitations"]

    paragraph = doc.element(2)
    assert paragraph.type == StructureType.PARAGRAPH
    assert doc.parent(paragraph).text == "Introduction"
    assert doc.parent(root) is None
    assert not paragraph.has_children
    assert root.has_children


def test_elements_are_preorder_descendants_of_root():
    doc = _make_manual()
    assert [el.text for el in doc.elements] == ["Introduction", "Read before flight", "Limitations"]
    assert [el.text for el in doc.iter_subtree(doc.element(1))] == ["Introduction", "Read before flight"]


def test_structure_without_nodes_has_no_hierarchy():
    empty = DocumentStructure(nodes=())
    assert empty.hierarchy is None
    assert empty.elements == []


def test_builder_rejects_unknown_parent_and_type():
    builder = StructureBuilder()
    with pytest.raises(InvalidInputError):
        builder.add(StructureType.PARAGRAPH, text="orphan", parent=5)
    with pytest.raises(InvalidInputError):
        builder.add("sidebar", text="unknown")


def test_built_structure_is_isolated_from_builder():
    builder = StructureBuilder(root_text="Root")
    builder.add(StructureType.PARAGRAPH, text="one")
    first = builder.build()
    builder.add(StructureType.PARAGRAPH, text="two")

    assert len(first.nodes) == 2
    assert len(builder) == 3
    assert first.hierarchy.children_indices == (1,)


def test_elements_are_frozen_and_metadata_read_only():
    doc = _make_manual()
    paragraph = doc.element(2)

    with pytest.raises(dataclasses.FrozenInstanceError):
        paragraph.text = "changed"
    with pytest.raises(TypeError):
        paragraph.metadata["page"] = 2
    assert paragraph.metadata["page"] == 1


def test_to_dict_and_from_dict_roundtrip():
    doc = _make_manual()
    payload = doc.to_dict()

    assert payload["title"] == "Flight Manual"
    assert payload["hierarchy"]["type"] == "section"
    assert [c["text"] for c in payload["hierarchy"]["children"]] == ["Introduction", "Limitations"]
    assert len(payload["elements"]) == 3

    rebuilt = DocumentStructure.from_dict(payload)
    assert rebuilt.to_dict() == payload


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"hierarchy": None},
        {"hierarchy": {"text": "no type"}},
        {"hierarchy": {"type": "section", "children": "not a list"}},
        {"hierarchy": {"type": "section", "children": [{"type": "banner"}]}},
    ],
)
def test_from_dict_rejects_malformed_payloads(payload):
    with pytest.raises(InvalidInputError):
        DocumentStructure.from_dict(payload)


def test_structure_metadata_accepts_camel_case():
    meta = StructureMetadata.from_dict({"processingTime": 12, "pageCount": 3, "confidence": 0.5})
    assert meta.processing_time == 12.0
    assert meta.page_count == 3
    assert meta.confidence == 0.5
    assert StructureMetadata.from_dict(None).confidence == 1.0


def test_structure_from_extraction_puts_headings_before_paragraphs():
    result = ExtractionResult(
        text="First paragraph\n\n   \n\nSecond\nparagraph\n\n",
        headings=(ExtractionHeading(text="Scope", level=1, page_index=0),),
        metadata=ExtractionMetadata(title="Ops Manual", format="PDF", page_count=2),
    )

    doc = structure_from_extraction(result)

    root = doc.hierarchy
    assert root.text == "Ops Manual"
    assert root.level == 0
    assert [(el.type, el.text) for el in doc.elements] == [
        (StructureType.HEADING, "Scope"),
        (StructureType.PARAGRAPH, "First paragraph"),
        (StructureType.PARAGRAPH, "Second\nparagraph"),
    ]
    assert doc.elements[0].metadata["page_number"] == 0
    assert doc.metadata.page_count == 2
    assert doc.metadata.format == "PDF"


def test_structure_from_extraction_without_title_uses_default_root_text():
    doc = structure_from_extraction(ExtractionResult(text=""))
    assert doc.hierarchy.text == DEFAULT_ROOT_TEXT
    assert doc.elements == []


def test_default_metadata_is_empty_and_read_only():
    element = DocumentElement(type=StructureType.PARAGRAPH, text="x")
    change = ElementChange(
        type=ChangeType.ADDED,
        significance=ChangeSignificance.MAJOR,
        element_type=StructureType.PARAGRAPH,
    )

    for metadata in (element.metadata, change.metadata):
        assert dict(metadata) == {}
        with pytest.raises(TypeError):
            metadata["key"] = "value"
    assert element.to_dict()["metadata"] == {}
    assert change.to_dict()["metadata"] == {}


def test_deep_structures_roundtrip_through_dict():
    builder = StructureBuilder(root_text="Level 0")
    parent = builder.root
    for level in range(1, 1500):
        parent = builder.add(StructureType.SECTION, text=f"Level {level}", parent=parent)
    doc = builder.build()

    rebuilt = DocumentStructure.from_dict(doc.to_dict())

    assert len(rebuilt.nodes) == 1500
    assert rebuilt.element(1499).text == "Level 1499"
    assert rebuilt.element(1499).parent_index == 1498
