from __future__ import annotations

from comparison.models import ChangeSignificance, ChangeType, StructureType
from comparison.options import ComparisonOptions
from comparison.structure_builder import StructureBuilder
from comparison.tree_differ import TreeDiffer, diff_trees


def _make_doc(children, root_text="Manual"):
    """children: list of (type, text) or (type, text, [grandchildren])."""
    builder = StructureBuilder(root_type=StructureType.SECTION, root_text=root_text)

    def _add(parent, nodes):
        for node in nodes:
            index = builder.add(node[0], text=node[1], parent=parent)
            if len(node) > 2:
                _add(index, node[2])

    _add(builder.root, children)
    return builder.build()


def _kinds(changes):
    return [(c.type, c.content_before, c.content_after) for c in changes]


def test_matched_children_produce_unchanged_and_modified_records():
    before = _make_doc([
        (StructureType.HEADING, "Introduction"),
        (StructureType.PARAGRAPH, "The engine start procedure is described here"),
    ])
    after = _make_doc([
        (StructureType.HEADING, "Introduction"),
        (StructureType.PARAGRAPH, "The engine start procedure is described here in detail"),
    ])

    changes = diff_trees(before, after)

    assert [c.type for c in changes] == [ChangeType.UNCHANGED, ChangeType.UNCHANGED, ChangeType.MODIFIED]
    modified = changes[2]
    assert modified.element_type == StructureType.PARAGRAPH
    assert 0.8 < modified.similarity < 1.0
    assert modified.significance == ChangeSignificance.TRIVIAL
    assert modified.before.text == "The engine start procedure is described here"
    assert modified.after.text == "The engine start procedure is described here in detail"


def test_unmatched_subtrees_are_emitted_node_by_node():
    before = _make_doc([
        (StructureType.SECTION, "Appendix", [(StructureType.PARAGRAPH, "Old table notes")]),
    ])
    after = _make_doc([
        (StructureType.PARAGRAPH, "Brand new content", [(StructureType.FOOTNOTE, "See page 4")]),
    ])

    changes = diff_trees(before, after)

    assert _kinds(changes) == [
        (ChangeType.UNCHANGED, "Manual", "Manual"),
        (ChangeType.REMOVED, "Appendix", None),
        (ChangeType.REMOVED, "Old table notes", None),
        (ChangeType.ADDED, None, "Brand new content"),
        (ChangeType.ADDED, None, "See page 4"),
    ]
    for change in changes[1:]:
        assert change.significance == ChangeSignificance.MAJOR
        assert change.similarity is None
    assert changes[1].after is None
    assert changes[3].before is None


def test_children_only_on_one_side():
    empty = _make_doc([])
    full = _make_doc([
        (StructureType.PARAGRAPH, "First"),
        (StructureType.PARAGRAPH, "Second", [(StructureType.LIST_ITEM, "Nested")]),
    ])

    removed = diff_trees(full, empty)
    added = diff_trees(empty, full)

    assert [c.type for c in removed[1:]] == [ChangeType.REMOVED] * 3
    assert [c.type for c in added[1:]] == [ChangeType.ADDED] * 3
    assert [c.content_after for c in added[1:]] == ["First", "Second", "Nested"]


def test_records_follow_before_tree_order_with_additions_last():
    before = _make_doc([
        (StructureType.PARAGRAPH, "alpha one"),
        (StructureType.PARAGRAPH, "beta two"),
        (StructureType.PARAGRAPH, "gamma three"),
    ])
    after = _make_doc([
        (StructureType.PARAGRAPH, "gamma three"),
        (StructureType.PARAGRAPH, "delta four"),
        (StructureType.PARAGRAPH, "alpha one"),
    ])

    changes = diff_trees(before, after)

    assert _kinds(changes) == [
        (ChangeType.UNCHANGED, "Manual", "Manual"),
        (ChangeType.UNCHANGED, "alpha one", "alpha one"),
        (ChangeType.REMOVED, "beta two", None),
        (ChangeType.UNCHANGED, "gamma three", "gamma three"),
        (ChangeType.ADDED, None, "delta four"),
    ]
    assert changes[1].metadata == {"before_index": 1, "after_index": 3}
    assert all(c.type != ChangeType.MOVED for c in changes)


def test_nested_matches_recurse_into_grandchildren():
    before = _make_doc([
        (StructureType.HEADING, "Engine", [
            (StructureType.PARAGRAPH, "Set throttle to idle"),
            (StructureType.PARAGRAPH, "Open the fuel valve"),
        ]),
    ])
    after = _make_doc([
        (StructureType.HEADING, "Engine", [
            (StructureType.PARAGRAPH, "Set throttle to idle"),
        ]),
    ])

    changes = diff_trees(before, after)

    assert _kinds(changes) == [
        (ChangeType.UNCHANGED, "Manual", "Manual"),
        (ChangeType.UNCHANGED, "Engine", "Engine"),
        (ChangeType.UNCHANGED, "Set throttle to idle", "Set throttle to idle"),
        (ChangeType.REMOVED, "Open the fuel valve", None),
    ]


def test_root_significance_uses_configured_thresholds():
    before = _make_doc([], root_text="alpha beta")
    after = _make_doc([], root_text="alpha gamma")

    default = TreeDiffer(before, after).diff()
    strict = TreeDiffer(
        before,
        after,
        ComparisonOptions(significance_thresholds=ComparisonOptions().significance_thresholds.raised(0.25)),
    ).diff()

    assert default[0].type == ChangeType.MODIFIED
    assert default[0].significance == ChangeSignificance.MINOR
    assert strict[0].significance == ChangeSignificance.MAJOR


def test_diff_does_not_mutate_inputs():
    before = _make_doc([(StructureType.PARAGRAPH, "one"), (StructureType.PARAGRAPH, "two")])
    after = _make_doc([(StructureType.PARAGRAPH, "two")])
    snapshot_before = before.to_dict()
    snapshot_after = after.to_dict()

    diff_trees(before, after)

    assert before.to_dict() == snapshot_before
    assert after.to_dict() == snapshot_after


def _make_chain(depth, leaf_text="check fuel pressure gauge now"):
    builder = StructureBuilder(root_type=StructureType.SECTION, root_text="Level 0")
    parent = builder.root
    for level in range(1, depth):
        parent = builder.add(StructureType.SECTION, text=f"Level {level}", parent=parent)
    builder.add(StructureType.PARAGRAPH, text=leaf_text, parent=parent)
    return builder.build()


def test_deep_chains_are_diffed_without_recursion_limits():
    depth = 1500
    before = _make_chain(depth)
    after = _make_chain(depth, leaf_text="check fuel pressure gauge again")

    changes = diff_trees(before, after)

    assert len(changes) == depth + 1
    assert [c.content_before for c in changes[:3]] == ["Level 0", "Level 1", "Level 2"]
    assert all(c.type == ChangeType.UNCHANGED for c in changes[:-1])
    assert changes[-1].type == ChangeType.MODIFIED
    assert changes[-1].content_after == "check fuel pressure gauge again"
