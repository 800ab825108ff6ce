from __future__ import annotations

import pytest

from comparison.impact_analysis import (
    FALLBACK_RECOMMENDATION,
    analyze_impact,
    determine_severity,
)
from comparison.models import ChangeSignificance, ChangeSummary, ChangeType, ElementChange, StructureType


def _change(change_type, before=None, after=None, significance=ChangeSignificance.MAJOR):
    return ElementChange(
        type=change_type,
        significance=significance,
        element_type=StructureType.PARAGRAPH,
        content_before=before,
        content_after=after,
    )


@pytest.mark.parametrize(
    "summary, expected",
    [
        (ChangeSummary(major=6), "high"),
        (ChangeSummary(major=5), "medium"),
        (ChangeSummary(major=1), "medium"),
        (ChangeSummary(minor=11), "medium"),
        (ChangeSummary(minor=10), "low"),
        (ChangeSummary(), "low"),
    ],
)
def test_determine_severity(summary, expected):
    assert determine_severity(summary) == expected


def test_fallback_when_nothing_changed():
    changes = [
        _change(ChangeType.UNCHANGED, "Safety regulation applies", "Safety regulation applies",
                ChangeSignificance.TRIVIAL),
    ]

    impact = analyze_impact(changes, ChangeSummary(total=1, unchanged=1, trivial=1))

    assert impact.severity == "low"
    assert impact.regulatory_impact is False
    assert impact.affected_areas == ()
    assert impact.category == "general"
    assert impact.recommendations == (FALLBACK_RECOMMENDATION,)


def test_regulatory_keywords_trigger_compliance_recommendations():
    changes = [_change(ChangeType.ADDED, after="Modification approved by EASA")]

    impact = analyze_impact(changes, ChangeSummary(total=1, added=1, major=1))

    assert impact.regulatory_impact is True
    assert impact.severity == "medium"
    assert impact.recommendations == (
        "Verify compliance with regulatory requirements",
        "Document changes for regulatory audit trail",
    )


def test_after_text_is_scanned_for_modified_changes():
    changes = [_change(ChangeType.MODIFIED, before="Old wording", after="New certification basis")]
    impact = analyze_impact(changes, ChangeSummary(total=1, modified=1, major=1))
    assert impact.regulatory_impact is True


def test_affected_areas_follow_declaration_order():
    changes = [
        _change(ChangeType.MODIFIED, before="Update the hydraulic system checklist"),
        _change(ChangeType.REMOVED, before="Trainees attend an emergency briefing"),
    ]

    impact = analyze_impact(changes, ChangeSummary(total=2, major=8))

    assert impact.affected_areas == ("technical", "operational", "training", "safety")
    assert impact.category == "technical"
    assert impact.severity == "high"
    assert impact.recommendations == (
        "Conduct a thorough review of all major changes",
        "Perform a safety assessment for the changes",
        "Update training materials to reflect changes",
        "Update operational procedures and checklists",
    )


def test_impact_to_dict_uses_contract_keys():
    impact = analyze_impact([], ChangeSummary())
    payload = impact.to_dict()
    assert payload == {
        "category": "general",
        "severity": "low",
        "affectedAreas": [],
        "recommendations": [FALLBACK_RECOMMENDATION],
        "regulatoryImpact": False,
    }


def test_technical_only_changes_get_fallback_recommendation():
    changes = [
        _change(ChangeType.MODIFIED, before="fuel system", after="fuel systems",
                significance=ChangeSignificance.MINOR),
    ]

    impact = analyze_impact(changes, ChangeSummary(total=1, modified=1, minor=1))

    assert impact.affected_areas == ("technical",)
    assert impact.category == "technical"
    assert impact.recommendations == (FALLBACK_RECOMMENDATION,)
