"""Keyword heuristics that turn a change list into a business-impact assessment."""
from __future__ import annotations

import re
from typing import Dict, Iterator, List, Pattern, Sequence

from comparison.models import ChangeSummary, ChangeType, ElementChange, ImpactAnalysis
from utils.logging import logger

HIGH_SEVERITY_MAJOR_COUNT = 5
MEDIUM_SEVERITY_MINOR_COUNT = 10

REGULATORY_RE = re.compile(
    r"\b(regulat\w*|complian\w*|complies|safety|certif\w*|approv\w*|authorit\w*|faa|easa|caa|icao)\b",
    re.IGNORECASE,
)

# Declaration order is the order areas are reported in, so the first hit is the category
AFFECTED_AREA_PATTERNS: Dict[str, Pattern[str]] = {
    "technical": re.compile(
        r"\b(systems?|components?|engines?|hydraulics?|electrical|avionics|fuel)\b", re.IGNORECASE
    ),
    "operational": re.compile(
        r"\b(procedures?|checklists?|operations?|techniques?|performance)\b", re.IGNORECASE
    ),
    "training": re.compile(
        r"\b(training|instructions?|learning|students?|trainees?|instructors?)\b", re.IGNORECASE
    ),
    "safety": re.compile(
        r"\b(safety|cautions?|warnings?|emergency|emergencies|hazards?|dangers?)\b", re.IGNORECASE
    ),
    "regulatory": re.compile(
        r"\b(requirements?|regulations?|compliance|standards?|laws?)\b", re.IGNORECASE
    ),
}

FALLBACK_RECOMMENDATION = "Review changes for accuracy and consistency"


def determine_severity(summary: ChangeSummary) -> str:
    if summary.major > HIGH_SEVERITY_MAJOR_COUNT:
        return "high"
    if summary.major > 0 or summary.minor > MEDIUM_SEVERITY_MINOR_COUNT:
        return "medium"
    return "low"


def _changed_texts(changes: Sequence[ElementChange]) -> Iterator[str]:
    for change in changes:
        if change.type == ChangeType.UNCHANGED:
            continue
        for text in (change.content_before, change.content_after):
            if text:
                yield text


def analyze_impact(changes: Sequence[ElementChange], summary: ChangeSummary) -> ImpactAnalysis:
    """
    Derive severity, affected domains, regulatory exposure and recommendations.

    Only records that are not UNCHANGED are scanned, using both their
    before and after text. The recommendation list is never empty.
    """
    severity = determine_severity(summary)
    texts = list(_changed_texts(changes))

    regulatory_impact = any(REGULATORY_RE.search(text) for text in texts)
    affected_areas = [
        area
        for area, pattern in AFFECTED_AREA_PATTERNS.items()
        if any(pattern.search(text) for text in texts)
    ]

    recommendations = _build_recommendations(severity, regulatory_impact, affected_areas)

    logger.debug(
        "Impact analysis: severity=%s regulatory=%s areas=%s",
        severity,
        regulatory_impact,
        affected_areas,
    )
    return ImpactAnalysis(
        category=affected_areas[0] if affected_areas else "general",
        severity=severity,
        affected_areas=tuple(affected_areas),
        recommendations=tuple(recommendations),
        regulatory_impact=regulatory_impact,
    )


def _build_recommendations(severity: str, regulatory_impact: bool, affected_areas: List[str]) -> List[str]:
    recommendations: List[str] = []

    if severity == "high":
        recommendations.append("Conduct a thorough review of all major changes")

    if regulatory_impact:
        recommendations.append("Verify compliance with regulatory requirements")
        recommendations.append("Document changes for regulatory audit trail")

    if "safety" in affected_areas:
        recommendations.append("Perform a safety assessment for the changes")
    if "training" in affected_areas:
        recommendations.append("Update training materials to reflect changes")
    if "operational" in affected_areas:
        recommendations.append("Update operational procedures and checklists")

    if not recommendations:
        recommendations.append(FALLBACK_RECOMMENDATION)
    return recommendations
