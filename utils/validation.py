"""Input validation helpers."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from comparison.errors import InvalidInputError, ResourceLimitError

if TYPE_CHECKING:  # pragma: no cover
    from comparison.options import ComparisonOptions

MATCHING_STRATEGIES = {"greedy", "optimal"}
OVERFLOW_POLICIES = {"error", "positional"}


def validate_structure(structure: Any, label: str) -> None:
    """Reject a missing structure or one without a hierarchy root."""
    if structure is None:
        raise InvalidInputError(f"{label} document is missing")
    if getattr(structure, "hierarchy", None) is None:
        raise InvalidInputError(f"{label} document has no hierarchy")


def validate_unit_interval(value: float, name: str) -> float:
    if value is None or not 0.0 <= value <= 1.0:
        raise InvalidInputError(f"{name} must be within [0, 1], got {value!r}")
    return value


def validate_options(options: "ComparisonOptions") -> None:
    validate_unit_interval(options.similarity_threshold, "similarity_threshold")
    thresholds = options.significance_thresholds
    validate_unit_interval(thresholds.major, "significance_thresholds.major")
    validate_unit_interval(thresholds.minor, "significance_thresholds.minor")
    if thresholds.major > thresholds.minor:
        raise InvalidInputError("significance_thresholds.major must not exceed significance_thresholds.minor")
    if options.matching_strategy not in MATCHING_STRATEGIES:
        raise InvalidInputError(f"Unsupported matching strategy: {options.matching_strategy!r}")
    if options.sibling_overflow not in OVERFLOW_POLICIES:
        raise InvalidInputError(f"Unsupported sibling overflow policy: {options.sibling_overflow!r}")
    if options.max_sibling_width < 1:
        raise InvalidInputError("max_sibling_width must be at least 1")
    if options.timeout_seconds is not None and options.timeout_seconds <= 0:
        raise InvalidInputError("timeout_seconds must be positive")


def check_sibling_width(before_count: int, after_count: int, limit: int) -> None:
    """Raise ResourceLimitError when either sibling list is wider than ``limit``."""
    widest = max(before_count, after_count)
    if widest > limit:
        raise ResourceLimitError(
            f"Sibling list of {widest} elements exceeds the configured limit of {limit}",
            limit=limit,
            actual=widest,
        )
