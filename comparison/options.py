"""Comparison options passed explicitly through every stage."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Literal, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from comparison.errors import InvalidInputError
from utils.validation import validate_options

if TYPE_CHECKING:  # pragma: no cover
    from config.settings import Settings

MatchingStrategy = Literal["greedy", "optimal"]
OverflowPolicy = Literal["error", "positional"]

_BOOL = TypeAdapter(bool)
_FLOAT = TypeAdapter(float)
_INT = TypeAdapter(int)
_OPTIONAL_FLOAT = TypeAdapter(Optional[float])


@dataclass(frozen=True)
class SignificanceThresholds:
    major: float = 0.3  # similarity < major => MAJOR
    minor: float = 0.7  # similarity < minor => MINOR, otherwise TRIVIAL

    def raised(self, amount: float) -> "SignificanceThresholds":
        return SignificanceThresholds(major=self.major + amount, minor=self.minor + amount)


@dataclass(frozen=True)
class ComparisonOptions:
    """Options for a single comparison. Validated on construction."""

    ignore_whitespace: bool = True
    ignore_case: bool = False
    ignore_formatting: bool = False  # accepted for compatibility; trees carry no formatting
    include_impact_analysis: bool = True
    similarity_threshold: float = 0.8
    significance_thresholds: SignificanceThresholds = field(default_factory=SignificanceThresholds)

    matching_strategy: MatchingStrategy = "greedy"
    max_sibling_width: int = 500
    sibling_overflow: OverflowPolicy = "error"
    timeout_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        validate_options(self)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ComparisonOptions":
        return cls(
            ignore_whitespace=settings.ignore_whitespace,
            ignore_case=settings.ignore_case,
            include_impact_analysis=settings.include_impact_analysis,
            similarity_threshold=settings.similarity_threshold,
            significance_thresholds=SignificanceThresholds(
                major=settings.significance_major_threshold,
                minor=settings.significance_minor_threshold,
            ),
            matching_strategy=settings.matching_strategy,  # type: ignore[arg-type]
            max_sibling_width=settings.max_sibling_width,
            sibling_overflow=settings.sibling_overflow,  # type: ignore[arg-type]
            timeout_seconds=settings.comparison_timeout_seconds,
        )

    @classmethod
    def from_dict(
        cls,
        payload: Optional[Mapping[str, Any]],
        base: Optional["ComparisonOptions"] = None,
    ) -> "ComparisonOptions":
        """
        Overlay request options (camelCase or snake_case keys) on ``base``.

        Keys that are absent keep the base value, so a partial request such
        as ``{"ignoreCase": True}`` only changes case handling.
        """
        base = base or cls()
        if not payload:
            return base

        def _get(snake: str, camel: str, default: Any) -> Any:
            if snake in payload:
                return payload[snake]
            return payload.get(camel, default)

        thresholds_payload = _get("significance_thresholds", "significanceThresholds", None) or {}
        thresholds = SignificanceThresholds(
            major=_coerce(_FLOAT, thresholds_payload.get("major", base.significance_thresholds.major), "major"),
            minor=_coerce(_FLOAT, thresholds_payload.get("minor", base.significance_thresholds.minor), "minor"),
        )

        def _field(adapter: TypeAdapter, snake: str, camel: str) -> Any:
            return _coerce(adapter, _get(snake, camel, getattr(base, snake)), snake)

        return replace(
            base,
            ignore_whitespace=_field(_BOOL, "ignore_whitespace", "ignoreWhitespace"),
            ignore_case=_field(_BOOL, "ignore_case", "ignoreCase"),
            ignore_formatting=_field(_BOOL, "ignore_formatting", "ignoreFormatting"),
            include_impact_analysis=_field(_BOOL, "include_impact_analysis", "includeImpactAnalysis"),
            similarity_threshold=_field(_FLOAT, "similarity_threshold", "similarityThreshold"),
            significance_thresholds=thresholds,
            matching_strategy=_get("matching_strategy", "matchingStrategy", base.matching_strategy),
            max_sibling_width=_field(_INT, "max_sibling_width", "maxSiblingWidth"),
            sibling_overflow=_get("sibling_overflow", "siblingOverflow", base.sibling_overflow),
            timeout_seconds=_field(_OPTIONAL_FLOAT, "timeout_seconds", "timeoutSeconds"),
        )


def _coerce(adapter: TypeAdapter, value: Any, name: str) -> Any:
    """Lax pydantic coercion: ``"false"`` is False and ``"2.5"`` is 2.5."""
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid value for {name}: {value!r}") from exc
