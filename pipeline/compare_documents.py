"""
Main orchestrator: structural comparison of two documents.

Provides the public entrypoints that:
1. Validate both document structures
2. Diff the hierarchies (sibling matching + recursive descent)
3. Score structure, content and overall similarity
4. Summarize changes and estimate character statistics
5. Optionally run keyword-based impact analysis

Extraction results and plain text are turned into flat structures first,
and independent document pairs can be compared concurrently.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from comparison.change_statistics import calculate_char_statistics, summarize_changes
from comparison.errors import ComparisonError
from comparison.impact_analysis import analyze_impact
from comparison.models import (
    ChangeType,
    DocumentComparison,
    DocumentElement,
    DocumentStructure,
    ElementChange,
    ExtractionResult,
    StructureType,
)
from comparison.options import ComparisonOptions
from comparison.significance import classify_text_significance
from comparison.structure_builder import extraction_from_text, structure_from_extraction
from comparison.text_similarity import structural_similarity, text_similarity
from comparison.tree_differ import TreeDiffer
from config.settings import Settings, get_settings
from utils.logging import logger
from utils.performance import Deadline, track_time
from utils.text_normalization import prepare_text
from utils.validation import validate_structure

StructurePair = Tuple[DocumentStructure, DocumentStructure]


def default_options(settings: Optional[Settings] = None) -> ComparisonOptions:
    """Options seeded from environment-driven settings."""
    return ComparisonOptions.from_settings(settings or get_settings())


def compare_document_structures(
    before: DocumentStructure,
    after: DocumentStructure,
    options: Optional[ComparisonOptions] = None,
    deadline: Optional[Deadline] = None,
) -> DocumentComparison:
    """
    Compare two document structures.

    Inputs are read-only; the result holds text snapshots and immutable
    nodes only.

    Args:
        before: Earlier version of the document (or its dictionary form)
        after: Later version of the document (or its dictionary form)
        options: Comparison options (defaults when omitted)
        deadline: Overrides ``options.timeout_seconds`` when given

    Returns:
        DocumentComparison with changes, summary, statistics and,
        if requested, impact analysis

    Raises:
        InvalidInputError: if either structure is missing or has no hierarchy
        ResourceLimitError: if a sibling list exceeds the configured width
        ComparisonTimeoutError: if the deadline passes mid-comparison
        ComparisonError: for any other failure inside the engine
    """
    before = _coerce_structure(before, "Before")
    after = _coerce_structure(after, "After")
    options = options or ComparisonOptions()
    if deadline is None:
        deadline = Deadline.after(options.timeout_seconds)

    logger.info(
        "Comparing document structures: %d vs %d elements",
        len(before.nodes),
        len(after.nodes),
    )

    try:
        with track_time("compare_document_structures") as timing:
            changes = TreeDiffer(before, after, options, deadline).diff()

            structure_similarity = structural_similarity(before, after)
            content_similarity = text_similarity(
                _all_text(before.elements, options),
                _all_text(after.elements, options),
            )
            overall_similarity = (structure_similarity + content_similarity) / 2

            summary = summarize_changes(changes)
            statistics = calculate_char_statistics(changes)
            impact = analyze_impact(changes, summary) if options.include_impact_analysis else None
    except ComparisonError:
        raise
    except Exception as exc:
        logger.exception("Document comparison failed")
        raise ComparisonError(f"Document comparison failed: {exc}") from exc

    statistics = replace(statistics, processing_time=timing.milliseconds)

    logger.info(
        "Comparison complete: %d changes (%d major, %d minor), overall similarity %.3f",
        summary.total,
        summary.major,
        summary.minor,
        overall_similarity,
    )
    return DocumentComparison(
        overall_similarity=overall_similarity,
        structure_similarity=structure_similarity,
        content_similarity=content_similarity,
        changes=tuple(changes),
        summary=summary,
        statistics=statistics,
        impact_analysis=impact,
    )


def compare_extraction_results(
    before: ExtractionResult,
    after: ExtractionResult,
    options: Optional[ComparisonOptions] = None,
) -> DocumentComparison:
    """Build flat structures (headings, then paragraphs) from extraction output and compare them."""
    return compare_document_structures(
        structure_from_extraction(before),
        structure_from_extraction(after),
        options,
    )


def compare_text_documents(
    before_text: str,
    after_text: str,
    options: Optional[ComparisonOptions] = None,
) -> DocumentComparison:
    """Compare two plain-text documents split into blank-line separated paragraphs."""
    return compare_extraction_results(
        extraction_from_text(before_text, "Before Document"),
        extraction_from_text(after_text, "After Document"),
        options,
    )


def compare_text_blocks(
    before: str,
    after: str,
    options: Optional[ComparisonOptions] = None,
) -> ElementChange:
    """
    Compare two free-standing text blocks as paragraphs.

    Whitespace and case options are applied to the stored snapshots, and
    text containing critical terms (warning, safety, must, ...) is held
    to stricter significance thresholds.
    """
    options = options or ComparisonOptions()
    before_text = prepare_text(before, options.ignore_whitespace, options.ignore_case)
    after_text = prepare_text(after, options.ignore_whitespace, options.ignore_case)

    similarity = text_similarity(before_text, after_text)
    return ElementChange(
        type=ChangeType.UNCHANGED if similarity == 1.0 else ChangeType.MODIFIED,
        significance=classify_text_significance(
            before_text, after_text, similarity, options.significance_thresholds
        ),
        element_type=StructureType.PARAGRAPH,
        similarity=similarity,
        content_before=before_text,
        content_after=after_text,
    )


def compare_document_batch(
    pairs: Iterable[StructurePair],
    options: Optional[ComparisonOptions] = None,
    max_workers: Optional[int] = None,
) -> List[DocumentComparison]:
    """
    Compare independent document pairs concurrently.

    Each comparison gets its own deadline from ``options.timeout_seconds``.
    Results keep the input order; the first failure is raised.
    """
    pairs = list(pairs)
    if not pairs:
        return []
    workers = max_workers or get_settings().num_workers
    logger.info("Comparing %d document pairs with %d workers", len(pairs), workers)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(compare_document_structures, before, after, options)
            for before, after in pairs
        ]
        return [future.result() for future in futures]


def _coerce_structure(structure: Any, label: str) -> DocumentStructure:
    if isinstance(structure, Mapping):
        return DocumentStructure.from_dict(structure)
    validate_structure(structure, label)
    return structure


def _all_text(elements: Sequence[DocumentElement], options: ComparisonOptions) -> str:
    text = " ".join(element.text for element in elements if element.text)
    return prepare_text(text, options.ignore_whitespace, options.ignore_case)
