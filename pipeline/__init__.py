"""Pipeline module - orchestrates end-to-end document structure comparison."""
from pipeline.compare_documents import (
    compare_document_batch,
    compare_document_structures,
    compare_extraction_results,
    compare_text_blocks,
    compare_text_documents,
    default_options,
)

__all__ = [
    "compare_document_batch",
    "compare_document_structures",
    "compare_extraction_results",
    "compare_text_blocks",
    "compare_text_documents",
    "default_options",
]
