"""Exception types raised by the comparison engine."""
from __future__ import annotations


class ComparisonError(Exception):
    """Base class for every failure surfaced by a document comparison."""


class InvalidInputError(ComparisonError, ValueError):
    """A document structure or option set is malformed (e.g. missing hierarchy)."""


class ResourceLimitError(ComparisonError):
    """A configured resource cap (sibling list width) was exceeded."""

    def __init__(self, message: str, limit: int, actual: int):
        super().__init__(message)
        self.limit = limit
        self.actual = actual


class ComparisonTimeoutError(ComparisonError, TimeoutError):
    """The comparison ran past its deadline."""
