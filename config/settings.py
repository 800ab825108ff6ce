"""Configuration defaults for comparison thresholds, guards and workers."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Matching
    similarity_threshold: float = Field(
        default=0.8,
        description="Minimum element similarity (0.0-1.0) for the sibling matcher to pair two elements",
    )
    matching_strategy: str = Field(
        default="greedy",
        description="Sibling matching strategy: 'greedy' (best pair first) or 'optimal' (maximum-weight assignment)",
    )

    # Significance Thresholds
    significance_major_threshold: float = Field(
        default=0.3,
        description="Changes with similarity below this value are MAJOR",
    )
    significance_minor_threshold: float = Field(
        default=0.7,
        description="Changes with similarity below this value (and not MAJOR) are MINOR, others TRIVIAL",
    )

    # Text preprocessing
    ignore_whitespace: bool = Field(
        default=True,
        description="Collapse runs of whitespace before scoring text",
    )
    ignore_case: bool = Field(
        default=False,
        description="Lower-case text before scoring",
    )

    # Impact Analysis
    include_impact_analysis: bool = Field(
        default=True,
        description="Run the keyword-based impact analysis stage",
    )

    # Resource Guards
    max_sibling_width: int = Field(
        default=500,
        description="Maximum sibling list length the matcher will score pairwise",
    )
    sibling_overflow: str = Field(
        default="error",
        description="Behaviour past max_sibling_width: 'error' (ResourceLimitError) or 'positional' (index pairing)",
    )
    comparison_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Deadline for a single comparison in seconds (None disables the deadline)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Level used by configure_logging when none is passed")
    log_file: Optional[str] = Field(default=None, description="Optional file that configure_logging also writes to")

    # Performance
    num_workers: int = Field(default=4, description="Parallel workers for batch comparisons")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def get_settings() -> Settings:
    """Return a cached settings instance."""
    return _get_settings()


@lru_cache()
def _get_settings() -> Settings:
    return Settings()
