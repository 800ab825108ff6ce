"""Export comparison results as JSON."""
from __future__ import annotations

import json
from pathlib import Path

from comparison.models import DocumentComparison
from utils.logging import logger


def comparison_to_json(result: DocumentComparison, indent: int | None = 2) -> str:
    """Serialize a comparison to the JSON contract (camelCase keys, ISO timestamp)."""
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=indent)


def export_json(result: DocumentComparison, output_path: str | Path) -> Path:
    """
    Write a comparison report to ``output_path`` as UTF-8 JSON.

    Parent directories are created when missing.
    """
    output = Path(output_path)
    logger.info("Writing JSON comparison report to %s", output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(comparison_to_json(result), encoding="utf-8")
    return output
