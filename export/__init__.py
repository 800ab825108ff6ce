"""Export module for JSON comparison reports."""
from export.json_exporter import comparison_to_json, export_json

__all__ = ["comparison_to_json", "export_json"]
