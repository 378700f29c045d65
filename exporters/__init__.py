"""Exporters for converting lint reports to various output formats."""

from .text_exporter import to_text, format_diagnostic
from .json_exporter import to_json

__all__ = ["to_text", "format_diagnostic", "to_json"]
