"""Placeholder handling for compiled clauses."""

from mirrorql.parameters.scanner import PlaceholderScanner, convert_qmark_to_numeric, count_qmark_placeholders
from mirrorql.parameters.types import PlaceholderInfo, PlaceholderStyle

__all__ = (
    "PlaceholderInfo",
    "PlaceholderScanner",
    "PlaceholderStyle",
    "convert_qmark_to_numeric",
    "count_qmark_placeholders",
)
