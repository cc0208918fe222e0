"""Diagnostics module: domain model and public parsing API."""

from .models import (
    Diagnostic,
    Expansion,
    FileNode,
    GeneratedLine,
    LineSpan,
    Processor,
    RawError,
    Severity,
)
from .api import (
    ListingError,
    ListingParseResult,
    ParseOptions,
    ParseStrategy,
    filter_hidden_codes,
    parse_errors,
    parse_listing_file,
    parse_listing_text,
    select_strategy,
)

__all__ = [
    "Diagnostic",
    "Expansion",
    "FileNode",
    "GeneratedLine",
    "LineSpan",
    "Processor",
    "RawError",
    "Severity",
    "ListingError",
    "ListingParseResult",
    "ParseOptions",
    "ParseStrategy",
    "filter_hidden_codes",
    "parse_errors",
    "parse_listing_file",
    "parse_listing_text",
    "select_strategy",
]
