"""Listing module for reading compiler event file records."""

from .tokenizer import LINE_WIDTH, pad_lines, split_listing, tokenize
from .naming import format_ifs, format_name, logical_path
from .records import (
    RecordType,
    get_file_id,
    get_record_type,
    parse_error,
    parse_expansion,
    parse_file_end,
    parse_file_id,
    parse_number,
)

__all__ = [
    "LINE_WIDTH",
    "pad_lines",
    "split_listing",
    "tokenize",
    "format_ifs",
    "format_name",
    "logical_path",
    "RecordType",
    "get_file_id",
    "get_record_type",
    "parse_error",
    "parse_expansion",
    "parse_file_end",
    "parse_file_id",
    "parse_number",
]
