"""Listing Diagnostics - Maps compiler event file errors to original source files.

Public API (in the ``diagnostics`` package):
    parse_errors: Map already split listing lines to diagnostics per file
    parse_listing_text: Same, for a listing held in one string
    parse_listing_file: Read a listing file and return a ListingParseResult
    ParseOptions: Strategy selection and hidden message ids
    ParseStrategy: RANGE (legacy line correction) or TREE (source map)
    ListingError: Exception raised when a listing cannot be read
    Diagnostic: A diagnostic positioned in an original source file

Example:
    >>> from diagnostics import parse_listing_file, ParseOptions, ParseStrategy
    >>> from pathlib import Path
    >>>
    >>> result = parse_listing_file(
    ...     Path("EMPLOYEES.evfevent"),
    ...     ParseOptions(strategy=ParseStrategy.TREE),
    ... )
    >>> for path, errors in result.diagnostics.items():
    ...     print(path, [error.line for error in errors])
"""

