"""Public API for mapping compiler listing errors to source files.

This module provides the programmatic interface for turning an event file
listing into diagnostics keyed by original source file. Use these
functions instead of calling the mapping strategies directly.

Example:
    from diagnostics import parse_listing_file, ParseOptions, ParseStrategy

    result = parse_listing_file(
        Path("HELLO.evfevent"),
        options=ParseOptions(strategy=ParseStrategy.TREE),
    )

    for path, diagnostics in result.diagnostics.items():
        for diagnostic in diagnostics:
            print(path, diagnostic.line, diagnostic.code, diagnostic.text)
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from listing.tokenizer import pad_lines, split_listing
from .models import Diagnostic, Severity


class ListingError(Exception):
    """Raised when a listing cannot be read."""
    pass


class ParseStrategy(Enum):
    """Available error mapping strategies."""

    RANGE = "range"
    TREE = "tree"

    @classmethod
    def from_string(cls, name: str) -> "ParseStrategy":
        """Convert a strategy name to a ParseStrategy.

        Raises:
            ValueError: If the name is not a known strategy
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown strategy '{name}' (expected one of: {choices})")


@dataclass
class ParseOptions:
    """Options for listing parsing.

    Attributes:
        strategy: Mapping strategy to use. When None, the tree strategy is
            used only if try_new_error_parser is set and the listing holds
            an EXPANSION record; the range strategy otherwise.
        try_new_error_parser: Opt in to the tree strategy for listings with
            precompiler expansions (default: False)
        hide_codes: Message ids to leave out of the result
    """
    strategy: Optional[ParseStrategy] = None
    try_new_error_parser: bool = False
    hide_codes: List[str] = field(default_factory=list)


@dataclass
class ListingParseResult:
    """Result of parsing a listing file.

    Attributes:
        listing_name: File name of the listing
        strategy: Strategy that produced the diagnostics
        diagnostics: Diagnostics keyed by logical source path
        execution_time_seconds: Time taken for parsing
    """
    listing_name: str
    strategy: ParseStrategy
    diagnostics: Dict[str, List[Diagnostic]]
    execution_time_seconds: float

    @property
    def file_count(self) -> int:
        return len(self.diagnostics)

    @property
    def diagnostic_count(self) -> int:
        return sum(len(errors) for errors in self.diagnostics.values())

    def summary(self) -> Dict[str, Any]:
        """Count diagnostics per file and per level."""
        by_level = {level.value: 0 for level in Severity}
        for errors in self.diagnostics.values():
            for diagnostic in errors:
                by_level[diagnostic.level.value] += 1
        return {
            "files": self.file_count,
            "diagnostics": self.diagnostic_count,
            "by_level": by_level,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "listing": self.listing_name,
            "strategy": self.strategy.value,
            "execution_time_seconds": self.execution_time_seconds,
            "files": {
                path: [diagnostic.to_dict() for diagnostic in errors]
                for path, errors in self.diagnostics.items()
            },
            "summary": self.summary(),
        }


def select_strategy(lines: List[str], options: Optional[ParseOptions] = None) -> ParseStrategy:
    """Choose the mapping strategy for a listing.

    Args:
        lines: Listing lines
        options: Parse options

    Returns:
        The explicit strategy if one is set, otherwise TREE when the new
        parser is enabled and the listing contains an expansion
    """
    options = options or ParseOptions()
    if options.strategy is not None:
        return options.strategy

    has_expansions = any("EXPANSION" in line for line in lines)
    if options.try_new_error_parser and has_expansions:
        return ParseStrategy.TREE
    return ParseStrategy.RANGE


def create_resolver(strategy: ParseStrategy):
    """Build the resolver object implementing a strategy.

    Both resolvers expose ``resolve(lines) -> Dict[str, List[Diagnostic]]``.
    """
    from mapping import RangeCorrector, SourceMapper

    if strategy == ParseStrategy.TREE:
        return SourceMapper()
    return RangeCorrector()


def filter_hidden_codes(
    diagnostics: Dict[str, List[Diagnostic]],
    hide_codes: Iterable[str],
) -> Dict[str, List[Diagnostic]]:
    """Drop diagnostics whose message id is hidden.

    Files left without diagnostics are dropped as well.
    """
    hidden = set(hide_codes)
    if not hidden:
        return diagnostics

    filtered: Dict[str, List[Diagnostic]] = {}
    for path, errors in diagnostics.items():
        kept = [diagnostic for diagnostic in errors if diagnostic.code not in hidden]
        if kept:
            filtered[path] = kept
    return filtered


def parse_errors(
    lines: List[str],
    options: Optional[ParseOptions] = None,
) -> Dict[str, List[Diagnostic]]:
    """Map the errors of a listing to their original source files.

    Args:
        lines: Listing lines, already split on line terminators
        options: Parse options (uses defaults if not provided)

    Returns:
        Diagnostics keyed by logical source path, ordered by line
    """
    options = options or ParseOptions()
    padded = pad_lines(lines)
    resolver = create_resolver(select_strategy(lines, options))
    return filter_hidden_codes(resolver.resolve(padded), options.hide_codes)


def parse_listing_text(
    text: str,
    options: Optional[ParseOptions] = None,
) -> Dict[str, List[Diagnostic]]:
    """Same as parse_errors() for a listing held in a single string."""
    return parse_errors(split_listing(text), options)


def parse_listing_file(
    listing_path: Path,
    options: Optional[ParseOptions] = None,
) -> ListingParseResult:
    """Read and parse a listing file.

    Args:
        listing_path: Path to the event file listing
        options: Parse options (uses defaults if not provided)

    Returns:
        ListingParseResult with diagnostics and the strategy used

    Raises:
        FileNotFoundError: If the listing file doesn't exist
        ListingError: If the listing cannot be read
    """
    options = options or ParseOptions()

    if not listing_path.exists():
        raise FileNotFoundError(f"Listing file not found: {listing_path}")

    if not listing_path.is_file():
        raise FileNotFoundError(f"Listing path is not a file: {listing_path}")

    start_time = time.perf_counter()

    try:
        text = listing_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ListingError(f"Failed to read listing {listing_path}: {e}") from e

    lines = split_listing(text)
    strategy = select_strategy(lines, options)
    diagnostics = parse_errors(
        lines,
        ParseOptions(strategy=strategy, hide_codes=list(options.hide_codes)),
    )

    end_time = time.perf_counter()

    return ListingParseResult(
        listing_name=listing_path.name,
        strategy=strategy,
        diagnostics=diagnostics,
        execution_time_seconds=round(end_time - start_time, 4),
    )
