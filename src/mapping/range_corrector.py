"""Range-based error line correction (legacy strategy).

This corrector walks the listing once. While scanning it records the
line ranges that nested copy members and precompiler expansions occupy,
and corrects each ERROR record's line number by walking the ranges seen
so far for the error's file.

The correction only keeps a running line offset, so it cannot represent
lines removed by a precompiler, and when several ranges enclose an error
the first one scanned wins. The tree-based SourceMapper supersedes it;
the behavior is kept unchanged for compatibility with older listings.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from diagnostics.models import Diagnostic
from listing.naming import logical_path
from listing.records import (
    Number,
    RecordType,
    get_file_id,
    get_record_type,
    parse_error,
    parse_expansion,
    parse_file_end,
    parse_file_id,
)
from listing.tokenizer import pad_lines
from .ranges import Range, contains, is_after, length, with_file_id, with_high


@dataclass
class _CorrectorState:
    """Per-call scanning state. Never shared between calls."""

    file_paths: Dict[Number, str] = field(default_factory=dict)
    errors: Dict[Number, List[Diagnostic]] = field(default_factory=dict)
    expansions: Dict[Number, List[Range]] = field(default_factory=dict)
    track_copies: Dict[Number, bool] = field(default_factory=dict)
    file_parents: List[Number] = field(default_factory=list)
    ranges: List[Range] = field(default_factory=list)


class RangeCorrector:
    """Resolves listing errors by correcting line numbers with ranges."""

    # Errors about precompiler generated names carry no useful location
    SQL_NOISE_TEXT = "name or indicator SQ"
    SQL_CODE_PREFIX = "SQL"

    def resolve(self, lines: List[str]) -> Dict[str, List[Diagnostic]]:
        """Map the errors of a listing to their original files.

        Args:
            lines: Listing lines (padding is applied if missing)

        Returns:
            Diagnostics keyed by logical file path, sorted by line
        """
        lines = pad_lines(lines)
        state = _CorrectorState()

        for index, line in enumerate(lines):
            record_type = get_record_type(line)

            if record_type == RecordType.FILE_ID:
                self._on_file_id(state, lines, index)
            elif record_type == RecordType.FILE_END:
                self._on_file_end(state, line)
            elif record_type == RecordType.EXPANSION:
                self._on_expansion(state, line)
            elif record_type == RecordType.ERROR:
                self._on_error(state, line)

        return self._collect(state)

    def _on_file_id(self, state: _CorrectorState, lines: List[str], index: int) -> None:
        record = parse_file_id(lines, index)

        if record.file_id not in state.file_paths:
            state.file_paths[record.file_id] = logical_path(record.name)
            state.errors[record.file_id] = []
            state.expansions[record.file_id] = []
            state.track_copies[record.file_id] = record.is_include

        state.ranges.append(Range(low=record.line, high=0))
        state.file_parents.append(record.file_id)

    def _on_file_end(self, state: _CorrectorState, line: str) -> None:
        record = parse_file_end(line)
        if state.file_parents:
            state.file_parents.pop()

        if not state.track_copies.get(record.file_id) or not state.ranges:
            return

        copy_range = state.ranges.pop()
        copy_range = with_high(copy_range, copy_range.low + record.line_count - 1)
        copy_range = with_file_id(copy_range, record.file_id)

        # Copy member extents belong to the including file
        if len(state.file_parents) >= 2:
            including = state.expansions.get(state.file_parents[-1])
            if including is not None:
                including.append(copy_range)

    def _on_expansion(self, state: _CorrectorState, line: str) -> None:
        record = parse_expansion(line)
        expansions = state.expansions.get(record.file_id)
        if expansions is not None:
            expansions.append(Range(low=record.range_start, high=record.range_end))

    def _on_error(self, state: _CorrectorState, line: str) -> None:
        record = parse_error(line)
        if self.SQL_NOISE_TEXT in record.text or record.code.startswith(self.SQL_CODE_PREFIX):
            return

        line_number = record.line
        sqldiff = 0
        owner = None

        for rng in state.expansions.get(record.file_id, []):
            if is_after(rng, line_number):
                if contains(rng, line_number):
                    sqldiff += rng.high - line_number
                else:
                    sqldiff += length(rng)
            elif contains(rng, line_number):
                # first enclosing range wins
                sqldiff += rng.low
                owner = rng.file_id
                break

        if sqldiff > 0:
            line_number -= sqldiff

        target = state.errors.get(owner or record.file_id)
        if target is not None:
            target.append(
                Diagnostic(
                    severity=record.severity,
                    line=line_number,
                    column_start=record.column,
                    column_end=record.to_column,
                    text=record.text,
                    code=record.code,
                )
            )

    def _collect(self, state: _CorrectorState) -> Dict[str, List[Diagnostic]]:
        by_path: Dict[str, List[Diagnostic]] = {}
        for file_id, path in state.file_paths.items():
            errors = state.errors.get(file_id)
            if errors:
                by_path.setdefault(path, []).extend(errors)

        for path, errors in by_path.items():
            errors.sort(key=lambda diagnostic: diagnostic.line)

        return by_path
