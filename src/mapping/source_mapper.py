"""Tree-based source mapping of listing errors.

The SQL precompilers expand every copy member into a single temporary
source and may insert and remove lines while translating embedded SQL.
The compiler then reports errors against that generated source, which no
editor has open.

This mapper works in two passes:

1. Build a forest of processors, each holding the file nodes opened by
   FILEID/FILEEND pairs, with their errors and expansions.
2. Rebuild the generated source as a list of GeneratedLine entries (the
   source map) by splicing every copy member in at its point of
   inclusion, then apply each precompiler expansion in listing order.
   Errors are resolved by looking their generated line up in the map.

Errors seen before any expansion of their processor are resolved against
the map as built from copy members alone; errors seen after an expansion
are resolved once the processor's expansions have been applied.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple

from diagnostics.models import (
    Diagnostic,
    Expansion,
    FileNode,
    GeneratedLine,
    LineSpan,
    Number,
    Processor,
    RawError,
)
from listing.naming import logical_path
from listing.records import (
    RecordType,
    get_file_id,
    get_record_type,
    is_count,
    parse_error,
    parse_expansion,
    parse_file_end,
    parse_file_id,
)
from listing.tokenizer import pad_lines

# File id of the temporary source an SQL precompiler generates
SQL_BASE_FILE_ID = 999

# File id the compiler gives the member being compiled
ROOT_FILE_ID = 1


def _as_count(value: Optional[Number]) -> int:
    """Treat missing or malformed line counts as zero lines."""
    if value is None or not is_count(value):
        return 0
    return value


class SourceMap:
    """Ordered list of generated lines with splice-style editing.

    Positions follow the semantics of an array splice: a negative start
    counts back from the end, a start past the end appends, and a NaN
    start is treated as 0.
    """

    def __init__(self, lines: Optional[Sequence[GeneratedLine]] = None):
        self._lines: List[GeneratedLine] = list(lines or [])

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> List[GeneratedLine]:
        """A copy of the generated lines."""
        return list(self._lines)

    def _position(self, start: Number) -> int:
        if isinstance(start, float):
            if math.isnan(start):
                return 0
            start = int(start)
        size = len(self._lines)
        if start < 0:
            return max(size + start, 0)
        return min(start, size)

    def insert(self, start: Number, entries: Sequence[GeneratedLine]) -> None:
        """Insert entries before position ``start``."""
        position = self._position(start)
        self._lines[position:position] = list(entries)

    def remove(self, start: Number, count: Number) -> None:
        """Remove ``count`` entries starting at position ``start``."""
        position = self._position(start)
        del self._lines[position:position + _as_count(count)]

    def lookup(self, index: Number) -> Optional[GeneratedLine]:
        """Return the entry at a 0-based generated line, or None."""
        if not isinstance(index, int) or index < 0 or index >= len(self._lines):
            return None
        return self._lines[index]


def apply_expansion(
    source_map: SourceMap,
    processor: Processor,
    node: FileNode,
    expansion: Expansion,
) -> None:
    """Apply one precompiler expansion to the source map.

    An expansion with a valid ``range`` inserts SQL-only lines into the
    file it is ``on``. Otherwise, an expansion with a valid ``defined``
    span removes those lines. Insertion takes precedence.

    Args:
        source_map: Map to edit in place
        processor: Processor owning the expansion
        node: File node the expansion was recorded against
        expansion: The expansion to apply
    """
    if expansion.is_insertion:
        target = processor.find_file(expansion.on)
        if target is None:
            return
        count = _as_count(expansion.range.end - expansion.range.start + 1)
        source_map.insert(
            target.starts_at + expansion.range.start + 1,
            [GeneratedLine(path=target.path, line=i + 1, is_sql=True) for i in range(count)],
        )
    elif expansion.is_removal:
        source_map.remove(
            node.starts_at + expansion.defined.start + 1,
            expansion.defined.end - expansion.defined.start + 1,
        )


class SourceMapper:
    """Resolves listing errors through a rebuilt source map."""

    def resolve(self, lines: List[str]) -> Dict[str, List[Diagnostic]]:
        """Map the errors of a listing to their original files.

        Args:
            lines: Listing lines (padding is applied if missing)

        Returns:
            Diagnostics keyed by logical file path, sorted by line
        """
        processors, true_paths = self.build_forest(lines)
        return self.map_errors(processors, true_paths)

    def build_forest(self, lines: List[str]) -> Tuple[List[Processor], Dict[Number, str]]:
        """First pass: group file nodes, errors and expansions by processor.

        Records seen before the first PROCESSOR record are ignored.

        Returns:
            Tuple of (processors, first path seen for each file id)
        """
        lines = pad_lines(lines)
        processors: List[Processor] = []
        true_paths: Dict[Number, str] = {}
        current: Optional[Processor] = None
        parent_ids: List[Number] = []
        expanded = False

        for index, line in enumerate(lines):
            record_type = get_record_type(line)
            file_id = get_file_id(line)

            if record_type == RecordType.PROCESSOR:
                expanded = False
                if current is not None:
                    processors.append(current)
                current = Processor()

            elif record_type == RecordType.FILE_ID:
                record = parse_file_id(lines, index)
                path = logical_path(record.name)
                true_paths.setdefault(file_id, path)

                if current is not None:
                    current.files.append(
                        FileNode(
                            id=file_id,
                            path=path,
                            starts_at=record.line - 1,
                            parent=parent_ids[-1] if parent_ids else None,
                        )
                    )
                    parent_ids.append(file_id)

            elif record_type == RecordType.FILE_END:
                if current is not None:
                    node = current.find_file(file_id)
                    if node is not None:
                        node.length = parse_file_end(line).line_count
                    if parent_ids:
                        parent_ids.pop()

            elif record_type == RecordType.EXPANSION:
                expanded = True
                if current is None:
                    continue
                node = current.find_file(file_id)
                if node is None and parent_ids:
                    node = current.find_file(parent_ids[-1])
                if node is not None:
                    record = parse_expansion(line)
                    node.expansions.append(
                        Expansion(
                            on=record.on,
                            defined=LineSpan(record.defined_start - 1, record.defined_end - 1),
                            range=LineSpan(record.range_start - 1, record.range_end - 1),
                        )
                    )

            elif record_type == RecordType.ERROR:
                if current is None:
                    continue
                node = current.find_file(file_id)
                if node is not None:
                    record = parse_error(line)
                    node.errors.append(
                        RawError(
                            severity=record.severity,
                            line=record.line - 1,
                            column_start=record.column,
                            column_end=record.to_column,
                            text=record.text,
                            code=record.code,
                            post_expansion=expanded,
                        )
                    )

        if current is not None:
            processors.append(current)

        return processors, true_paths

    def map_errors(
        self,
        processors: List[Processor],
        true_paths: Dict[Number, str],
    ) -> Dict[str, List[Diagnostic]]:
        """Second pass: build the source map and resolve every error.

        Copy members are spliced in for the first processor only, as all
        processors of one listing share the same copy member layout.
        """
        source_map = SourceMap()
        file_errors: Dict[str, List[Diagnostic]] = {}
        done_parent = False

        for processor in processors:
            for node in processor.files:
                if not done_parent and node.id != SQL_BASE_FILE_ID:
                    source_map.insert(
                        self.true_start(processor, node),
                        [GeneratedLine(path=node.path, line=i + 1) for i in range(_as_count(node.length))],
                    )

                for error in node.errors:
                    if error.post_expansion:
                        continue
                    if len(processor.files) == 1 or node.id == ROOT_FILE_ID:
                        self._emit_mapped(file_errors, source_map, error)
                    else:
                        path = true_paths.get(node.id, node.path)
                        file_errors.setdefault(path, []).append(error.to_diagnostic(error.line + 1))

            for node in processor.files:
                for expansion in node.expansions:
                    apply_expansion(source_map, processor, node, expansion)

            # Late errors see every expansion of their processor
            for node in processor.files:
                for error in node.errors:
                    if error.post_expansion:
                        self._emit_mapped(file_errors, source_map, error)

            done_parent = True

        # Copy members can report lines out of order; keep ties in listing order
        for errors in file_errors.values():
            errors.sort(key=lambda diagnostic: diagnostic.line)

        return file_errors

    @staticmethod
    def true_start(processor: Processor, node: FileNode) -> Number:
        """Absolute generated line where a file node's content begins.

        Sums ``starts_at + 1`` over the node and each ancestor, stopping
        at the first ancestor that is not itself included.
        """
        start = node.starts_at + 1
        parent = processor.find_file(node.parent)
        while parent is not None and parent.starts_at >= 0:
            start += parent.starts_at + 1
            parent = processor.find_file(parent.parent)
        return start

    @staticmethod
    def _emit_mapped(
        file_errors: Dict[str, List[Diagnostic]],
        source_map: SourceMap,
        error: RawError,
    ) -> None:
        entry = source_map.lookup(error.line)
        if entry is None or entry.is_sql:
            return
        file_errors.setdefault(entry.path, []).append(error.to_diagnostic(entry.line))
