"""Domain model for listing diagnostics.

This module defines the source units, precompiler expansions and
diagnostics that the mapping strategies build from an event file listing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]


class Severity(Enum):
    """Diagnostic level derived from the compiler's numeric severity."""

    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def from_number(cls, severity: Number) -> "Severity":
        """Map a compiler severity (00-50) to a diagnostic level."""
        if severity == 20:
            return cls.WARNING
        if severity in (30, 40, 50):
            return cls.ERROR
        return cls.INFORMATION


@dataclass
class Diagnostic:
    """A diagnostic positioned in an original source file.

    Attributes:
        severity: Compiler severity (00, 10, 20, 30, 40 or 50)
        line: 1-based line in the original source file
        column_start: First column of the token in error
        column_end: Last column of the token in error
        text: Message text
        code: Message id (e.g. RNF7030, SQL0312)
    """

    severity: Number
    line: Number
    column_start: Number
    column_end: Number
    text: str
    code: str

    @property
    def level(self) -> Severity:
        return Severity.from_number(self.severity)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "severity": self.severity,
            "level": self.level.value,
            "line": self.line,
            "column_start": self.column_start,
            "column_end": self.column_end,
            "text": self.text,
            "code": self.code,
        }


@dataclass
class RawError:
    """An ERROR record as reported by the compiler, before mapping.

    ``line`` is 0-based. ``post_expansion`` is True when an EXPANSION
    record had already been seen for the owning processor.
    """

    severity: Number
    line: Number
    column_start: Number
    column_end: Number
    text: str
    code: str
    post_expansion: bool = False

    def to_diagnostic(self, line: Number) -> Diagnostic:
        """Build the resolved diagnostic for a mapped line."""
        return Diagnostic(
            severity=self.severity,
            line=line,
            column_start=self.column_start,
            column_end=self.column_end,
            text=self.text,
            code=self.code,
        )


@dataclass(frozen=True)
class LineSpan:
    """Inclusive 0-based line interval of an expansion."""

    start: Number
    end: Number

    @property
    def is_valid(self) -> bool:
        """Both bounds are non-negative (NaN bounds are never valid)."""
        return self.start >= 0 and self.end >= 0


@dataclass
class Expansion:
    """Lines inserted or removed by an SQL precompiler.

    Attributes:
        on: File id whose generated lines the expansion applies to
        defined: Lines of the original member that were removed
        range: Lines of the generated unit that were inserted
    """

    on: Number
    defined: LineSpan
    range: LineSpan

    @property
    def is_insertion(self) -> bool:
        return self.range.is_valid

    @property
    def is_removal(self) -> bool:
        return not self.range.is_valid and self.defined.is_valid


@dataclass
class FileNode:
    """One source unit contributing lines to a compiled unit."""

    id: Number
    path: str
    starts_at: Number
    parent: Optional[Number] = None
    length: Optional[Number] = None
    errors: List[RawError] = field(default_factory=list)
    expansions: List[Expansion] = field(default_factory=list)


@dataclass
class Processor:
    """The file forest of one compile step in a listing."""

    files: List[FileNode] = field(default_factory=list)

    def find_file(self, file_id: Optional[Number]) -> Optional[FileNode]:
        """Return the first file node with the given id, or None."""
        if file_id is None:
            return None
        for node in self.files:
            if node.id == file_id:
                return node
        return None


@dataclass(frozen=True)
class GeneratedLine:
    """One entry of the source map of a compiled unit.

    ``line`` is the 1-based line in ``path``. SQL lines were generated by
    the precompiler and have no original location.
    """

    path: str
    line: int
    is_sql: bool = False
