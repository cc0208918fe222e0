"""Record classification and fixed-column field extraction.

An event file listing is a sequence of fixed-column records. The first
ten columns hold the record type, columns 13-15 the numeric source file
id, and the rest of the layout depends on the record type:

    FILEID     0 001 000004 063 /home/me/qprotsrc/constants.rpgle 20230619180115 0
    EXPANSION  0 001 000096 000096 999 000154 000171
    ERROR      0 001 1 000012 000012 002 000012 005 RNF7030 S 30 042 The name ...
    FILEEND    0 001 000013

All offsets live in RECORD_FIELDS.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

Number = Union[int, float]

# FILEID "line" value for a source that is not included by another one
ROOT_INCLUDE_MARKER = "000000"

# Longest file name chunk a FILEID or FILEIDCONT record can carry
MAX_NAME_CHUNK = 255


class RecordType(Enum):
    """Record types found in an event file listing."""

    TIMESTAMP = "TIMESTAMP"
    PROCESSOR = "PROCESSOR"
    FILE_ID = "FILEID"
    FILE_ID_CONT = "FILEIDCONT"
    FILE_END = "FILEEND"
    ERROR = "ERROR"
    EXPANSION = "EXPANSION"
    PROGRAM = "PROGRAM"
    MAP_DEFINE = "MAPDEFINE"
    MAP_START = "MAPSTART"
    MAP_END = "MAPEND"
    FEEDBACK = "FEEDBACK"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, tag: str) -> "RecordType":
        """Convert a record tag to a RecordType, UNKNOWN if unrecognized."""
        try:
            return cls(tag.strip())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class FieldSpec:
    """Location of a field inside a record."""

    offset: int
    width: Optional[int] = None  # None reads to the end of the line

    def extract(self, line: str) -> str:
        if self.width is None:
            return line[self.offset:]
        return line[self.offset:self.offset + self.width]


RECORD_TYPE_FIELD = FieldSpec(0, 10)
FILE_ID_FIELD = FieldSpec(13, 3)

RECORD_FIELDS: Dict[RecordType, Dict[str, FieldSpec]] = {
    RecordType.FILE_ID: {
        "line": FieldSpec(17, 6),
        "name_length": FieldSpec(24, 3),
        "name": FieldSpec(28),
    },
    RecordType.FILE_ID_CONT: {
        "name": FieldSpec(28),
    },
    RecordType.FILE_END: {
        "line_count": FieldSpec(17, 6),
    },
    RecordType.EXPANSION: {
        "defined_start": FieldSpec(17, 6),
        "defined_end": FieldSpec(24, 6),
        "on": FieldSpec(31, 3),
        "range_start": FieldSpec(35, 6),
        "range_end": FieldSpec(42, 6),
    },
    RecordType.ERROR: {
        "column": FieldSpec(33, 3),
        "line": FieldSpec(37, 6),
        "to_column": FieldSpec(44, 3),
        "code": FieldSpec(48, 7),
        "severity": FieldSpec(58, 2),
        "text": FieldSpec(65),
    },
}


def parse_number(text: str) -> Number:
    """Convert a numeric field, yielding NaN instead of raising.

    Blank fields read as 0.
    """
    value = text.strip()
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return math.nan


def is_count(value: Number) -> bool:
    """Check that a parsed number is usable as a non-negative count."""
    return isinstance(value, int) and value >= 0


def get_record_type(line: str) -> RecordType:
    """Classify a listing line by its leading tag."""
    return RecordType.from_string(RECORD_TYPE_FIELD.extract(line))


def get_file_id(line: str) -> Number:
    """Extract the source file id present on every record."""
    return parse_number(FILE_ID_FIELD.extract(line))


def get_field(line: str, record_type: RecordType, name: str) -> str:
    """Extract a raw field of a record.

    Raises:
        KeyError: If the record type has no field with that name
    """
    return RECORD_FIELDS[record_type][name].extract(line)


def get_number(line: str, record_type: RecordType, name: str) -> Number:
    """Extract a numeric field of a record."""
    return parse_number(get_field(line, record_type, name))


@dataclass(frozen=True)
class FileIdRecord:
    """A parsed FILEID record."""

    file_id: Number
    line: Number
    name: str
    include_marker: str

    @property
    def is_include(self) -> bool:
        """True when the source was included into another one."""
        return self.include_marker != ROOT_INCLUDE_MARKER


@dataclass(frozen=True)
class FileEndRecord:
    """A parsed FILEEND record."""

    file_id: Number
    line_count: Number


@dataclass(frozen=True)
class ExpansionRecord:
    """A parsed EXPANSION record. All line numbers are 1-based."""

    file_id: Number
    defined_start: Number
    defined_end: Number
    on: Number
    range_start: Number
    range_end: Number


@dataclass(frozen=True)
class ErrorRecord:
    """A parsed ERROR record. The line number is 1-based."""

    file_id: Number
    severity: Number
    line: Number
    column: Number
    to_column: Number
    code: str
    text: str


def read_file_name(lines: List[str], index: int) -> str:
    """Read the source name of the FILEID record at ``lines[index]``.

    The name is cut using the record's name length field. Names longer
    than MAX_NAME_CHUNK continue on the FILEIDCONT records that directly
    follow the FILEID record.

    Args:
        lines: Padded listing lines
        index: Position of the FILEID record

    Returns:
        The full source name
    """
    line = lines[index]
    length = get_number(line, RecordType.FILE_ID, "name_length")
    name_field = get_field(line, RecordType.FILE_ID, "name")

    if not is_count(length) or length == 0:
        tokens = name_field.split()
        return tokens[0] if tokens else ""

    name = name_field[:min(length, MAX_NAME_CHUNK)]
    remaining = length - MAX_NAME_CHUNK
    file_id = get_file_id(line)
    cursor = index + 1

    while remaining > 0 and cursor < len(lines):
        continuation = lines[cursor]
        if get_record_type(continuation) != RecordType.FILE_ID_CONT:
            break
        if get_file_id(continuation) != file_id:
            break
        chunk = min(remaining, MAX_NAME_CHUNK)
        name += get_field(continuation, RecordType.FILE_ID_CONT, "name")[:chunk]
        remaining -= chunk
        cursor += 1

    return name


def parse_file_id(lines: List[str], index: int) -> FileIdRecord:
    """Parse the FILEID record at ``lines[index]``."""
    line = lines[index]
    return FileIdRecord(
        file_id=get_file_id(line),
        line=get_number(line, RecordType.FILE_ID, "line"),
        name=read_file_name(lines, index),
        include_marker=get_field(line, RecordType.FILE_ID, "line"),
    )


def parse_file_end(line: str) -> FileEndRecord:
    """Parse a FILEEND record."""
    return FileEndRecord(
        file_id=get_file_id(line),
        line_count=get_number(line, RecordType.FILE_END, "line_count"),
    )


def parse_expansion(line: str) -> ExpansionRecord:
    """Parse an EXPANSION record."""
    return ExpansionRecord(
        file_id=get_file_id(line),
        defined_start=get_number(line, RecordType.EXPANSION, "defined_start"),
        defined_end=get_number(line, RecordType.EXPANSION, "defined_end"),
        on=get_number(line, RecordType.EXPANSION, "on"),
        range_start=get_number(line, RecordType.EXPANSION, "range_start"),
        range_end=get_number(line, RecordType.EXPANSION, "range_end"),
    )


def parse_error(line: str) -> ErrorRecord:
    """Parse an ERROR record."""
    return ErrorRecord(
        file_id=get_file_id(line),
        severity=get_number(line, RecordType.ERROR, "severity"),
        line=get_number(line, RecordType.ERROR, "line"),
        column=get_number(line, RecordType.ERROR, "column"),
        to_column=get_number(line, RecordType.ERROR, "to_column"),
        code=get_field(line, RecordType.ERROR, "code").strip(),
        text=get_field(line, RecordType.ERROR, "text").strip(),
    )
