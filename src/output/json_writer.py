"""JSON output for listing diagnostics reports.

A report is the dictionary built by ListingParseResult.to_dict():

    {
        "listing": "HELLO.evfevent",
        "strategy": "range",
        "execution_time_seconds": 0.0012,
        "files": {"MYLIB/QRPGLESRC/HELLO": [{"line": 12, ...}]},
        "summary": {"files": 1, "diagnostics": 1, "by_level": {...}},
    }
"""

import copy
import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

COLUMN_KEYS = ("column_start", "column_end")
LEVEL_KEY = "level"

REPORT_HEADER_KEYS = ("listing", "strategy", "execution_time_seconds")


def _to_json(obj: Any) -> Any:
    """Fallback for values json cannot encode natively."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if is_dataclass(obj):
        return asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JSONWriter:
    """Serializes diagnostics reports.

    Column positions and derived levels can be stripped from every
    diagnostic under ``files``; the rest of the report is left as is.
    """

    def __init__(
        self,
        pretty_print: bool = True,
        indent: int = 2,
        include_columns: bool = True,
        include_levels: bool = True,
    ):
        """Initialize the writer.

        Args:
            pretty_print: Indent the output; otherwise emit a single line
            indent: Spaces per indentation level when pretty printing
            include_columns: Keep column_start/column_end in diagnostics
            include_levels: Keep the derived level in diagnostics
        """
        self.indent = indent if pretty_print else None
        self.separators = None if pretty_print else (",", ":")

        self.dropped_keys: List[str] = []
        if not include_columns:
            self.dropped_keys.extend(COLUMN_KEYS)
        if not include_levels:
            self.dropped_keys.append(LEVEL_KEY)

    def strip_diagnostics(self, report: Dict[str, Any]) -> Dict[str, Any]:
        """Return the report without the dropped diagnostic keys.

        The input report is never modified.
        """
        if not self.dropped_keys or "files" not in report:
            return report

        stripped = copy.deepcopy(report)
        for diagnostics in stripped["files"].values():
            for diagnostic in diagnostics:
                for key in self.dropped_keys:
                    diagnostic.pop(key, None)
        return stripped

    def dumps(self, report: Dict[str, Any]) -> str:
        """Serialize a report to a JSON string."""
        return json.dumps(
            self.strip_diagnostics(report),
            indent=self.indent,
            separators=self.separators,
            ensure_ascii=False,
            default=_to_json,
        )

    def write(self, report: Dict[str, Any], output_path: Optional[Path] = None) -> str:
        """Serialize a report, writing it to ``output_path`` when given.

        Returns:
            The JSON text
        """
        text = self.dumps(report)
        if output_path:
            output_path.write_text(text, encoding="utf-8")
        return text


def create_output_report(
    result_output: Dict[str, Any],
    include_summary: bool = True,
    include_details: bool = True,
) -> Dict[str, Any]:
    """Select the sections of a report to output.

    Args:
        result_output: Output of ListingParseResult.to_dict()
        include_summary: Keep the summary section
        include_details: Keep the diagnostics per file

    Returns:
        Report dictionary
    """
    report = {key: result_output.get(key) for key in REPORT_HEADER_KEYS}

    if include_details and "files" in result_output:
        report["files"] = result_output["files"]

    if include_summary and "summary" in result_output:
        report["summary"] = result_output["summary"]

    return report


def write_diagnostics_report(
    result_output: Dict[str, Any],
    output_path: Path,
    writer: Optional[JSONWriter] = None,
) -> None:
    """Write a complete report to file.

    Args:
        result_output: Output of ListingParseResult.to_dict()
        output_path: Path to write the report
        writer: Writer to use (a pretty printing writer by default)
    """
    writer = writer or JSONWriter()
    writer.write(create_output_report(result_output), output_path)
