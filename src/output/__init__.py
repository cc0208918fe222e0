"""Output module for writing diagnostics reports."""

from .json_writer import JSONWriter, create_output_report, write_diagnostics_report

__all__ = ["JSONWriter", "create_output_report", "write_diagnostics_report"]
