"""Tests for the public API module."""

import pytest
from pathlib import Path

from diagnostics import (
    Diagnostic,
    ListingError,
    ListingParseResult,
    ParseOptions,
    ParseStrategy,
    Severity,
    filter_hidden_codes,
    parse_errors,
    parse_listing_file,
    parse_listing_text,
    select_strategy,
)
from listing_records import error, file_end, file_id


# Path to test fixtures
FIXTURES_DIR = Path(__file__).parent / "fixtures"

COPYBOOK = "/home/ANGELORPA/builds/fix1200/display/qprotsrc/constants.rpgle"
NESTED = "/home/ANGELORPA/builds/fix1200/display/qprotsrc/constLeve2.rpgle"


class TestParseStrategy:
    """Tests for strategy names."""

    def test_from_string(self):
        assert ParseStrategy.from_string("TREE") == ParseStrategy.TREE
        assert ParseStrategy.from_string(" range ") == ParseStrategy.RANGE

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown strategy"):
            ParseStrategy.from_string("fastest")


class TestSelectStrategy:
    """Tests for choosing a strategy from options and listing content."""

    EXPANDED = ["EXPANSION  0 001 000000 000000 999 000006 000070"]
    PLAIN = ["FILEEND    0 001 000013"]

    def test_explicit_strategy_wins(self):
        options = ParseOptions(strategy=ParseStrategy.TREE)

        assert select_strategy(self.PLAIN, options) == ParseStrategy.TREE

    def test_default_is_range(self):
        """Test that expansions alone do not enable the tree strategy."""
        assert select_strategy(self.EXPANDED) == ParseStrategy.RANGE

    def test_opt_in_with_expansions(self):
        options = ParseOptions(try_new_error_parser=True)

        assert select_strategy(self.EXPANDED, options) == ParseStrategy.TREE

    def test_opt_in_without_expansions(self):
        """Test that listings without expansions keep the range strategy."""
        options = ParseOptions(try_new_error_parser=True)

        assert select_strategy(self.PLAIN, options) == ParseStrategy.RANGE


class TestParseErrors:
    """Tests for parse_errors and parse_listing_text."""

    def test_default_strategy(self):
        """Test the single member scenario through the public entry point."""
        lines = [
            file_id(1, "MYLIB/MYFILE(MYMBR)"),
            error(1, 5, "RNF1234", 30, "Undefined symbol"),
            file_end(1, 10),
        ]

        result = parse_errors(lines)

        assert result == {
            "MYLIB/MYFILE/MYMBR": [
                Diagnostic(severity=30, line=5, column_start=0, column_end=0, text="Undefined symbol", code="RNF1234")
            ]
        }

    def test_sql_listing_depends_on_strategy(self):
        """Test that the tree strategy reports precompiler errors."""
        lines = (FIXTURES_DIR / "employees_member.evfevent").read_text(encoding="utf-8").split("\n")

        assert parse_errors(lines) == {}
        tree = parse_errors(lines, ParseOptions(try_new_error_parser=True))
        assert len(tree["LIAMA/QRPGLESRC/EMPLOYEES"]) == 10

    def test_hide_codes(self):
        """Test that hidden message ids are left out, with emptied files."""
        text = (FIXTURES_DIR / "nested_copybook.evfevent").read_text(encoding="utf-8")

        result = parse_listing_text(text, ParseOptions(hide_codes=["RNF7031"]))

        assert COPYBOOK not in result
        assert [d.code for d in result[NESTED]] == ["RNF0734", "RNF0734"]
        assert all(d.code != "RNF7031" for errors in result.values() for d in errors)

    def test_crlf_listing(self):
        text = "\r\n".join([
            file_id(1, "MYLIB/MYFILE(MYMBR)"),
            error(1, 5, "RNF1234", 30, "Undefined symbol"),
            file_end(1, 10),
            "",
        ])

        result = parse_listing_text(text)

        assert result["MYLIB/MYFILE/MYMBR"][0].text == "Undefined symbol"


class TestFilterHiddenCodes:
    """Tests for filter_hidden_codes."""

    def _diagnostic(self, code):
        return Diagnostic(severity=0, line=1, column_start=0, column_end=0, text="x", code=code)

    def test_no_codes_returns_input(self):
        diagnostics = {"A": [self._diagnostic("RNF7031")]}

        assert filter_hidden_codes(diagnostics, []) is diagnostics

    def test_filters(self):
        diagnostics = {
            "A": [self._diagnostic("RNF7031"), self._diagnostic("RNF7030")],
            "B": [self._diagnostic("RNF7031")],
        }

        result = filter_hidden_codes(diagnostics, ["RNF7031"])

        assert list(result) == ["A"]
        assert [d.code for d in result["A"]] == ["RNF7030"]


class TestParseListingFile:
    """Tests for the parse_listing_file function."""

    def test_basic_parse(self):
        """Test parsing a listing file."""
        result = parse_listing_file(FIXTURES_DIR / "nested_copybook.evfevent")

        assert isinstance(result, ListingParseResult)
        assert result.listing_name == "nested_copybook.evfevent"
        assert result.strategy == ParseStrategy.RANGE
        assert result.file_count == 3
        assert result.diagnostic_count == 12
        assert result.execution_time_seconds >= 0

    def test_summary(self):
        """Test diagnostic counts per level."""
        result = parse_listing_file(FIXTURES_DIR / "nested_copybook.evfevent")

        assert result.summary() == {
            "files": 3,
            "diagnostics": 12,
            "by_level": {"information": 3, "warning": 3, "error": 6},
        }

    def test_strategy_is_reported(self):
        options = ParseOptions(try_new_error_parser=True)

        result = parse_listing_file(FIXTURES_DIR / "long_path.evfevent", options)

        assert result.strategy == ParseStrategy.TREE
        assert result.file_count == 2

    def test_to_dict(self):
        """Test the JSON-ready shape of a result."""
        output = parse_listing_file(FIXTURES_DIR / "nested_copybook.evfevent").to_dict()

        assert output["listing"] == "nested_copybook.evfevent"
        assert output["strategy"] == "range"
        assert set(output["files"]) == set(parse_listing_file(FIXTURES_DIR / "nested_copybook.evfevent").diagnostics)
        first = output["files"][COPYBOOK][0]
        assert first == {
            "severity": 0,
            "level": "information",
            "line": 3,
            "column_start": 7,
            "column_end": 15,
            "text": "The name or indicator FIRST_DAY is not referenced.",
            "code": "RNF7031",
        }
        assert output["summary"]["diagnostics"] == 12

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            parse_listing_file(FIXTURES_DIR / "nonexistent.evfevent")

    def test_directory_is_rejected(self):
        with pytest.raises(FileNotFoundError):
            parse_listing_file(FIXTURES_DIR)

    def test_read_failure(self, monkeypatch):
        """Test that read errors are wrapped in ListingError."""
        def fail(*args, **kwargs):
            raise OSError("device not ready")

        monkeypatch.setattr(Path, "read_text", fail)

        with pytest.raises(ListingError, match="device not ready"):
            parse_listing_file(FIXTURES_DIR / "nested_copybook.evfevent")


class TestSeverity:
    """Tests for severity levels."""

    @pytest.mark.parametrize(
        "severity,level",
        [
            (0, Severity.INFORMATION),
            (10, Severity.INFORMATION),
            (20, Severity.WARNING),
            (30, Severity.ERROR),
            (40, Severity.ERROR),
            (50, Severity.ERROR),
        ],
    )
    def test_from_number(self, severity, level):
        assert Severity.from_number(severity) == level
