"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest

import main as cli
from main import build_parse_options, load_config, main, parse_listing
from diagnostics import ParseStrategy

# Path to test fixtures
FIXTURES_DIR = Path(__file__).parent / "fixtures"
NESTED_LISTING = FIXTURES_DIR / "nested_copybook.evfevent"
LONG_PATH_LISTING = FIXTURES_DIR / "long_path.evfevent"


class TestConfig:
    """Tests for configuration loading."""

    def test_defaults(self):
        config = load_config()

        assert config["parser"]["strategy"] is None
        assert config["parser"]["try_new_error_parser"] is False
        assert config["output"]["hide_codes"] == []

    def test_yaml_overrides(self, tmp_path):
        """Test that a YAML file is merged over the defaults."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("parser:\n  try_new_error_parser: true\noutput:\n  indent_size: 4\n")

        config = load_config(config_path)

        assert config["parser"]["try_new_error_parser"] is True
        assert config["parser"]["strategy"] is None
        assert config["output"]["indent_size"] == 4
        assert config["output"]["pretty_print"] is True

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == load_config()

    def test_build_parse_options(self):
        """Test that command line values extend the configuration."""
        config = load_config()
        config["output"]["hide_codes"] = ["RNF7031"]

        options = build_parse_options(config, strategy="tree", hide_codes=["RNF5409"])

        assert options.strategy == ParseStrategy.TREE
        assert options.hide_codes == ["RNF7031", "RNF5409"]
        assert options.try_new_error_parser is False

    def test_build_parse_options_bad_strategy(self):
        with pytest.raises(ValueError):
            build_parse_options(load_config(), strategy="fastest")


class TestParseListing:
    """Tests for parse_listing."""

    def test_returns_report(self):
        output = parse_listing(NESTED_LISTING)

        assert output["listing"] == "nested_copybook.evfevent"
        assert output["summary"]["files"] == 3
        assert output["execution_time_seconds"] >= 0

    def test_writes_output(self, tmp_path):
        output_path = tmp_path / "out.json"

        parse_listing(NESTED_LISTING, output_path=output_path)

        assert json.loads(output_path.read_text(encoding="utf-8"))["strategy"] == "range"


class TestMain:
    """Tests for the main() entry point."""

    def test_prints_json(self, capsys):
        """Test that the report goes to stdout without a subcommand."""
        exit_code = main([str(NESTED_LISTING), "-q"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["strategy"] == "range"
        assert len(output["files"]) == 3

    def test_parse_subcommand_with_strategy(self, capsys):
        exit_code = main(["parse", str(LONG_PATH_LISTING), "--strategy", "tree", "-q"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["strategy"] == "tree"
        assert "QTEMP/QSQLTEMP1/FIX1200" in output["files"]

    def test_try_new_error_parser(self, capsys):
        exit_code = main([str(LONG_PATH_LISTING), "--try-new-error-parser", "-q"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["strategy"] == "tree"

    def test_hide_code(self, capsys):
        """Test that --hide-code can be repeated."""
        exit_code = main([str(NESTED_LISTING), "--hide-code", "RNF7031", "--hide-code", "RNF0734", "-q"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        codes = {d["code"] for errors in output["files"].values() for d in errors}
        assert codes == {"RNF3312", "RNF0637", "RNF7030", "RNS9308"}

    def test_compact(self, capsys):
        main([str(NESTED_LISTING), "--compact", "-q"])

        output = json.loads(capsys.readouterr().out)
        diagnostic = next(iter(output["files"].values()))[0]
        assert "column_start" not in diagnostic
        assert "level" not in diagnostic

    def test_summary_only(self, capsys):
        main([str(NESTED_LISTING), "--summary-only", "-q"])

        output = json.loads(capsys.readouterr().out)
        assert "files" not in output
        assert output["summary"]["diagnostics"] == 12

    def test_output_dir(self, tmp_path):
        """Test writing the report into an output directory."""
        output_dir = tmp_path / "reports"

        exit_code = main([str(NESTED_LISTING), "-o", str(output_dir), "-q"])

        assert exit_code == 0
        report = output_dir / "nested_copybook-diagnostics.json"
        assert report.exists()
        assert json.loads(report.read_text(encoding="utf-8"))["summary"]["files"] == 3

    def test_output_filename_pattern(self, tmp_path):
        exit_code = main([
            str(NESTED_LISTING), "-o", str(tmp_path),
            "--output-filename", "{listing_name}.json", "-q",
        ])

        assert exit_code == 0
        assert (tmp_path / "nested_copybook.json").exists()

    def test_config_file(self, tmp_path, capsys):
        """Test that the configuration file enables the tree strategy."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("parser:\n  try_new_error_parser: true\n")

        exit_code = main([str(LONG_PATH_LISTING), "--config", str(config_path), "-q"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["strategy"] == "tree"

    def test_bad_strategy_in_config(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("parser:\n  strategy: fastest\n")

        assert main([str(NESTED_LISTING), "--config", str(config_path), "-q"]) == 1

    def test_missing_listing(self, tmp_path):
        assert main([str(tmp_path / "missing.evfevent"), "-q"]) == 1

    def test_directory_listing(self, tmp_path):
        assert main([str(tmp_path), "-q"]) == 1

    def test_no_command_shows_help(self, capsys):
        assert main([]) == 0
        assert "listing-diagnostics" in capsys.readouterr().out

    def test_verbose_and_quiet_conflict(self):
        with pytest.raises(SystemExit):
            main([str(NESTED_LISTING), "-v", "-q"])

    def test_version(self, capsys):
        """Test that --version reports the package version."""
        with pytest.raises(SystemExit):
            main(["--version"])

        assert cli.__version__ in capsys.readouterr().out

    def test_config_is_loaded_once(self, tmp_path, monkeypatch):
        """Test that one invocation reads the configuration a single time."""
        calls = []
        original_load_config = cli.load_config

        def counting_load_config(config_path=None):
            calls.append(config_path)
            return original_load_config(config_path)

        monkeypatch.setattr(cli, "load_config", counting_load_config)

        assert main([str(NESTED_LISTING), "-o", str(tmp_path), "-q"]) == 0
        assert len(calls) == 1


class TestVersion:
    """Tests for the package version."""

    def test_setup_reads_cli_version(self):
        """Test that the version setup.py reads is the one the CLI reports."""
        setup_text = (Path(__file__).parent.parent / "setup.py").read_text(encoding="utf-8")
        main_text = (Path(__file__).parent.parent / "src" / "main.py").read_text(encoding="utf-8")

        assert 'open("src/main.py"' in setup_text
        assert f'__version__ = "{cli.__version__}"' in main_text
