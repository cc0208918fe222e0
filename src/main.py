"""Main entry point for the listing diagnostics tool.

This module provides the CLI interface for mapping compiler event file
listings to diagnostics against the original source files.
"""

import argparse
import sys
import logging
import time
from pathlib import Path
from typing import Optional, List

import yaml

from diagnostics import ListingError, ParseOptions, ParseStrategy, parse_listing_file
from output import JSONWriter, create_output_report, write_diagnostics_report

__version__ = "0.1.0"


def setup_logging(level: str = "INFO", quiet: bool = False) -> None:
    """Configure logging.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR)
        quiet: If True, suppress all output except errors
    """
    if quiet:
        level = "ERROR"
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    default_config = {
        "parser": {
            "strategy": None,
            "try_new_error_parser": False,
        },
        "output": {
            "pretty_print": True,
            "indent_size": 2,
            "include_columns": True,
            "hide_codes": [],
        },
        "logging": {"level": "INFO"},
    }

    if config_path and config_path.exists():
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f)
            if user_config:
                # Merge user config with defaults
                for key, value in user_config.items():
                    if isinstance(value, dict) and key in default_config:
                        default_config[key].update(value)
                    else:
                        default_config[key] = value

    return default_config


def build_parse_options(
    config: dict,
    strategy: Optional[str] = None,
    hide_codes: Optional[List[str]] = None,
    try_new_error_parser: bool = False,
) -> ParseOptions:
    """Combine configuration and command line overrides into ParseOptions.

    Args:
        config: Configuration dictionary
        strategy: Strategy name given on the command line
        hide_codes: Message ids given on the command line
        try_new_error_parser: Command line opt-in to the tree strategy

    Returns:
        ParseOptions for the parse

    Raises:
        ValueError: If a strategy name is not recognized
    """
    parser_config = config.get("parser", {})
    output_config = config.get("output", {})

    strategy_name = strategy or parser_config.get("strategy")
    codes = list(output_config.get("hide_codes") or [])
    codes.extend(hide_codes or [])

    return ParseOptions(
        strategy=ParseStrategy.from_string(strategy_name) if strategy_name else None,
        try_new_error_parser=try_new_error_parser or bool(parser_config.get("try_new_error_parser", False)),
        hide_codes=codes,
    )


def parse_listing(
    listing_path: Path,
    options: Optional[ParseOptions] = None,
    output_path: Optional[Path] = None,
    config: Optional[dict] = None,
) -> dict:
    """Parse a listing file into a diagnostics report.

    Args:
        listing_path: Path to the event file listing
        options: Parse options
        output_path: Optional path to write JSON output
        config: Configuration dictionary

    Returns:
        Report dictionary with execution timing
    """
    start_time = time.perf_counter()
    config = config or load_config()
    options = options or build_parse_options(config)
    logger = logging.getLogger(__name__)

    logger.info(f"Reading listing: {listing_path}")
    result = parse_listing_file(listing_path, options)
    logger.info(f"Strategy: {result.strategy.value}")
    logger.info(f"Found {result.diagnostic_count} diagnostics in {result.file_count} files")

    output = result.to_dict()

    end_time = time.perf_counter()
    output["execution_time_seconds"] = round(end_time - start_time, 4)

    if output_path:
        output_config = config.get("output", {})
        writer = JSONWriter(
            pretty_print=output_config.get("pretty_print", True),
            indent=output_config.get("indent_size", 2),
            include_columns=output_config.get("include_columns", True),
        )
        write_diagnostics_report(output, output_path, writer)
        logger.info(f"Output written to: {output_path}")

    return output


def handle_parse(args, config: Optional[dict] = None) -> int:
    """Handle the parse subcommand.

    Args:
        args: Parsed arguments
        config: Loaded configuration (read from args.config if None)

    Returns:
        Exit code
    """
    logger = logging.getLogger(__name__)

    # Validate input
    if not args.listing.exists():
        logger.error(f"Listing file not found: {args.listing}")
        return 1

    if not args.listing.is_file():
        logger.error(f"Listing path is not a file: {args.listing}")
        return 1

    # Create output directory if specified and doesn't exist
    if args.output_dir:
        try:
            args.output_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Output directory: {args.output_dir}")
        except OSError as e:
            logger.error(f"Failed to create output directory: {e}")
            return 1

    if config is None:
        config = load_config(args.config)

    try:
        options = build_parse_options(
            config,
            strategy=args.strategy,
            hide_codes=args.hide_codes,
            try_new_error_parser=args.try_new_error_parser,
        )
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        output = parse_listing(args.listing, options=options, config=config)
        execution_time = output.get("execution_time_seconds", 0)

        output = create_output_report(output, include_details=not args.summary_only)

        output_config = config.get("output", {})
        include_columns = not args.compact and output_config.get("include_columns", True)
        writer = JSONWriter(
            pretty_print=output_config.get("pretty_print", True),
            indent=output_config.get("indent_size", 2),
            include_columns=include_columns,
            include_levels=not args.compact,
        )

        if args.output_dir:
            output_filename = args.output_filename.format(listing_name=args.listing.stem)
            output_path = args.output_dir / output_filename
            writer.write(output, output_path)
            if not args.quiet:
                print(f"Diagnostics written to: {output_path}")
                print(f"Execution time: {execution_time:.4f} seconds")
        else:
            print(writer.write(output))

        return 0

    except ListingError as e:
        logger.error(f"Listing error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Parse failed: {e}")
        return 1


def create_parse_parser(subparsers):
    """Create the parse subcommand parser.

    Args:
        subparsers: Subparsers object from main parser

    Returns:
        The parse subparser
    """
    parse_parser = subparsers.add_parser(
        "parse",
        help="Map listing errors to source files",
        description="Read a compiler event file listing and report its errors against the original source files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s HELLO.evfevent
  %(prog)s HELLO.evfevent -o ./output
  %(prog)s HELLO.evfevent --strategy tree
  %(prog)s HELLO.evfevent --hide-code RNF7031 --hide-code RNF5409
  %(prog)s HELLO.evfevent --summary-only
        """,
    )

    # Required arguments
    parse_parser.add_argument(
        "listing",
        type=Path,
        help="Path to the event file listing to parse",
    )

    # Parser options
    parser_group = parse_parser.add_argument_group("Parser Options")
    parser_group.add_argument(
        "-s", "--strategy",
        choices=[strategy.value for strategy in ParseStrategy],
        help="Mapping strategy (default: chosen from the listing and configuration)",
    )
    parser_group.add_argument(
        "--try-new-error-parser",
        action="store_true",
        help="Use the tree strategy for listings containing precompiler expansions",
    )
    parser_group.add_argument(
        "--hide-code",
        action="append",
        dest="hide_codes",
        metavar="CODE",
        help="Message id to leave out of the output (can be specified multiple times)",
    )

    # Output options
    output_group = parse_parser.add_argument_group("Output Options")
    output_group.add_argument(
        "-o", "--output-dir",
        type=Path,
        dest="output_dir",
        help="Output directory for the diagnostics report (created if it doesn't exist)",
    )
    output_group.add_argument(
        "--output-filename",
        type=str,
        default="{listing_name}-diagnostics.json",
        help="Output filename pattern. Use {listing_name} as placeholder (default: {listing_name}-diagnostics.json)",
    )
    output_group.add_argument(
        "--compact",
        action="store_true",
        help="Leave column positions and diagnostic levels out of the output",
    )
    output_group.add_argument(
        "--summary-only",
        action="store_true",
        help="Output only the summary section (minimal output)",
    )

    # Configuration options
    config_group = parse_parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="Path to YAML configuration file",
    )

    # Logging options
    logging_group = parse_parser.add_argument_group("Logging")
    logging_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output (debug level logging)",
    )
    logging_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    parse_parser.set_defaults(func=handle_parse)
    return parse_parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)

    # If first arg is not a subcommand, assume 'parse'
    subcommands = ["parse"]
    if argv and argv[0] not in subcommands + ["-h", "--help", "--version"]:
        argv.insert(0, "parse")

    parser = argparse.ArgumentParser(
        prog="listing-diagnostics",
        description="Listing Diagnostics - Maps compiler event file errors back to the original source files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  parse    Map listing errors to source files (default)

Examples:
  %(prog)s parse HELLO.evfevent -o ./output
  %(prog)s HELLO.evfevent --strategy tree

For more information on a command, use: %(prog)s <command> --help
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        metavar="<command>",
    )

    create_parse_parser(subparsers)

    args = parser.parse_args(argv)

    # Show help if no command specified
    if not args.command:
        parser.print_help()
        return 0

    if args.verbose and args.quiet:
        parser.error("--verbose and --quiet cannot be used together")

    # Setup logging
    config = load_config(args.config)
    log_level = "DEBUG" if args.verbose else config["logging"].get("level", "INFO")
    setup_logging(log_level, quiet=args.quiet)

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
