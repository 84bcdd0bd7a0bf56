"""Command-line interface for direct-coverage-detector."""

import argparse
import logging
import sys

from direct_coverage_detector.analyzer import (
    NoDeclaredFunctionsError,
    analyze_package,
    generate_diff_report,
)
from direct_coverage_detector.formatter import format_report
from direct_coverage_detector.source_loader import SourceLoadError

logger = logging.getLogger(__name__)

COMMANDS = ("analyze",)


def setup_logging(debug: bool = False, verbose: bool = False):
    """Configure logging to stderr."""
    level = logging.WARNING
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="direct-coverage-detector",
        description="Find Go functions which don't have direct unit tests",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Log debug information",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a package for functions lacking direct unit tests",
    )
    analyze_parser.add_argument(
        "--package",
        "-p",
        default=".",
        help="Package directory to analyze (default: current directory)",
    )
    analyze_parser.add_argument(
        "--fail-on-found",
        "-F",
        action="store_true",
        help="Exit with status 1 when functions without direct tests are found",
    )
    analyze_parser.add_argument(
        "--json",
        "-j",
        action="store_true",
        dest="output_json",
        help="Render results as JSON",
    )

    return parser


def parse_args(args: list[str]) -> argparse.Namespace:
    """Parse command-line arguments with backwards compatibility."""
    parser = create_parser()

    # Bare package directory without subcommand
    if args and not args[0].startswith("-") and args[0] not in COMMANDS:
        args = ["analyze", "--package"] + args

    return parser.parse_args(args)


def run_analyze(package: str, fail_on_found: bool, output_json: bool) -> int:
    """Run the analyze command.

    Args:
        package: Package directory to analyze
        fail_on_found: Return 1 when any function lacks a direct test
        output_json: Print JSON instead of the text report

    Returns:
        Exit code (0 for success, non-zero for errors or findings)
    """
    try:
        report = analyze_package(package)
        diff = generate_diff_report(report)
    except (SourceLoadError, NoDeclaredFunctionsError) as e:
        logger.error(f"Analysis failed during {e.phase}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if output_json:
        print(diff.to_json())
    else:
        print(format_report(diff, color=sys.stdout.isatty()))

    if fail_on_found and diff.details:
        logger.info(f"{diff.missing_count} functions without direct tests")
        return 1
    return 0


def run_cli(args: list[str]) -> int:
    """Run the CLI with the given arguments.

    Args:
        args: Command-line arguments (without program name)

    Returns:
        Exit code (0 for success, non-zero for fatal errors)
    """
    try:
        parsed = parse_args(args)
    except SystemExit as e:
        return e.code if e.code else 0

    setup_logging(debug=parsed.debug, verbose=parsed.verbose)

    if parsed.command is None:
        create_parser().print_help(sys.stderr)
        return 1

    if parsed.command == "analyze":
        return run_analyze(parsed.package, parsed.fail_on_found, parsed.output_json)

    return 1


def main():
    """Entry point for the CLI."""
    sys.exit(run_cli(sys.argv[1:]))


if __name__ == "__main__":
    main()
