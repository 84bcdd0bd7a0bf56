"""Main analyzer that orchestrates the analysis passes."""

import logging
from pathlib import Path

from direct_coverage_detector.analysis import (
    collect_declarations,
    collect_package_bindings,
    extract_helper_signatures,
    resolve_called_names,
)
from direct_coverage_detector.models import DeclaredFunction, DiffOutput, Report
from direct_coverage_detector.source_loader import PackageSources, load_package

logger = logging.getLogger(__name__)


class NoDeclaredFunctionsError(Exception):
    """The package declares no functions, so no score can be computed."""

    def __init__(self, message: str = "No declared functions found"):
        super().__init__(message)
        self.phase = "reporting"


def analyze_sources(sources: PackageSources) -> Report:
    """Run the analysis passes over already parsed sources.

    Helper signatures and package-level bindings are complete before any
    test body is walked.
    """
    helper_signatures = extract_helper_signatures(sources.test_files)
    declared_details = collect_declarations(sources.non_test_files)
    package_bindings = collect_package_bindings(sources.test_files)
    called = resolve_called_names(
        sources.test_files, helper_signatures, package_bindings
    )

    declared = set(declared_details)
    pruned = called - declared
    called &= declared
    logger.debug(f"declared functions: {sorted(declared)}")
    logger.debug(f"called functions: {sorted(called)}")
    logger.debug(f"ignored calls: {sorted(pruned)}")

    return Report(declared_details=declared_details, declared=declared, called=called)


def analyze_package(package_dir: Path | str | None = None) -> Report:
    """Analyze a Go package directory for functions without direct tests.

    Args:
        package_dir: The package directory; the current directory when omitted

    Returns:
        Report of declared and directly called functions

    Raises:
        SourceLoadError: If the directory cannot be loaded or parsed
    """
    logger.info(f"Starting analysis of {package_dir or Path.cwd()}")
    report = analyze_sources(load_package(package_dir))
    logger.info(
        f"Analysis complete: {len(report.called)}/{len(report.declared)} functions called directly"
    )
    return report


def sort_missing(functions: list[DeclaredFunction]) -> list[DeclaredFunction]:
    """Order functions by filename, then declaration line."""
    return sorted(functions, key=lambda f: (f.filename, f.decl_position.line, f.name))


def generate_diff_report(report: Report) -> DiffOutput:
    """Compute the functions declared but never called directly.

    Raises:
        NoDeclaredFunctionsError: If the report has no declared functions
    """
    if not report.declared:
        raise NoDeclaredFunctionsError()

    missing = sort_missing(
        [report.declared_details[name] for name in report.declared - report.called]
    )

    details: dict[str, list[DeclaredFunction]] = {}
    for function in missing:
        details.setdefault(function.filename, []).append(function)

    declared_count = len(report.declared)
    called_count = len(report.called)
    return DiffOutput(
        declared_count=declared_count,
        called_count=called_count,
        score=100 * called_count // declared_count,
        details=details,
        longest_name_length=max((len(f.name) for f in missing), default=0),
    )
