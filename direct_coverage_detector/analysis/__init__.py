"""Syntax-tree passes that find declared and directly called functions."""

from direct_coverage_detector.analysis.calls import (
    PROGRAM_ENTRY,
    CallResolver,
    collect_package_bindings,
    resolve_called_names,
)
from direct_coverage_detector.analysis.declarations import (
    collect_declarations,
    collect_file_declarations,
    qualified_name,
)
from direct_coverage_detector.analysis.helpers import (
    extract_helper_signatures,
    return_signature,
)

__all__ = [
    # Declarations
    "collect_declarations",
    "collect_file_declarations",
    "qualified_name",
    # Helpers
    "extract_helper_signatures",
    "return_signature",
    # Calls
    "PROGRAM_ENTRY",
    "CallResolver",
    "collect_package_bindings",
    "resolve_called_names",
]
