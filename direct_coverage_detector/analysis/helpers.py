"""Find helper functions in test files and record their return types."""

import logging

from tree_sitter import Node

from direct_coverage_detector.analysis.syntax import (
    FUNCTION_DECLARATION,
    iter_top_level_functions,
    named_children,
    node_text,
    strip_pointer,
)
from direct_coverage_detector.source_loader import SourceFile

logger = logging.getLogger(__name__)

TEST_FUNCTION_PREFIX = "Test"

# Placeholder keeping later results in position; never bound
UNKNOWN_RESULT = ""


def result_type_name(type_node: Node | None, source: bytes) -> str | None:
    """Canonical name of a single result type.

    ``T`` and ``*T`` give ``"T"``; ``pkg.T`` and ``*pkg.T`` give ``"pkg.T"``.
    Other shapes (slices, maps, funcs, ...) give None.
    """
    type_node = strip_pointer(type_node)
    if type_node is None:
        return None
    if type_node.type == "generic_type":
        type_node = type_node.child_by_field_name("type")
        if type_node is None:
            return None
    if type_node.type in ("type_identifier", "identifier"):
        return node_text(type_node, source)
    if type_node.type == "qualified_type":
        package = type_node.child_by_field_name("package")
        name = type_node.child_by_field_name("name")
        if package is not None and name is not None:
            return f"{node_text(package, source)}.{node_text(name, source)}"
    return None


def return_signature(declaration: Node, source: bytes) -> list[str]:
    """Ordered result type names of a function declaration.

    Results of unsupported shape are recorded as ``UNKNOWN_RESULT``.
    """
    result = declaration.child_by_field_name("result")
    if result is None:
        return []

    if result.type != "parameter_list":
        return [result_type_name(result, source) or UNKNOWN_RESULT]

    signature = []
    for parameter in named_children(result):
        if parameter.type != "parameter_declaration":
            continue
        type_name = result_type_name(parameter.child_by_field_name("type"), source)
        # (a, b int) declares two results of one type
        names = parameter.children_by_field_name("name")
        signature.extend([type_name or UNKNOWN_RESULT] * max(len(names), 1))
    return signature


def is_helper_declaration(declaration: Node, source: bytes) -> bool:
    """Top-level, non-method, non-``Test`` functions are helpers."""
    if declaration.type != FUNCTION_DECLARATION:
        return False
    name = declaration.child_by_field_name("name")
    return name is not None and not node_text(name, source).startswith(
        TEST_FUNCTION_PREFIX
    )


def extract_helper_signatures(test_files: list[SourceFile]) -> dict[str, list[str]]:
    """Map every helper function in the test files to its return signature.

    Functions without results are left out, so their bodies are walked like
    tests. Benchmarks and void assertion helpers count this way.
    """
    signatures: dict[str, list[str]] = {}
    for source_file in test_files:
        for declaration in iter_top_level_functions(source_file.root):
            if not is_helper_declaration(declaration, source_file.source):
                continue
            name = node_text(declaration.child_by_field_name("name"), source_file.source)
            signature = return_signature(declaration, source_file.source)
            if not signature:
                continue
            signatures[name] = signature
            logger.debug(f"Helper {name} returns {signature}")

    logger.info(f"Found {len(signatures)} helper functions")
    return signatures
