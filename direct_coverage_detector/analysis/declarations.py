"""Collect the functions and methods declared in non-test files."""

import logging

from tree_sitter import Node

from direct_coverage_detector.analysis.syntax import (
    METHOD_DECLARATION,
    base_type_name,
    iter_top_level_functions,
    named_children,
    node_position,
    node_text,
)
from direct_coverage_detector.models import DeclaredFunction
from direct_coverage_detector.source_loader import SourceFile

logger = logging.getLogger(__name__)


def receiver_type_name(declaration: Node, source: bytes) -> str | None:
    """Return the receiver's base type name of a method declaration.

    Empty or unrecognisable receivers give None, so the method is treated
    as a plain function.
    """
    if declaration.type != METHOD_DECLARATION:
        return None
    receiver = declaration.child_by_field_name("receiver")
    parameters = [
        p for p in named_children(receiver) if p.type == "parameter_declaration"
    ]
    if not parameters:
        return None
    return base_type_name(parameters[0].child_by_field_name("type"), source)


def qualified_name(declaration: Node, source: bytes) -> str | None:
    """``Receiver.Method`` for methods, the bare name for functions."""
    name_node = declaration.child_by_field_name("name")
    if name_node is None:
        return None
    name = node_text(name_node, source)
    receiver = receiver_type_name(declaration, source)
    if receiver:
        return f"{receiver}.{name}"
    return name


def collect_file_declarations(source_file: SourceFile) -> dict[str, DeclaredFunction]:
    """Catalog the top-level functions and methods of one file."""
    declared: dict[str, DeclaredFunction] = {}
    filename = source_file.filename

    for declaration in iter_top_level_functions(source_file.root):
        name = qualified_name(declaration, source_file.source)
        if name is None:
            continue

        body_start = body_end = None
        body = declaration.child_by_field_name("body")
        if body is not None:
            body_start = node_position(body, filename)
            closing = body.children[-1]
            body_end = node_position(closing, filename)

        if name in declared:
            logger.debug(f"Duplicate declaration of {name} in {filename}")
        declared[name] = DeclaredFunction(
            name=name,
            filename=filename,
            decl_position=node_position(declaration, filename),
            body_start=body_start,
            body_end=body_end,
        )

    return declared


def collect_declarations(source_files: list[SourceFile]) -> dict[str, DeclaredFunction]:
    """Build the declared-function catalog for a set of non-test files.

    Later files win when two declarations share a qualified name.
    """
    declared: dict[str, DeclaredFunction] = {}
    for source_file in source_files:
        file_declared = collect_file_declarations(source_file)
        logger.debug(f"{source_file.filename}: {len(file_declared)} declarations")
        declared.update(file_declared)
    logger.info(f"Found {len(declared)} declared functions")
    return declared
