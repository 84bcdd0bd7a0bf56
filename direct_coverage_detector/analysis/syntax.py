"""Helpers for reading tree-sitter-go syntax trees."""

from collections.abc import Iterator

from tree_sitter import Node

from direct_coverage_detector.models import Position

FUNCTION_DECLARATION = "function_declaration"
METHOD_DECLARATION = "method_declaration"


def node_text(node: Node, source: bytes) -> str:
    """Return the source text covered by a node."""
    return source[node.start_byte : node.end_byte].decode("utf-8")


def node_position(node: Node, filename: str) -> Position:
    """Return the position of a node's first byte."""
    row, column = node.start_point
    return Position(
        filename=filename, line=row + 1, column=column + 1, offset=node.start_byte
    )


def named_children(node: Node | None) -> list[Node]:
    """Named children of a node, without comments."""
    if node is None:
        return []
    return [child for child in node.named_children if child.type != "comment"]


def iter_statements(node: Node | None) -> Iterator[Node]:
    """Yield the statements of a block or case clause.

    Newer grammars wrap statements in a ``statement_list`` node; older ones
    put them directly under the block.
    """
    for child in named_children(node):
        if child.type == "statement_list":
            yield from named_children(child)
        else:
            yield child


def iter_top_level_functions(root: Node) -> Iterator[Node]:
    """Yield function and method declarations at the top of a file."""
    for child in root.named_children:
        if child.type in (FUNCTION_DECLARATION, METHOD_DECLARATION):
            yield child


def iter_var_specs(declaration: Node) -> Iterator[Node]:
    """Yield the var_spec nodes of a var declaration, grouped or not."""
    for child in named_children(declaration):
        if child.type == "var_spec":
            yield child
        elif child.type == "var_spec_list":
            yield from (c for c in named_children(child) if c.type == "var_spec")


def unwrap_element(node: Node) -> Node:
    """Return the expression inside a ``literal_element`` wrapper."""
    if node.type == "literal_element":
        children = named_children(node)
        if children:
            return children[0]
    return node


def strip_pointer(type_node: Node | None) -> Node | None:
    """Strip pointer and parenthesis wrappers from a type node."""
    while type_node is not None and type_node.type in (
        "pointer_type",
        "parenthesized_type",
    ):
        children = named_children(type_node)
        type_node = children[0] if children else None
    return type_node


def base_type_name(type_node: Node | None, source: bytes) -> str | None:
    """Name of a local type, ignoring pointers and type arguments.

    ``T``, ``*T``, ``T[X]`` and ``*T[X]`` all give ``T``. Any other shape
    gives None.
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
    return None


def binding_type_name(type_node: Node | None, source: bytes) -> str | None:
    """Type name recorded for a variable of the given declared type.

    Package-qualified types bind to their bare name (``pkg.T`` → ``T``).
    """
    stripped = strip_pointer(type_node)
    if stripped is not None and stripped.type == "qualified_type":
        name = stripped.child_by_field_name("name")
        return node_text(name, source) if name is not None else None
    return base_type_name(type_node, source)
