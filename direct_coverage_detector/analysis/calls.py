"""Resolve the functions that test code calls directly.

The resolver walks test-function bodies and turns every call it can name
into a canonical call name: ``f`` for plain calls and ``T.M`` for method
calls on a variable whose type ``T`` is known. Variable types come from a
heuristic binding map built while walking (composite literals, ``var``
declarations and helper-function results); nothing is type checked.

Calls that cannot be named are dropped rather than guessed, so the tool
errs on the side of reporting a function as untested.
"""

import logging
from collections import ChainMap
from collections.abc import Mapping

from tree_sitter import Node

from direct_coverage_detector.analysis.syntax import (
    FUNCTION_DECLARATION,
    binding_type_name,
    iter_statements,
    iter_top_level_functions,
    iter_var_specs,
    named_children,
    node_text,
    unwrap_element,
)
from direct_coverage_detector.source_loader import SourceFile

logger = logging.getLogger(__name__)

# Go runs init implicitly, so it always counts as called
PROGRAM_ENTRY = "init"

BLANK_IDENTIFIER = "_"

CASE_CLAUSES = frozenset(
    {"expression_case", "type_case", "communication_case", "default_case"}
)
CASE_HEADER_FIELDS = ("value", "type", "communication")


def var_spec_binding(spec: Node, source: bytes) -> tuple[str, str] | None:
    """The (name, type) pair of a ``var v T`` spec, first name only."""
    names = spec.children_by_field_name("name")
    type_name = binding_type_name(spec.child_by_field_name("type"), source)
    if not names or type_name is None:
        return None
    return node_text(names[0], source), type_name


def collect_package_bindings(test_files: list[SourceFile]) -> dict[str, str]:
    """Bind the package-level ``var`` declarations of the test files.

    These bindings are visible from every test function in the package.
    """
    bindings: dict[str, str] = {}
    for source_file in test_files:
        for child in source_file.root.named_children:
            if child.type != "var_declaration":
                continue
            for spec in iter_var_specs(child):
                binding = var_spec_binding(spec, source_file.source)
                if binding is not None:
                    name, type_name = binding
                    bindings[name] = type_name
    logger.debug(f"Package-level bindings: {bindings}")
    return bindings


class CallResolver:
    """Record the names called directly from one test declaration.

    Local bindings live in the first map of a ChainMap layered over the
    package-level bindings, so they never leak into other declarations.
    Function literals share the scope of the declaration they appear in.
    """

    STATEMENT_VISITORS = {
        "expression_statement": "_visit_expression_statement",
        "short_var_declaration": "_visit_assignment",
        "assignment_statement": "_visit_assignment",
        "var_declaration": "_visit_var_declaration",
        "defer_statement": "_visit_deferred_call",
        "go_statement": "_visit_deferred_call",
        "return_statement": "_visit_return_statement",
        "send_statement": "_visit_send_statement",
        "if_statement": "_visit_if_statement",
        "for_statement": "_visit_for_statement",
        "expression_switch_statement": "_visit_case_statement",
        "type_switch_statement": "_visit_case_statement",
        "select_statement": "_visit_case_statement",
        "labeled_statement": "_visit_labeled_statement",
        "block": "visit_block",
    }

    # Statements that cannot contain a call worth recording
    IGNORED_STATEMENTS = frozenset(
        {
            "inc_statement",
            "dec_statement",
            "const_declaration",
            "type_declaration",
            "break_statement",
            "continue_statement",
            "goto_statement",
            "fallthrough_statement",
            "empty_statement",
        }
    )

    def __init__(
        self,
        source: bytes,
        helper_signatures: Mapping[str, list[str]],
        package_bindings: Mapping[str, str] | None = None,
        called: set[str] | None = None,
    ):
        self.source = source
        self.helper_signatures = helper_signatures
        self.bindings = ChainMap({}, package_bindings or {})
        self.called = called if called is not None else set()

    def bind(self, name: str | None, type_name: str | None):
        if name and type_name and name != BLANK_IDENTIFIER:
            self.bindings[name] = type_name

    def text(self, node: Node) -> str:
        return node_text(node, self.source)

    # Blocks and statements

    def visit_block(self, block: Node | None):
        for statement in iter_statements(block):
            self.visit_statement(statement)

    def visit_statement(self, statement: Node):
        visitor = self.STATEMENT_VISITORS.get(statement.type)
        if visitor is not None:
            getattr(self, visitor)(statement)
        elif statement.type not in self.IGNORED_STATEMENTS:
            line = statement.start_point[0] + 1
            logger.debug(f"Skipping {statement.type} at line {line}")

    def _visit_expression_statement(self, statement: Node):
        for expression in named_children(statement):
            if expression.type == "call_expression":
                self.resolve_call(expression)

    def _visit_assignment(self, statement: Node):
        names = [
            self.text(n) if n.type == "identifier" else None
            for n in named_children(statement.child_by_field_name("left"))
        ]
        values = named_children(statement.child_by_field_name("right"))

        for index, value in enumerate(values):
            target = names[index] if index < len(names) else None
            if value.type == "func_literal":
                self.visit_function_literal(value)
            elif value.type == "unary_expression":
                operand = value.child_by_field_name("operand")
                if operand is not None and operand.type == "composite_literal":
                    self.visit_composite_literal(operand, target)
            elif value.type == "composite_literal":
                self.visit_composite_literal(value, target)
            elif value.type == "call_expression":
                if len(values) == 1:
                    self._bind_helper_results(value, names)
                self.resolve_call(value)

    def _bind_helper_results(self, call: Node, names: list[str | None]):
        function = call.child_by_field_name("function")
        if function is None or function.type != "identifier":
            return
        signature = self.helper_signatures.get(self.text(function))
        if signature is None:
            return
        for name, type_name in zip(names, signature):
            self.bind(name, type_name)

    def _visit_var_declaration(self, statement: Node):
        specs = list(iter_var_specs(statement))
        if not specs:
            return
        binding = var_spec_binding(specs[0], self.source)
        if binding is not None:
            self.bind(*binding)

    def _visit_deferred_call(self, statement: Node):
        # defer/go: the callee only, never the arguments
        for expression in named_children(statement):
            if expression.type == "call_expression":
                self.resolve_callee(expression.child_by_field_name("function"))

    def _visit_return_statement(self, statement: Node):
        for child in named_children(statement):
            expressions = (
                named_children(child) if child.type == "expression_list" else [child]
            )
            for expression in expressions:
                if expression.type == "call_expression":
                    self.resolve_callee(expression.child_by_field_name("function"))

    def _visit_send_statement(self, statement: Node):
        value = statement.child_by_field_name("value")
        if value is not None and value.type == "call_expression":
            self.resolve_call(value)

    def _visit_if_statement(self, statement: Node):
        # The condition and initializer are not scanned
        self.visit_block(statement.child_by_field_name("consequence"))
        alternative = statement.child_by_field_name("alternative")
        if alternative is None:
            return
        if alternative.type == "if_statement":
            self._visit_if_statement(alternative)
        else:
            self.visit_block(alternative)

    def _visit_for_statement(self, statement: Node):
        self.visit_block(statement.child_by_field_name("body"))

    def _visit_case_statement(self, statement: Node):
        for clause in named_children(statement):
            if clause.type in CASE_CLAUSES:
                self._visit_case_clause(clause)

    def _visit_case_clause(self, clause: Node):
        # Case values, types and select communications are not scanned
        header = [
            node
            for field_name in CASE_HEADER_FIELDS
            for node in clause.children_by_field_name(field_name)
        ]
        for statement in iter_statements(clause):
            if not any(statement == node for node in header):
                self.visit_statement(statement)

    def _visit_labeled_statement(self, statement: Node):
        for child in named_children(statement):
            if child.type != "label_name":
                self.visit_statement(child)

    # Expressions

    def visit_function_literal(self, literal: Node):
        self.visit_block(literal.child_by_field_name("body"))

    def resolve_call(self, call: Node):
        """Record a call's callee and any calls nested in its arguments."""
        for argument in named_children(call.child_by_field_name("arguments")):
            if argument.type == "call_expression":
                self.resolve_call(argument)
            elif argument.type == "func_literal":
                self.visit_function_literal(argument)
        self.resolve_callee(call.child_by_field_name("function"))

    def resolve_callee(self, function: Node | None):
        """Record the canonical name of a callee expression, if it has one."""
        if function is None:
            return
        if function.type == "identifier":
            name = self.text(function)
            if name not in self.helper_signatures:
                self.called.add(name)
        elif function.type == "selector_expression":
            operand = function.child_by_field_name("operand")
            field = function.child_by_field_name("field")
            if operand is None or field is None or operand.type != "identifier":
                return
            type_name = self.bindings.get(self.text(operand))
            if type_name:
                self.called.add(f"{type_name}.{self.text(field)}")
        elif function.type == "func_literal":
            self.visit_function_literal(function)

    def visit_composite_literal(self, literal: Node, target: str | None = None):
        """Scan a composite literal's elements and bind ``target`` to its type."""
        self._scan_literal_value(literal.child_by_field_name("body"))
        if target is not None:
            type_node = literal.child_by_field_name("type")
            self.bind(target, binding_type_name(type_node, self.source))

    def _scan_literal_value(self, body: Node | None):
        for element in named_children(body):
            element = unwrap_element(element)
            if element.type == "keyed_element":
                value = element.child_by_field_name("value")
                if value is None:
                    value = named_children(element)[-1]
                value = unwrap_element(value)
                if value.type == "call_expression":
                    self.resolve_call(value)
                else:
                    self._scan_nested(value)
            elif element.type == "call_expression":
                self.resolve_callee(element.child_by_field_name("function"))
            else:
                self._scan_nested(element)

    def _scan_nested(self, node: Node):
        if node.type == "func_literal":
            self.visit_function_literal(node)
        elif node.type == "literal_value":
            self._scan_literal_value(node)
        elif node.type == "composite_literal":
            self._scan_literal_value(node.child_by_field_name("body"))
        elif node.type == "unary_expression":
            operand = node.child_by_field_name("operand")
            if operand is not None and operand.type == "composite_literal":
                self._scan_literal_value(operand.child_by_field_name("body"))


def is_resolvable_declaration(
    declaration: Node, source: bytes, helper_signatures: Mapping[str, list[str]]
) -> bool:
    """Test-file declarations walked for calls: anything but helpers, with a body."""
    if declaration.child_by_field_name("body") is None:
        return False
    if declaration.type == FUNCTION_DECLARATION:
        name = declaration.child_by_field_name("name")
        return name is not None and node_text(name, source) not in helper_signatures
    return True


def resolve_called_names(
    test_files: list[SourceFile],
    helper_signatures: Mapping[str, list[str]],
    package_bindings: Mapping[str, str] | None = None,
) -> set[str]:
    """Collect every name called directly from the test files.

    The result is seeded with ``init`` and is not yet pruned against the
    declared functions.
    """
    called = {PROGRAM_ENTRY}
    for source_file in test_files:
        for declaration in iter_top_level_functions(source_file.root):
            if not is_resolvable_declaration(
                declaration, source_file.source, helper_signatures
            ):
                continue
            resolver = CallResolver(
                source_file.source, helper_signatures, package_bindings, called
            )
            resolver.visit_block(declaration.child_by_field_name("body"))
        logger.debug(f"{source_file.filename}: {len(called)} called names so far")
    return called
