"""Tests for collecting declared functions."""

import textwrap
from pathlib import Path

import pytest

from direct_coverage_detector.analysis.declarations import (
    collect_declarations,
    collect_file_declarations,
)
from direct_coverage_detector.models import Position
from direct_coverage_detector.source_loader import parse_source


@pytest.fixture
def fixtures_path():
    return Path(__file__).parent.parent / "fixtures" / "example_packages"


def parse_file(code: str, name: str = "example.go"):
    return parse_source(textwrap.dedent(code).encode(), Path(name))


class TestCollectFileDeclarations:
    def given_source(self, code):
        self.source_file = parse_file(code)

    def given_fixture_file(self, path):
        self.source_file = parse_source(path.read_bytes(), path)

    def when_declarations_are_collected(self):
        self.declared = collect_file_declarations(self.source_file)

    def then_names_are(self, *names):
        assert set(self.declared) == set(names)

    def test_simple(self):
        """Free functions are keyed by their bare name."""
        self.given_source(
            """
            package test
            func example(){}
            """
        )
        self.when_declarations_are_collected()
        self.then_names_are("example")

    def test_receivers(self):
        """Methods are qualified by receiver type, pointer or not."""
        self.given_source(
            """
            package test
            type Example struct{}
            func (e Example) value(){}
            func (e *Example) pointer(){}
            func (Example) unnamed(){}
            """
        )
        self.when_declarations_are_collected()
        self.then_names_are("Example.value", "Example.pointer", "Example.unnamed")

    def test_generic_receiver(self):
        """Type parameters on the receiver are dropped."""
        self.given_source(
            """
            package test
            type Stack[T any] struct{ items []T }
            func (s *Stack[T]) Push(item T) {}
            """
        )
        self.when_declarations_are_collected()
        self.then_names_are("Stack.Push")

    def test_positions(self, fixtures_path):
        """The func keyword and both braces of the body are recorded."""
        path = fixtures_path / "simple" / "main.go"
        self.given_fixture_file(path)
        self.when_declarations_are_collected()

        a = self.declared["a"]
        assert a.filename == str(path)
        assert a.decl_position == Position(str(path), line=3, column=1, offset=16)
        assert a.body_start == Position(str(path), line=3, column=17, offset=32)
        assert a.body_end == Position(str(path), line=5, column=1, offset=46)

        wrapper = self.declared["wrapper"]
        assert wrapper.decl_position == Position(str(path), line=15, column=1, offset=115)
        assert wrapper.body_start == Position(str(path), line=15, column=16, offset=130)
        assert wrapper.body_end == Position(str(path), line=19, column=1, offset=147)

    def test_declaration_without_body(self):
        """Body-less declarations have no brace positions."""
        self.given_source(
            """
            package test
            func external() int
            """
        )
        self.when_declarations_are_collected()
        assert self.declared["external"].body_start is None
        assert self.declared["external"].body_end is None


class TestCollectDeclarations:
    def test_last_file_wins_on_collision(self):
        """A qualified name declared twice keeps the later declaration."""
        first = parse_file("package p\nfunc init() {}\n", "a.go")
        second = parse_file("package p\n\nfunc init() {}\n", "b.go")

        declared = collect_declarations([first, second])

        assert declared["init"].filename == "b.go"
        assert declared["init"].decl_position.line == 3
