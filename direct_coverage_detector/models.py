"""Data models for analysis output."""

import json
from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class Position:
    """A location in a source file.

    Line and column are 1-based, column counted in bytes. Offset is the
    0-based byte offset.
    """

    filename: str
    line: int
    column: int
    offset: int


@dataclass(frozen=True)
class DeclaredFunction:
    """A top-level function or method declared in a non-test file."""

    name: str
    filename: str
    decl_position: Position
    body_start: Position | None = None  # opening brace
    body_end: Position | None = None  # closing brace

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class Report:
    """Declared and directly called functions of one package."""

    declared_details: dict[str, DeclaredFunction]
    declared: set[str]
    called: set[str]


@dataclass
class DiffOutput:
    """Functions declared but never called directly from a test."""

    declared_count: int
    called_count: int
    score: int
    details: dict[str, list[DeclaredFunction]] = field(default_factory=dict)
    longest_name_length: int = 0

    @property
    def missing_count(self) -> int:
        return sum(len(functions) for functions in self.details.values())

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "declared": self.declared_count,
            "called": self.called_count,
            "score": self.score,
            "longest_name_length": self.longest_name_length,
            "details": {
                filename: [f.to_dict() for f in functions]
                for filename, functions in sorted(self.details.items())
            },
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
