"""Load and parse the Go source files of a package directory."""

import logging
from dataclasses import dataclass
from pathlib import Path

import tree_sitter
import tree_sitter_go

logger = logging.getLogger(__name__)

TEST_FILE_SUFFIX = "_test.go"

_PARSER: tree_sitter.Parser | None = None


class SourceLoadError(Exception):
    """Error loading or parsing a package directory."""

    def __init__(self, message: str, phase: str = "loading"):
        super().__init__(message)
        self.phase = phase


@dataclass
class SourceFile:
    """A parsed Go source file."""

    path: Path
    source: bytes
    tree: tree_sitter.Tree

    @property
    def filename(self) -> str:
        return str(self.path)

    @property
    def is_test(self) -> bool:
        return self.path.name.endswith(TEST_FILE_SUFFIX)

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node


@dataclass
class PackageSources:
    """All parsed files of one package directory, split by role."""

    directory: Path
    files: list[SourceFile]

    @property
    def test_files(self) -> list[SourceFile]:
        return [f for f in self.files if f.is_test]

    @property
    def non_test_files(self) -> list[SourceFile]:
        return [f for f in self.files if not f.is_test]


def get_parser() -> tree_sitter.Parser:
    """Get the cached Go parser."""
    global _PARSER
    if _PARSER is None:
        language = tree_sitter.Language(tree_sitter_go.language())
        _PARSER = tree_sitter.Parser(language)
    return _PARSER


def parse_source(source: bytes, path: Path) -> SourceFile:
    """Parse Go source bytes.

    Raises:
        SourceLoadError: If the source contains syntax errors
    """
    tree = get_parser().parse(source)
    if tree.root_node.has_error:
        line = _first_error_line(tree.root_node)
        raise SourceLoadError(
            f"Syntax error in {path} near line {line}", phase="parsing"
        )
    return SourceFile(path=path, source=source, tree=tree)


def _first_error_line(node: tree_sitter.Node) -> int:
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error:
            return _first_error_line(child)
    return node.start_point[0] + 1


def load_package(directory: Path | str | None = None) -> PackageSources:
    """Parse every .go file directly inside a package directory.

    Args:
        directory: Package directory; the current working directory when omitted

    Returns:
        PackageSources with files in sorted path order

    Raises:
        SourceLoadError: If the directory is missing, holds no Go files,
            or any file fails to parse
    """
    package_dir = Path(directory) if directory else Path.cwd()
    logger.debug(f"package directory: {package_dir}")

    if not package_dir.is_dir():
        raise SourceLoadError(f"Package directory doesn't exist: {package_dir}")

    paths = sorted(p for p in package_dir.glob("*.go") if p.is_file())
    if not paths:
        raise SourceLoadError(f"No Go files found in {package_dir}")

    files = []
    for path in paths:
        logger.debug(f"Parsing {path}")
        files.append(parse_source(path.read_bytes(), path))

    logger.info(f"Loaded {len(files)} Go files from {package_dir}")
    return PackageSources(directory=package_dir, files=files)
