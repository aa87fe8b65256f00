# Parsed program handed to every rule: file path, source bytes, AST, and
# helpers for walking nodes and turning byte spans into readable locations.

import logging
from pathlib import Path
from typing import Iterator, Optional

from tree_sitter import Node as TSNode
from tree_sitter import Parser, Tree

from lintbridge.findings.models import Span
from lintbridge.parser import create_parser, parse_bytes

logger = logging.getLogger(__name__)


def walk(node: TSNode) -> Iterator[TSNode]:
    """Yield node and every descendant in document order (pre-order DFS)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


FUNCTION_NODE_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)


def count_tree_stats(root: TSNode) -> tuple[int, int]:
    """
    Return (total node count, function count) for the tree.

    Function count covers declarations, expressions, arrows and methods.
    """
    nodes = 0
    functions = 0
    for node in walk(root):
        nodes += 1
        if node.is_named and node.type in FUNCTION_NODE_TYPES:
            functions += 1
    return nodes, functions


class ParsedProgram:
    """
    A parsed JavaScript module: path, raw source bytes, and AST.

    Rules read program.source and program.tree; spans reported against it are
    byte offsets into program.source.
    """

    def __init__(
        self,
        path: Path,
        source: bytes,
        tree: Tree,
        *,
        has_parse_errors: bool = False,
    ) -> None:
        self.path = path
        self.source = source
        self.tree = tree
        self.has_parse_errors = has_parse_errors

    @property
    def root_node(self) -> TSNode:
        """Convenience access to the AST root."""
        return self.tree.root_node


def span_of(node: TSNode) -> Span:
    """Return the byte span covered by node."""
    return Span(lo=node.start_byte, hi=node.end_byte)


def get_source_span(program: ParsedProgram, node: TSNode) -> str:
    """
    Return the substring of program.source for the given node's byte range.

    Decodes with errors="replace" so bad UTF-8 does not crash.
    """
    return program.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def offset_to_line_col(source: bytes, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of a byte offset; column counts bytes."""
    offset = max(0, min(offset, len(source)))
    line = source.count(b"\n", 0, offset) + 1
    line_start = source.rfind(b"\n", 0, offset) + 1
    return line, offset - line_start + 1


def parse_program(path: Path, source: bytes, parser: Optional[Parser] = None) -> ParsedProgram:
    """Parse in-memory source into a ParsedProgram (no file access)."""
    tree = parse_bytes(source, parser=parser)
    return ParsedProgram(
        path=path,
        source=source,
        tree=tree,
        has_parse_errors=tree.root_node.has_error,
    )


def create_program(
    path: Path,
    parser: Optional[Parser] = None,
) -> Optional[ParsedProgram]:
    """
    Read a JavaScript file and parse it into a ParsedProgram.

    - Unreadable file (permission, missing): returns None and logs error.
    - Syntax errors: still returns a ParsedProgram with has_parse_errors=True
      and logs a warning.
    - Success: logs node count and function count.
    """
    if parser is None:
        parser = create_parser()

    try:
        source = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None

    program = parse_program(path, source, parser=parser)
    if program.has_parse_errors:
        logger.warning("File %s parsed with syntax errors; AST may be incomplete", path)

    node_count, func_count = count_tree_stats(program.root_node)
    logger.info(
        "Parsed %s: %d nodes, %d function(s)%s",
        path,
        node_count,
        func_count,
        " (with parse errors)" if program.has_parse_errors else "",
    )
    return program


def load_programs(
    paths: list[Path],
    parser: Optional[Parser] = None,
) -> list[ParsedProgram]:
    """
    Read and parse multiple files. Unreadable files are skipped (logged);
    order matches input order.
    """
    if parser is None:
        parser = create_parser()

    programs: list[ParsedProgram] = []
    for path in paths:
        program = create_program(path, parser=parser)
        if program is not None:
            programs.append(program)
    return programs
