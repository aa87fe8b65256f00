"""Tests for lintbridge.program: ParsedProgram, create_program, span helpers."""

from pathlib import Path

from lintbridge.program import (
    count_tree_stats,
    create_program,
    get_source_span,
    load_programs,
    offset_to_line_col,
    parse_program,
    span_of,
    walk,
)


def test_count_tree_stats_counts_functions():
    program = parse_program(Path("a.js"), b"function f() {}\nconst g = () => 1;\n")
    nodes, funcs = count_tree_stats(program.root_node)
    assert nodes > 5
    assert funcs == 2


def test_create_program(tmp_path):
    js = tmp_path / "main.js"
    js.write_bytes(b"let x = 1;\n")
    program = create_program(js)
    assert program is not None
    assert program.path == js
    assert program.source == b"let x = 1;\n"
    assert program.has_parse_errors is False


def test_create_program_nonexistent():
    assert create_program(Path("/nonexistent/file.js")) is None


def test_create_program_malformed_still_returns_program(tmp_path):
    js = tmp_path / "bad.js"
    js.write_bytes(b"if (x { }\n")
    program = create_program(js)
    assert program is not None
    assert program.has_parse_errors is True


def test_walk_is_document_order():
    program = parse_program(Path("a.js"), b"a; b;")
    identifiers = [get_source_span(program, n) for n in walk(program.root_node) if n.type == "identifier"]
    assert identifiers == ["a", "b"]


def test_walk_handles_deep_nesting():
    source = ("var s = " + " + ".join(["a"] * 5000) + ";").encode("utf-8")
    program = parse_program(Path("deep.js"), source)
    nodes = list(walk(program.root_node))
    assert nodes[0] == program.root_node
    assert sum(1 for n in nodes if n.type == "binary_expression") == 4999
    assert count_tree_stats(program.root_node) == (len(nodes), 0)


def test_span_of_matches_bytes():
    source = "const s = 'héllo'; x;".encode("utf-8")
    program = parse_program(Path("a.js"), source)
    ident = [n for n in walk(program.root_node) if n.type == "identifier"][-1]
    span = span_of(ident)
    assert source[span.lo : span.hi] == b"x"


def test_offset_to_line_col():
    source = b"a;\nbb;\n"
    assert offset_to_line_col(source, 0) == (1, 1)
    assert offset_to_line_col(source, 3) == (2, 1)
    assert offset_to_line_col(source, 4) == (2, 2)


def test_load_programs_skips_unreadable(tmp_path):
    a = tmp_path / "a.js"
    a.write_bytes(b"a;\n")
    programs = load_programs([a, tmp_path / "missing.js"])
    assert [p.path for p in programs] == [a]
