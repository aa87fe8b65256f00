"""Tests for the control-flow query surface and builder."""

from pathlib import Path

from lintbridge.control_flow import ControlFlow, ControlFlowFact, build_control_flow
from lintbridge.program import parse_program


def _facts(source: bytes) -> ControlFlow:
    return build_control_flow(parse_program(Path("cf.js"), source).tree)


def test_lookup_without_fact_is_unknown():
    cf = ControlFlow({5: ControlFlowFact(unreachable=False, stops_execution=True)})
    assert cf.lookup(6) is None
    assert cf.is_reachable(6) is None
    assert cf.stops_execution(6) is None
    assert cf.is_reachable(5) is True
    assert cf.stops_execution(5) is True


def test_snapshot_is_not_affected_by_source_dict():
    facts = {0: ControlFlowFact(unreachable=True, stops_execution=False)}
    cf = ControlFlow(facts)
    facts[1] = ControlFlowFact(unreachable=False, stops_execution=False)
    assert cf.lookup(1) is None
    assert len(cf) == 1


def test_statement_after_return_is_unreachable():
    source = b"function f() {\n  return 1;\n  foo();\n}\n"
    cf = _facts(source)
    ret = source.index(b"return")
    call = source.index(b"foo();")
    assert cf.is_reachable(ret) is True
    assert cf.stops_execution(ret) is True
    assert cf.is_reachable(call) is False
    assert cf.stops_execution(call) is False


def test_if_else_both_returning_stops():
    source = b"function f(a) {\n  if (a) { return 1; } else { throw a; }\n  after();\n}\n"
    cf = _facts(source)
    assert cf.stops_execution(source.index(b"if")) is True
    assert cf.is_reachable(source.index(b"after")) is False


def test_if_without_else_does_not_stop():
    source = b"function f(a) {\n  if (a) { return 1; }\n  after();\n}\n"
    cf = _facts(source)
    assert cf.stops_execution(source.index(b"if")) is False
    assert cf.is_reachable(source.index(b"after")) is True


def test_break_in_loop_only_affects_loop_body():
    source = b"while (x) {\n  break;\n  skipped();\n}\nreached();\n"
    cf = _facts(source)
    assert cf.is_reachable(source.index(b"skipped")) is False
    assert cf.is_reachable(source.index(b"reached")) is True


def test_do_while_body_runs_once():
    source = b"function f(x) {\n  do {\n    return 1;\n  } while (x);\n  after();\n}\n"
    cf = _facts(source)
    assert cf.stops_execution(source.index(b"do")) is True
    assert cf.is_reachable(source.index(b"after")) is False


def test_do_while_with_break_falls_through():
    source = b"do {\n  if (x) { break; }\n  return;\n} while (y);\nreached();\n"
    cf = _facts(source)
    assert cf.stops_execution(source.index(b"do")) is False
    assert cf.is_reachable(source.index(b"reached")) is True


def test_deeply_nested_arrow_functions():
    source = ("const f = " + "a => " * 3000 + "0;\n").encode("utf-8")
    assert _facts(source).is_reachable(0) is True


def test_nested_function_body_starts_reachable():
    source = b"function outer() {\n  return function inner() { ok(); };\n}\n"
    cf = _facts(source)
    assert cf.is_reachable(source.index(b"ok()")) is True


def test_expression_offsets_have_no_fact():
    source = b"const a = b + c;\n"
    cf = _facts(source)
    assert cf.is_reachable(source.index(b"c;")) is None
