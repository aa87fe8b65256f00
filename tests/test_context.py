"""Tests for DiagnosticContext."""

from lintbridge.context import DiagnosticContext
from lintbridge.control_flow import ControlFlow
from lintbridge.findings.models import Span


def test_add_diagnostic_has_no_hint():
    context = DiagnosticContext()
    context.add_diagnostic(Span(lo=0, hi=3), "some-rule", "message")
    [d] = context.diagnostics
    assert d.rule_code == "some-rule"
    assert d.span == Span(lo=0, hi=3)
    assert d.hint is None


def test_add_diagnostic_with_hint_keeps_hint():
    context = DiagnosticContext()
    context.add_diagnostic_with_hint(Span(lo=1, hi=2), "some-rule", "message", "do this")
    assert context.diagnostics[0].hint == "do this"


def test_diagnostics_keep_insertion_order():
    context = DiagnosticContext()
    context.add_diagnostic(Span(lo=10, hi=11), "b", "second by offset")
    context.add_diagnostic(Span(lo=0, hi=1), "a", "first by offset")
    assert [d.rule_code for d in context.diagnostics] == ["b", "a"]


def test_set_plugin_codes_accumulates():
    context = DiagnosticContext(control_flow=ControlFlow())
    context.set_plugin_codes({"x"})
    context.set_plugin_codes({"y"})
    assert context.plugin_codes == {"x", "y"}
    assert context.diagnostics == []
