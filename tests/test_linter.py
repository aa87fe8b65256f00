"""Tests for run orchestration and diagnostic merge order."""

from pathlib import Path

import pytest

from lintbridge.config import Config, build_registry, get_builtin_rules
from lintbridge.context import DiagnosticContext
from lintbridge.errors import ScriptFault
from lintbridge.findings.models import Span
from lintbridge.linter import Linter
from lintbridge.program import parse_program
from lintbridge.rules.base import Rule
from lintbridge.rules.registry import RuleRegistry
from lintbridge.rules.valid_typeof import ValidTypeofRule


class _NativeAB(Rule):
    code = "native-ab"

    def docs(self) -> str:
        return "Reports a then b."

    def run(self, context, program):
        context.add_diagnostic(Span(lo=5, hi=6), self.code, "a")
        context.add_diagnostic(Span(lo=1, hi=2), self.code, "b")


class _FakeRunner:
    """Stands in for a PluginRunner: reports c then d through the context."""

    plugin_path = "fake.js"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.registered_codes = frozenset({"plugin-cd"})

    def run(self, context, program):
        context.set_plugin_codes(self.registered_codes)
        context.add_diagnostic(Span(lo=0, hi=1), "plugin-cd", "c")
        if self.fail:
            raise ScriptFault("plugin blew up")
        context.add_diagnostic_with_hint(Span(lo=3, hi=4), "plugin-cd", "d", "hint")


def _registry(runner) -> RuleRegistry:
    registry = RuleRegistry()
    registry.register_plugin(runner)
    registry.register_native(_NativeAB())
    return registry


def _program():
    return parse_program(Path("x.js"), b"a; b; c;\n")


def test_native_diagnostics_precede_plugin_diagnostics():
    result = Linter(_registry(_FakeRunner())).lint_program(_program())
    assert [d.message for d in result.diagnostics] == ["a", "b", "c", "d"]
    assert result.plugin_codes == {"plugin-cd"}
    assert result.ok


def test_plugin_failure_keeps_native_diagnostics():
    result = Linter(_registry(_FakeRunner(fail=True))).lint_program(_program())
    assert not result.ok
    assert isinstance(result.errors[0], ScriptFault)
    assert [d.message for d in result.diagnostics] == ["a", "b", "c"]


def test_run_propagates_plugin_failure():
    registry = _registry(_FakeRunner(fail=True))
    context = DiagnosticContext()
    with pytest.raises(ScriptFault):
        Linter(registry).run(context, _program())
    assert [d.message for d in context.diagnostics] == ["a", "b", "c"]


def test_plugin_codes_noted_in_registry():
    registry = _registry(_FakeRunner())
    Linter(registry).lint_program(_program())
    assert registry.lookup("plugin-cd") is not None


def test_lint_file_with_real_plugin(tmp_path):
    plugin = tmp_path / "no_foo.js"
    plugin.write_text(
        'export default class NoFoo extends Visitor {\n'
        '  static ruleCode() { return "no-foo"; }\n'
        '  visitIdentifier(node) { if (node.text === "foo") this.addDiagnostic(node, "no foo"); }\n'
        '}\n'
    )
    target = tmp_path / "main.js"
    target.write_bytes(b'typeof foo === "strnig";\n')
    registry = build_registry(Config(rules=[ValidTypeofRule()], plugin_paths=[str(plugin)]))
    result = Linter(registry).lint_file(target)
    assert result is not None
    assert [d.rule_code for d in result.diagnostics] == ["valid-typeof", "no-foo"]


def test_lint_file_unreadable(tmp_path):
    assert Linter(RuleRegistry()).lint_file(tmp_path / "missing.js") is None


def test_lint_file_deep_binary_chain(tmp_path):
    plugin = tmp_path / "count.js"
    plugin.write_text(
        'export default class CountIdentifiers extends Visitor {\n'
        '  static ruleCode() { return "count-identifiers"; }\n'
        '  visitProgram(node) { this.count = 0; }\n'
        '  visitIdentifier(node) { this.count += 1; this.last = node; }\n'
        '  collectDiagnostics(ast) {\n'
        '    super.collectDiagnostics(ast);\n'
        '    this.addDiagnostic(this.last, "identifiers: " + this.count);\n'
        '    return this.diagnostics;\n'
        '  }\n'
        '}\n'
    )
    target = tmp_path / "bundle.js"
    target.write_bytes(("var s = " + " + ".join(["a"] * 5000) + ";\ntypeof s === 5;\n").encode("utf-8"))
    config = Config(rules=get_builtin_rules(), plugin_paths=[str(plugin)])
    result = Linter(build_registry(config)).lint_file(target)
    assert result is not None
    assert result.ok
    assert [(d.rule_code, d.message) for d in result.diagnostics] == [
        ("valid-typeof", "Invalid typeof comparison value"),
        ("count-identifiers", "identifiers: 5002"),
    ]
