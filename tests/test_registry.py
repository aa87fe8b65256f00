"""Tests for the rule registry."""

import pytest

from lintbridge.errors import DuplicateRuleError
from lintbridge.rules.no_unreachable import NoUnreachableRule
from lintbridge.rules.registry import NativeRuleHandle, PluginRuleHandle, RuleRegistry
from lintbridge.rules.valid_typeof import ValidTypeofRule


class _FakeRunner:
    plugin_path = "fake.js"
    registered_codes = frozenset()

    def run(self, context, program):
        pass


def test_duplicate_native_code_rejected():
    registry = RuleRegistry()
    registry.register_native(ValidTypeofRule())
    with pytest.raises(DuplicateRuleError):
        registry.register_native(ValidTypeofRule())


def test_lookup_native():
    registry = RuleRegistry()
    handle = registry.register_native(ValidTypeofRule())
    assert registry.lookup("valid-typeof") is handle
    assert isinstance(handle, NativeRuleHandle)
    assert registry.lookup("missing") is None


def test_sources_yield_natives_before_plugins():
    registry = RuleRegistry()
    plugin = registry.register_plugin(_FakeRunner())
    first = registry.register_native(ValidTypeofRule())
    second = registry.register_native(NoUnreachableRule())
    assert list(registry.sources()) == [first, second, plugin]


def test_plugin_code_shadows_native_code():
    registry = RuleRegistry()
    registry.register_native(ValidTypeofRule())
    plugin = registry.register_plugin(_FakeRunner())
    registry.note_plugin_codes(plugin, {"valid-typeof", "custom"})
    assert isinstance(registry.lookup("valid-typeof"), PluginRuleHandle)
    assert registry.codes() == ["custom", "valid-typeof"]
    assert [type(r) for r in registry.native_rules()] == [ValidTypeofRule]
