# Rule registry: maps rule codes to native rules or plugin bridges and fixes
# the order in which rule sources run (natives first, then plugins).

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, AbstractSet, Iterator, Optional, Union

from lintbridge.context import DiagnosticContext
from lintbridge.errors import DuplicateRuleError
from lintbridge.program import ParsedProgram
from lintbridge.rules.base import Rule

if TYPE_CHECKING:
    from lintbridge.plugins.runner import PluginRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativeRuleHandle:
    rule: Rule

    def run(self, context: DiagnosticContext, program: ParsedProgram) -> None:
        self.rule.run(context, program)


@dataclass(frozen=True, eq=False)
class PluginRuleHandle:
    runner: "PluginRunner"

    def run(self, context: DiagnosticContext, program: ParsedProgram) -> None:
        self.runner.run(context, program)


RuleHandle = Union[NativeRuleHandle, PluginRuleHandle]


class RuleRegistry:
    """
    Code -> handle lookup plus the ordered list of rule sources.

    Native codes are unique. Plugin codes are only known after a plugin has
    been evaluated and are not checked against native codes, so a plugin can
    shadow a built-in rule of the same code.
    """

    def __init__(self) -> None:
        self._natives: list[NativeRuleHandle] = []
        self._plugins: list[PluginRuleHandle] = []
        self._by_code: dict[str, RuleHandle] = {}

    def register_native(self, rule: Rule) -> NativeRuleHandle:
        existing = self._by_code.get(rule.code)
        if isinstance(existing, NativeRuleHandle):
            raise DuplicateRuleError(
                f"Rule code {rule.code!r} is already registered by {type(existing.rule).__name__}"
            )
        handle = NativeRuleHandle(rule)
        self._natives.append(handle)
        self._by_code[rule.code] = handle
        return handle

    def register_plugin(self, runner: "PluginRunner") -> PluginRuleHandle:
        handle = PluginRuleHandle(runner)
        self._plugins.append(handle)
        return handle

    def note_plugin_codes(self, handle: PluginRuleHandle, codes: AbstractSet[str]) -> None:
        """Point each code at the plugin that registered it."""
        for code in codes:
            existing = self._by_code.get(code)
            if isinstance(existing, NativeRuleHandle):
                logger.debug("Plugin code %s shadows native rule %s", code, type(existing.rule).__name__)
            self._by_code[code] = handle

    def lookup(self, code: str) -> Optional[RuleHandle]:
        return self._by_code.get(code)

    def sources(self) -> Iterator[RuleHandle]:
        yield from self._natives
        yield from self._plugins

    def native_rules(self) -> list[Rule]:
        return [handle.rule for handle in self._natives]

    def plugins(self) -> list[PluginRuleHandle]:
        return list(self._plugins)

    def codes(self) -> list[str]:
        return sorted(self._by_code)
