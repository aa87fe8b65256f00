from __future__ import annotations

"""
Linter configuration: which native rules are enabled and which plugin
modules to load.

Kept as a plain dataclass; the CLI fills plugin_paths and rule filters from
its options. build_registry() is the single place that turns a Config into
the rule sources a Linter runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from lintbridge.plugins.runner import PluginRunner
from lintbridge.rules.base import Rule
from lintbridge.rules.no_unreachable import NoUnreachableRule
from lintbridge.rules.registry import RuleRegistry
from lintbridge.rules.valid_typeof import ValidTypeofRule

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """
    Linter configuration.

    rules: native rules to run, in order.
    plugin_paths: JavaScript plugin modules, one bridge per path.
    """

    rules: Sequence[Rule] = field(default_factory=list)
    plugin_paths: Sequence[str] = field(default_factory=list)


def get_builtin_rules() -> List[Rule]:
    """Every native rule shipped with the linter."""
    return [
        ValidTypeofRule(),
        NoUnreachableRule(),
    ]


def get_default_config() -> Config:
    """Default configuration: all built-in rules, no plugins."""
    return Config(rules=get_builtin_rules())


def get_enabled_rules(
    config: Config | None = None,
    only: Optional[Iterable[str]] = None,
) -> Sequence[Rule]:
    """
    Return the enabled native rules, optionally restricted to the codes in only.

    Unknown codes in only are logged and ignored.
    """
    if config is None:
        config = get_default_config()
    if only is None:
        return config.rules
    wanted = set(only)
    known = {rule.code for rule in config.rules}
    for code in sorted(wanted - known):
        logger.warning("Unknown rule code %s; ignoring", code)
    return [rule for rule in config.rules if rule.code in wanted]


def build_registry(
    config: Config | None = None,
    only: Optional[Iterable[str]] = None,
) -> RuleRegistry:
    """
    Register enabled native rules, then one PluginRunner per plugin path.

    Plugin loading errors (PluginIOError, ScriptFault) propagate.
    """
    if config is None:
        config = get_default_config()
    registry = RuleRegistry()
    for rule in get_enabled_rules(config, only):
        registry.register_native(rule)
    for path in config.plugin_paths:
        registry.register_plugin(PluginRunner(path))
    return registry
