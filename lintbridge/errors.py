# Error taxonomy shared by native rules, the plugin bridge and the linter.

from __future__ import annotations


class LintError(Exception):
    """Base class for every failure the engine reports to its caller."""


class ProtocolError(LintError):
    """A payload crossing the script/host boundary did not match its schema."""


class MissingContextError(LintError):
    """A control-flow query was issued while no control-flow data was installed."""


class PluginIOError(LintError, OSError):
    """A plugin module or one of its imports could not be resolved or read."""


class ScriptFault(LintError):
    """An uncaught exception escaped script code during evaluation."""


class DuplicateRuleError(LintError):
    """Two native rules were registered under the same code."""
