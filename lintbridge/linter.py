# Analysis run orchestration: one DiagnosticContext per program, native rules
# first, then plugin bridges, results collected in a LintResult.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lintbridge.context import DiagnosticContext
from lintbridge.control_flow import ControlFlow, build_control_flow
from lintbridge.errors import LintError
from lintbridge.findings.models import Diagnostic
from lintbridge.program import ParsedProgram, create_program
from lintbridge.rules.registry import PluginRuleHandle, RuleRegistry

logger = logging.getLogger(__name__)


@dataclass
class LintResult:
    """Outcome of linting one program."""

    path: Path
    source: bytes
    diagnostics: list[Diagnostic] = field(default_factory=list)
    plugin_codes: set[str] = field(default_factory=set)
    errors: list[LintError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class Linter:
    """Runs every rule source in a registry over parsed programs."""

    def __init__(self, registry: RuleRegistry) -> None:
        self.registry = registry

    def run(self, context: DiagnosticContext, program: ParsedProgram) -> None:
        """
        Dispatch all rule sources against one program.

        Natives run first, in registration order, then plugins. The first
        failure propagates; diagnostics added before it stay in context.
        """
        for handle in self.registry.sources():
            handle.run(context, program)
            if isinstance(handle, PluginRuleHandle):
                self.registry.note_plugin_codes(handle, handle.runner.registered_codes)

    def lint_program(
        self,
        program: ParsedProgram,
        control_flow: Optional[ControlFlow] = None,
    ) -> LintResult:
        """
        Lint one program with a fresh context.

        A failing plugin pass is logged and recorded in result.errors; native
        diagnostics and earlier plugin diagnostics are kept.
        """
        if control_flow is None:
            control_flow = build_control_flow(program.tree)
        context = DiagnosticContext(control_flow=control_flow)
        result = LintResult(path=program.path, source=program.source)

        for handle in self.registry.sources():
            if isinstance(handle, PluginRuleHandle):
                try:
                    handle.run(context, program)
                except LintError as e:
                    logger.error("Plugin %s failed on %s: %s", handle.runner.plugin_path, program.path, e)
                    result.errors.append(e)
                    continue
                self.registry.note_plugin_codes(handle, handle.runner.registered_codes)
            else:
                handle.run(context, program)

        result.diagnostics = list(context.diagnostics)
        result.plugin_codes = set(context.plugin_codes)
        logger.info("Linted %s: %d diagnostic(s)", program.path, len(result.diagnostics))
        return result

    def lint_file(self, path: Path) -> Optional[LintResult]:
        """Read, parse and lint a file; None if it could not be read."""
        program = create_program(path)
        if program is None:
            return None
        return self.lint_program(program)
