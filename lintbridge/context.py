# Run-scoped diagnostic state shared by every rule invocation of one analysis run.

from __future__ import annotations

import logging
from typing import AbstractSet, Optional

from lintbridge.control_flow import ControlFlow
from lintbridge.findings.models import Diagnostic, Span

logger = logging.getLogger(__name__)


class DiagnosticContext:
    """
    Accumulated diagnostics and control-flow data for one analysis run.

    Created once per run and passed to each rule in turn. Diagnostics are
    append-only and keep insertion order; nothing sorts them.
    """

    def __init__(self, control_flow: Optional[ControlFlow] = None) -> None:
        self.control_flow = control_flow
        self.diagnostics: list[Diagnostic] = []
        self.plugin_codes: set[str] = set()

    def add_diagnostic(self, span: Span, code: str, message: str) -> None:
        self.diagnostics.append(Diagnostic(rule_code=code, span=span, message=message))

    def add_diagnostic_with_hint(self, span: Span, code: str, message: str, hint: str) -> None:
        self.diagnostics.append(Diagnostic(rule_code=code, span=span, message=message, hint=hint))

    def set_plugin_codes(self, codes: AbstractSet[str]) -> None:
        """
        Record plugin rule codes active in this run.

        Codes from several plugin bridges in the same run are merged. This is
        bookkeeping only; diagnostics are recorded regardless.
        """
        self.plugin_codes |= set(codes)
        logger.debug("Active plugin codes: %s", sorted(self.plugin_codes))
