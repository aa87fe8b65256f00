# Rule interface (abstract base class): defines the contract all native rules implement.
# Concrete rules (valid_typeof, no_unreachable) subclass Rule and implement run().

from __future__ import annotations

from abc import ABC, abstractmethod

from lintbridge.context import DiagnosticContext
from lintbridge.program import ParsedProgram


class Rule(ABC):
    """
    Abstract base class for all native lint rules.

    Subclasses must define:
    - code (str): unique rule code (e.g. "valid-typeof")
    - docs(): markdown documentation for the rule
    - run(context, program): walk the AST and report through the context

    Rules keep no state between runs; everything they report goes through
    context.add_diagnostic / context.add_diagnostic_with_hint.
    """

    code: str

    @abstractmethod
    def docs(self) -> str:
        """Return the rule documentation (markdown)."""
        ...

    @abstractmethod
    def run(self, context: DiagnosticContext, program: ParsedProgram) -> None:
        """
        Analyze one program and report any diagnostics.

        Args:
            context: Run-scoped diagnostic state. Use context.control_flow for
                     reachability queries.
            program: Parsed module (path, source bytes, tree-sitter tree).
        """
        ...

    def summary(self) -> str:
        """First line of docs(), for listings."""
        text = self.docs().strip()
        return text.splitlines()[0] if text else ""
