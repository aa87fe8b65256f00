# Plugin host bridge: runs one JavaScript plugin module as a lint rule inside
# an embedded QuickJS runtime and merges what it reports into the run's context.

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Optional

import quickjs

from lintbridge.context import DiagnosticContext
from lintbridge.errors import LintError, ProtocolError, ScriptFault
from lintbridge.plugins.bootstrap import (
    AST_BUILDER,
    BOOTSTRAP_SCRIPTS,
    ENTRY_MODULE_NAME,
    HOST_OP_FUNCTION,
    MODULE_TABLE,
    create_entry_source,
)
from lintbridge.plugins.loader import ModuleLinker
from lintbridge.plugins.ops import HostState, dispatch_op
from lintbridge.plugins.wire import serialize_program
from lintbridge.program import ParsedProgram

logger = logging.getLogger(__name__)


class PluginRunner:
    """
    One embedded runtime bound to one plugin module.

    Construction loads the bootstrap scripts and links the plugin module
    graph (file errors surface here as PluginIOError). Each run() then:

    1. installs the run's control-flow data into the host state,
    2. evaluates the entry module (first run only; module bodies run once),
    3. records the registered rule codes on the context,
    4. calls runPlugins(ast, codes) in the runtime,
    5. drains reported diagnostics into the context.

    Runs must not interleave; the host state holds a single pass at a time.
    """

    def __init__(
        self,
        plugin_path: str,
        *,
        linker: Optional[ModuleLinker] = None,
        state: Optional[HostState] = None,
    ) -> None:
        self.plugin_path = plugin_path
        self.state = state if state is not None else HostState()
        self.entry_id = str(Path.cwd() / ENTRY_MODULE_NAME)
        self._registered: set[str] = set()
        self._evaluated = False

        self._runtime = quickjs.Context()
        self._runtime.add_callable(HOST_OP_FUNCTION, functools.partial(dispatch_op, self.state))
        for name, script in BOOTSTRAP_SCRIPTS:
            self._execute(name, script)

        modules = (linker or ModuleLinker()).link(self.entry_id, create_entry_source(plugin_path))
        for module in modules:
            self._execute(module.module_id, module.define_script(MODULE_TABLE))
        logger.info("Loaded plugin %s (%d module(s))", plugin_path, len(modules))

    @property
    def registered_codes(self) -> frozenset[str]:
        """Rule codes the plugin registered so far."""
        return frozenset(self._registered)

    def run(self, context: DiagnosticContext, program: ParsedProgram) -> None:
        self.state.begin_pass(context.control_flow)

        if not self._evaluated:
            self._execute(self.entry_id, f"{MODULE_TABLE}.evaluate({json.dumps(self.entry_id)});")
            self._evaluated = True

        self._registered |= self.state.take_codes()
        codes = sorted(self._registered)
        context.set_plugin_codes(set(codes))
        if not codes:
            logger.info("Plugin %s registered no rules", self.plugin_path)
            return

        self._execute(
            "runPlugins",
            f"runPlugins({AST_BUILDER}({serialize_program(program)}), {json.dumps(codes)});",
        )

        reported = 0
        for code, diagnostics in self.state.take_diagnostics().items():
            for d in diagnostics:
                if d.hint is not None:
                    context.add_diagnostic_with_hint(d.span.to_span(), code, d.message, d.hint)
                else:
                    context.add_diagnostic(d.span.to_span(), code, d.message)
                reported += 1
        logger.info("Plugin %s reported %d diagnostic(s) for %s", self.plugin_path, reported, program.path)

    def _execute(self, name: str, code: str) -> None:
        """Evaluate a script and run the job queue until it is empty."""
        self.state.errors.clear()
        try:
            self._runtime.eval(code)
            while self._runtime.execute_pending_job():
                pass
        except quickjs.JSException as e:
            host_error = self._uncaught_host_error(str(e))
            if host_error is not None:
                raise host_error from e
            raise ScriptFault(f"Uncaught exception in {name}: {e}") from e
        sticky = self._sticky_host_error()
        if sticky is not None:
            raise sticky

    def _sticky_host_error(self) -> Optional[BaseException]:
        """Protocol violations and host bugs fail the run even if the script caught them."""
        for error in self.state.errors:
            if isinstance(error, ProtocolError) or not isinstance(error, LintError):
                return error
        return None

    def _uncaught_host_error(self, message: str) -> Optional[BaseException]:
        sticky = self._sticky_host_error()
        if sticky is not None:
            return sticky
        for error in reversed(self.state.errors):
            if f"{type(error).__name__}: {error}" in message:
                return error
        return None
