# Host operations callable from plugin scripts, and the typed state they act on.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from lintbridge.control_flow import ControlFlow
from lintbridge.errors import LintError, MissingContextError, ProtocolError
from lintbridge.plugins.wire import (
    AddDiagnosticsPayload,
    ControlFlowQueryPayload,
    ControlFlowQueryResponse,
    RuleCodePayload,
    WireDiagnostic,
    decode_payload,
    encode_error,
    encode_reply,
)

logger = logging.getLogger(__name__)


@dataclass
class PluginRunState:
    """Diagnostics and rule codes reported by script code during one plugin pass."""

    diagnostics: dict[str, list[WireDiagnostic]] = field(default_factory=dict)
    codes: set[str] = field(default_factory=set)


class HostState:
    """
    Everything host operations may touch, owned by one plugin bridge.

    - control_flow: installed at the start of each pass, read by queries.
      Installing replaces the previous one.
    - run: PluginRunState for the current pass; drained by the bridge after
      the script call that filled it returns.
    - errors: host-side failures raised while serving the current script
      call, kept so the bridge can re-raise them once control returns.
    """

    def __init__(self) -> None:
        self.control_flow: Optional[ControlFlow] = None
        self.run = PluginRunState()
        self.errors: list[BaseException] = []

    def begin_pass(self, control_flow: Optional[ControlFlow]) -> None:
        self.control_flow = control_flow
        self.run = PluginRunState()

    def take_codes(self) -> set[str]:
        codes, self.run.codes = self.run.codes, set()
        return codes

    def take_diagnostics(self) -> dict[str, list[WireDiagnostic]]:
        diagnostics, self.run.diagnostics = self.run.diagnostics, {}
        return diagnostics


def op_add_diagnostics(state: HostState, payload: AddDiagnosticsPayload) -> dict[str, Any]:
    # entries accumulate; a second report for the same code does not replace the first
    state.run.diagnostics.setdefault(payload.code, []).extend(payload.diagnostics)
    return {}


def op_add_rule_code(state: HostState, payload: RuleCodePayload) -> dict[str, Any]:
    state.run.codes.add(payload.code)
    return {}


def op_query_control_flow_by_span(state: HostState, payload: ControlFlowQueryPayload) -> dict[str, Any]:
    if state.control_flow is None:
        raise MissingContextError("ControlFlow is not set")
    offset = payload.span.lo
    response = ControlFlowQueryResponse(
        is_reachable=state.control_flow.is_reachable(offset),
        stops_execution=state.control_flow.stops_execution(offset),
    )
    return response.model_dump(by_alias=True)


OPS: dict[str, tuple[type, Callable[[HostState, Any], dict[str, Any]]]] = {
    "op_add_diagnostics": (AddDiagnosticsPayload, op_add_diagnostics),
    "op_add_rule_code": (RuleCodePayload, op_add_rule_code),
    "op_query_control_flow_by_span": (ControlFlowQueryPayload, op_query_control_flow_by_span),
}


def dispatch_op(state: HostState, name: Any, raw: Any) -> str:
    """
    Serve one synchronous host-op call and return the JSON reply.

    Failures are returned to the script as error replies and recorded in
    state.errors; the bridge decides after the call whether they fail the run.
    """
    try:
        if not isinstance(name, str) or name not in OPS:
            raise ProtocolError(f"Unknown host operation {name!r}")
        model, op = OPS[name]
        payload = decode_payload(model, raw)
        result = op(state, payload)
    except Exception as e:
        if isinstance(e, LintError):
            logger.debug("Host op %s failed: %s", name, e)
        else:
            logger.exception("Host op %s raised unexpectedly", name)
        state.errors.append(e)
        return encode_error(e)
    logger.debug("Host op %s ok", name)
    return encode_reply(result)
