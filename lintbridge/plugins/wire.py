# Wire protocol between the host and script code: payload schemas for host
# operations and the JSON form of the AST handed to plugin rules.

from __future__ import annotations

import json
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError, model_validator
from tree_sitter import Node as TSNode

from lintbridge.errors import ProtocolError
from lintbridge.findings.models import Span
from lintbridge.program import ParsedProgram

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class WireSpan(BaseModel):
    lo: StrictInt = Field(..., ge=0)
    hi: StrictInt = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "WireSpan":
        if self.hi < self.lo:
            raise ValueError(f"span end {self.hi} precedes start {self.lo}")
        return self

    def to_span(self) -> Span:
        return Span(lo=self.lo, hi=self.hi)


class WireDiagnostic(BaseModel):
    span: WireSpan
    message: StrictStr
    hint: Optional[StrictStr] = None


class AddDiagnosticsPayload(BaseModel):
    """`{code, diagnostics: [{span, message, hint}]}` sent by op_add_diagnostics."""

    code: StrictStr
    diagnostics: list[WireDiagnostic]


class RuleCodePayload(BaseModel):
    """`{code}` sent by op_add_rule_code."""

    code: StrictStr


class ControlFlowQueryPayload(BaseModel):
    """`{span}` sent by op_query_control_flow_by_span."""

    span: WireSpan


class ControlFlowQueryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_reachable: Optional[StrictBool] = Field(None, alias="isReachable")
    stops_execution: Optional[StrictBool] = Field(None, alias="stopsExecution")


def decode_payload(model: Type[PayloadT], raw: Any) -> PayloadT:
    """
    Parse a JSON payload into model, raising ProtocolError on any mismatch.

    raw must be the JSON text produced by the script side; any other type
    means the script bypassed the host-op wrapper.
    """
    if not isinstance(raw, str):
        raise ProtocolError(f"{model.__name__}: expected JSON text, got {type(raw).__name__}")
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        raise ProtocolError(f"{model.__name__}: {e.error_count()} invalid field(s): {e}") from e


def encode_reply(value: Any) -> str:
    return json.dumps({"ok": value}, separators=(",", ":"))


def encode_error(error: BaseException) -> str:
    return json.dumps(
        {"error": {"name": type(error).__name__, "message": str(error)}},
        separators=(",", ":"),
    )


def flatten_node(program: ParsedProgram, node: TSNode) -> list[dict[str, Any]]:
    """
    Convert a tree-sitter node (and its subtree) into AST handoff records.

    Records come in document pre-order. Each carries type, span and named,
    plus parent: the index of its parent record (-1 for node itself). field
    is set when the parent exposes the node under a grammar field; text is
    set on leaves only. Parents always precede their children, so the
    nested tree is rebuilt in one forward pass without recursion.
    """
    records: list[dict[str, Any]] = []
    stack: list[tuple[TSNode, Optional[str], int]] = [(node, None, -1)]
    while stack:
        current, field, parent = stack.pop()
        data: dict[str, Any] = {
            "type": current.type,
            "span": {"lo": current.start_byte, "hi": current.end_byte},
            "named": current.is_named,
            "parent": parent,
        }
        if field is not None:
            data["field"] = field
        if current.child_count == 0:
            data["text"] = program.source[current.start_byte : current.end_byte].decode("utf-8", errors="replace")
        index = len(records)
        records.append(data)
        children = current.children
        for position in range(len(children) - 1, -1, -1):
            stack.append((children[position], current.field_name_for_child(position), index))
    return records


def serialize_program(program: ParsedProgram) -> str:
    """JSON text of the flattened program tree; spans round-trip unchanged."""
    return json.dumps(flatten_node(program, program.root_node), separators=(",", ":"))
