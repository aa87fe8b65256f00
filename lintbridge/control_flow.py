# Control-flow facts: read-only byte offset -> reachability/termination lookup,
# plus a small statement-level builder over tree-sitter JavaScript trees.

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from tree_sitter import Node as TSNode
from tree_sitter import Tree

from lintbridge.program import FUNCTION_NODE_TYPES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControlFlowFact:
    """Reachability metadata for the statement starting at a given offset."""

    unreachable: bool
    stops_execution: bool


class ControlFlow:
    """
    Immutable snapshot of control-flow facts for one analysis run.

    lookup() returns None for any offset that is not covered; the derived
    queries keep that as a third state rather than guessing.
    """

    def __init__(self, facts: Optional[Mapping[int, ControlFlowFact]] = None) -> None:
        self._facts: Mapping[int, ControlFlowFact] = MappingProxyType(dict(facts or {}))

    def lookup(self, offset: int) -> Optional[ControlFlowFact]:
        return self._facts.get(offset)

    def is_reachable(self, offset: int) -> Optional[bool]:
        fact = self.lookup(offset)
        if fact is None:
            return None
        return not fact.unreachable

    def stops_execution(self, offset: int) -> Optional[bool]:
        fact = self.lookup(offset)
        if fact is None:
            return None
        return fact.stops_execution

    def __len__(self) -> int:
        return len(self._facts)

    def __repr__(self) -> str:
        return f"ControlFlow({len(self._facts)} facts)"


_TERMINATORS = frozenset(
    {"return_statement", "throw_statement", "break_statement", "continue_statement"}
)
_LOOPS = frozenset({"for_statement", "for_in_statement", "while_statement"})
_LOOP_EXITS = frozenset({"break_statement", "continue_statement"})
_SKIPPED = frozenset({"comment", "hashbang_comment"})


class _Builder:
    def __init__(self) -> None:
        self.facts: dict[int, ControlFlowFact] = {}

    def block(self, statements: Iterable[TSNode], unreachable: bool) -> bool:
        """Analyze a statement list; return True if control never falls out of it."""
        stops = False
        for stmt in statements:
            if stmt.type in _SKIPPED:
                continue
            if self.visit(stmt, unreachable):
                unreachable = True
                stops = True
        return stops

    def visit(self, stmt: TSNode, unreachable: bool) -> bool:
        stops = self._statement(stmt, unreachable)
        # outer statement wins when nested statements share a start offset
        self.facts[stmt.start_byte] = ControlFlowFact(unreachable=unreachable, stops_execution=stops)
        return stops

    def _statement(self, node: TSNode, unreachable: bool) -> bool:
        kind = node.type
        if kind in _TERMINATORS:
            self.functions(node)
            return True
        if kind == "statement_block":
            return self.block(node.named_children, unreachable)
        if kind == "if_statement":
            self.functions(node.child_by_field_name("condition"))
            consequence = node.child_by_field_name("consequence")
            cons_stops = consequence is not None and self.visit(consequence, unreachable)
            alternative = node.child_by_field_name("alternative")
            if alternative is None:
                return False
            alt_results = [
                self.visit(child, unreachable)
                for child in alternative.named_children
                if child.type not in _SKIPPED
            ]
            return cons_stops and any(alt_results)
        if kind == "try_statement":
            body = node.child_by_field_name("body")
            body_stops = body is not None and self.visit(body, unreachable)
            handler_stops = True
            handler = node.child_by_field_name("handler")
            if handler is not None:
                handler_body = handler.child_by_field_name("body")
                handler_stops = handler_body is not None and self.visit(handler_body, unreachable)
            finalizer = node.child_by_field_name("finalizer")
            fin_stops = False
            if finalizer is not None:
                fin_body = finalizer.child_by_field_name("body")
                fin_stops = fin_body is not None and self.visit(fin_body, unreachable)
            return fin_stops or (body_stops and handler_stops)
        if kind == "switch_statement":
            self.functions(node.child_by_field_name("value"))
            body = node.child_by_field_name("body")
            for case in body.named_children if body is not None else ():
                if case.type in _SKIPPED:
                    continue
                self.functions(case.child_by_field_name("value"))
                self.block(case.children_by_field_name("body"), unreachable)
            return False
        if kind == "do_statement":
            # the body runs at least once
            body = node.child_by_field_name("body")
            body_stops = body is not None and self.visit(body, unreachable)
            self.functions(node.child_by_field_name("condition"))
            return body_stops and not _exits_loop(body)
        if kind in _LOOPS or kind in ("labeled_statement", "with_statement"):
            for field in ("initializer", "condition", "increment", "left", "right", "object"):
                self.functions(node.child_by_field_name(field))
            body = node.child_by_field_name("body")
            if body is not None:
                self.visit(body, unreachable)
            return False
        self.functions(node)
        return False

    def functions(self, node: Optional[TSNode]) -> None:
        """Analyze the bodies of functions nested anywhere under node."""
        if node is None:
            return
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type in FUNCTION_NODE_TYPES or current.type == "class_static_block":
                body = current.child_by_field_name("body")
                if body is not None and body.type == "statement_block":
                    self.block(body.named_children, False)
                elif body is not None:
                    stack.append(body)
                continue
            stack.extend(reversed(current.children))


def _exits_loop(body: TSNode) -> bool:
    """True if body holds a break or continue outside nested functions."""
    stack = [body]
    while stack:
        current = stack.pop()
        if current.type in _LOOP_EXITS:
            return True
        if current.type not in FUNCTION_NODE_TYPES:
            stack.extend(current.children)
    return False


def build_control_flow(tree: Tree) -> ControlFlow:
    """Compute statement-level control-flow facts for a parsed module."""
    builder = _Builder()
    builder.block(tree.root_node.named_children, False)
    logger.debug("Control flow built: %d statement facts", len(builder.facts))
    return ControlFlow(builder.facts)
