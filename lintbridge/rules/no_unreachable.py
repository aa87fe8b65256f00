# no-unreachable: report statements the control-flow facts mark as unreachable.

from __future__ import annotations

from lintbridge.context import DiagnosticContext
from lintbridge.program import ParsedProgram, span_of
from lintbridge.rules.base import Rule

MESSAGE = "This statement is unreachable"
HINT = "Remove the statement or the return/throw/break/continue before it"

# hoisted, so they are still usable from reachable code
_EXEMPT = frozenset({"function_declaration", "generator_function_declaration", "comment"})

DOCS = """Disallows statements that can never execute.

A statement after `return`, `throw`, `break` or `continue` in the same block
never runs. The same holds after an `if`/`else` whose branches both leave the
block. Function declarations are exempt because they are hoisted.

### Invalid:
```javascript
function foo() {
  return true;
  console.log("done");
}
```

### Valid:
```javascript
function foo() {
  return bar();
  function bar() { return 1; }
}
```
"""


class NoUnreachableRule(Rule):
    """Reports every outermost unreachable statement."""

    code = "no-unreachable"

    def docs(self) -> str:
        return DOCS

    def run(self, context: DiagnosticContext, program: ParsedProgram) -> None:
        control_flow = context.control_flow
        if control_flow is None:
            return
        stack = [program.root_node]
        while stack:
            node = stack.pop()
            if node.type not in _EXEMPT and control_flow.is_reachable(node.start_byte) is False:
                # children of a reported statement are not reported again
                context.add_diagnostic_with_hint(span_of(node), self.code, MESSAGE, HINT)
                continue
            stack.extend(reversed(node.named_children))
