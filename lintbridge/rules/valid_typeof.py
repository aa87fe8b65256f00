# valid-typeof: restrict typeof comparisons to the strings typeof can actually return.

from __future__ import annotations

from typing import Optional

from tree_sitter import Node as TSNode

from lintbridge.context import DiagnosticContext
from lintbridge.program import ParsedProgram, get_source_span, span_of, walk
from lintbridge.rules.base import Rule

VALID_TYPES = frozenset(
    {"undefined", "object", "boolean", "number", "string", "function", "symbol", "bigint"}
)

EQUALITY_OPERATORS = frozenset({"==", "!=", "===", "!=="})

MESSAGE = "Invalid typeof comparison value"

DOCS = """Restricts the use of the `typeof` operator to a specific set of string literals.

When used with a value the `typeof` operator returns one of the following strings:
`"undefined"`, `"object"`, `"boolean"`, `"number"`, `"string"`, `"function"`,
`"symbol"` or `"bigint"`.

Comparing the result against any other string is almost certainly a typo.
Comparing it against a non-string value such as `undefined`, or against a
variable, is also reported since the result cannot be checked. Comparing the
results of two `typeof` operations is always allowed.

### Invalid:
```javascript
typeof foo === "strnig"
typeof foo == "undefimed"
typeof bar != "nunber"
typeof foo === undefined
typeof bar == Object
typeof baz === anotherVariable
typeof foo == 5
```

### Valid:
```javascript
typeof foo === "undefined"
typeof bar == "object"
typeof baz === "string"
typeof bar === typeof qux
```
"""


def _is_typeof(node: Optional[TSNode]) -> bool:
    if node is None or node.type != "unary_expression":
        return False
    operator = node.child_by_field_name("operator")
    return operator is not None and operator.type == "typeof"


def _is_equality(node: TSNode) -> bool:
    operator = node.child_by_field_name("operator")
    return operator is not None and operator.type in EQUALITY_OPERATORS


_SIMPLE_ESCAPES = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}
_OCTAL_DIGITS = frozenset("01234567")


def _decode_escape(text: str) -> str:
    """Value of one escape_sequence token such as \\n, \\x73, \\u0073 or \\u{73}."""
    body = text[1:]
    if body[:2] == "u{" and body.endswith("}"):
        digits = body[2:-1]
    elif body[:1] in ("x", "u") and len(body) > 1:
        digits = body[1:]
    elif body and set(body) <= _OCTAL_DIGITS:
        return chr(int(body, 8))
    elif body in ("\n", "\r", "\r\n", "\u2028", "\u2029"):
        # line continuation
        return ""
    else:
        return _SIMPLE_ESCAPES.get(body, body)
    try:
        return chr(int(digits, 16))
    except (ValueError, OverflowError):
        return body


def _string_value(program: ParsedProgram, node: TSNode) -> str:
    """Cooked value of a string literal: fragments plus decoded escape sequences."""
    parts = []
    for child in node.named_children:
        text = get_source_span(program, child)
        parts.append(_decode_escape(text) if child.type == "escape_sequence" else text)
    return "".join(parts)


class ValidTypeofRule(Rule):
    """Flags typeof comparisons against anything but a known type-name string."""

    code = "valid-typeof"

    def docs(self) -> str:
        return DOCS

    def run(self, context: DiagnosticContext, program: ParsedProgram) -> None:
        for node in walk(program.root_node):
            if node.type != "binary_expression" or not _is_equality(node):
                continue
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            if _is_typeof(left):
                operand = right
            elif _is_typeof(right):
                operand = left
            else:
                continue
            if operand is None or _is_typeof(operand):
                continue
            if operand.type == "string" and _string_value(program, operand) in VALID_TYPES:
                continue
            context.add_diagnostic(span_of(operand), self.code, MESSAGE)
