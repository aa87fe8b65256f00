# Module loading for plugin code: specifier resolution, synchronous file reads,
# and linking of ES module syntax into factories for the script-side module table.

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import tree_sitter
from tree_sitter import Node as TSNode

from lintbridge.errors import PluginIOError, ScriptFault
from lintbridge.parser import create_parser, parse_bytes

logger = logging.getLogger(__name__)

REQUIRE = "__require"
EXPORTS = "__exports"


def resolve_specifier(specifier: str, referrer: str) -> str:
    """
    Resolve an import specifier to a module id (an absolute file path).

    Accepts file:// URLs, absolute paths, and paths relative to the directory
    of referrer. Package names are not looked up; a specifier without a
    leading ./ or ../ is still treated as relative.
    """
    if not specifier:
        raise PluginIOError(f"Empty module specifier imported from {referrer}")
    parsed = urlparse(specifier)
    if parsed.scheme == "file":
        return str(Path(url2pathname(unquote(parsed.path))).resolve())
    if len(parsed.scheme) > 1:
        raise PluginIOError(f"Unsupported module scheme {parsed.scheme!r} in {specifier!r}")
    path = Path(specifier)
    if not path.is_absolute():
        path = Path(referrer).parent / path
    return str(path.resolve())


def load_source(module_id: str) -> str:
    """Read a module's source text; any filesystem failure is a PluginIOError."""
    try:
        return Path(module_id).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PluginIOError(f"Failed to load module {module_id}: {e}") from e


@dataclass(frozen=True)
class LinkedModule:
    """A module rewritten as the body of a factory(__require, __exports)."""

    module_id: str
    body: str

    def define_script(self, table: str) -> str:
        return (
            f"{table}.define({json.dumps(self.module_id)}, function ({REQUIRE}, {EXPORTS}) {{\n"
            f"\"use strict\";\n{self.body}\n}});"
        )


def _text(source: bytes, node: TSNode) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _string_value(source: bytes, node: TSNode) -> str:
    return _text(source, node)[1:-1]


def _declared_names(source: bytes, declaration: TSNode) -> list[str]:
    """Names bound by an exported declaration."""
    if declaration.type in ("lexical_declaration", "variable_declaration"):
        names = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is None or name.type != "identifier":
                raise ScriptFault(
                    f"Unsupported export binding {_text(source, declarator)!r}: only plain identifiers can be exported"
                )
            names.append(_text(source, name))
        return names
    name = declaration.child_by_field_name("name")
    return [_text(source, name)] if name is not None else []


def _specifier_pairs(source: bytes, clause: TSNode, kind: str) -> list[tuple[str, str]]:
    """(imported/local name, alias) pairs of an import or export list."""
    pairs = []
    for spec in clause.named_children:
        if spec.type != kind:
            continue
        name = spec.child_by_field_name("name")
        alias = spec.child_by_field_name("alias")
        name_text = _text(source, name)
        if name.type == "string":
            name_text = name_text[1:-1]
        pairs.append((name_text, _text(source, alias) if alias is not None else name_text))
    return pairs


class ModuleLinker:
    """
    Resolves, loads and rewrites a module graph for the script runtime.

    Each module becomes a factory body: imports turn into __require() calls,
    exports into assignments on __exports. Bindings are copied at import
    time, so live bindings and top-level await are not supported.
    """

    def __init__(
        self,
        parser: Optional[tree_sitter.Parser] = None,
        loader: Callable[[str], str] = load_source,
        resolver: Callable[[str, str], str] = resolve_specifier,
    ) -> None:
        self._parser = parser or create_parser()
        self._loader = loader
        self._resolver = resolver

    def link(self, entry_id: str, entry_source: str) -> list[LinkedModule]:
        """Return every module reachable from the entry, dependencies first."""
        ordered: list[LinkedModule] = []
        seen: set[str] = set()

        def visit(module_id: str, text: str) -> None:
            seen.add(module_id)
            body, dependencies = self.rewrite(module_id, text)
            for dep in dependencies:
                if dep not in seen:
                    logger.debug("Loading module %s (imported by %s)", dep, module_id)
                    visit(dep, self._loader(dep))
            ordered.append(LinkedModule(module_id, body))

        visit(entry_id, entry_source)
        logger.info("Linked %d module(s) for %s", len(ordered), entry_id)
        return ordered

    def rewrite(self, module_id: str, text: str) -> tuple[str, list[str]]:
        """Rewrite import/export statements; return (body, resolved dependency ids)."""
        source = text.encode("utf-8")
        tree = parse_bytes(source, parser=self._parser)
        if tree.root_node.has_error:
            raise ScriptFault(f"Syntax error in module {module_id}")

        edits: list[tuple[int, int, str]] = []
        dependencies: list[str] = []

        def require(spec_node: TSNode) -> str:
            dep = self._resolver(_string_value(source, spec_node), module_id)
            if dep not in dependencies:
                dependencies.append(dep)
            return f"{REQUIRE}({json.dumps(dep)})"

        for stmt in tree.root_node.named_children:
            if stmt.type == "import_statement":
                edits.append((stmt.start_byte, stmt.end_byte, self._rewrite_import(source, stmt, require)))
            elif stmt.type == "export_statement":
                edits.append((stmt.start_byte, stmt.end_byte, self._rewrite_export(source, stmt, require)))

        out = source
        for start, end, replacement in reversed(edits):
            out = out[:start] + replacement.encode("utf-8") + out[end:]
        return out.decode("utf-8"), dependencies

    def _rewrite_import(self, source: bytes, stmt: TSNode, require: Callable[[TSNode], str]) -> str:
        call = require(stmt.child_by_field_name("source"))
        clause = next((c for c in stmt.named_children if c.type == "import_clause"), None)
        if clause is None:
            return f"{call};"
        lines = []
        for part in clause.named_children:
            if part.type == "identifier":
                lines.append(f"const {_text(source, part)} = {call}.default;")
            elif part.type == "namespace_import":
                local = next(c for c in part.named_children if c.type == "identifier")
                lines.append(f"const {_text(source, local)} = {call};")
            elif part.type == "named_imports":
                pairs = _specifier_pairs(source, part, "import_specifier")
                bindings = ", ".join(
                    f"{json.dumps(name)}: {alias}" for name, alias in pairs
                )
                lines.append(f"const {{ {bindings} }} = {call};")
        return " ".join(lines)

    def _rewrite_export(self, source: bytes, stmt: TSNode, require: Callable[[TSNode], str]) -> str:
        is_default = any(child.type == "default" for child in stmt.children)
        declaration = stmt.child_by_field_name("declaration")
        value = stmt.child_by_field_name("value")
        spec_node = stmt.child_by_field_name("source")

        if declaration is not None:
            names = _declared_names(source, declaration)
            text = _text(source, declaration)
            if is_default and not names:
                return f"{EXPORTS}.default = ({text});"
            if is_default:
                return f"{text}\n{EXPORTS}.default = {names[0]};"
            assigns = " ".join(f"{EXPORTS}.{name} = {name};" for name in names)
            return f"{text}\n{assigns}"
        if value is not None:
            return f"{EXPORTS}.default = ({_text(source, value)});"

        clause = next((c for c in stmt.named_children if c.type == "export_clause"), None)
        namespace = next((c for c in stmt.named_children if c.type == "namespace_export"), None)
        if spec_node is not None:
            call = require(spec_node)
            if clause is not None:
                pairs = _specifier_pairs(source, clause, "export_specifier")
                return " ".join(
                    f"{EXPORTS}[{json.dumps(alias)}] = {call}[{json.dumps(name)}];" for name, alias in pairs
                )
            if namespace is not None:
                alias = _text(source, namespace.named_children[-1]).strip("'\"")
                return f"{EXPORTS}[{json.dumps(alias)}] = {call};"
            return (
                f"(function (m) {{ for (const k of Object.keys(m)) {{ "
                f"if (k !== \"default\") {EXPORTS}[k] = m[k]; }} }})({call});"
            )
        if clause is not None:
            pairs = _specifier_pairs(source, clause, "export_specifier")
            return " ".join(f"{EXPORTS}[{json.dumps(alias)}] = {name};" for name, alias in pairs)
        raise ScriptFault(f"Unsupported export statement {_text(source, stmt)!r}")
