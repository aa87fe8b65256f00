from __future__ import annotations

"""
Typer CLI entry point for lintbridge.

- `lint TARGET`: lint a JavaScript file or every JS file under a directory
  with the built-in rules plus any --plugin modules.
- `rules`: list the built-in rule codes.

Exit status: 0 when clean, 1 when problems were reported, 2 when a plugin
could not be loaded or failed during a run.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.logging import RichHandler

from lintbridge.config import Config, build_registry, get_builtin_rules, get_default_config
from lintbridge.errors import LintError
from lintbridge.linter import LintResult, Linter
from lintbridge.reporting.console import print_results
from lintbridge.traversal import find_js_files, is_js_file

logger = logging.getLogger(__name__)

app = typer.Typer(help="lintbridge - JavaScript linter with native and plugin rules.")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _collect_js_files(target: Path) -> List[Path]:
    """Resolve a target into the JavaScript files to lint."""
    if target.is_file():
        if not is_js_file(target):
            raise typer.BadParameter(f"Target file is not a JavaScript file: {target}")
        return [target]

    if target.is_dir():
        files = find_js_files(target)
        if not files:
            logger.warning("No JavaScript files found under %s", target)
        return files

    raise typer.BadParameter(f"Target path is neither a file nor a directory: {target}")


@app.command()
def lint(
    target: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        resolve_path=True,
        help="JavaScript file or directory to lint.",
    ),
    plugin: Optional[List[str]] = typer.Option(
        None,
        "--plugin",
        "-p",
        help="Path or file:// URL of a JavaScript plugin rule module (repeatable).",
    ),
    rule: Optional[List[str]] = typer.Option(
        None,
        "--rule",
        "-r",
        help="Only run these built-in rule codes (repeatable).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show hints and debug logging."),
) -> None:
    """Lint a single file or all JavaScript files under a directory."""
    _configure_logging(verbose)
    base = get_default_config()
    config = Config(rules=base.rules, plugin_paths=list(plugin or []))

    try:
        registry = build_registry(config, only=rule or None)
    except LintError as e:
        typer.echo(f"Failed to load plugin: {type(e).__name__}: {e}", err=True)
        raise typer.Exit(code=2)

    linter = Linter(registry)
    results: List[LintResult] = []
    for path in _collect_js_files(target):
        result = linter.lint_file(path)
        if result is not None:
            results.append(result)

    print_results(results, verbose=verbose)

    if any(not r.ok for r in results):
        raise typer.Exit(code=2)
    if any(r.diagnostics for r in results):
        raise typer.Exit(code=1)


@app.command()
def rules() -> None:
    """List the built-in rules."""
    for native in get_builtin_rules():
        typer.echo(f"{native.code}: {native.summary()}")


def main() -> None:
    """Entry point for `python -m lintbridge.main` and the console script."""
    app()


if __name__ == "__main__":
    main()
