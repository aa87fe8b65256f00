# Rich console output: render lint results for terminal display.

from __future__ import annotations

from typing import Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lintbridge.linter import LintResult
from lintbridge.program import offset_to_line_col


def print_results(
    results: Sequence[LintResult],
    verbose: bool = False,
    console: Console | None = None,
) -> None:
    """
    Print diagnostics grouped by file, in the order rules reported them.

    Line and column come from each diagnostic's start offset. With verbose,
    hints are printed under the table. Plugin failures are listed per file.
    """
    console = console or Console()
    total = sum(len(r.diagnostics) for r in results)
    failures = sum(len(r.errors) for r in results)

    if total == 0 and failures == 0:
        console.print(
            Panel(
                "[green]No problems found.[/green]",
                title="lintbridge",
                border_style="green",
                box=box.ROUNDED,
            )
        )
        return

    for result in results:
        if not result.diagnostics and not result.errors:
            continue
        console.print()
        console.print(Panel(f"[bold cyan]{escape(str(result.path))}[/bold cyan]", box=box.SIMPLE_HEAD, border_style="blue"))

        if result.diagnostics:
            table = Table(show_header=True, header_style="bold magenta", box=box.SIMPLE, padding=(0, 1))
            table.add_column("Line", justify="right", style="dim", width=5)
            table.add_column("Col", justify="right", style="dim", width=4)
            table.add_column("Rule", width=22)
            table.add_column("Message", style="white")
            for d in result.diagnostics:
                line, col = offset_to_line_col(result.source, d.span.lo)
                table.add_row(str(line), str(col), Text(f"[{d.rule_code}]", style="bold yellow"), Text(d.message))
            console.print(table)

        if verbose:
            for d in result.diagnostics:
                if d.hint:
                    console.print(f"  [dim]Hint:[/dim] {escape(f'[{d.rule_code}] {d.hint}')}")

        for error in result.errors:
            console.print(f"  [bold red]plugin failed:[/bold red] {escape(f'{type(error).__name__}: {error}')}")

    _print_summary(total, failures, console)


def _print_summary(total: int, failures: int, console: Console) -> None:
    parts = [f"[bold]{total} problem{'s' if total != 1 else ''}[/bold]"]
    if failures:
        parts.append(f"[bold red]{failures} plugin failure{'s' if failures != 1 else ''}[/bold red]")
    console.print()
    console.print(
        Panel(
            " | ".join(parts),
            title="Summary",
            border_style="yellow" if total or failures else "green",
            box=box.ROUNDED,
        )
    )
