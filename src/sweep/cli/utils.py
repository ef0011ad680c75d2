"""
CLI utility helpers: output formatting and error reporting.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sweep.core.errors import SweepError, exit_code_for
from sweep.execution.models import ResultRecord
from sweep.routing.router import Route, classify

console = Console()
err_console = Console(stderr=True)

_ROUTE_STYLE = {
    Route.SUCCESS: "green",
    Route.FAILURE: "red",
    Route.NONE: "yellow",
}


def fail(error: SweepError) -> NoReturn:
    """Report a fatal setup error and exit with its code."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    raise typer.Exit(code=exit_code_for(error))


def print_record(record: ResultRecord, *, as_json: bool = False) -> None:
    """Live pass-through line for one record."""
    if as_json:
        typer.echo(json.dumps(record.as_dict(), default=str))
        return
    style = _ROUTE_STYLE[classify(record.status)]
    line = f"[{style}]{escape(str(record.status)):<8}[/{style}] {escape(record.target)}"
    if record.message:
        line += f"  [dim]{escape(record.message)}[/dim]"
    extras = " ".join(f"{k}={v}" for k, v in record.fields.items() if v is not None)
    if extras:
        line += f"  {escape(extras)}"
    console.print(line, highlight=False)


def print_summary(summary: dict[str, Any], *, as_json: bool = False) -> None:
    """Final run summary, on stderr so stdout stays a pure record stream."""
    if as_json:
        err_console.print_json(json.dumps({"summary": summary}, default=str))
        return
    err_console.print()
    err_console.print(f"[bold]Sweep {summary['run_id']}[/bold] ({summary['module']})")
    for key in ("total", "succeeded", "failed", "unclassified", "timed_out", "duration_seconds"):
        err_console.print(f"  [cyan]{key}[/cyan]: {summary[key]}")
    for key in ("success_path", "failure_path"):
        if summary.get(key):
            err_console.print(f"  [cyan]{key}[/cyan]: {escape(summary[key])}")


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)
