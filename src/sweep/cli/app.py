"""
Root Typer application for the sweep CLI.

    sweep run web01 web02 --module tcp
    sweep run --scope prod --module dns --max-workers 64 --timeout 600
    sweep run --targets-file hosts.txt --module ./checks/ssh_banner.py --json
    sweep modules
    sweep scopes
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from typer import Typer

from sweep.cli.utils import console, err_console, fail, print_record, print_summary, print_table
from sweep.core.errors import SweepError
from sweep.core.logging import configure_logging
from sweep.core.settings import load_settings
from sweep.modules.loader import available_modules, load_module
from sweep.runner import SweepRunner
from sweep.targets import FileTargetProvider, Scope, resolve_targets

app = Typer(
    name="sweep",
    help="sweep: run one search module across many remote targets.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from sweep import __version__

        typer.echo(f"sweep {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """sweep CLI: fan a search module out over targets with bounded concurrency."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("run")
def run(
    targets: list[str] | None = typer.Argument(None, help="Explicit targets (hostnames or addresses)"),  # noqa: UP007
    scope: str | None = typer.Option(None, "--scope", "-s", help="Named scope: test, dev or prod"),  # noqa: UP007
    targets_file: Path | None = typer.Option(None, "--targets-file", "-f", help="File with one target per line"),  # noqa: UP007
    module: str = typer.Option("tcp", "--module", "-m", help="Search module name, file.py or pkg.mod:attr"),
    max_workers: int | None = typer.Option(None, "--max-workers", "-w", help="Concurrent worker slots"),  # noqa: UP007
    poll_interval: float | None = typer.Option(None, "--poll-interval", help="Seconds between poll cycles"),  # noqa: UP007
    timeout: float | None = typer.Option(None, "--timeout", "-t", help="Overall deadline in seconds"),  # noqa: UP007
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Directory for the CSV output"),  # noqa: UP007
    targets_dir: Path | None = typer.Option(None, "--targets-dir", help="Directory holding {scope}.txt files"),  # noqa: UP007
    as_json: bool = typer.Option(False, "--json", help="Emit records as JSON lines"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),  # noqa: UP007
) -> None:
    """Run a search module against every target and write success/failure CSVs.

    Exit codes: 0 when the run completes (whatever the per-target outcomes),
    2 for configuration errors, 3 when the target list or search module
    cannot be loaded.
    """
    try:
        settings = load_settings(
            max_workers=max_workers,
            poll_interval=poll_interval,
            timeout=timeout,
            output_dir=output_dir,
            targets_dir=targets_dir,
            log_level=log_level,
        )
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
        config = settings.run_config()
        search = load_module(module, settings=settings)
        resolved = resolve_targets(
            targets or None,
            scope=scope,
            targets_file=targets_file,
            provider=FileTargetProvider(settings.targets_dir),
        )
    except SweepError as exc:
        fail(exc)

    runner = SweepRunner(config, search, settings.output_dir)
    runner.prepare_outputs()
    if not as_json:
        err_console.print(
            f"[bold green]Sweeping {len(resolved)} target(s)[/bold green] "
            f"with [bold]{escape(search.name)}[/bold] "
            f"(workers={config.max_workers}, poll={config.poll_interval}s, timeout={config.timeout}s)"
        )
    stream = runner.execute(resolved)
    try:
        for record in stream:
            print_record(record, as_json=as_json)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Sweep interrupted; partial results kept[/yellow]")
        raise typer.Exit(code=130)
    finally:
        stream.close()
        print_summary(runner.summary.to_dict(), as_json=as_json)


@app.command("modules")
def modules() -> None:
    """List available search modules and the fields they record."""
    try:
        registry = available_modules(settings=load_settings())
    except SweepError as exc:
        fail(exc)
    print_table(
        [
            {
                "name": m.name,
                "fields": ", ".join(m.fields) or "-",
                "description": m.description or "-",
            }
            for m in registry.list_modules()
        ],
        title="Search modules",
    )


@app.command("scopes")
def scopes(
    targets_dir: Path | None = typer.Option(None, "--targets-dir", help="Directory holding {scope}.txt files"),  # noqa: UP007
) -> None:
    """Show each named scope and how many targets it resolves to."""
    try:
        settings = load_settings(targets_dir=targets_dir)
    except SweepError as exc:
        fail(exc)
    provider = FileTargetProvider(settings.targets_dir)
    rows = []
    for scope in Scope:
        try:
            count = str(len(provider.resolve(scope)))
        except SweepError as exc:
            count = f"error: {exc.message}"
        rows.append({"scope": scope.value, "file": str(provider.path_for(scope)), "targets": count})
    print_table(rows, title="Scopes")
    console.print(f"[dim]targets dir: {escape(str(settings.targets_dir))}[/dim]")
