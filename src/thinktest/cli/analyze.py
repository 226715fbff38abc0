"""CLI command: thinktest analyze <path> — WordPress plugin analysis."""

from __future__ import annotations

import asyncio
import json
import sys

import click
from rich.console import Console
from rich.table import Table

from thinktest.analysis.engine import PluginAnalyzer
from thinktest.analysis.models import AnalysisMethod, AnalysisResult, Priority
from thinktest.cli.common import load_config
from thinktest.config import ThinkTestConfig
from thinktest.sources import SourceError, file_hash, load_source

console = Console(stderr=True)

_PRIORITY_COLORS = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "blue",
}


@click.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option("--save", is_flag=True, help="Store the result in the local database.")
@click.pass_context
def analyze(ctx: click.Context, path: str, as_json: bool, save: bool) -> None:
    """Analyze a PHP file, ZIP archive or plugin directory."""
    config = load_config(ctx)

    try:
        source = load_source(path, config)
    except SourceError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    result = PluginAnalyzer(config.rules).analyze(source.content, source.filename)

    analysis_id = None
    if save:
        analysis_id = asyncio.run(_save(config, result, file_hash(source.content)))

    if as_json:
        data = result.to_dict()
        if analysis_id:
            data["id"] = analysis_id
        click.echo(json.dumps(data, indent=2))
        return

    console.print(
        f"[bold]ThinkTest[/bold] analyzed [cyan]{result.filename}[/cyan] "
        f"({source.file_count} file(s)) using [cyan]{result.analysis_method.value}[/cyan]\n"
    )
    _print_tables(result)
    _print_summary(result)
    if analysis_id:
        console.print(f"Saved as [cyan]{analysis_id}[/cyan]")


async def _save(config: ThinkTestConfig, result: AnalysisResult, digest: str) -> str:
    from thinktest.storage.db import get_db
    from thinktest.storage.repos import AnalysisRepo

    db = await get_db(config.db_path)
    try:
        return await AnalysisRepo(db).save(result, digest)
    finally:
        await db.close()


def _print_tables(result: AnalysisResult) -> None:
    hook_rows = [("action", h.name, h.callback, str(h.priority), str(h.line)) for h in result.hooks]
    hook_rows += [
        ("filter", f.name, f.callback, str(f.priority), str(f.line)) for f in result.filters
    ]
    _table("Hooks and filters", ("Kind", "Name", "Callback", "Priority", "Line"), hook_rows)

    _table(
        "AJAX handlers",
        ("Action", "Callback", "Public", "Line"),
        [
            (a.action, a.callback, "yes" if a.is_public else "no", str(a.line))
            for a in result.ajax_handlers
        ],
    )
    _table(
        "REST endpoints",
        ("Namespace", "Route", "Methods", "Line"),
        [
            (r.namespace, r.route, ", ".join(r.methods), str(r.line))
            for r in result.rest_endpoints
        ],
    )
    _table(
        "Database operations",
        ("Operation", "Category", "Line"),
        [(d.type, d.category.value, str(d.line)) for d in result.database_operations],
    )
    _table(
        "Security patterns",
        ("Function", "Category", "Line"),
        [(s.type, s.category.value, str(s.line)) for s in result.security_patterns],
    )

    table = Table(title="Test recommendations", show_lines=False)
    table.add_column("Priority", style="bold", width=8)
    table.add_column("Type", style="cyan")
    table.add_column("Description")
    for rec in result.test_recommendations:
        color = _PRIORITY_COLORS.get(rec.priority, "white")
        table.add_row(f"[{color}]{rec.priority.value}[/{color}]", rec.type, rec.description)
    console.print(table)


def _table(title: str, columns: tuple[str, ...], rows: list[tuple[str, ...]]) -> None:
    if not rows:
        return
    table = Table(title=title, show_lines=False)
    for column in columns:
        table.add_column(column, justify="right" if column == "Line" else "left")
    for row in rows:
        table.add_row(*row)
    console.print(table)


def _print_summary(result: AnalysisResult) -> None:
    console.print(
        f"\n{len(result.functions)} functions, {len(result.classes)} classes, "
        f"{len(result.wordpress_patterns)} WordPress API calls"
    )
    if result.is_multi_file:
        console.print(
            f"Parsed {result.parsed_file_count} files "
            f"({result.failed_file_count} with syntax errors)"
        )
    if result.analysis_method is AnalysisMethod.REGEX_FALLBACK:
        console.print(
            "[yellow]Some source could not be parsed; "
            "results come from pattern matching and may be less precise.[/yellow]"
        )
