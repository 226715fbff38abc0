"""CLI command: thinktest elementor <file> — Elementor widget analysis."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from thinktest.cli.common import load_config
from thinktest.elementor.analyzer import analyze_elementor_widget

console = Console(stderr=True)


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def elementor(ctx: click.Context, path: str, as_json: bool) -> None:
    """Analyze an Elementor widget class file."""
    config = load_config(ctx)

    file_path = Path(path)
    if file_path.stat().st_size > config.max_file_size:
        console.print(f"[red]{file_path.name} exceeds the maximum file size[/red]")
        sys.exit(1)

    analysis = analyze_elementor_widget(file_path.read_text(encoding="utf-8", errors="ignore"))

    if as_json:
        click.echo(json.dumps(analysis.to_dict(), indent=2))
        return

    if not analysis.is_elementor_widget:
        console.print("[yellow]No Elementor widget patterns found.[/yellow]")
        return

    console.print(
        f"[bold]Widget[/bold] [cyan]{analysis.widget_name or '?'}[/cyan] "
        f"({analysis.widget_title or 'untitled'})"
    )
    if analysis.widget_categories:
        console.print(f"Categories: {', '.join(analysis.widget_categories)}")

    if analysis.controls:
        table = Table(title="Controls", show_lines=False)
        table.add_column("ID", style="cyan")
        table.add_column("Type")
        table.add_column("Label")
        table.add_column("Default")
        for control in analysis.controls:
            table.add_row(
                control.id,
                control.type or "",
                control.label or "",
                "" if control.default is None else str(control.default),
            )
        console.print(table)

    console.print(
        f"\n{len(analysis.control_sections)} sections, render method: "
        f"{'yes' if analysis.has_render_method else 'no'}"
    )
