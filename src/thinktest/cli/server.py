"""CLI command: thinktest server — start the analysis API."""

from __future__ import annotations

import click
from rich.console import Console

from thinktest.cli.common import load_config

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8471).",
)
@click.pass_context
def server(ctx: click.Context, port: int | None) -> None:
    """Start the ThinkTest analysis API."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install thinktest[web]"
        )
        raise SystemExit(1)

    config = load_config(ctx)
    if port is not None:
        config.web_port = port

    console.print(
        f"[bold]ThinkTest[/bold] API starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}[/cyan]\n"
    )

    from thinktest.web.app import create_app

    uvicorn.run(
        create_app(config),
        host=config.web_host,
        port=config.web_port,
        log_level="info",
    )
