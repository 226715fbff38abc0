"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from thinktest import __version__


@click.group()
@click.version_option(version=__version__, prog_name="thinktest")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to a YAML config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """ThinkTest — WordPress plugin analysis for test generation."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from thinktest.cli.analyze import analyze  # noqa: F811
    from thinktest.cli.elementor import elementor  # noqa: F811
    from thinktest.cli.server import server  # noqa: F811

    main.add_command(analyze)
    main.add_command(elementor)
    main.add_command(server)


_register_commands()
