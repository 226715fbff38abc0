"""Helpers shared by CLI commands."""

from __future__ import annotations

import click

from thinktest.config import ConfigError, ThinkTestConfig


def load_config(ctx: click.Context) -> ThinkTestConfig:
    """Load configuration named by the global ``--config`` option."""
    try:
        config = ThinkTestConfig.load(ctx.obj.get("config_path"))
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    config.verbose = ctx.obj.get("verbose", False)
    return config
