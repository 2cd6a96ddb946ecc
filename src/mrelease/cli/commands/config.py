"""Commands that show and change mrelease configuration."""

from dataclasses import fields

import click

from mrelease.cli.ensure import Ensure
from mrelease.cli.output import machine_output, user_output
from mrelease.core.config import CONFIG_KEYS, apply_settings
from mrelease.core.context import MaintenanceContext


@click.group("config")
def config_group() -> None:
    """Manage mrelease configuration."""


@config_group.command("show")
@click.pass_obj
def config_show(ctx: MaintenanceContext) -> None:
    """Print the effective configuration."""
    config_path = ctx.config_store.path()
    if ctx.config_store.exists():
        user_output(click.style(f"Configuration from {config_path}:", bold=True))
    else:
        user_output(click.style(f"Defaults ({config_path} does not exist):", bold=True))

    for field in fields(ctx.config):
        value = getattr(ctx.config, field.name)
        if isinstance(value, tuple):
            value = " ".join(value)
        machine_output(f"  {field.name}={value}")


@config_group.command("set")
@click.argument("key", type=click.Choice(sorted(CONFIG_KEYS)))
@click.argument("value")
@click.pass_obj
def config_set(ctx: MaintenanceContext, key: str, value: str) -> None:
    """Set KEY to VALUE in the configuration file."""
    stored: str | int = value
    if key == "concurrency":
        Ensure.invariant(value.isdigit(), f"Invalid value for {key}: {value}")
        stored = int(value)

    # Validate before writing so a bad value never reaches the file
    Ensure.succeeds(lambda: apply_settings(ctx.config, {key: stored}, ctx.cwd))
    Ensure.succeeds(lambda: ctx.config_store.set_value(key, stored))
    user_output(f"Set {key}={value} in {ctx.config_store.path()}")
