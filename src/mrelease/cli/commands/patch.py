"""Commands that manage patches."""

import click

from mrelease.cli.ensure import Ensure
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine


@click.group("patch")
def patch_group() -> None:
    """Create and edit patches."""


@patch_group.command("create")
@click.argument("repo")
@click.argument("message")
@click.option("--name", "patch_name", help="Patch name (defaults to REPO)")
@click.pass_obj
def create_patch(ctx: MaintenanceContext, repo: str, message: str, patch_name: str | None) -> None:
    """Create a patch for REPO described by MESSAGE (usually an issue link)."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.create_patch(repo, message, patch_name))


@patch_group.command("remove")
@click.argument("name")
@click.pass_obj
def remove_patch(ctx: MaintenanceContext, name: str) -> None:
    """Remove a patch no branch needs any more."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.remove_patch(name))


@patch_group.command("add-sha")
@click.argument("name")
@click.argument("sha", required=False)
@click.pass_obj
def add_patch_sha(ctx: MaintenanceContext, name: str, sha: str | None) -> None:
    """Add a candidate commit to a patch (defaults to HEAD of the patch repo)."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.add_patch_sha(name, sha))


@patch_group.command("remove-sha")
@click.argument("name")
@click.argument("sha")
@click.pass_obj
def remove_patch_sha(ctx: MaintenanceContext, name: str, sha: str) -> None:
    """Remove a candidate commit from a patch."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.remove_patch_sha(name, sha))


@patch_group.command("remove-all-shas")
@click.argument("name")
@click.pass_obj
def remove_all_patch_shas(ctx: MaintenanceContext, name: str) -> None:
    """Remove every candidate commit from a patch."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.remove_all_patch_shas(name))
