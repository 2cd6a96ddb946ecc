"""Commands for the cached list of discovered release branches."""

import click

from mrelease.cli.ensure import Ensure
from mrelease.cli.filters import branch_filter_options, build_selector
from mrelease.cli.output import machine_output, user_output
from mrelease.cli.rendering import render_release_branches
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine


@click.group("release-branches")
def release_branches_group() -> None:
    """Inspect the release branches eligible for maintenance."""


@release_branches_group.command("list")
@branch_filter_options
@click.pass_obj
def list_release_branches(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """List release branches, discovering them first if none are cached."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    render_release_branches(Ensure.succeeds(lambda: engine.get_maintenance_branches(selector)))


@release_branches_group.command("refresh")
@click.pass_obj
def refresh_release_branches(ctx: MaintenanceContext) -> None:
    """Rediscover release branches from metadata and git, replacing the cache."""
    engine = MaintenanceEngine(ctx)
    render_release_branches(
        Ensure.succeeds(lambda: engine.get_maintenance_branches(force_refresh=True))
    )


@release_branches_group.command("inspect")
@click.argument("repo")
@click.argument("branch")
@click.pass_obj
def inspect_release_branch(ctx: MaintenanceContext, repo: str, branch: str) -> None:
    """Print the capabilities detected at the tip of REPO BRANCH."""
    engine = MaintenanceEngine(ctx)
    report = Ensure.succeeds(lambda: engine.inspect_release_branch(repo, branch))
    user_output(click.style(f"{repo} {branch}:", bold=True))
    for name, value in report.items():
        machine_output(f"  {name}={value}")
