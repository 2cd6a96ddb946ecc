"""Commands that inspect or reset the maintenance state."""

import click

from mrelease.cli.ensure import Ensure
from mrelease.cli.filters import branch_filter_options, build_selector
from mrelease.cli.output import machine_output, user_output
from mrelease.cli.rendering import render_state
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine


@click.command("reset")
@click.option(
    "--keep-cached-release-branches",
    is_flag=True,
    help="Keep the discovered release branches instead of rediscovering them",
)
@click.confirmation_option(prompt="Discard all patches and modified branches?")
@click.pass_obj
def reset_cmd(ctx: MaintenanceContext, keep_cached_release_branches: bool) -> None:
    """Start a new maintenance release from an empty state."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.reset(keep_cached_release_branches))
    user_output(f"Reset {ctx.config.state_file}")


@click.command("list")
@click.pass_obj
def list_cmd(ctx: MaintenanceContext) -> None:
    """Show the modified branches and patches of the current maintenance release."""
    engine = MaintenanceEngine(ctx)
    render_state(Ensure.succeeds(engine.load_state))


@click.command("list-links")
@branch_filter_options
@click.pass_obj
def list_links_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Print markdown testing links for every deployed branch."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    branch_filter = selector.for_modified_branches() if selector is not None else None
    for line in Ensure.succeeds(lambda: engine.list_links(branch_filter)):
        machine_output(line)


@click.command("check-branch-status")
@branch_filter_options
@click.pass_obj
def check_branch_status_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Report anything out of the ordinary on every maintenance branch."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    for line in Ensure.succeeds(lambda: engine.check_branch_status(selector)):
        machine_output(line)


@click.command("create-unreleased-issues")
@click.option("--notes", default="", help="Additional notes appended to every issue body")
@click.pass_obj
def create_unreleased_issues_cmd(ctx: MaintenanceContext, notes: str) -> None:
    """Open a QA issue for each unreleased branch that received changes."""
    engine = MaintenanceEngine(ctx)
    for url in Ensure.succeeds(lambda: engine.create_unreleased_issues(notes)):
        machine_output(url)
