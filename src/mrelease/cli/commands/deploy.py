"""Deployment commands."""

import click

from mrelease.cli.ensure import Ensure
from mrelease.cli.filters import branch_filter_options, build_selector
from mrelease.cli.output import user_output
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine


@click.command("deploy-rc")
@branch_filter_options
@click.pass_obj
def deploy_rc_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Deploy a release candidate of every branch ready for one."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    branch_filter = selector.for_modified_branches() if selector is not None else None
    Ensure.succeeds(lambda: engine.deploy_release_candidates(branch_filter))


@click.command("deploy-production")
@branch_filter_options
@click.pass_obj
def deploy_production_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Deploy every branch with a verified release candidate to production."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    branch_filter = selector.for_modified_branches() if selector is not None else None
    Ensure.succeeds(lambda: engine.deploy_production(branch_filter))


@click.command("redeploy-all-production")
@click.argument("message")
@branch_filter_options
@click.confirmation_option(prompt="Redeploy every released branch to production?")
@click.pass_obj
def redeploy_all_production_cmd(
    ctx: MaintenanceContext,
    message: str,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Deploy an RC and then production of every released branch with MESSAGE."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    Ensure.succeeds(lambda: engine.redeploy_all_production(message, selector))


@click.command("redeploy-last-deployed")
@branch_filter_options
@click.confirmation_option(prompt="Redeploy the last deployed SHAs of every released branch?")
@click.pass_obj
def redeploy_last_deployed_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Redeploy production of every released branch from its last deployed SHAs."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    redeployed = Ensure.succeeds(lambda: engine.redeploy_all_last_deployed_production(selector))
    user_output(f"Redeployed {len(redeployed)} release branches")
