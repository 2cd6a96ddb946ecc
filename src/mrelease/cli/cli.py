from pathlib import Path

import click

from mrelease.cli.commands.checkouts import (
    check_built_cmd,
    check_unbuilt_cmd,
    update_checkouts_cmd,
)
from mrelease.cli.commands.config import config_group
from mrelease.cli.commands.deploy import (
    deploy_production_cmd,
    deploy_rc_cmd,
    redeploy_all_production_cmd,
    redeploy_last_deployed_cmd,
)
from mrelease.cli.commands.needed import needed_group
from mrelease.cli.commands.patch import patch_group
from mrelease.cli.commands.release_branches import release_branches_group
from mrelease.cli.commands.repl import repl_cmd
from mrelease.cli.commands.state import (
    check_branch_status_cmd,
    create_unreleased_issues_cmd,
    list_cmd,
    list_links_cmd,
    reset_cmd,
)
from mrelease.cli.commands.workflow import (
    apply_patches_cmd,
    checkout_branch_cmd,
    update_dependencies_cmd,
)
from mrelease.cli.output import configure_logging
from mrelease.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="mrelease")
@click.option("-v", "--verbose", is_flag=True, help="Show every executed command")
@click.option(
    "--dry-run", is_flag=True, help="Print pushes, deploys and issues instead of doing them"
)
@click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Maintenance state file (overrides the configured one)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, dry_run: bool, state_file: Path | None) -> None:
    """Drive maintenance releases across simulation release branches."""
    configure_logging(verbose)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(dry_run=dry_run, state_file=state_file)


# State
cli.add_command(reset_cmd)
cli.add_command(list_cmd)
cli.add_command(list_links_cmd)
cli.add_command(check_branch_status_cmd)
cli.add_command(create_unreleased_issues_cmd)
cli.add_command(release_branches_group)

# Patches
cli.add_command(patch_group)
cli.add_command(needed_group)

# Workflow
cli.add_command(checkout_branch_cmd)
cli.add_command(apply_patches_cmd)
cli.add_command(update_dependencies_cmd)
cli.add_command(deploy_rc_cmd)
cli.add_command(deploy_production_cmd)
cli.add_command(redeploy_all_production_cmd)
cli.add_command(redeploy_last_deployed_cmd)

# Checkouts
cli.add_command(update_checkouts_cmd)
cli.add_command(check_unbuilt_cmd)
cli.add_command(check_built_cmd)

cli.add_command(config_group)
cli.add_command(repl_cmd)


def main() -> None:
    """CLI entry point used by the `mrelease` console script."""
    cli()
