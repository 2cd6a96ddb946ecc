"""Commands that apply patches and push the resulting dependency changes."""

import click

from mrelease.cli.ensure import Ensure
from mrelease.cli.filters import branch_filter_options, build_selector
from mrelease.cli.output import user_output
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine


@click.command("checkout-branch")
@click.argument("repo")
@click.argument("branch")
@click.option("--output-js", is_flag=True, help="Transpile after checking out")
@click.pass_obj
def checkout_branch_cmd(ctx: MaintenanceContext, repo: str, branch: str, output_js: bool) -> None:
    """Check out a modified branch with its (possibly unpushed) patched dependencies."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.checkout_branch(repo, branch, output_js))


@click.command("apply-patches")
@click.pass_obj
def apply_patches_cmd(ctx: MaintenanceContext) -> None:
    """Cherry-pick every needed patch onto its release branches.

    Exits with status 1 when a patch could not be cherry-picked onto some
    branch; that patch remains needed there.
    """
    engine = MaintenanceEngine(ctx)
    success = Ensure.succeeds(engine.apply_patches)
    if not success:
        user_output(
            click.style("Some patches could not be cherry-picked", fg="yellow")
            + " (run `mrelease list` to see what is still needed)"
        )
        raise SystemExit(1)


@click.command("update-dependencies")
@branch_filter_options
@click.pass_obj
def update_dependencies_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Push patched dependencies and commit updated manifests on each release branch."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    branch_filter = selector.for_modified_branches() if selector is not None else None
    Ensure.succeeds(lambda: engine.update_dependencies(branch_filter))
