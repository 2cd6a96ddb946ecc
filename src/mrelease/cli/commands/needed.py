"""Commands that mark which release branches need which patches."""

import click

from mrelease.cli.ensure import Ensure
from mrelease.cli.filters import (
    branch_filter_options,
    build_content_filter,
    build_selector,
    content_filter_options,
)
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine
from mrelease.core.predicates import ReleaseBranchFilter, accept_all
from mrelease.core.release_branch import ReleaseBranch


@click.group("needed")
def needed_group() -> None:
    """Mark patches as needed (or no longer needed) on release branches."""


@needed_group.command("add")
@click.argument("repo")
@click.argument("branch")
@click.argument("patch_name")
@click.pass_obj
def add_needed(ctx: MaintenanceContext, repo: str, branch: str, patch_name: str) -> None:
    """Mark PATCH_NAME as needed on the REPO BRANCH release branch."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.add_needed_patch(repo, branch, patch_name))


@needed_group.command("add-release-branch")
@click.argument("repo")
@click.argument("branch")
@click.argument("patch_name")
@click.option("--brand", "brands", multiple=True, default=["phet"], show_default=True)
@click.option("--unreleased", is_flag=True, help="The branch has never been published")
@click.pass_obj
def add_needed_release_branch(
    ctx: MaintenanceContext,
    repo: str,
    branch: str,
    patch_name: str,
    brands: tuple[str, ...],
    unreleased: bool,
) -> None:
    """Mark PATCH_NAME as needed on a release branch discovery does not know about."""
    engine = MaintenanceEngine(ctx)
    release_branch = ReleaseBranch(repo, branch, brands, is_released=not unreleased)
    Ensure.succeeds(lambda: engine.add_needed_patch_release_branch(release_branch, patch_name))


@needed_group.command("add-all")
@click.argument("patch_name")
@branch_filter_options
@click.pass_obj
def add_needed_all(
    ctx: MaintenanceContext,
    patch_name: str,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Mark PATCH_NAME as needed on every maintenance branch (optionally narrowed)."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    if selector is None:
        Ensure.succeeds(lambda: engine.add_all_needed_patches(patch_name))
    else:
        Ensure.succeeds(lambda: engine.add_needed_patches(patch_name, selector))


@needed_group.command("add-before")
@click.argument("patch_name")
@click.argument("sha")
@click.pass_obj
def add_needed_before(ctx: MaintenanceContext, patch_name: str, sha: str) -> None:
    """Needed on every branch whose pinned patch repo does not contain SHA."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.add_needed_patches_before(patch_name, sha))


@needed_group.command("add-after")
@click.argument("patch_name")
@click.argument("sha")
@click.pass_obj
def add_needed_after(ctx: MaintenanceContext, patch_name: str, sha: str) -> None:
    """Needed on every branch whose pinned patch repo already contains SHA."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.add_needed_patches_after(patch_name, sha))


@needed_group.command("add-build-filter")
@click.argument("patch_name")
@content_filter_options
@click.pass_obj
def add_needed_build_filter(
    ctx: MaintenanceContext,
    patch_name: str,
    contains: str | None,
    matches: str | None,
    invert: bool,
) -> None:
    """Build every branch and mark PATCH_NAME where the built HTML matches.

    Examples:
        mrelease needed add-build-filter fix-1 --contains "phet.chipper.brand"
        mrelease needed add-build-filter fix-1 --matches "Sim\\(.*\\)" --invert
    """
    content_filter = build_content_filter(contains, matches, invert)
    if content_filter is None:
        raise click.UsageError("One of --contains or --matches is required")
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.add_needed_patches_build_filter(patch_name, content_filter))


@needed_group.command("add-file-filter")
@click.argument("patch_name")
@click.argument("path")
@content_filter_options
@click.pass_obj
def add_needed_file_filter(
    ctx: MaintenanceContext,
    patch_name: str,
    path: str,
    contains: str | None,
    matches: str | None,
    invert: bool,
) -> None:
    """Mark PATCH_NAME where the file at PATH (at the branch tip) matches."""
    content_filter = build_content_filter(contains, matches, invert)
    if content_filter is None:
        raise click.UsageError("One of --contains or --matches is required")
    engine = MaintenanceEngine(ctx)
    branch_filter: ReleaseBranchFilter = engine.single_file_release_branch_filter(
        path, content_filter
    )
    Ensure.succeeds(lambda: engine.add_needed_patches(patch_name, branch_filter))


@needed_group.command("remove")
@click.argument("repo")
@click.argument("branch")
@click.argument("patch_name")
@click.pass_obj
def remove_needed(ctx: MaintenanceContext, repo: str, branch: str, patch_name: str) -> None:
    """PATCH_NAME is no longer needed on the REPO BRANCH release branch."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.remove_needed_patch(repo, branch, patch_name))


@needed_group.command("remove-all")
@click.argument("patch_name")
@branch_filter_options
@click.pass_obj
def remove_needed_all(
    ctx: MaintenanceContext,
    patch_name: str,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """PATCH_NAME is no longer needed on any selected branch."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    branch_filter: ReleaseBranchFilter = selector if selector is not None else accept_all
    Ensure.succeeds(lambda: engine.remove_needed_patches(patch_name, branch_filter))


@needed_group.command("remove-before")
@click.argument("patch_name")
@click.argument("sha")
@click.pass_obj
def remove_needed_before(ctx: MaintenanceContext, patch_name: str, sha: str) -> None:
    """Not needed on branches whose pinned patch repo does not contain SHA."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.remove_needed_patches_before(patch_name, sha))


@needed_group.command("remove-after")
@click.argument("patch_name")
@click.argument("sha")
@click.pass_obj
def remove_needed_after(ctx: MaintenanceContext, patch_name: str, sha: str) -> None:
    """Not needed on branches whose pinned patch repo already contains SHA."""
    engine = MaintenanceEngine(ctx)
    Ensure.succeeds(lambda: engine.remove_needed_patches_after(patch_name, sha))
