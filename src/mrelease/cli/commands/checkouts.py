"""Commands for the standalone release-branch checkouts."""

import click

from mrelease.cli.ensure import Ensure
from mrelease.cli.filters import branch_filter_options, build_selector
from mrelease.cli.output import user_output
from mrelease.core.checkouts import CheckoutOptions
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine
from mrelease.core.release_branch import ReleaseBranch


@click.command("update-checkouts")
@branch_filter_options
@click.option("--concurrency", type=click.IntRange(min=1), help="Parallel workers")
@click.option("--build/--no-build", default=True, show_default=True)
@click.option("--transpile/--no-transpile", default=True, show_default=True)
@click.option("--lint/--no-lint", default=True, show_default=True)
@click.pass_obj
def update_checkouts_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
    concurrency: int | None,
    build: bool,
    transpile: bool,
    lint: bool,
) -> None:
    """Update (and build) a standalone checkout of every maintenance branch."""
    engine = MaintenanceEngine(ctx)
    options = CheckoutOptions(
        concurrency=concurrency or ctx.config.concurrency,
        build=build,
        transpile=transpile,
        lint=lint,
    )
    selector = build_selector(repos, brands, released)
    report = Ensure.succeeds(lambda: engine.update_checkouts(selector, options))

    user_output(f"{len(report.finished)} finished, {report.failure_count} failed")
    for release_branch, error in [*report.update_failures, *report.build_failures]:
        user_output(click.style(f"  {release_branch}: ", fg="red") + error.partition("\n")[0])
    if report.failure_count:
        raise SystemExit(1)


def _report_problems(problems: list[tuple[ReleaseBranch, str]]) -> None:
    if not problems:
        user_output(click.style("All checkouts look usable", fg="green"))
        return
    user_output(click.style(f"{len(problems)} checkouts have problems", fg="red"))
    raise SystemExit(1)


@click.command("check-unbuilt")
@branch_filter_options
@click.pass_obj
def check_unbuilt_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Check the unbuilt entry point of every standalone checkout."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    _report_problems(Ensure.succeeds(lambda: engine.check_unbuilt_checkouts(selector)))


@click.command("check-built")
@branch_filter_options
@click.pass_obj
def check_built_cmd(
    ctx: MaintenanceContext,
    repos: tuple[str, ...],
    brands: tuple[str, ...],
    released: bool | None,
) -> None:
    """Check the built phet HTML of every standalone checkout."""
    engine = MaintenanceEngine(ctx)
    selector = build_selector(repos, brands, released)
    _report_problems(Ensure.succeeds(lambda: engine.check_built_checkouts(selector)))
