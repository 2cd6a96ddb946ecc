"""Rich rendering of maintenance state for the terminal."""

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.state import MaintenanceState


def _console() -> Console:
    return Console(stderr=True, width=200, force_terminal=True)


def render_state(state: MaintenanceState) -> None:
    """Print modified branches and patches of the current maintenance release."""
    console = _console()

    if state.all_release_branches:
        console.print(f"Total recognized ReleaseBranches: {len(state.all_release_branches)}")

    if not state.modified_branches:
        console.print("\nRelease Branches in MR: None")
    else:
        table = Table(title="Release Branches in MR", show_header=True, header_style="bold")
        table.add_column("#", no_wrap=True)
        table.add_column("branch", style="cyan", no_wrap=True)
        table.add_column("brands", no_wrap=True)
        table.add_column("deployed", no_wrap=True)
        table.add_column("needs", no_wrap=True)
        table.add_column("deps", no_wrap=True)
        table.add_column("pending", no_wrap=True)
        table.add_column("pushed", no_wrap=True)
        for index, modified_branch in enumerate(state.modified_branches, start=1):
            label = f"{modified_branch.repo} {modified_branch.branch}"
            if not modified_branch.release_branch.is_released:
                label += " (unreleased)"
            table.add_row(
                str(index),
                label,
                ",".join(modified_branch.brands),
                str(modified_branch.deployed_version or "-"),
                ",".join(patch.name for patch in modified_branch.needed_patches) or "-",
                "\n".join(
                    f"{repo}: {sha}" for repo, sha in modified_branch.changed_dependencies.items()
                )
                or "-",
                "\n".join(modified_branch.pending_messages) or "-",
                "\n".join(modified_branch.pushed_messages) or "-",
            )
        console.print(table)

    if not state.patches:
        console.print("\nMaintenance Patches in MR: None")
    else:
        table = Table(title="Maintenance Patches in MR", show_header=True, header_style="bold")
        table.add_column("#", no_wrap=True)
        table.add_column("patch", style="cyan", no_wrap=True)
        table.add_column("repo", no_wrap=True)
        table.add_column("message")
        table.add_column("shas", no_wrap=True)
        table.add_column("needed by", no_wrap=True)
        for index, patch in enumerate(state.patches, start=1):
            needed_by = [
                f"{branch.repo} {branch.branch} {','.join(branch.brands)}"
                for branch in state.modified_branches
                if branch.needs_patch(patch)
            ]
            table.add_row(
                str(index),
                patch.name,
                patch.repo,
                patch.message,
                "\n".join(patch.shas) or "-",
                "\n".join(needed_by) or "-",
            )
        console.print(table)
    console.print()


def render_release_branches(release_branches: Sequence[ReleaseBranch]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("repo", style="cyan", no_wrap=True)
    table.add_column("branch", no_wrap=True)
    table.add_column("brands", no_wrap=True)
    table.add_column("released", no_wrap=True)
    for release_branch in release_branches:
        table.add_row(
            release_branch.repo,
            release_branch.branch,
            ",".join(release_branch.brands),
            "yes" if release_branch.is_released else "no",
        )

    console = _console()
    console.print(table)
    console.print(f"{len(release_branches)} release branches")
