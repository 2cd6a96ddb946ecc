"""Builders for maintenance scenarios used across tests.

Every scenario lives under REPOS_ROOT with the tooling checkout at
TOOLING_DIR, matching what default_config() derives from the CLI's cwd.
"""

import json
from pathlib import Path
from typing import Any

from mrelease.core.config import MaintenanceConfig, default_config
from mrelease.core.context import MaintenanceContext
from mrelease.core.engine import MaintenanceEngine
from mrelease.core.manifest import MANIFEST_FILENAME
from mrelease.core.modified_branch import ModifiedBranch
from mrelease.core.patch import Patch
from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.state import MaintenanceState
from tests.fakes.git import FakeGit
from tests.fakes.state import FakeStateStore

REPOS_ROOT = Path("/repos")
TOOLING_DIR = REPOS_ROOT / "perennial"


def scenario_config() -> MaintenanceConfig:
    return default_config(TOOLING_DIR)


def repo_dir(repo: str) -> Path:
    return REPOS_ROOT / repo


def manifest_text(shas: dict[str, str], comment: str | None = "pinned for release") -> str:
    """A dependencies.json document pinning each repo to a SHA."""
    manifest: dict[str, object] = {}
    if comment is not None:
        manifest["comment"] = comment
    for repo, sha in shas.items():
        manifest[repo] = {"sha": sha, "branch": "main"}
    return json.dumps(manifest, indent=2)


def package_text(version: str, **phet: object) -> str:
    """A package.json document with an optional "phet" section."""
    package: dict[str, object] = {"name": "sim", "version": version}
    if phet:
        package["phet"] = phet
    return json.dumps(package)


def release_branch(
    repo: str = "sim-a",
    branch: str = "1.2",
    brands: tuple[str, ...] = ("phet",),
    is_released: bool = True,
) -> ReleaseBranch:
    return ReleaseBranch(repo, branch, brands, is_released)


def sim_git(
    *,
    repo: str = "sim-a",
    branch: str = "1.2",
    tip: str = "sim-tip",
    previous: str = "sim-prev",
    dependencies: dict[str, str] | None = None,
    extra_remote_branches: dict[Path, dict[str, str]] | None = None,
    parents: dict[Path, dict[str, str]] | None = None,
    cherry_pick_results: dict[tuple[Path, str], str | None] | None = None,
    extra_files: dict[tuple[Path, str, str], str] | None = None,
    extra_commits: dict[Path, set[str]] | None = None,
    working_files: dict[Path, str] | None = None,
    dirty_repos: set[Path] | None = None,
    push_raises: Exception | None = None,
) -> FakeGit:
    """FakeGit holding one release branch whose manifest pins `dependencies`.

    The manifest always pins the sim itself to `previous`, the parent of `tip`.
    """
    sim_dir = repo_dir(repo)
    pins = {repo: previous, **(dependencies or {})}
    files = {
        (sim_dir, tip, MANIFEST_FILENAME): manifest_text(pins),
        (sim_dir, tip, "package.json"): package_text(f"{branch}.0"),
    }
    files.update(extra_files or {})

    remote = {sim_dir: {"main": "sim-main", branch: tip}}
    for path, branches in (extra_remote_branches or {}).items():
        remote.setdefault(path, {}).update(branches)

    all_parents = {sim_dir: {tip: previous}}
    for path, links in (parents or {}).items():
        all_parents.setdefault(path, {}).update(links)

    commits = {repo_dir(dependency): {sha} for dependency, sha in (dependencies or {}).items()}
    for path, shas in (extra_commits or {}).items():
        commits.setdefault(path, set()).update(shas)
    return FakeGit(
        remote_branches=remote,
        parents=all_parents,
        commits=commits,
        files=files,
        working_files=working_files,
        cherry_pick_results=cherry_pick_results,
        dirty_repos=dirty_repos,
        push_raises=push_raises,
    )


def state_with_needed_patch(
    rb: ReleaseBranch,
    *,
    patch_repo: str = "sim-a",
    name: str = "fix-1",
    message: str = "issue #12",
    shas: list[str] | None = None,
) -> MaintenanceState:
    """State in which `rb` needs a single patch."""
    patch = Patch(repo=patch_repo, name=name, message=message, shas=list(shas or []))
    return MaintenanceState(
        patches=[patch],
        modified_branches=[ModifiedBranch(rb, needed_patches=[patch])],
        all_release_branches=[rb],
    )


def scenario_context(
    *,
    git: FakeGit | None = None,
    state: MaintenanceState | None = None,
    **kwargs: Any,
) -> tuple[MaintenanceContext, FakeStateStore]:
    """Context over fakes rooted at the scenario tooling checkout."""
    store = FakeStateStore(initial=state)
    ctx = MaintenanceContext.for_test(
        git=git,
        state_store=store,
        cwd=TOOLING_DIR,
        config=scenario_config(),
        **kwargs,
    )
    return ctx, store


def make_engine(
    *,
    git: FakeGit | None = None,
    state: MaintenanceState | None = None,
    **kwargs: Any,
) -> tuple[MaintenanceEngine, FakeStateStore]:
    ctx, store = scenario_context(git=git, state=state, **kwargs)
    return MaintenanceEngine(ctx), store
