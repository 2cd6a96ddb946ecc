"""Tests for pushing patched dependencies and committing new manifests."""

import json

import pytest

from mrelease.core.errors import DependencyUpdateError, ExecuteError
from mrelease.core.manifest import MANIFEST_FILENAME
from mrelease.core.modified_branch import ModifiedBranch
from mrelease.core.predicates import ReleaseBranchSelector
from mrelease.core.state import MaintenanceState
from mrelease.core.version import SimVersion
from tests.test_utils.builders import make_engine, release_branch, repo_dir, sim_git

SIM_A = release_branch("sim-a", "1.2")
SIM_DIR = repo_dir("sim-a")
JOIST = repo_dir("joist")


def _patched_state() -> MaintenanceState:
    return MaintenanceState(
        modified_branches=[
            ModifiedBranch(
                SIM_A,
                changed_dependencies={"joist": "j1"},
                pending_messages=["issue #12", "issue #13"],
                pushed_messages=["issue #1"],
                deployed_version=SimVersion.parse("1.2.1-rc.1"),
            )
        ],
        all_release_branches=[SIM_A],
    )


def test_update_dependencies_commits_manifest_and_clears_state() -> None:
    """Test the manifest commit, dependency branch and resulting state."""
    # Arrange
    git = sim_git(dependencies={"joist": "j0"}, extra_commits={JOIST: {"j1"}})
    engine, _ = make_engine(git=git, state=_patched_state())

    # Act
    engine.update_dependencies()

    # Assert
    manifest_text = git.file_at(SIM_DIR, "origin/1.2", MANIFEST_FILENAME)
    assert manifest_text is not None
    manifest = json.loads(manifest_text)
    assert manifest["joist"]["sha"] == "j1"
    assert manifest["sim-a"]["sha"] == "sim-tip"
    assert manifest["comment"] == "pinned for release"

    assert git.created_branches == [(JOIST, "sim-a-1.2", "j1")]
    assert (JOIST, "sim-a-1.2") in git.pushed_branches
    assert (SIM_DIR, "1.2") in git.pushed_branches
    assert [message for _, message, _ in git.commits_made] == [
        "updated dependencies.json for issue #12 and issue #13"
    ]

    modified_branch = engine.load_state().modified_branches[0]
    assert modified_branch.changed_dependencies == {}
    assert modified_branch.deployed_version is None
    assert modified_branch.pending_messages == []
    assert modified_branch.pushed_messages == ["issue #1", "issue #12", "issue #13"]
    assert git.head_of(SIM_DIR) == "main"


def test_existing_dependency_branch_is_fast_forwarded() -> None:
    """Test that an existing {repo}-{branch} branch is merged, not recreated."""
    git = sim_git(
        dependencies={"joist": "j0"},
        extra_remote_branches={JOIST: {"sim-a-1.2": "j0"}},
        parents={JOIST: {"j1": "j0"}},
    )
    engine, _ = make_engine(git=git, state=_patched_state())

    engine.update_dependencies()

    assert git.created_branches == []
    assert git.merges == [(JOIST, "j1")]
    assert git.get_remote_branch_map(JOIST)["sim-a-1.2"] == "j1"


def test_up_to_date_dependency_branch_is_not_pushed() -> None:
    """Test that a dependency branch already at the SHA is left alone."""
    git = sim_git(
        dependencies={"joist": "j0"},
        extra_remote_branches={JOIST: {"sim-a-1.2": "j1"}},
    )
    engine, _ = make_engine(git=git, state=_patched_state())

    engine.update_dependencies()

    assert git.merges == []
    assert (JOIST, "sim-a-1.2") not in git.pushed_branches


def test_filtered_branch_is_skipped() -> None:
    """Test that a modified-branch filter can exclude a branch."""
    git = sim_git(dependencies={"joist": "j0"}, extra_commits={JOIST: {"j1"}})
    engine, _ = make_engine(git=git, state=_patched_state())

    engine.update_dependencies(ReleaseBranchSelector.build(repos=["sim-b"]).for_modified_branches())

    assert git.commits_made == []
    assert engine.load_state().modified_branches[0].changed_dependencies == {"joist": "j1"}


def test_push_failure_saves_and_reports_context() -> None:
    """Test that a failed push raises with context after saving state."""
    git = sim_git(
        dependencies={"joist": "j0"},
        extra_commits={JOIST: {"j1"}},
        push_raises=ExecuteError("rejected", exit_code=1),
    )
    engine, store = make_engine(git=git, state=_patched_state())

    with pytest.raises(DependencyUpdateError, match="Failure updating dependencies for sim-a"):
        engine.update_dependencies()

    assert store.save_count >= 1
    modified_branch = engine.load_state().modified_branches[0]
    assert modified_branch.changed_dependencies == {"joist": "j1"}
    assert modified_branch.pending_messages == ["issue #12", "issue #13"]
