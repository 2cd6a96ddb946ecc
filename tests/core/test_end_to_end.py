"""A full maintenance cycle against in-memory gateways."""

from mrelease.core.state import MaintenanceState
from tests.fakes.deploy import FakeDeployer
from tests.test_utils.builders import make_engine, release_branch, repo_dir, sim_git

SIM_A = release_branch("sim-a", "1.2")
SIM_DIR = repo_dir("sim-a")


def test_patch_applied_from_empty_state() -> None:
    """Test create patch, mark needed, and apply a single clean SHA."""
    # Arrange
    git = sim_git(extra_commits={SIM_DIR: {"fix-sha"}}, cherry_pick_results={})
    engine, _ = make_engine(git=git, state=MaintenanceState(all_release_branches=[SIM_A]))

    # Act
    engine.create_patch("sim-a", "issue #12", "fix-1")
    engine.add_needed_patch("sim-a", "1.2", "fix-1")
    engine.add_patch_sha("fix-1", "fix-sha")
    success = engine.apply_patches()

    # Assert
    assert success
    modified_branch = engine.load_state().modified_branches[0]
    new_commit = modified_branch.changed_dependencies["sim-a"]
    assert modified_branch.needed_patches == []
    assert modified_branch.pending_messages == ["issue #12"]
    assert git.is_ancestor(SIM_DIR, "sim-prev", new_commit)
    assert new_commit != "sim-prev"


def test_full_cycle_through_production() -> None:
    """Test patch, dependency update, RC and production for one branch."""
    # Arrange
    joist = repo_dir("joist")
    git = sim_git(
        dependencies={"joist": "j0"},
        extra_commits={joist: {"fix-sha"}},
        cherry_pick_results={(joist, "fix-sha"): "j1"},
    )
    deployer = FakeDeployer()
    engine, _ = make_engine(
        git=git, deployer=deployer, state=MaintenanceState(all_release_branches=[SIM_A])
    )
    engine.create_patch("joist", "issue #12")
    engine.add_patch_sha("joist", "fix-sha")
    engine.add_all_needed_patches("joist")

    # Act
    assert engine.apply_patches()
    engine.update_dependencies()
    engine.deploy_release_candidates()
    rc_links = engine.list_links()
    engine.deploy_production()

    # Assert
    assert any("phet-dev.colorado.edu/html/sim-a/1.2.0-rc.1" in line for line in rc_links)
    assert [message for _, _, message in deployer.production_calls] == ["issue #12"]
    modified_branch = engine.load_state().modified_branches[0]
    assert modified_branch.is_unused
    assert modified_branch.pushed_messages == []
    assert str(modified_branch.deployed_version) == "1.2.0"
    assert git.get_remote_branch_map(joist) == {"sim-a-1.2": "j1"}
