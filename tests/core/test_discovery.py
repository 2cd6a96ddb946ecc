"""Tests for release-branch discovery and its cache."""

import pytest

from mrelease.core.discovery import (
    discover_release_branches,
    discover_unreleased_branches,
    get_active_sims,
)
from mrelease.core.errors import DiscoveryError, MetadataError
from mrelease.core.git.abc import Git
from mrelease.core.metadata.types import PhetioSimulation, PublishedSimulation
from mrelease.core.release_branch import ReleaseBranch
from tests.fakes.git import FakeGit
from tests.fakes.metadata import FakeMetadataService
from tests.test_utils.builders import (
    TOOLING_DIR,
    make_engine,
    package_text,
    repo_dir,
    scenario_config,
)

SIM_A = repo_dir("sim-a")
SIM_B = repo_dir("sim-b")


def _published() -> list[PublishedSimulation]:
    return [
        PublishedSimulation("sim-a", 1, 2, 1),
        PublishedSimulation("sim-b", 2, 0, 0),
        PublishedSimulation("forces-and-motion-basics", 2, 3, 0),
    ]


def _phetio() -> list[PhetioSimulation]:
    return [
        PhetioSimulation("sim-a", 1, 2, 0, "", active=True, latest=True),
        PhetioSimulation("sim-a", 1, 1, 3, "", active=True, latest=False),
        PhetioSimulation("sim-c", 1, 0, 0, "", active=False, latest=True),
        PhetioSimulation("forces-and-motion-basics", 2, 3, 0, "phetio", active=True, latest=True),
    ]


def _discovery_git(sim_a_package: str | None = None) -> FakeGit:
    return FakeGit(
        remote_branches={
            SIM_A: {"main": "a-main", "1.1": "a11", "1.2": "a12", "1.3": "a13", "1.4": "a14"},
            SIM_B: {"main": "b-main", "2.0": "b20", "2.1": "b21"},
        },
        files={
            (SIM_A, "a13", "package.json"): package_text(
                "1.3.0-rc.1", supportedBrands=["phet", "phet-io"]
            ),
            (SIM_A, "a14", "package.json"): package_text(
                "1.4.0-dev.0", ignoreForAutomatedMaintenanceReleases=True
            ),
        },
        working_files={
            TOOLING_DIR / "data/active-sims": "sim-a\nsim-b\n\n",
            SIM_A / "package.json": sim_a_package or package_text("1.5.0-dev.0"),
            SIM_B / "package.json": package_text(
                "2.2.0-dev.0", ignoreForAutomatedMaintenanceReleases=True
            ),
        },
    )


def test_active_sims_skip_blank_lines() -> None:
    """Test that the active-sims list is read from the tooling checkout."""
    git: Git = _discovery_git()

    assert get_active_sims(git, scenario_config()) == ["sim-a", "sim-b"]


def test_discovery_combines_every_source() -> None:
    """Test published, phet-io and unreleased branches merged into one sorted list."""
    # Arrange
    metadata = FakeMetadataService(published=_published(), phetio=_phetio())

    # Act
    branches = discover_release_branches(_discovery_git(), metadata, scenario_config())

    # Assert
    assert branches == [
        ReleaseBranch("forces-and-motion-basics", "2.3", ("phet",), True),
        ReleaseBranch("sim-a", "1.2", ("phet", "phet-io"), True),
        ReleaseBranch("sim-a", "1.3", ("phet", "phet-io"), False),
        ReleaseBranch("sim-b", "2.0", ("phet",), True),
    ]


def test_discovery_without_production_version_keeps_all_branches() -> None:
    """Test that every numbered branch is unreleased when nothing is published."""
    git = FakeGit(
        remote_branches={SIM_A: {"main": "a-main", "1.0": "a10", "feature": "f"}},
        files={(SIM_A, "a10", "package.json"): package_text("1.0.0-dev.3")},
        working_files={
            TOOLING_DIR / "data/active-sims": "sim-a",
            SIM_A / "package.json": package_text("1.1.0-dev.0"),
        },
    )

    branches = discover_release_branches(git, FakeMetadataService(), scenario_config())

    assert branches == [ReleaseBranch("sim-a", "1.0", ("phet",), False)]


def test_unreleased_branches_compare_against_highest_published_version() -> None:
    """Test that only branches newer than the highest published version are unreleased."""
    # Arrange
    git = FakeGit(
        remote_branches={SIM_A: {"main": "a-main", "1.2": "a12", "1.4": "a14"}},
        files={
            (SIM_A, "a12", "package.json"): package_text("1.2.0-rc.1"),
            (SIM_A, "a14", "package.json"): package_text("1.4.0-dev.0"),
        },
        working_files={
            TOOLING_DIR / "data/active-sims": "sim-a",
            SIM_A / "package.json": package_text("1.5.0-dev.0"),
        },
    )
    published = [PublishedSimulation("sim-a", 1, 3, 0), PublishedSimulation("sim-a", 1, 1, 2)]

    # Act
    branches = discover_unreleased_branches(git, scenario_config(), published, released=[])

    # Assert
    assert branches == [ReleaseBranch("sim-a", "1.4", ("phet",), False)]


def test_discovery_rejects_invalid_package_json() -> None:
    """Test that unreadable package metadata aborts discovery."""
    metadata = FakeMetadataService(published=_published())

    with pytest.raises(DiscoveryError, match="Invalid package.json in sim-a"):
        discover_release_branches(_discovery_git("{not json"), metadata, scenario_config())


def test_engine_caches_discovered_branches() -> None:
    """Test that discovery runs once and is saved until a forced refresh."""
    # Arrange
    metadata = FakeMetadataService(published=_published(), phetio=_phetio())
    engine, store = make_engine(git=_discovery_git(), metadata=metadata)

    # Act
    first = engine.load_all_maintenance_branches()
    queries_after_first = metadata.query_count
    second = engine.get_maintenance_branches(include_unreleased=False)
    engine.load_all_maintenance_branches(force_refresh=True)

    # Assert
    assert len(first) == 4
    assert [branch.key for branch in second] == [
        ("forces-and-motion-basics", "2.3"),
        ("sim-a", "1.2"),
        ("sim-b", "2.0"),
    ]
    assert queries_after_first == 2
    assert metadata.query_count == 4
    assert store.save_count == 2
    assert engine.load_state().all_release_branches == first


def test_discovery_failure_saves_nothing() -> None:
    """Test that a metadata failure propagates without touching the cache."""
    metadata = FakeMetadataService(raises=MetadataError("service unavailable"))
    engine, store = make_engine(git=_discovery_git(), metadata=metadata)

    with pytest.raises(MetadataError, match="service unavailable"):
        engine.load_all_maintenance_branches()

    assert store.save_count == 0
