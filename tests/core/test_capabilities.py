"""Tests for capability detection and branch status reporting."""

from mrelease.core.capabilities import (
    ES6_COMMIT,
    INITIALIZE_GLOBALS_COMMIT,
    NEW_PHETIO_STANDALONE_COMMIT,
    PHETIO_HYDROGEN_COMMIT,
    PHETIO_STUDIO_COMMIT,
    PHETIO_STUDIO_INDEX_COMMIT,
    ReleaseBranchInspector,
)
from mrelease.core.manifest import MANIFEST_FILENAME
from tests.fakes.git import FakeGit
from tests.test_utils.builders import (
    manifest_text,
    package_text,
    release_branch,
    repo_dir,
    scenario_config,
    sim_git,
)

SIM_A = release_branch("sim-a", "1.2")
SIM_A_PHETIO = release_branch("sim-a", "1.2", brands=("phet", "phet-io"))
SIM_DIR = repo_dir("sim-a")
CHIPPER = repo_dir("chipper")
JOIST = repo_dir("joist")
PHETIO = repo_dir("phet-io")
WRAPPERS = repo_dir("phet-io-wrappers")


def _inspector(git: FakeGit) -> ReleaseBranchInspector:
    return ReleaseBranchInspector(git, scenario_config())


def _chipper_git(chipper_version: str, chipper_parents: dict[str, str] | None = None) -> FakeGit:
    return sim_git(
        dependencies={"chipper": "c1"},
        extra_files={(CHIPPER, "c1", "package.json"): package_text(chipper_version)},
        parents={CHIPPER: chipper_parents or {}},
    )


def test_dependencies_memoized_per_tip() -> None:
    """Test that the manifest is read once for an unchanged branch tip."""
    inspector = _inspector(sim_git(dependencies={"joist": "j1"}))

    first = inspector.dependencies(SIM_A)

    assert first["joist"]["sha"] == "j1"
    assert inspector.dependencies(SIM_A) is first


def test_dependencies_reread_when_tip_moves() -> None:
    """Test that a new branch tip invalidates the memoized manifest."""
    # Arrange
    git = sim_git(
        dependencies={"joist": "j1"},
        extra_files={
            (SIM_DIR, "sim-next", MANIFEST_FILENAME): manifest_text(
                {"sim-a": "sim-tip", "joist": "j2"}
            )
        },
    )
    inspector = _inspector(git)
    inspector.dependencies(SIM_A)

    # Act
    git.remote_branches[SIM_DIR]["1.2"] = "sim-next"

    # Assert
    assert inspector.dependencies(SIM_A)["joist"]["sha"] == "j2"


def test_sha_inclusion_follows_ancestry() -> None:
    """Test includes/missing SHA checks against the pinned dependency commit."""
    git = sim_git(dependencies={"joist": "j2"}, parents={JOIST: {"j2": "j1", "j1": "j0"}})
    inspector = _inspector(git)

    assert inspector.includes_sha(SIM_A, "joist", "j1")
    assert inspector.includes_sha(SIM_A, "joist", "j2")
    assert not inspector.is_missing_sha(SIM_A, "joist", "j0")
    assert inspector.is_missing_sha(SIM_A, "joist", "j-later")
    assert not inspector.includes_sha(SIM_A, "sun", "s1")
    assert not inspector.is_missing_sha(SIM_A, "sun", "s1")


def test_chipper2_detected_from_pinned_chipper_version() -> None:
    """Test that chipper above 0.0 switches to the brand-nested build layout."""
    modern = _inspector(_chipper_git("2.0.0"))
    legacy = _inspector(_chipper_git("0.0.0"))

    assert modern.uses_chipper2(SIM_A)
    assert modern.built_phet_path(SIM_A) == "build/phet/sim-a_en_phet.html"
    assert modern.built_phetio_path(SIM_A) == "build/phet-io/sim-a_all_phet-io.html"
    assert not legacy.uses_chipper2(SIM_A)
    assert legacy.built_phet_path(SIM_A) == "build/sim-a_en.html"


def test_no_chipper_dependency_is_legacy_layout() -> None:
    """Test that a branch without chipper never counts as chipper 2."""
    assert not _inspector(sim_git()).uses_chipper2(SIM_A)


def test_link_capabilities_for_studio_era_branch() -> None:
    """Test capabilities of a branch whose chipper includes the Studio commit."""
    # Arrange
    studio_sha = PHETIO_STUDIO_COMMIT[1]
    standalone_sha = NEW_PHETIO_STANDALONE_COMMIT[1]
    git = _chipper_git("0.0.0", {"c1": studio_sha, studio_sha: standalone_sha})
    inspector = _inspector(git)

    # Act
    phetio = inspector.link_capabilities(SIM_A_PHETIO)
    phet_only = inspector.link_capabilities(SIM_A)

    # Assert
    assert phetio.uses_phetio_studio
    assert phetio.phetio_standalone_query_parameter == "phetioStandalone"
    assert phetio.uses_relative_sim_path
    assert not phetio.uses_phetio_studio_index
    assert not phetio.uses_chipper2
    assert not phet_only.uses_phetio_studio


def test_old_branch_uses_legacy_standalone_flag() -> None:
    """Test that branches predating the rename use phet-io.standalone."""
    inspector = _inspector(_chipper_git("0.0.0"))

    assert inspector.phetio_standalone_query_parameter(SIM_A) == "phet-io.standalone"


def test_status_of_clean_branch_is_empty() -> None:
    """Test that a branch pinned to its previous commit reports nothing."""
    inspector = _inspector(sim_git())

    assert inspector.status_messages(SIM_A, lambda repo: {}) == []


def test_status_reports_potential_changes() -> None:
    """Test the notice when the pinned own SHA is not the tip's parent."""
    inspector = _inspector(sim_git(parents={SIM_DIR: {"sim-tip": "other"}}))

    assert inspector.status_messages(SIM_A, lambda repo: {}) == [
        "[INFO] Potential changes (dependency is not previous commit)",
        "[INFO] sim-tip other sim-prev",
    ]


def test_status_reports_release_candidate_version() -> None:
    """Test the QA reminder for a released branch sitting on an RC version."""
    git = sim_git(extra_files={(SIM_DIR, "sim-tip", "package.json"): package_text("1.2.0-rc.2")})

    messages = _inspector(git).status_messages(SIM_A, lambda repo: {})

    assert messages == ["[INFO] Release candidate version detected (see if there is a QA issue)"]


def test_status_reports_dependency_branch_mismatch() -> None:
    """Test the warning when a dependency branch disagrees with the manifest."""
    # Arrange
    inspector = _inspector(sim_git(dependencies={"joist": "j1", "sun": "s1"}))
    branch_maps = {"joist": {"sim-a-1.2": "j0"}, "sun": {"sim-a-1.2": "s1"}}

    # Act
    messages = inspector.status_messages(SIM_A, lambda repo: branch_maps.get(repo, {}))

    # Assert
    assert messages == ["[WARNING] Dependency mismatch for joist on branch sim-a-1.2"]


def test_status_reports_missing_own_dependency() -> None:
    """Test the warning when the manifest does not pin the sim itself."""
    git = sim_git(
        extra_files={(SIM_DIR, "sim-tip", MANIFEST_FILENAME): manifest_text({"joist": "j1"})}
    )

    messages = _inspector(git).status_messages(SIM_A, lambda repo: {})

    assert messages == ["[WARNING] Own repository not included in dependencies"]


def test_capability_report_follows_pinned_commits() -> None:
    """Test every capability query against commits pinned by the manifest."""
    # Arrange
    es6_sha = ES6_COMMIT[1]
    globals_sha = INITIALIZE_GLOBALS_COMMIT[1]
    hydrogen_sha = PHETIO_HYDROGEN_COMMIT[1]
    index_sha = PHETIO_STUDIO_INDEX_COMMIT[1]
    git = sim_git(
        dependencies={"chipper": "c1", "phet-io": "io1", "phet-io-wrappers": "w1"},
        extra_files={(CHIPPER, "c1", "package.json"): package_text("0.0.0")},
        parents={
            CHIPPER: {"c1": globals_sha, globals_sha: es6_sha},
            PHETIO: {"io1": "io0"},
            WRAPPERS: {"w1": hydrogen_sha, hydrogen_sha: index_sha},
        },
    )
    inspector = _inspector(git)

    # Act
    report = inspector.capability_report(SIM_A_PHETIO)

    # Assert
    assert report == {
        "uses_es6": True,
        "uses_initialize_globals_query_parameters": True,
        "uses_chipper2": False,
        "phetio_standalone_query_parameter": "phet-io.standalone",
        "uses_relative_sim_path": False,
        "uses_phetio_studio": False,
        "uses_phetio_studio_index": True,
        "is_phetio_hydrogen": True,
        "built_phet_path": "build/sim-a_en.html",
    }
    assert not inspector.is_phetio_hydrogen(SIM_A)


def test_capability_defaults_without_dependencies() -> None:
    """Test the answers for a branch that pins none of the capability repos."""
    inspector = _inspector(sim_git())

    assert inspector.capability_report(SIM_A_PHETIO) == {
        "uses_es6": False,
        "uses_initialize_globals_query_parameters": False,
        "uses_chipper2": False,
        "phetio_standalone_query_parameter": "phet-io.standalone",
        "uses_relative_sim_path": True,
        "uses_phetio_studio": False,
        "uses_phetio_studio_index": False,
        "is_phetio_hydrogen": False,
        "built_phet_path": "build/sim-a_en.html",
    }
