"""Capability detection for release branches.

Each query resolves the branch tip on origin, reads its dependency manifest
with a non-destructive content read, and tests whether a known
capability-introducing commit is an ancestor of the pinned dependency
commit. Manifests are memoized per resolved tip SHA, so a branch that moves
is re-read while repeated queries against the same tip are free.
"""

import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from mrelease.core.config import MaintenanceConfig
from mrelease.core.errors import ExecuteError
from mrelease.core.git.abc import Git
from mrelease.core.manifest import (
    COMMENT_KEY,
    MANIFEST_FILENAME,
    Manifest,
    parse_manifest,
    pinned_sha,
)
from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.version import SimVersion

logger = logging.getLogger(__name__)

ES6_COMMIT = ("chipper", "80b4ad62cd8f2057b844f18d3c00cf5c0c89ed8d")
INITIALIZE_GLOBALS_COMMIT = ("chipper", "e454f88ff51d1e3fabdb3a076d7407a2a9e9133c")
NEW_PHETIO_STANDALONE_COMMIT = ("chipper", "4814d6966c54f250b1c0f3909b71f2b9cfcc7665")
RELATIVE_SIM_PATH_COMMIT = ("phet-io", "e3fc26079358d86074358a6db3ebaf1af9725632")
PHETIO_STUDIO_COMMIT = ("chipper", "7375f6a57b5874b6bbf97a54c9a908f19f88d38f")
PHETIO_STUDIO_INDEX_COMMIT = ("phet-io-wrappers", "7ec1a04a70fb9707b381b8bcab3ad070815ef7fe")
PHETIO_HYDROGEN_COMMIT = ("phet-io-wrappers", "7e8d97020c6451f68e898ae83aa43593b555137f")

# Not a real dependency; never checked for release-branch mismatches.
_STATUS_IGNORED_DEPENDENCIES = frozenset({COMMENT_KEY, "phet-io-wrapper-sonification"})


@dataclass(frozen=True)
class LinkCapabilities:
    """Capabilities that shape deployed test links for a branch."""

    uses_chipper2: bool
    phetio_standalone_query_parameter: str
    uses_relative_sim_path: bool
    uses_phetio_studio: bool
    uses_phetio_studio_index: bool


class ReleaseBranchInspector:
    """Answers questions about a release branch without checking it out."""

    def __init__(self, git: Git, config: MaintenanceConfig) -> None:
        self._git = git
        self._config = config
        self._manifests: dict[tuple[str, str], Manifest] = {}
        self._lock = threading.Lock()

    def tip_sha(self, release_branch: ReleaseBranch) -> str:
        repo_dir = self._config.repo_dir(release_branch.repo)
        return self._git.get_revision(repo_dir, f"origin/{release_branch.branch}")

    def dependencies(self, release_branch: ReleaseBranch) -> Manifest:
        """The dependency manifest at the branch tip."""
        sha = self.tip_sha(release_branch)
        key = (release_branch.repo, sha)
        with self._lock:
            cached = self._manifests.get(key)
        if cached is not None:
            return cached

        repo_dir = self._config.repo_dir(release_branch.repo)
        manifest = parse_manifest(self._git.read_file_at_revision(repo_dir, sha, MANIFEST_FILENAME))
        with self._lock:
            self._manifests[key] = manifest
        return manifest

    def read_file_at_tip(self, release_branch: ReleaseBranch, path: str) -> str | None:
        """Contents of `path` at the branch tip, or None if it does not exist there."""
        repo_dir = self._config.repo_dir(release_branch.repo)
        try:
            return self._git.read_file_at_revision(repo_dir, self.tip_sha(release_branch), path)
        except ExecuteError:
            logger.debug("%s not present at tip of %s", path, release_branch)
            return None

    def branch_version(self, release_branch: ReleaseBranch) -> SimVersion:
        """The version in the branch tip's package.json."""
        package = json.loads(self.read_file_at_tip(release_branch, "package.json") or "{}")
        return SimVersion.parse(package["version"])

    def includes_sha(self, release_branch: ReleaseBranch, repo: str, sha: str) -> bool:
        """Whether the branch's pinned `repo` contains `sha`.

        False when the branch does not depend on `repo`.
        """
        current = pinned_sha(self.dependencies(release_branch), repo)
        if current is None:
            return False
        return sha == current or self._git.is_ancestor(self._config.repo_dir(repo), sha, current)

    def is_missing_sha(self, release_branch: ReleaseBranch, repo: str, sha: str) -> bool:
        """Whether the branch's pinned `repo` lacks `sha`.

        False when the branch does not depend on `repo`.
        """
        current = pinned_sha(self.dependencies(release_branch), repo)
        if current is None:
            return False
        return sha != current and not self._git.is_ancestor(
            self._config.repo_dir(repo), sha, current
        )

    def _has_capability(
        self, release_branch: ReleaseBranch, commit: tuple[str, str], *, if_absent: bool
    ) -> bool:
        repo, capability_sha = commit
        current = pinned_sha(self.dependencies(release_branch), repo)
        if current is None:
            return if_absent
        return self._git.is_ancestor(self._config.repo_dir(repo), capability_sha, current)

    def uses_es6(self, release_branch: ReleaseBranch) -> bool:
        return self._has_capability(release_branch, ES6_COMMIT, if_absent=False)

    def uses_initialize_globals_query_parameters(self, release_branch: ReleaseBranch) -> bool:
        """Whether query parameters come from the initialize-globals schema."""
        return self._has_capability(release_branch, INITIALIZE_GLOBALS_COMMIT, if_absent=False)

    def uses_old_phetio_standalone(self, release_branch: ReleaseBranch) -> bool:
        """Whether 'phet-io.standalone' (rather than 'phetioStandalone') is the flag name."""
        return not self._has_capability(
            release_branch, NEW_PHETIO_STANDALONE_COMMIT, if_absent=False
        )

    def uses_relative_sim_path(self, release_branch: ReleaseBranch) -> bool:
        """Whether wrappers take relativeSimPath instead of launchLocalVersion."""
        return self._has_capability(release_branch, RELATIVE_SIM_PATH_COMMIT, if_absent=True)

    def uses_phetio_studio(self, release_branch: ReleaseBranch) -> bool:
        """Whether Studio replaces the deprecated instance-proxies wrapper."""
        return self._has_capability(release_branch, PHETIO_STUDIO_COMMIT, if_absent=False)

    def uses_phetio_studio_index(self, release_branch: ReleaseBranch) -> bool:
        """Whether Studio is served from its top-level index.html."""
        return self._has_capability(release_branch, PHETIO_STUDIO_INDEX_COMMIT, if_absent=False)

    def is_phetio_hydrogen(self, release_branch: ReleaseBranch) -> bool:
        repo, sha = PHETIO_HYDROGEN_COMMIT
        return "phet-io" in release_branch.brands and self.includes_sha(release_branch, repo, sha)

    def uses_chipper2(self, release_branch: ReleaseBranch) -> bool:
        """Whether build output is nested by brand (chipper version above 0.0)."""
        chipper_sha = pinned_sha(self.dependencies(release_branch), "chipper")
        if chipper_sha is None:
            return False
        package = json.loads(
            self._git.read_file_at_revision(
                self._config.repo_dir("chipper"), chipper_sha, "package.json"
            )
        )
        major, minor = (int(part) for part in package["version"].split(".")[:2])
        return major != 0 or minor != 0

    def phetio_standalone_query_parameter(self, release_branch: ReleaseBranch) -> str:
        if self.uses_old_phetio_standalone(release_branch):
            return "phet-io.standalone"
        return "phetioStandalone"

    def built_phet_path(self, release_branch: ReleaseBranch) -> str:
        """Path (relative to the repo) of the built phet-brand English HTML."""
        if self.uses_chipper2(release_branch):
            return f"build/phet/{release_branch.repo}_en_phet.html"
        return f"build/{release_branch.repo}_en.html"

    def built_phetio_path(self, release_branch: ReleaseBranch) -> str:
        """Path (relative to the repo) of the built phet-io-brand HTML."""
        if self.uses_chipper2(release_branch):
            return f"build/phet-io/{release_branch.repo}_all_phet-io.html"
        return f"build/{release_branch.repo}_en-phetio.html"

    def link_capabilities(self, release_branch: ReleaseBranch) -> LinkCapabilities:
        return LinkCapabilities(
            uses_chipper2=self.uses_chipper2(release_branch),
            phetio_standalone_query_parameter=self.phetio_standalone_query_parameter(
                release_branch
            ),
            uses_relative_sim_path=self.uses_relative_sim_path(release_branch),
            uses_phetio_studio=(
                "phet-io" in release_branch.brands and self.uses_phetio_studio(release_branch)
            ),
            uses_phetio_studio_index=self.uses_phetio_studio_index(release_branch),
        )

    def capability_report(self, release_branch: ReleaseBranch) -> dict[str, bool | str]:
        """Every detected capability of the branch, keyed by query name."""
        return {
            "uses_es6": self.uses_es6(release_branch),
            "uses_initialize_globals_query_parameters": (
                self.uses_initialize_globals_query_parameters(release_branch)
            ),
            "uses_chipper2": self.uses_chipper2(release_branch),
            "phetio_standalone_query_parameter": self.phetio_standalone_query_parameter(
                release_branch
            ),
            "uses_relative_sim_path": self.uses_relative_sim_path(release_branch),
            "uses_phetio_studio": self.uses_phetio_studio(release_branch),
            "uses_phetio_studio_index": self.uses_phetio_studio_index(release_branch),
            "is_phetio_hydrogen": self.is_phetio_hydrogen(release_branch),
            "built_phet_path": self.built_phet_path(release_branch),
        }

    def status_messages(
        self,
        release_branch: ReleaseBranch,
        branch_map_for: Callable[[str], dict[str, str]],
    ) -> list[str]:
        """Report anything out of the ordinary about a release branch.

        Args:
            release_branch: Branch to inspect
            branch_map_for: Returns the remote branch -> SHA map of a dependency repo
        """
        results: list[str] = []
        repo_dir = self._config.repo_dir(release_branch.repo)
        dependencies = self.dependencies(release_branch)

        own_sha = pinned_sha(dependencies, release_branch.repo)
        if own_sha is None:
            results.append("[WARNING] Own repository not included in dependencies")
        else:
            try:
                current = self.tip_sha(release_branch)
                previous = self._git.get_revision(repo_dir, f"{current}^")
                if own_sha != previous:
                    results.append("[INFO] Potential changes (dependency is not previous commit)")
                    results.append(f"[INFO] {current} {previous} {own_sha}")
                version = self.branch_version(release_branch)
                if version.is_release_candidate and release_branch.is_released:
                    results.append(
                        "[INFO] Release candidate version detected (see if there is a QA issue)"
                    )
            except (ExecuteError, KeyError, ValueError) as e:
                results.append(f"[ERROR] Failure to check current/previous commit: {e}")

        dependency_branch = f"{release_branch.repo}-{release_branch.branch}"
        for dependency, entry in dependencies.items():
            if dependency in _STATUS_IGNORED_DEPENDENCIES or dependency == release_branch.repo:
                continue
            branch_map = branch_map_for(dependency)
            mismatched = entry.get("sha") != branch_map.get(dependency_branch)
            if dependency_branch in branch_map and mismatched:
                results.append(
                    f"[WARNING] Dependency mismatch for {dependency} on branch {dependency_branch}"
                )
        return results
