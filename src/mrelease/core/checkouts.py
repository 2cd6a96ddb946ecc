"""Standalone release-branch checkouts and the bulk update/build pipeline.

Each release branch gets its own directory under the release-branches root
holding the simulation repo and every dependency pinned by its manifest, so
workers never share a working copy. Git operations against the primary
repositories (used by filters) are not safe to run in parallel; filters
therefore run sequentially before any worker starts.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from mrelease.core.build.abc import BuildRunner, build_arguments
from mrelease.core.capabilities import ReleaseBranchInspector
from mrelease.core.config import MaintenanceConfig
from mrelease.core.git.abc import Git
from mrelease.core.manifest import MANIFEST_FILENAME, dependency_repos, parse_manifest, pinned_sha
from mrelease.core.release_branch import ReleaseBranch

logger = logging.getLogger(__name__)

# Always present in a checkout, but tracked by branch rather than pinned.
UNPINNED_DEPENDENCIES = ("babel",)
# Repositories that need their node packages installed to build.
NPM_REPOS = frozenset({"chipper", "perennial-alias"})
TOOLING_REPO = "perennial"


@dataclass(frozen=True)
class CheckoutOptions:
    """Options for the bulk checkout pipeline."""

    concurrency: int = 5
    build: bool = True
    transpile: bool = True
    lint: bool = True


@dataclass
class CheckoutReport:
    """Outcome of a bulk checkout run."""

    finished: list[ReleaseBranch] = field(default_factory=list)
    update_failures: list[tuple[ReleaseBranch, str]] = field(default_factory=list)
    build_failures: list[tuple[ReleaseBranch, str]] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.update_failures) + len(self.build_failures)


class ReleaseBranchCheckouts:
    """Creates, updates, builds and checks standalone release-branch checkouts."""

    def __init__(
        self,
        git: Git,
        builder: BuildRunner,
        inspector: ReleaseBranchInspector,
        config: MaintenanceConfig,
    ) -> None:
        self._git = git
        self._builder = builder
        self._inspector = inspector
        self._config = config

    def checkout_directory(self, release_branch: ReleaseBranch) -> Path:
        return release_branch.checkout_directory(self._config.release_branches_dir)

    def repo_directory(self, release_branch: ReleaseBranch) -> Path:
        return self.checkout_directory(release_branch) / release_branch.repo

    def update_checkout(self, release_branch: ReleaseBranch) -> None:
        """Bring the standalone checkout to the branch tip and its pinned dependencies."""
        logger.info("updating checkout for %s", release_branch)
        checkout_dir = self.checkout_directory(release_branch)
        repo_dir = self.repo_directory(release_branch)

        self._git.clone_or_fetch(self._config.remote_url(release_branch.repo), repo_dir)
        self._git.checkout(repo_dir, release_branch.branch)
        self._git.pull(repo_dir)

        manifest = parse_manifest(self._git.read_working_file(repo_dir, MANIFEST_FILENAME))
        dependencies = [repo for repo in dependency_repos(manifest) if repo != release_branch.repo]
        for repo in UNPINNED_DEPENDENCIES:
            if repo not in dependencies:
                dependencies.append(repo)

        for repo in dependencies:
            dependency_dir = checkout_dir / repo
            self._git.clone_or_fetch(self._config.remote_url(repo), dependency_dir)
            sha = pinned_sha(manifest, repo)
            if repo in UNPINNED_DEPENDENCIES or sha is None:
                self._git.checkout(dependency_dir, self._config.primary_branch)
                self._git.pull(dependency_dir)
            else:
                self._git.checkout(dependency_dir, sha)

        for repo in [*sorted(NPM_REPOS.intersection(dependencies)), release_branch.repo]:
            logger.info("npm %s in %s", repo, checkout_dir)
            self._builder.install(checkout_dir / repo).raise_for_failure(f"npm update of {repo}")

        tooling_dir = checkout_dir / TOOLING_REPO
        self._git.clone_or_fetch(self._config.remote_url(TOOLING_REPO), tooling_dir)
        self._git.checkout(tooling_dir, self._config.primary_branch)
        self._git.pull(tooling_dir)

    def transpile(self, release_branch: ReleaseBranch) -> None:
        """Best-effort transpile of the checkout; older build tools lack the task."""
        logger.info("transpiling %s", self.checkout_directory(release_branch))
        result = self._builder.build(
            self.repo_directory(release_branch), ["output-js-project", "--silent"]
        )
        if not result.succeeded:
            logger.debug("transpile of %s exited with %d", release_branch, result.exit_code)

    def build(self, release_branch: ReleaseBranch, *, lint: bool = False) -> None:
        """Build every brand of the checkout.

        Raises:
            BuildError: If the build tool exits unsuccessfully
        """
        args = build_arguments(
            release_branch.brands,
            uses_chipper2=self._inspector.uses_chipper2(release_branch),
            lint=lint,
            locales=self._config.locales,
        )
        self._builder.build(self.repo_directory(release_branch), args).raise_for_failure(
            f"Build of {release_branch}"
        )

    def read_built_phet_html(self, release_branch: ReleaseBranch) -> str:
        return self._git.read_working_file(
            self.repo_directory(release_branch), self._inspector.built_phet_path(release_branch)
        )

    def check_unbuilt(self, release_branch: ReleaseBranch) -> str | None:
        """Problem with the unbuilt English entry point, or None when it looks usable."""
        return self._check_file(release_branch, f"{release_branch.repo}_en.html")

    def check_built(self, release_branch: ReleaseBranch) -> str | None:
        """Problem with the built phet-brand HTML, or None when it looks usable."""
        return self._check_file(release_branch, self._inspector.built_phet_path(release_branch))

    def _check_file(self, release_branch: ReleaseBranch, path: str) -> str | None:
        repo_dir = self.repo_directory(release_branch)
        if not self._git.path_exists(repo_dir / path):
            return f"[ERROR] Missing {repo_dir / path}"
        if not self._git.read_working_file(repo_dir, path).strip():
            return f"[ERROR] Empty {repo_dir / path}"
        return None

    def _process(self, release_branch: ReleaseBranch, options: CheckoutOptions) -> tuple[str, str]:
        logger.info("Beginning: %s", release_branch)
        try:
            self.update_checkout(release_branch)
            if options.transpile:
                self.transpile(release_branch)
        except Exception as e:
            logger.error("failed to update %s: %s", release_branch, e)
            return ("update", str(e))

        if options.build:
            try:
                self.build(release_branch, lint=options.lint)
            except Exception as e:
                logger.error("failed to build %s: %s", release_branch, e)
                return ("build", str(e))
        logger.info("Finished: %s", release_branch)
        return ("finished", "")

    def update_all(
        self, release_branches: Sequence[ReleaseBranch], options: CheckoutOptions
    ) -> CheckoutReport:
        """Update (and optionally transpile and build) every branch in a bounded pool.

        A failure for one branch is logged and recorded; it never stops the others.
        """
        logger.info(
            "Updating %d checkouts (running in parallel with %d threads)",
            len(release_branches),
            options.concurrency,
        )
        report = CheckoutReport()
        with ThreadPoolExecutor(max_workers=options.concurrency) as executor:
            futures = [
                (release_branch, executor.submit(self._process, release_branch, options))
                for release_branch in release_branches
            ]
            for release_branch, future in futures:
                outcome, detail = future.result()
                if outcome == "update":
                    report.update_failures.append((release_branch, detail))
                elif outcome == "build":
                    report.build_failures.append((release_branch, detail))
                else:
                    report.finished.append(release_branch)
        logger.info("Done")
        return report
