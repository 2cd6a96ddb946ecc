"""Maintenance release orchestration.

Every operation loads the state file, performs its work, and saves the whole
state again after each durable decision (a patch applied, a dependency
branch pushed, a manifest committed, a version deployed). A crash therefore
leaves the state file describing exactly what has happened in the
repositories, and re-running the same operation resumes from there.
"""

import logging
from collections.abc import Callable

from mrelease.core.capabilities import ReleaseBranchInspector
from mrelease.core.checkouts import CheckoutOptions, CheckoutReport, ReleaseBranchCheckouts
from mrelease.core.context import MaintenanceContext
from mrelease.core.discovery import discover_release_branches
from mrelease.core.errors import (
    CommitNotFoundError,
    DependencyUpdateError,
    DeploymentError,
    MaintenanceError,
    PatchApplicationError,
    ValidationError,
)
from mrelease.core.manifest import (
    COMMENT_KEY,
    MANIFEST_FILENAME,
    Manifest,
    dump_manifest,
    parse_manifest,
    pinned_sha,
    set_pinned_sha,
)
from mrelease.core.modified_branch import UNRELEASED_ISSUE_LABEL, ModifiedBranch
from mrelease.core.patch import Patch
from mrelease.core.predicates import (
    ContentFilter,
    ModifiedBranchFilter,
    ReleaseBranchFilter,
    accept_all,
)
from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.state import MaintenanceState
from mrelease.core.version import SimVersion

logger = logging.getLogger(__name__)


class MaintenanceEngine:
    """Operations of a maintenance release, backed by the state store in `ctx`."""

    def __init__(self, ctx: MaintenanceContext) -> None:
        self._ctx = ctx
        self._config = ctx.config
        self._git = ctx.git
        self.inspector = ReleaseBranchInspector(ctx.git, ctx.config)
        self.checkouts = ReleaseBranchCheckouts(ctx.git, ctx.builder, self.inspector, ctx.config)

    # State

    def load_state(self) -> MaintenanceState:
        return self._ctx.state_store.load()

    def _save(self, state: MaintenanceState) -> None:
        self._ctx.state_store.save(state)

    def reset(self, keep_cached_release_branches: bool = False) -> None:
        """Forget all patches and modified branches.

        Only do this before starting a new maintenance release. The discovery
        cache is dropped too unless `keep_cached_release_branches` is set.
        """
        logger.info(
            "Make sure to check on the active PhET-iO Deploy Status to ensure that the right "
            "PhET-iO sims are included in this maintenance release."
        )
        release_branches: list[ReleaseBranch] = []
        if keep_cached_release_branches:
            release_branches = self.load_state().all_release_branches
        self._save(MaintenanceState(all_release_branches=release_branches))

    # Discovery

    def load_all_maintenance_branches(
        self, force_refresh: bool = False, state: MaintenanceState | None = None
    ) -> list[ReleaseBranch]:
        """The cached release branches, discovering (and saving) them on a miss."""
        if state is None:
            state = self.load_state()
        if state.all_release_branches and not force_refresh:
            return state.all_release_branches

        state.all_release_branches = discover_release_branches(
            self._git, self._ctx.metadata, self._config
        )
        self._save(state)
        return state.all_release_branches

    def get_maintenance_branches(
        self,
        release_branch_filter: ReleaseBranchFilter | None = None,
        include_unreleased: bool = True,
        force_refresh: bool = False,
        state: MaintenanceState | None = None,
    ) -> list[ReleaseBranch]:
        release_branches = self.load_all_maintenance_branches(force_refresh, state)
        return [
            release_branch
            for release_branch in release_branches
            if (include_unreleased or release_branch.is_released)
            and (release_branch_filter is None or release_branch_filter(release_branch))
        ]

    # Patches

    def _find_patch(self, state: MaintenanceState, name: str) -> Patch:
        patch = state.find_patch(name)
        if patch is None:
            raise ValidationError(f"Patch not found for {name}")
        return patch

    def create_patch(self, repo: str, message: str, patch_name: str | None = None) -> Patch:
        """Create a patch for `repo`; its name defaults to the repo name."""
        state = self.load_state()
        name = patch_name or repo
        if state.find_patch(name) is not None:
            raise ValidationError(
                "Multiple patches with the same name are not concurrently supported"
            )
        patch = Patch(repo=repo, name=name, message=message)
        state.patches.append(patch)
        self._save(state)
        logger.info("Created patch for %s with message: %s", repo, message)
        return patch

    def remove_patch(self, patch_name: str) -> None:
        state = self.load_state()
        patch = self._find_patch(state, patch_name)
        if any(branch.needs_patch(patch) for branch in state.modified_branches):
            raise ValidationError("Patch is marked as needed by at least one branch")
        state.patches.remove(patch)
        self._save(state)
        logger.info("Removed patch for %s", patch_name)

    def add_patch_sha(self, patch_name: str, sha: str | None = None) -> str:
        """Add a candidate commit to a patch, defaulting to HEAD of the patch repo."""
        state = self.load_state()
        patch = self._find_patch(state, patch_name)
        if not sha:
            sha = self._git.get_revision(self._config.repo_dir(patch.repo), "HEAD")
            logger.info("SHA not provided, detecting SHA: %s", sha)
        patch.shas.append(sha)
        self._save(state)
        logger.info("Added SHA %s to patch %s", sha, patch_name)
        return sha

    def remove_patch_sha(self, patch_name: str, sha: str) -> None:
        state = self.load_state()
        patch = self._find_patch(state, patch_name)
        if sha not in patch.shas:
            raise ValidationError("SHA not found")
        patch.shas.remove(sha)
        self._save(state)
        logger.info("Removed SHA %s from patch %s", sha, patch_name)

    def remove_all_patch_shas(self, patch_name: str) -> None:
        state = self.load_state()
        patch = self._find_patch(state, patch_name)
        for sha in patch.shas:
            logger.info("Removing SHA %s from patch %s", sha, patch_name)
        patch.shas = []
        self._save(state)

    # Needed patches

    def _ensure_modified_branch(
        self,
        state: MaintenanceState,
        repo: str,
        branch: str,
        release_branches: list[ReleaseBranch] | None = None,
    ) -> ModifiedBranch:
        modified_branch = state.find_modified_branch(repo, branch)
        if modified_branch is not None:
            return modified_branch

        if release_branches is None:
            release_branches = self.get_maintenance_branches(
                lambda release_branch: release_branch.repo == repo, state=state
            )
        for release_branch in release_branches:
            if release_branch.repo == repo and release_branch.branch == branch:
                modified_branch = ModifiedBranch(release_branch)
                state.modified_branches.append(modified_branch)
                return modified_branch
        raise ValidationError(f"Could not find a release branch for repo={repo} branch={branch}")

    def _require_modified_branch(
        self, state: MaintenanceState, repo: str, branch: str
    ) -> ModifiedBranch:
        modified_branch = state.find_modified_branch(repo, branch)
        if modified_branch is None:
            raise ValidationError(f"Could not find a tracked modified branch for {repo} {branch}")
        return modified_branch

    def _remove_if_unused(self, state: MaintenanceState, modified_branch: ModifiedBranch) -> None:
        if modified_branch.is_unused:
            state.modified_branches.remove(modified_branch)

    def add_needed_patch(self, repo: str, branch: str, patch_name: str) -> None:
        """Mark `patch_name` as needed for one release branch."""
        state = self.load_state()
        patch = self._find_patch(state, patch_name)
        modified_branch = self._ensure_modified_branch(state, repo, branch)
        if not modified_branch.needs_patch(patch):
            modified_branch.needed_patches.append(patch)
        self._save(state)
        logger.info("Added patch %s as needed for %s %s", patch_name, repo, branch)

    def add_needed_patch_release_branch(
        self, release_branch: ReleaseBranch, patch_name: str
    ) -> None:
        """Mark a patch as needed for a release branch that may not be in the discovery cache."""
        state = self.load_state()
        patch = self._find_patch(state, patch_name)
        modified_branch = self._ensure_modified_branch(
            state, release_branch.repo, release_branch.branch, [release_branch]
        )
        if not modified_branch.needs_patch(patch):
            modified_branch.needed_patches.append(patch)
        self._save(state)
        logger.info(
            "Added patch %s as needed for %s %s",
            patch_name,
            release_branch.repo,
            release_branch.branch,
        )

    def add_needed_patches(
        self, patch_name: str, release_branch_filter: ReleaseBranchFilter
    ) -> int:
        """Mark a patch as needed on every maintenance branch accepted by the filter.

        Returns:
            Number of branches the patch was newly added to
        """
        state = self.load_state()
        release_branches = self.get_maintenance_branches(state=state)
        patch = self._find_patch(state, patch_name)

        count = 0
        for release_branch in release_branches:
            if not release_branch_filter(release_branch):
                logger.info("  skipping %s %s", release_branch.repo, release_branch.branch)
                continue

            modified_branch = self._ensure_modified_branch(
                state, release_branch.repo, release_branch.branch, release_branches
            )
            if modified_branch.needs_patch(patch):
                logger.info(
                    "Patch %s already included in %s %s",
                    patch_name,
                    release_branch.repo,
                    release_branch.branch,
                )
                continue
            modified_branch.needed_patches.append(patch)
            count += 1
            self._save(state)
            logger.info(
                "Added needed patch %s to %s %s",
                patch_name,
                release_branch.repo,
                release_branch.branch,
            )

        logger.info("Added %d releaseBranches to patch: %s", count, patch_name)
        self._save(state)
        return count

    def add_all_needed_patches(self, patch_name: str) -> int:
        return self.add_needed_patches(patch_name, accept_all)

    def add_needed_patches_before(self, patch_name: str, sha: str) -> int:
        """Needed on every branch whose pinned patch repo does not yet contain `sha`."""
        patch = self._find_patch(self.load_state(), patch_name)
        return self.add_needed_patches(
            patch_name,
            lambda release_branch: self.inspector.is_missing_sha(release_branch, patch.repo, sha),
        )

    def add_needed_patches_after(self, patch_name: str, sha: str) -> int:
        """Needed on every branch whose pinned patch repo already contains `sha`."""
        patch = self._find_patch(self.load_state(), patch_name)
        return self.add_needed_patches(
            patch_name,
            lambda release_branch: self.inspector.includes_sha(release_branch, patch.repo, sha),
        )

    def build_filter(self, content_filter: ContentFilter) -> ReleaseBranchFilter:
        """A release-branch filter that builds the branch and inspects the built phet HTML."""

        def matches(release_branch: ReleaseBranch) -> bool:
            self.checkouts.update_checkout(release_branch)
            self.checkouts.build(release_branch)
            return content_filter(self.checkouts.read_built_phet_html(release_branch))

        return matches

    def add_needed_patches_build_filter(
        self, patch_name: str, content_filter: ContentFilter
    ) -> int:
        return self.add_needed_patches(patch_name, self.build_filter(content_filter))

    def remove_needed_patch(self, repo: str, branch: str, patch_name: str) -> None:
        state = self.load_state()
        patch = self._find_patch(state, patch_name)
        modified_branch = self._require_modified_branch(state, repo, branch)
        if not modified_branch.needs_patch(patch):
            raise ValidationError("Could not find needed patch on the modified branch")
        modified_branch.needed_patches.remove(patch)
        self._remove_if_unused(state, modified_branch)
        self._save(state)
        logger.info("Removed patch %s from %s %s", patch_name, repo, branch)

    def remove_needed_patches(
        self, patch_name: str, release_branch_filter: ReleaseBranchFilter
    ) -> int:
        """Remove a needed patch from every modified branch accepted by the filter."""
        state = self.load_state()
        patch = self._find_patch(state, patch_name)

        count = 0
        for modified_branch in list(state.modified_branches):
            if not release_branch_filter(modified_branch.release_branch):
                logger.info("  skipping %s %s", modified_branch.repo, modified_branch.branch)
                continue
            if not modified_branch.needs_patch(patch):
                continue
            modified_branch.needed_patches.remove(patch)
            self._remove_if_unused(state, modified_branch)
            count += 1
            logger.info(
                "Removed needed patch %s from %s %s",
                patch_name,
                modified_branch.repo,
                modified_branch.branch,
            )

        logger.info("Removed %d releaseBranches from patch: %s", count, patch_name)
        self._save(state)
        return count

    def remove_needed_patches_before(self, patch_name: str, sha: str) -> int:
        patch = self._find_patch(self.load_state(), patch_name)
        return self.remove_needed_patches(
            patch_name,
            lambda release_branch: self.inspector.is_missing_sha(release_branch, patch.repo, sha),
        )

    def remove_needed_patches_after(self, patch_name: str, sha: str) -> int:
        patch = self._find_patch(self.load_state(), patch_name)
        return self.remove_needed_patches(
            patch_name,
            lambda release_branch: self.inspector.includes_sha(release_branch, patch.repo, sha),
        )

    def single_file_release_branch_filter(
        self, path: str, content_filter: ContentFilter
    ) -> ReleaseBranchFilter:
        """A filter applying `content_filter` to one file at each branch tip.

        Branches where the file does not exist are rejected.
        """

        def matches(release_branch: ReleaseBranch) -> bool:
            contents = self.inspector.read_file_at_tip(release_branch, path)
            if contents is None:
                return False
            return content_filter(contents)

        return matches

    # Working copies

    def checkout_branch(self, repo: str, branch: str, output_js: bool = False) -> None:
        """Check out a modified branch with its dependencies, including unpushed patches."""
        state = self.load_state()
        modified_branch = self._require_modified_branch(state, repo, branch)

        repo_dir = self._config.repo_dir(repo)
        self._git.checkout(repo_dir, branch)
        self._git.pull(repo_dir)
        manifest = parse_manifest(self._git.read_working_file(repo_dir, MANIFEST_FILENAME))
        for dependency, sha in modified_branch.changed_dependencies.items():
            set_pinned_sha(manifest, dependency, sha)

        for dependency in manifest:
            if dependency in (COMMENT_KEY, repo):
                continue
            sha = pinned_sha(manifest, dependency)
            if sha is not None:
                self._git.checkout(self._config.repo_dir(dependency), sha)

        for dependency in ("chipper", "perennial-alias", repo):
            if dependency in manifest:
                self._ctx.builder.install(self._config.repo_dir(dependency))

        if output_js:
            logger.info("Running output-js-project")
            result = self._ctx.builder.build(repo_dir, ["output-js-project", "--silent"])
            if not result.succeeded:
                logger.warning("output-js-project exited with %d", result.exit_code)

        # Nothing changed, so no save
        logger.info("Checked out %s %s", repo, branch)

    # Patch application

    def _current_patch_repo_sha(
        self, modified_branch: ModifiedBranch, patch_repo: str
    ) -> str:
        if patch_repo in modified_branch.changed_dependencies:
            return modified_branch.changed_dependencies[patch_repo]

        repo_dir = self._config.repo_dir(modified_branch.repo)
        self._git.checkout(repo_dir, modified_branch.branch)
        self._git.pull(repo_dir)
        manifest = parse_manifest(self._git.read_working_file(repo_dir, MANIFEST_FILENAME))
        self._git.checkout(repo_dir, self._config.primary_branch)

        sha = pinned_sha(manifest, patch_repo)
        if sha is None:
            raise MaintenanceError(
                f"{patch_repo} is not a dependency of {modified_branch.repo} "
                f"{modified_branch.branch}"
            )
        return sha

    def apply_patches(self) -> bool:
        """Cherry-pick every needed patch onto its release branches.

        Candidate SHAs of a patch are tried in order and the first that
        cherry-picks cleanly wins. A patch whose candidates all conflict stays
        needed and makes the result False; other patches still run.

        Raises:
            PatchApplicationError: Anything else failed (including a SHA that does
                not exist); applied patches up to that point are saved first
        """
        logger.info("applying patches")
        state = self.load_state()
        success = True
        applied = 0

        for modified_branch in state.modified_branches:
            if not modified_branch.needed_patches:
                continue
            repo = modified_branch.repo
            branch = modified_branch.branch

            for patch in list(modified_branch.needed_patches):
                if not patch.shas:
                    continue
                patch_repo = patch.repo
                patch_repo_dir = self._config.repo_dir(patch_repo)
                try:
                    current_sha = self._current_patch_repo_sha(modified_branch, patch_repo)
                    self._git.checkout(patch_repo_dir, current_sha)
                    logger.info(
                        "Checked out %s for %s %s, SHA: %s", patch_repo, repo, branch, current_sha
                    )

                    for sha in patch.shas:
                        if not self._git.has_commit(patch_repo_dir, sha):
                            raise CommitNotFoundError(patch_repo, sha)

                        if not self._git.cherry_pick(patch_repo_dir, sha).applied:
                            success = False
                            logger.warning("Could not cherry-pick %s", sha)
                            continue

                        new_sha = self._git.get_revision(patch_repo_dir, "HEAD")
                        logger.info("Cherry-pick success for %s, result is %s", sha, new_sha)
                        modified_branch.changed_dependencies[patch_repo] = new_sha
                        modified_branch.needed_patches.remove(patch)
                        modified_branch.add_pending_message(patch.message)
                        applied += 1
                        self._save(state)
                        break
                except Exception as e:
                    self._save(state)
                    raise PatchApplicationError(
                        f"Failure applying patch {patch_repo} to {repo} {branch}: {e}"
                    ) from e

            self._git.checkout(self._config.repo_dir(repo), self._config.primary_branch)

        self._save(state)
        logger.info("%d patches applied", applied)
        return success

    # Dependency manifests

    def _push_dependency_branch(
        self, modified_branch: ModifiedBranch, dependency: str, sha: str
    ) -> None:
        dependency_dir = self._config.repo_dir(dependency)
        dependency_branch = modified_branch.dependency_branch

        if dependency_branch in self._git.get_remote_branch_map(dependency_dir):
            logger.info("Branch %s already exists in %s", dependency_branch, dependency)
            self._git.checkout(dependency_dir, dependency_branch)
            self._git.pull(dependency_dir)
            if self._git.get_revision(dependency_dir, "HEAD") != sha:
                logger.info("Attempting to (hopefully fast-forward) merge %s", sha)
                self._git.merge_fast_forward(dependency_dir, sha)
                self._git.push(dependency_dir, dependency_branch)
        else:
            logger.info(
                "Branch %s does not exist in %s, creating.", dependency_branch, dependency
            )
            self._git.checkout(dependency_dir, sha)
            self._git.create_branch(dependency_dir, dependency_branch, sha)
            self._git.push(dependency_dir, dependency_branch)

    def update_dependencies(
        self, modified_branch_filter: ModifiedBranchFilter | None = None
    ) -> None:
        """Push patched dependencies and commit the new manifest on each release branch.

        Raises:
            DependencyUpdateError: A git operation failed; progress is saved first
        """
        logger.info("update dependencies")
        state = self.load_state()

        for modified_branch in state.modified_branches:
            changed_repos = list(modified_branch.changed_dependencies)
            if not changed_repos:
                continue
            if modified_branch_filter is not None and not modified_branch_filter(modified_branch):
                logger.info(
                    "Skipping dependency update for %s %s",
                    modified_branch.repo,
                    modified_branch.branch,
                )
                continue

            repo_dir = self._config.repo_dir(modified_branch.repo)
            try:
                self._git.checkout(repo_dir, modified_branch.branch)
                self._git.pull(repo_dir)
                logger.info("Checked out %s %s", modified_branch.repo, modified_branch.branch)

                manifest = parse_manifest(
                    self._git.read_working_file(repo_dir, MANIFEST_FILENAME)
                )
                set_pinned_sha(
                    manifest,
                    modified_branch.repo,
                    self._git.get_revision(repo_dir, modified_branch.branch),
                )

                for dependency in changed_repos:
                    sha = modified_branch.changed_dependencies[dependency]
                    set_pinned_sha(manifest, dependency, sha)
                    self._push_dependency_branch(modified_branch, dependency, sha)
                    del modified_branch.changed_dependencies[dependency]
                    modified_branch.deployed_version = None
                    self._save(state)

                message = " and ".join(modified_branch.pending_messages)
                self._git.write_working_file(repo_dir, MANIFEST_FILENAME, dump_manifest(manifest))
                self._git.add(repo_dir, MANIFEST_FILENAME)
                self._git.commit(repo_dir, f"updated dependencies.json for {message}")
                self._git.push(repo_dir, modified_branch.branch)

                modified_branch.push_pending_messages()
                self._save(state)

                self._git.checkout(repo_dir, self._config.primary_branch)
            except Exception as e:
                self._save(state)
                raise DependencyUpdateError(
                    f"Failure updating dependencies for {modified_branch.repo} to "
                    f"{modified_branch.branch}: {e}"
                ) from e

        self._save(state)
        logger.info("Dependencies updated")

    # Deployment

    def _deploy(
        self,
        kind: str,
        is_ready: Callable[[ModifiedBranch], bool],
        modified_branch_filter: ModifiedBranchFilter | None,
    ) -> list[ModifiedBranch]:
        state = self.load_state()
        deployed: list[ModifiedBranch] = []

        for modified_branch in state.modified_branches:
            if not is_ready(modified_branch) or not modified_branch.release_branch.is_released:
                continue
            if kind == "RC":
                logger.info("================================================")
            if modified_branch_filter is not None and not modified_branch_filter(modified_branch):
                logger.info(
                    "Skipping %s deploy for %s %s",
                    kind,
                    modified_branch.repo,
                    modified_branch.branch,
                )
                continue

            message = ", ".join(modified_branch.pushed_messages)
            locales = self._config.locales
            try:
                logger.info(
                    "Running %s deploy for %s %s",
                    kind,
                    modified_branch.repo,
                    modified_branch.branch,
                )
                if kind == "RC":
                    version = self._ctx.deployer.deploy_release_candidate(
                        modified_branch.release_branch, locales=locales, message=message
                    )
                else:
                    version = self._ctx.deployer.deploy_production(
                        modified_branch.release_branch, locales=locales, message=message
                    )
                    modified_branch.pushed_messages = []
                modified_branch.deployed_version = version
                self._save(state)
                deployed.append(modified_branch)
            except Exception as e:
                self._save(state)
                raise DeploymentError(
                    f"Failure with {kind} deploy for {modified_branch.repo} to "
                    f"{modified_branch.branch}: {e}"
                ) from e

        self._save(state)
        return deployed

    def deploy_release_candidates(
        self, modified_branch_filter: ModifiedBranchFilter | None = None
    ) -> list[ModifiedBranch]:
        """Deploy an RC of every released branch ready for one.

        Stops at the first failing deploy.
        """
        deployed = self._deploy(
            "RC", lambda branch: branch.is_ready_for_release_candidate, modified_branch_filter
        )
        logger.info("RC versions deployed")
        return deployed

    def deploy_production(
        self, modified_branch_filter: ModifiedBranchFilter | None = None
    ) -> list[ModifiedBranch]:
        """Deploy every released branch whose RC has been verified to production.

        Stops at the first failing deploy.
        """
        deployed = self._deploy(
            "production", lambda branch: branch.is_ready_for_production, modified_branch_filter
        )
        logger.info("production versions deployed")
        return deployed

    def redeploy_all_production(
        self, message: str, release_branch_filter: ReleaseBranchFilter | None = None
    ) -> None:
        """Deploy an RC and then production of every released branch, unchanged."""
        locales = self._config.locales
        for release_branch in self.get_maintenance_branches(include_unreleased=False):
            if release_branch_filter is not None and not release_branch_filter(release_branch):
                continue
            logger.info("%s", release_branch)
            self._ctx.deployer.deploy_release_candidate(
                release_branch, locales=locales, message=message
            )
            self._ctx.deployer.deploy_production(release_branch, locales=locales, message=message)
        logger.info("Finished redeploying")

    def _last_deployed_production(
        self, release_branch: ReleaseBranch
    ) -> tuple[SimVersion, Manifest]:
        metadata = self._ctx.metadata
        if "phet" in release_branch.brands:
            brand = "phet"
            versions = [
                SimVersion(published.major, published.minor, published.maintenance)
                for published in metadata.get_published_simulations(release_branch.repo)
                if published.branch == release_branch.branch
            ]
        elif "phet-io" in release_branch.brands:
            brand = "phet-io"
            versions = [
                SimVersion(entry.version_major, entry.version_minor, entry.version_maintenance)
                for entry in metadata.get_phetio_simulations(active=True)
                if entry.name == release_branch.repo and entry.branch == release_branch.branch
            ]
        else:
            raise ValidationError(f"Unknown deployed brand for {release_branch}")

        if not versions:
            raise DeploymentError(f"No deployed {brand} version found for {release_branch}")
        version = max(versions, key=lambda v: (v.major, v.minor, v.maintenance))
        return version, metadata.get_deployed_dependencies(release_branch.repo, version, brand)

    def redeploy_last_deployed_production(self, release_branch: ReleaseBranch) -> SimVersion:
        """Redeploy production built from the SHAs of the version currently deployed.

        Raises:
            ValidationError: For an unreleased branch or a -phetio suffixed branch
        """
        if not release_branch.is_released:
            raise ValidationError(f"Should not redeploy a non-released branch: {release_branch}")
        if "-phetio" in release_branch.branch:
            raise ValidationError(f"Unsupported suffix -phetio: {release_branch}")

        version, dependencies = self._last_deployed_production(release_branch)
        logger.info(
            "Redeploying %s %s to production as %s",
            release_branch.repo,
            release_branch.branch,
            version,
        )
        self._ctx.deployer.redeploy_production(
            release_branch, version, dependencies, locales=self._config.locales
        )
        return version

    def redeploy_all_last_deployed_production(
        self, release_branch_filter: ReleaseBranchFilter | None = None
    ) -> list[ReleaseBranch]:
        """Redeploy every released branch from its last deployed SHAs.

        -phetio suffixed branches are skipped. Stops at the first failing redeploy.
        """
        redeployed: list[ReleaseBranch] = []
        for release_branch in self.get_maintenance_branches(
            release_branch_filter, include_unreleased=False
        ):
            logger.info("%s", release_branch)
            if "-phetio" in release_branch.branch:
                logger.info("Skipping %s (unsupported suffix -phetio)", release_branch)
                continue
            try:
                self.redeploy_last_deployed_production(release_branch)
            except Exception as e:
                raise DeploymentError(
                    f"Failure redeploying {release_branch.repo} {release_branch.branch} "
                    f"to production: {e}"
                ) from e
            redeployed.append(release_branch)
        logger.info("Finished redeploying")
        return redeployed

    # Checkouts

    def update_checkouts(
        self,
        release_branch_filter: ReleaseBranchFilter | None = None,
        options: CheckoutOptions | None = None,
    ) -> CheckoutReport:
        if options is None:
            options = CheckoutOptions(concurrency=self._config.concurrency)

        # Filters may run git in the primary repos, so they never run in the pool
        filtered = [
            release_branch
            for release_branch in self.get_maintenance_branches()
            if release_branch_filter is None or release_branch_filter(release_branch)
        ]
        logger.info(
            "Filter applied. Updating %d: %s",
            len(filtered),
            ", ".join(str(release_branch) for release_branch in filtered),
        )
        return self.checkouts.update_all(filtered, options)

    def _check_checkouts(
        self,
        check: Callable[[ReleaseBranch], str | None],
        release_branch_filter: ReleaseBranchFilter | None,
    ) -> list[tuple[ReleaseBranch, str]]:
        problems: list[tuple[ReleaseBranch, str]] = []
        for release_branch in self.get_maintenance_branches():
            if release_branch_filter is not None and not release_branch_filter(release_branch):
                continue
            logger.info("%s", release_branch)
            try:
                problem = check(release_branch)
            except Exception as e:
                problem = f"[ERROR] Failure to check: {e}"
            if problem is not None:
                logger.warning("%s", problem)
                problems.append((release_branch, problem))
        return problems

    def check_unbuilt_checkouts(
        self, release_branch_filter: ReleaseBranchFilter | None = None
    ) -> list[tuple[ReleaseBranch, str]]:
        logger.info("Checking unbuilt checkouts")
        return self._check_checkouts(self.checkouts.check_unbuilt, release_branch_filter)

    def check_built_checkouts(
        self, release_branch_filter: ReleaseBranchFilter | None = None
    ) -> list[tuple[ReleaseBranch, str]]:
        logger.info("Checking built checkouts")
        return self._check_checkouts(self.checkouts.check_built, release_branch_filter)

    # Reporting

    def find_release_branch(self, repo: str, branch: str) -> ReleaseBranch:
        for release_branch in self.get_maintenance_branches(lambda rb: rb.repo == repo):
            if release_branch.branch == branch:
                return release_branch
        raise ValidationError(f"Could not find a release branch for repo={repo} branch={branch}")

    def inspect_release_branch(self, repo: str, branch: str) -> dict[str, bool | str]:
        """Capabilities detected at the tip of one release branch."""
        return self.inspector.capability_report(self.find_release_branch(repo, branch))

    def check_branch_status(
        self, release_branch_filter: ReleaseBranchFilter | None = None
    ) -> list[str]:
        """Status lines for every maintenance branch (nothing when a working copy is dirty)."""
        release_branches = self.get_maintenance_branches()

        for repo in sorted({release_branch.repo for release_branch in release_branches}):
            if not self._git.is_clean(self._config.repo_dir(repo)):
                line = f"Unclean repository: {repo}, please resolve this and then run again"
                logger.warning("%s", line)
                return [line]

        branch_maps: dict[str, dict[str, str]] = {}

        def branch_map_for(repo: str) -> dict[str, str]:
            if repo not in branch_maps:
                branch_maps[repo] = self._git.get_remote_branch_map(self._config.repo_dir(repo))
            return branch_maps[repo]

        lines: list[str] = []
        for release_branch in release_branches:
            if release_branch_filter is not None and not release_branch_filter(release_branch):
                lines.append(
                    f"{release_branch.repo} {release_branch.branch} (skipping due to filter)"
                )
                continue
            lines.append(f"{release_branch.repo} {release_branch.branch}")
            for message in self.inspector.status_messages(release_branch, branch_map_for):
                lines.append(f"  {message}")
        return lines

    def list_links(self, modified_branch_filter: ModifiedBranchFilter | None = None) -> list[str]:
        """Testing links for every deployed modified branch, production first."""
        state = self.load_state()
        production: list[ModifiedBranch] = []
        release_candidates: list[ModifiedBranch] = []
        for modified_branch in state.modified_branches:
            version = modified_branch.deployed_version
            if version is None:
                continue
            if modified_branch_filter is not None and not modified_branch_filter(modified_branch):
                continue
            if version.is_production:
                production.append(modified_branch)
            elif version.is_release_candidate:
                release_candidates.append(modified_branch)

        lines: list[str] = []
        for title, branches in (
            ("Production links", production),
            ("Release Candidate links", release_candidates),
        ):
            if not branches:
                continue
            lines.append(f"\n{title}\n")
            for modified_branch in branches:
                capabilities = self.inspector.link_capabilities(modified_branch.release_branch)
                lines.extend(modified_branch.deployed_link_lines(capabilities))
        return lines

    def create_unreleased_issues(self, additional_notes: str = "") -> list[str]:
        """Open a QA issue for each unreleased branch that had changes pushed.

        Returns:
            URLs of the created issues
        """
        urls: list[str] = []
        for modified_branch in self.load_state().modified_branches:
            if modified_branch.release_branch.is_released or not modified_branch.pushed_messages:
                continue
            logger.info("Creating issue for %s", modified_branch.release_branch)
            urls.append(
                self._ctx.issues.create_issue(
                    modified_branch.repo,
                    modified_branch.unreleased_issue_title(),
                    modified_branch.unreleased_issue_body(additional_notes),
                    [UNRELEASED_ISSUE_LABEL],
                )
            )
        logger.info("Finished creating unreleased issues")
        return urls
