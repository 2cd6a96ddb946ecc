"""No-op wrapper for deployments."""

from mrelease.cli.output import user_output
from mrelease.core.deploy.abc import Deployer
from mrelease.core.manifest import Manifest
from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.version import SimVersion


class DryRunDeployer(Deployer):
    """Prints the deploy that would run and returns the version it would produce.

    The version is derived from the branch name, so its maintenance number is
    always 0.
    """

    def __init__(self, wrapped: Deployer) -> None:
        self._wrapped = wrapped

    def deploy_release_candidate(
        self, release_branch: ReleaseBranch, *, locales: str, message: str
    ) -> SimVersion:
        user_output(f"[dry-run] Would deploy RC of {release_branch}: {message}")
        return _branch_version(release_branch).next_release_candidate()

    def deploy_production(
        self, release_branch: ReleaseBranch, *, locales: str, message: str
    ) -> SimVersion:
        user_output(f"[dry-run] Would deploy production of {release_branch}: {message}")
        return _branch_version(release_branch)

    def redeploy_production(
        self,
        release_branch: ReleaseBranch,
        version: SimVersion,
        dependencies: Manifest,
        *,
        locales: str,
    ) -> None:
        user_output(f"[dry-run] Would redeploy {release_branch} to production as {version}")


def _branch_version(release_branch: ReleaseBranch) -> SimVersion:
    return SimVersion.from_branch(release_branch.branch.split("-")[0])
