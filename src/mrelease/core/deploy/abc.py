"""Deployment interface for release-candidate and production deploys."""

from abc import ABC, abstractmethod

from mrelease.core.manifest import Manifest
from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.version import SimVersion


class Deployer(ABC):
    """Abstract interface for deploying a release branch.

    All implementations (real and fake) must implement this interface.
    Deploys of the branch tip return the version that was deployed.
    """

    @abstractmethod
    def deploy_release_candidate(
        self, release_branch: ReleaseBranch, *, locales: str, message: str
    ) -> SimVersion:
        """Deploy the branch tip as the next release candidate."""
        ...

    @abstractmethod
    def deploy_production(
        self, release_branch: ReleaseBranch, *, locales: str, message: str
    ) -> SimVersion:
        """Deploy the branch tip to production."""
        ...

    @abstractmethod
    def redeploy_production(
        self,
        release_branch: ReleaseBranch,
        version: SimVersion,
        dependencies: Manifest,
        *,
        locales: str,
    ) -> None:
        """Rebuild `version` from the given dependency SHAs and deploy it to production."""
        ...
