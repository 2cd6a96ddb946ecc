"""Exception hierarchy for maintenance operations.

Validation errors are raised before any state is mutated. Operation errors
(patch application, dependency updates, deployment) are raised after the
current state has been persisted, so the state file is always a valid
recovery point.
"""


class MaintenanceError(Exception):
    """Base class for all errors raised by the maintenance engine."""


class ValidationError(MaintenanceError):
    """Operator input was rejected before any state was touched."""


class CommitNotFoundError(MaintenanceError):
    """A patch SHA does not exist in the patch repository."""

    def __init__(self, repo: str, sha: str) -> None:
        super().__init__(f"SHA not found in {repo}: {sha}")
        self.repo = repo
        self.sha = sha


class PatchApplicationError(MaintenanceError):
    """Cherry-picking a patch onto a release branch failed unexpectedly."""


class DependencyUpdateError(MaintenanceError):
    """Updating or pushing a dependency manifest failed."""


class DeploymentError(MaintenanceError):
    """A release-candidate or production deploy failed."""


class DiscoveryError(MaintenanceError):
    """Release-branch discovery could not complete."""


class MetadataError(MaintenanceError):
    """The metadata service returned an unusable response."""


class BuildError(MaintenanceError):
    """A build or transpile step exited unsuccessfully."""


class ExecuteError(RuntimeError):
    """An external command exited with a non-zero status.

    Attributes:
        exit_code: Process exit status (None if the command could not start)
        stdout: Captured standard output
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
