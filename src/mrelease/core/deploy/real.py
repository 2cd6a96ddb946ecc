"""Deployer that drives the deploy tooling via subprocess."""

import logging
import tempfile
from pathlib import Path

from mrelease.core.deploy.abc import Deployer
from mrelease.core.errors import DeploymentError, ValidationError
from mrelease.core.manifest import MANIFEST_FILENAME, Manifest, dump_manifest
from mrelease.core.release_branch import ReleaseBranch
from mrelease.core.subprocess import run_subprocess_with_context
from mrelease.core.version import SimVersion

logger = logging.getLogger(__name__)


class SubprocessDeployer(Deployer):
    """Production implementation running the deploy tasks in the tooling checkout.

    The deploy command is invoked as
    ``<command> rc|production --repo=R --branch=B --brands=a,b --locales=L
    --message=M --noninteractive`` and must print the deployed version as the
    last non-empty line of its output.
    """

    def __init__(self, tooling_dir: Path, command: list[str]) -> None:
        self._tooling_dir = tooling_dir
        self._command = command

    def deploy_release_candidate(
        self, release_branch: ReleaseBranch, *, locales: str, message: str
    ) -> SimVersion:
        return self._deploy("rc", release_branch, locales, message)

    def deploy_production(
        self, release_branch: ReleaseBranch, *, locales: str, message: str
    ) -> SimVersion:
        return self._deploy("production", release_branch, locales, message)

    def redeploy_production(
        self,
        release_branch: ReleaseBranch,
        version: SimVersion,
        dependencies: Manifest,
        *,
        locales: str,
    ) -> None:
        """Run ``<command> production-redeploy`` with the manifest written to a temp file."""
        with tempfile.TemporaryDirectory(prefix="mrelease-") as tmp:
            manifest_path = Path(tmp) / MANIFEST_FILENAME
            manifest_path.write_text(dump_manifest(dependencies), encoding="utf-8")
            cmd = [
                *self._command,
                "production-redeploy",
                f"--repo={release_branch.repo}",
                f"--branch={release_branch.branch}",
                f"--brands={','.join(release_branch.brands)}",
                f"--version={version}",
                f"--dependencies={manifest_path}",
                f"--locales={locales}",
                "--noninteractive",
            ]
            logger.debug("redeploying %s as %s", release_branch, version)
            run_subprocess_with_context(
                cmd,
                operation_context=f"production redeploy {release_branch.repo} {version}",
                cwd=self._tooling_dir,
            )

    def _deploy(
        self, task: str, release_branch: ReleaseBranch, locales: str, message: str
    ) -> SimVersion:
        cmd = [
            *self._command,
            task,
            f"--repo={release_branch.repo}",
            f"--branch={release_branch.branch}",
            f"--brands={','.join(release_branch.brands)}",
            f"--locales={locales}",
            f"--message={message}",
            "--noninteractive",
        ]
        logger.debug("deploying %s (%s)", release_branch, task)
        result = run_subprocess_with_context(
            cmd,
            operation_context=f"{task} deploy {release_branch.repo} {release_branch.branch}",
            cwd=self._tooling_dir,
        )

        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            raise DeploymentError(f"Deploy of {release_branch} reported no version")
        try:
            return SimVersion.parse(lines[-1])
        except ValidationError as e:
            raise DeploymentError(
                f"Deploy of {release_branch} ended with unexpected output: {lines[-1]}"
            ) from e
