"""Build runner invoking grunt and npm via subprocess."""

import logging
from pathlib import Path

from mrelease.core.build.abc import BuildResult, BuildRunner
from mrelease.core.subprocess import run_subprocess_with_context

logger = logging.getLogger(__name__)


class SubprocessBuildRunner(BuildRunner):
    """Production implementation running `grunt` and `npm`."""

    def __init__(self, grunt_command: str = "grunt", npm_command: str = "npm") -> None:
        self._grunt = grunt_command
        self._npm = npm_command

    def build(self, checkout_dir: Path, args: list[str]) -> BuildResult:
        logger.info("building %s with %s %s", checkout_dir, self._grunt, " ".join(args))
        result = run_subprocess_with_context(
            [self._grunt, *args],
            operation_context=f"build {checkout_dir.name}",
            cwd=checkout_dir,
            check=False,
        )
        return BuildResult(exit_code=result.returncode, stdout=result.stdout + result.stderr)

    def install(self, repo_dir: Path) -> BuildResult:
        logger.info("npm update in %s", repo_dir)
        result = run_subprocess_with_context(
            [self._npm, "update"],
            operation_context=f"npm update {repo_dir.name}",
            cwd=repo_dir,
            check=False,
        )
        return BuildResult(exit_code=result.returncode, stdout=result.stdout + result.stderr)
