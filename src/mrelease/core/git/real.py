"""Production Git implementation using subprocess."""

import logging
from pathlib import Path

from mrelease.core.errors import ExecuteError
from mrelease.core.git.abc import CherryPickResult, Git
from mrelease.core.subprocess import run_subprocess_with_context

logger = logging.getLogger(__name__)


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def checkout(self, repo_dir: Path, target: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", target],
            operation_context=f"checkout '{target}' in {repo_dir.name}",
            cwd=repo_dir,
        )

    def pull(self, repo_dir: Path) -> None:
        run_subprocess_with_context(
            ["git", "pull"],
            operation_context=f"pull {repo_dir.name}",
            cwd=repo_dir,
        )

    def get_current_branch(self, repo_dir: Path) -> str | None:
        result = run_subprocess_with_context(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            operation_context=f"get current branch of {repo_dir.name}",
            cwd=repo_dir,
            check=False,
        )
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if branch == "HEAD":
            return None
        return branch

    def get_revision(self, repo_dir: Path, ref: str = "HEAD") -> str:
        result = run_subprocess_with_context(
            ["git", "rev-parse", ref],
            operation_context=f"resolve '{ref}' in {repo_dir.name}",
            cwd=repo_dir,
        )
        return result.stdout.strip()

    def has_commit(self, repo_dir: Path, sha: str) -> bool:
        result = run_subprocess_with_context(
            ["git", "cat-file", "-e", f"{sha}^{{commit}}"],
            operation_context=f"look up commit {sha} in {repo_dir.name}",
            cwd=repo_dir,
            check=False,
        )
        return result.returncode == 0

    def cherry_pick(self, repo_dir: Path, sha: str) -> CherryPickResult:
        result = run_subprocess_with_context(
            ["git", "cherry-pick", sha],
            operation_context=f"cherry-pick {sha} in {repo_dir.name}",
            cwd=repo_dir,
            check=False,
        )
        if result.returncode == 0:
            return CherryPickResult(applied=True)

        logger.debug("cherry-pick of %s failed: %s", sha, result.stderr.strip())
        run_subprocess_with_context(
            ["git", "cherry-pick", "--abort"],
            operation_context=f"abort cherry-pick of {sha} in {repo_dir.name}",
            cwd=repo_dir,
        )
        return CherryPickResult(applied=False)

    def is_ancestor(self, repo_dir: Path, ancestor: str, descendant: str) -> bool:
        cmd = ["git", "merge-base", "--is-ancestor", ancestor, descendant]
        result = run_subprocess_with_context(
            cmd,
            operation_context=f"check ancestry of {ancestor} in {repo_dir.name}",
            cwd=repo_dir,
            check=False,
        )
        # merge-base exits 1 for "not an ancestor" and >1 for real errors
        if result.returncode in (0, 1):
            return result.returncode == 0
        raise ExecuteError(
            f"Failed to check ancestry of {ancestor} in {repo_dir.name}\n"
            f"Command: {' '.join(cmd)}\nExit code: {result.returncode}",
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def read_file_at_revision(self, repo_dir: Path, revision: str, path: str) -> str:
        result = run_subprocess_with_context(
            ["git", "show", f"{revision}:{path}"],
            operation_context=f"read {path} at {revision} in {repo_dir.name}",
            cwd=repo_dir,
        )
        return result.stdout

    def get_remote_branch_map(self, repo_dir: Path) -> dict[str, str]:
        result = run_subprocess_with_context(
            ["git", "ls-remote", "--heads", "origin"],
            operation_context=f"list remote branches of {repo_dir.name}",
            cwd=repo_dir,
        )
        branches: dict[str, str] = {}
        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) != 2:
                continue
            sha, ref = parts
            branches[ref.removeprefix("refs/heads/")] = sha
        return branches

    def create_branch(self, repo_dir: Path, branch: str, start_point: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", "-b", branch, start_point],
            operation_context=f"create branch '{branch}' in {repo_dir.name}",
            cwd=repo_dir,
        )

    def merge_fast_forward(self, repo_dir: Path, target: str) -> None:
        run_subprocess_with_context(
            ["git", "merge", "--ff-only", target],
            operation_context=f"fast-forward to {target} in {repo_dir.name}",
            cwd=repo_dir,
        )

    def push(self, repo_dir: Path, branch: str) -> None:
        run_subprocess_with_context(
            ["git", "push", "-u", "origin", branch],
            operation_context=f"push '{branch}' of {repo_dir.name}",
            cwd=repo_dir,
        )

    def add(self, repo_dir: Path, path: str) -> None:
        run_subprocess_with_context(
            ["git", "add", path],
            operation_context=f"stage {path} in {repo_dir.name}",
            cwd=repo_dir,
        )

    def commit(self, repo_dir: Path, message: str) -> str:
        run_subprocess_with_context(
            ["git", "commit", "-m", message],
            operation_context=f"commit in {repo_dir.name}",
            cwd=repo_dir,
        )
        return self.get_revision(repo_dir)

    def is_clean(self, repo_dir: Path) -> bool:
        result = run_subprocess_with_context(
            ["git", "status", "--porcelain"],
            operation_context=f"check status of {repo_dir.name}",
            cwd=repo_dir,
        )
        return result.stdout.strip() == ""

    def clone_or_fetch(self, remote_url: str, target_dir: Path) -> None:
        if (target_dir / ".git").exists():
            run_subprocess_with_context(
                ["git", "fetch"],
                operation_context=f"fetch {target_dir.name}",
                cwd=target_dir,
            )
            return

        target_dir.parent.mkdir(parents=True, exist_ok=True)
        run_subprocess_with_context(
            ["git", "clone", remote_url, str(target_dir)],
            operation_context=f"clone {remote_url}",
            cwd=target_dir.parent,
        )

    def read_working_file(self, repo_dir: Path, path: str) -> str:
        return (repo_dir / path).read_text(encoding="utf-8")

    def write_working_file(self, repo_dir: Path, path: str, content: str) -> None:
        (repo_dir / path).write_text(content, encoding="utf-8")

    def path_exists(self, path: Path) -> bool:
        return path.exists()
