"""No-op wrapper for publishing git operations."""

from pathlib import Path

from mrelease.cli.output import user_output
from mrelease.core.git.abc import CherryPickResult, Git


class DryRunGit(Git):
    """Wrapper that suppresses pushes.

    Local working-copy operations are delegated to the wrapped implementation
    so the rest of a workflow can be exercised. Pushes print what would have
    been published and return without executing.
    """

    def __init__(self, wrapped: Git) -> None:
        self._wrapped = wrapped

    def checkout(self, repo_dir: Path, target: str) -> None:
        self._wrapped.checkout(repo_dir, target)

    def pull(self, repo_dir: Path) -> None:
        self._wrapped.pull(repo_dir)

    def get_current_branch(self, repo_dir: Path) -> str | None:
        return self._wrapped.get_current_branch(repo_dir)

    def get_revision(self, repo_dir: Path, ref: str = "HEAD") -> str:
        return self._wrapped.get_revision(repo_dir, ref)

    def has_commit(self, repo_dir: Path, sha: str) -> bool:
        return self._wrapped.has_commit(repo_dir, sha)

    def cherry_pick(self, repo_dir: Path, sha: str) -> CherryPickResult:
        return self._wrapped.cherry_pick(repo_dir, sha)

    def is_ancestor(self, repo_dir: Path, ancestor: str, descendant: str) -> bool:
        return self._wrapped.is_ancestor(repo_dir, ancestor, descendant)

    def read_file_at_revision(self, repo_dir: Path, revision: str, path: str) -> str:
        return self._wrapped.read_file_at_revision(repo_dir, revision, path)

    def get_remote_branch_map(self, repo_dir: Path) -> dict[str, str]:
        return self._wrapped.get_remote_branch_map(repo_dir)

    def create_branch(self, repo_dir: Path, branch: str, start_point: str) -> None:
        self._wrapped.create_branch(repo_dir, branch, start_point)

    def merge_fast_forward(self, repo_dir: Path, target: str) -> None:
        self._wrapped.merge_fast_forward(repo_dir, target)

    def push(self, repo_dir: Path, branch: str) -> None:
        user_output(f"[dry-run] Would push {branch} of {repo_dir.name}")

    def add(self, repo_dir: Path, path: str) -> None:
        self._wrapped.add(repo_dir, path)

    def commit(self, repo_dir: Path, message: str) -> str:
        return self._wrapped.commit(repo_dir, message)

    def is_clean(self, repo_dir: Path) -> bool:
        return self._wrapped.is_clean(repo_dir)

    def clone_or_fetch(self, remote_url: str, target_dir: Path) -> None:
        self._wrapped.clone_or_fetch(remote_url, target_dir)

    def read_working_file(self, repo_dir: Path, path: str) -> str:
        return self._wrapped.read_working_file(repo_dir, path)

    def write_working_file(self, repo_dir: Path, path: str, content: str) -> None:
        self._wrapped.write_working_file(repo_dir, path, content)

    def path_exists(self, path: Path) -> bool:
        return self._wrapped.path_exists(path)
