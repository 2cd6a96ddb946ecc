"""High-level git operations interface.

Every operation takes the path of a working copy. The engine resolves
repository names to paths under the configured repos root.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- DryRunGit: Suppresses publishing operations (push)
- FakeGit (tests): In-memory implementation
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CherryPickResult:
    """Outcome of a cherry-pick.

    When `applied` is False the implementation has already aborted the
    cherry-pick and the working copy is clean.
    """

    applied: bool


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    Failures raise ExecuteError.
    """

    @abstractmethod
    def checkout(self, repo_dir: Path, target: str) -> None:
        """Check out a branch or commit."""
        ...

    @abstractmethod
    def pull(self, repo_dir: Path) -> None:
        """Pull the currently checked-out branch."""
        ...

    @abstractmethod
    def get_current_branch(self, repo_dir: Path) -> str | None:
        """Get the checked-out branch, or None when HEAD is detached."""
        ...

    @abstractmethod
    def get_revision(self, repo_dir: Path, ref: str = "HEAD") -> str:
        """Resolve a ref to a full commit SHA."""
        ...

    @abstractmethod
    def has_commit(self, repo_dir: Path, sha: str) -> bool:
        """Check whether a commit exists in the repository."""
        ...

    @abstractmethod
    def cherry_pick(self, repo_dir: Path, sha: str) -> CherryPickResult:
        """Cherry-pick a commit onto HEAD.

        On failure the cherry-pick is aborted before returning, leaving the
        working copy clean.
        """
        ...

    @abstractmethod
    def is_ancestor(self, repo_dir: Path, ancestor: str, descendant: str) -> bool:
        """Check whether `ancestor` is reachable from `descendant`."""
        ...

    @abstractmethod
    def read_file_at_revision(self, repo_dir: Path, revision: str, path: str) -> str:
        """Read a file's contents at a revision without touching the working copy."""
        ...

    @abstractmethod
    def get_remote_branch_map(self, repo_dir: Path) -> dict[str, str]:
        """Map of remote branch name to tip SHA on origin."""
        ...

    @abstractmethod
    def create_branch(self, repo_dir: Path, branch: str, start_point: str) -> None:
        """Create a local branch at `start_point` and check it out."""
        ...

    @abstractmethod
    def merge_fast_forward(self, repo_dir: Path, target: str) -> None:
        """Fast-forward the checked-out branch to `target`."""
        ...

    @abstractmethod
    def push(self, repo_dir: Path, branch: str) -> None:
        """Push a local branch to origin, setting upstream."""
        ...

    @abstractmethod
    def add(self, repo_dir: Path, path: str) -> None:
        """Stage a file."""
        ...

    @abstractmethod
    def commit(self, repo_dir: Path, message: str) -> str:
        """Commit staged changes and return the new HEAD SHA."""
        ...

    @abstractmethod
    def is_clean(self, repo_dir: Path) -> bool:
        """Check that there are no uncommitted changes."""
        ...

    @abstractmethod
    def clone_or_fetch(self, remote_url: str, target_dir: Path) -> None:
        """Clone into `target_dir`, or fetch if it is already a working copy."""
        ...

    @abstractmethod
    def read_working_file(self, repo_dir: Path, path: str) -> str:
        """Read a file from the working copy."""
        ...

    @abstractmethod
    def write_working_file(self, repo_dir: Path, path: str, content: str) -> None:
        """Write a file into the working copy."""
        ...

    @abstractmethod
    def path_exists(self, path: Path) -> bool:
        """Check if a path exists on the filesystem."""
        ...
