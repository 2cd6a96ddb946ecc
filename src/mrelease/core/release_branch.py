"""Release branch descriptors and list combination."""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Always filtered from discovery: an upstream metadata anomaly keeps reporting it.
EXCLUDED_RELEASE_BRANCHES = frozenset({("forces-and-motion-basics", "2.3-phetio")})


@dataclass(frozen=True)
class ReleaseBranch:
    """One deployable branch of one simulation repository.

    Brands are normalized to a sorted tuple so equality is structural.
    """

    repo: str
    branch: str
    brands: tuple[str, ...]
    is_released: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "brands", tuple(sorted(set(self.brands))))

    @property
    def key(self) -> tuple[str, str]:
        return (self.repo, self.branch)

    def serialize(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "branch": self.branch,
            "brands": list(self.brands),
            "isReleased": self.is_released,
        }

    @staticmethod
    def deserialize(data: dict[str, Any]) -> "ReleaseBranch":
        return ReleaseBranch(
            repo=data["repo"],
            branch=data["branch"],
            brands=tuple(data["brands"]),
            is_released=bool(data["isReleased"]),
        )

    def checkout_directory(self, release_branches_dir: Path) -> Path:
        """Directory holding the standalone checkout used by the bulk pipeline."""
        return release_branches_dir / f"{self.repo}-{self.branch}"

    def __str__(self) -> str:
        suffix = "" if self.is_released else " (unpublished)"
        return f"{self.repo} {self.branch} {','.join(self.brands)}{suffix}"


def combine_release_branches(branches: Iterable[ReleaseBranch]) -> list[ReleaseBranch]:
    """Merge entries sharing (repo, branch) by unioning brands, then sort.

    The first entry seen for a pair determines `is_released`.
    """
    combined: dict[tuple[str, str], ReleaseBranch] = {}
    for branch in branches:
        existing = combined.get(branch.key)
        if existing is None:
            combined[branch.key] = branch
            continue
        combined[branch.key] = ReleaseBranch(
            repo=existing.repo,
            branch=existing.branch,
            brands=existing.brands + branch.brands,
            is_released=existing.is_released,
        )
    return [combined[key] for key in sorted(combined)]


def without_excluded(branches: Iterable[ReleaseBranch]) -> list[ReleaseBranch]:
    return [branch for branch in branches if branch.key not in EXCLUDED_RELEASE_BRANCHES]
