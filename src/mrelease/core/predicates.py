"""Filter interfaces used to select branches for batch operations.

A filter is anything callable with the branch (or file contents) that
returns a bool; plain functions, lambdas and the small strategy classes below
are interchangeable. A filter signals failure by raising.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from mrelease.core.release_branch import ReleaseBranch

if TYPE_CHECKING:
    from mrelease.core.modified_branch import ModifiedBranch


class ReleaseBranchFilter(Protocol):
    def __call__(self, release_branch: ReleaseBranch) -> bool: ...


class ModifiedBranchFilter(Protocol):
    def __call__(self, modified_branch: "ModifiedBranch") -> bool: ...


class ContentFilter(Protocol):
    def __call__(self, contents: str) -> bool: ...


def accept_all(_: object) -> bool:
    return True


@dataclass(frozen=True)
class ContainsText:
    """Matches contents containing `text`."""

    text: str

    def __call__(self, contents: str) -> bool:
        return self.text in contents


@dataclass(frozen=True)
class MatchesPattern:
    """Matches contents where the regular expression `pattern` is found."""

    pattern: str

    def __call__(self, contents: str) -> bool:
        return re.search(self.pattern, contents) is not None


@dataclass(frozen=True)
class Negated:
    inner: ContentFilter

    def __call__(self, contents: str) -> bool:
        return not self.inner(contents)


@dataclass(frozen=True)
class ReleaseBranchSelector:
    """Selects release branches by repo, brand, and release status.

    Empty `repos`/`brands` match everything; `released` of None matches both.
    """

    repos: frozenset[str] = frozenset()
    brands: frozenset[str] = frozenset()
    released: bool | None = None

    @staticmethod
    def build(
        repos: Iterable[str] = (), brands: Iterable[str] = (), released: bool | None = None
    ) -> "ReleaseBranchSelector":
        return ReleaseBranchSelector(frozenset(repos), frozenset(brands), released)

    def __call__(self, release_branch: ReleaseBranch) -> bool:
        if self.repos and release_branch.repo not in self.repos:
            return False
        if self.brands and not self.brands.intersection(release_branch.brands):
            return False
        if self.released is not None and release_branch.is_released != self.released:
            return False
        return True

    def for_modified_branches(self) -> "ModifiedBranchFilter":
        """The same selection applied to a modified branch's release branch."""
        return lambda modified_branch: self(modified_branch.release_branch)
