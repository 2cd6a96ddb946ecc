"""Maintenance state aggregate and its persistence.

The state file is rewritten in full after every durable decision, so it
doubles as the crash-recovery point: whatever was last saved is a
consistent view of what has actually happened in the repositories.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mrelease.core.errors import ValidationError
from mrelease.core.modified_branch import ModifiedBranch
from mrelease.core.patch import Patch
from mrelease.core.release_branch import ReleaseBranch

logger = logging.getLogger(__name__)


@dataclass
class MaintenanceState:
    """Root aggregate: patches, modified branches, and the discovery cache."""

    patches: list[Patch] = field(default_factory=list)
    modified_branches: list[ModifiedBranch] = field(default_factory=list)
    all_release_branches: list[ReleaseBranch] = field(default_factory=list)

    def find_patch(self, name: str) -> Patch | None:
        for patch in self.patches:
            if patch.name == name:
                return patch
        return None

    def find_modified_branch(self, repo: str, branch: str) -> ModifiedBranch | None:
        for modified_branch in self.modified_branches:
            if modified_branch.repo == repo and modified_branch.branch == branch:
                return modified_branch
        return None

    def find_release_branch(self, repo: str, branch: str) -> ReleaseBranch | None:
        for release_branch in self.all_release_branches:
            if release_branch.repo == repo and release_branch.branch == branch:
                return release_branch
        return None

    def serialize(self) -> dict[str, Any]:
        return {
            "patches": [patch.serialize() for patch in self.patches],
            "modifiedBranches": [branch.serialize() for branch in self.modified_branches],
            "allReleaseBranches": [branch.serialize() for branch in self.all_release_branches],
        }

    @staticmethod
    def deserialize(data: dict[str, Any]) -> "MaintenanceState":
        """Rebuild state, relinking patch references and sorting modified branches."""
        patches = [Patch.deserialize(entry) for entry in data.get("patches", [])]
        modified_branches = [
            ModifiedBranch.deserialize(entry, patches)
            for entry in data.get("modifiedBranches", [])
        ]
        modified_branches.sort(key=lambda branch: (branch.repo, branch.branch))
        return MaintenanceState(
            patches=patches,
            modified_branches=modified_branches,
            all_release_branches=[
                ReleaseBranch.deserialize(entry) for entry in data.get("allReleaseBranches", [])
            ],
        )


class StateStore(ABC):
    """Interface for loading and saving maintenance state."""

    @abstractmethod
    def load(self) -> MaintenanceState:
        """Load state, returning an empty state when nothing has been saved."""
        ...

    @abstractmethod
    def save(self, state: MaintenanceState) -> None:
        """Durably persist the entire state."""
        ...


class JsonFileStateStore(StateStore):
    """Stores state as a single pretty-printed JSON document.

    Writes go to a temporary file in the same directory which then replaces
    the state file, so a crash mid-write never leaves a truncated document.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> MaintenanceState:
        if not self.path.exists():
            return MaintenanceState()

        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"State file {self.path} is not valid JSON: {e}") from e
        return MaintenanceState.deserialize(data)

    def save(self, state: MaintenanceState) -> None:
        content = json.dumps(state.serialize(), indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("saved state to %s", self.path)


class DryRunStateStore(StateStore):
    """Loads real state but never writes it."""

    def __init__(self, wrapped: StateStore) -> None:
        self._wrapped = wrapped

    def load(self) -> MaintenanceState:
        return self._wrapped.load()

    def save(self, state: MaintenanceState) -> None:
        logger.debug("dry-run: state not saved")
