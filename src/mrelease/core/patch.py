"""Patch records: named fixes that may need cherry-picking onto release branches."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Patch:
    """A named fix living in one repository.

    `shas` holds candidate commits in application order. When several are
    listed, the first one that cherry-picks cleanly onto a branch wins, since
    the right commit to pick can differ by branch age.
    """

    repo: str
    name: str
    message: str
    shas: list[str] = field(default_factory=list)

    def serialize(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "name": self.name,
            "message": self.message,
            "shas": list(self.shas),
        }

    @staticmethod
    def deserialize(data: dict[str, Any]) -> "Patch":
        return Patch(
            repo=data["repo"],
            name=data["name"],
            message=data["message"],
            shas=list(data.get("shas", [])),
        )

    def __str__(self) -> str:
        label = self.repo if self.name == self.repo else f"[{self.name}] {self.repo}"
        return f"{label} {self.message}"
