"""Records returned by the simulation metadata services."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PublishedSimulation:
    """A phet-brand simulation as published on the production website.

    `repo` has the "html/" project prefix stripped.
    """

    repo: str
    major: int
    minor: int
    maintenance: int
    dev: int | None = None

    @property
    def branch(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class PhetioSimulation:
    """A PhET-iO simulation version entry."""

    name: str
    version_major: int
    version_minor: int
    version_maintenance: int
    version_suffix: str
    active: bool
    latest: bool

    @property
    def branch(self) -> str:
        branch = f"{self.version_major}.{self.version_minor}"
        if self.version_suffix:
            branch += f"-{self.version_suffix}"
        return branch
