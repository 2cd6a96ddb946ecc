"""Simulation metadata service interface."""

from abc import ABC, abstractmethod

from mrelease.core.manifest import Manifest
from mrelease.core.metadata.types import PhetioSimulation, PublishedSimulation
from mrelease.core.version import SimVersion


class MetadataService(ABC):
    """Abstract interface for the published-simulation metadata services.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def get_published_simulations(self, simulation: str | None = None) -> list[PublishedSimulation]:
        """List published phet-brand HTML simulations, optionally for one repo."""
        ...

    @abstractmethod
    def get_phetio_simulations(
        self, *, active: bool | None = None, latest: bool | None = None
    ) -> list[PhetioSimulation]:
        """List PhET-iO simulation versions matching the given flags."""
        ...

    @abstractmethod
    def get_deployed_dependencies(self, repo: str, version: SimVersion, brand: str) -> Manifest:
        """The dependencies.json published with a deployed version of `repo`.

        Raises:
            MetadataError: If nothing is published for that version
        """
        ...
