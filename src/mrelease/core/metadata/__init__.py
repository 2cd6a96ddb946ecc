from mrelease.core.metadata.abc import MetadataService
from mrelease.core.metadata.types import PhetioSimulation, PublishedSimulation

__all__ = ["MetadataService", "PhetioSimulation", "PublishedSimulation"]
