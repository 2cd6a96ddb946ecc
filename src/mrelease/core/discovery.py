"""Release-branch discovery.

Discovery is all-or-nothing: any metadata or git failure propagates and no
partial list is returned. Results are cached in MaintenanceState by the
engine, since a full run touches every active simulation repository.
"""

import json
import logging
import re
from typing import Any

from mrelease.core.config import MaintenanceConfig
from mrelease.core.errors import DiscoveryError
from mrelease.core.git.abc import Git
from mrelease.core.metadata.abc import MetadataService
from mrelease.core.metadata.types import PublishedSimulation
from mrelease.core.release_branch import (
    ReleaseBranch,
    combine_release_branches,
    without_excluded,
)

logger = logging.getLogger(__name__)

ACTIVE_SIMS_PATH = "data/active-sims"
RELEASE_BRANCH_PATTERN = re.compile(r"^(\d+)\.(\d+)$")


def _load_package(text: str, source: str) -> dict[str, Any]:
    try:
        package = json.loads(text)
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"Invalid package.json in {source}: {e}") from e
    if not isinstance(package, dict):
        raise DiscoveryError(f"Invalid package.json in {source}: not an object")
    return package


def _phet_section(package: dict[str, Any]) -> dict[str, Any]:
    section = package.get("phet")
    return section if isinstance(section, dict) else {}


def _ignores_maintenance(package: dict[str, Any]) -> bool:
    return bool(_phet_section(package).get("ignoreForAutomatedMaintenanceReleases"))


def get_active_sims(git: Git, config: MaintenanceConfig) -> list[str]:
    """Active simulation repositories listed in the tooling checkout."""
    text = git.read_working_file(config.tooling_dir, ACTIVE_SIMS_PATH)
    return [line.strip() for line in text.splitlines() if line.strip()]


def _is_newer_than_production(
    major: int, minor: int, production: PublishedSimulation | None
) -> bool:
    if production is None:
        return True
    return (major, minor) > (production.major, production.minor)


def discover_unreleased_branches(
    git: Git,
    config: MaintenanceConfig,
    published: list[PublishedSimulation],
    released: list[ReleaseBranch],
) -> list[ReleaseBranch]:
    """Release branches of active sims that are newer than their production version."""
    released_keys = {branch.key for branch in released}
    production_by_repo: dict[str, PublishedSimulation] = {}
    for simulation in published:
        current = production_by_repo.get(simulation.repo)
        if current is None or (simulation.major, simulation.minor) > (current.major, current.minor):
            production_by_repo[simulation.repo] = simulation

    unreleased: list[ReleaseBranch] = []
    for repo in get_active_sims(git, config):
        repo_dir = config.repo_dir(repo)
        package = _load_package(git.read_working_file(repo_dir, "package.json"), repo)
        if _ignores_maintenance(package):
            logger.debug("skipping %s (ignored for maintenance releases)", repo)
            continue

        for branch in sorted(git.get_remote_branch_map(repo_dir)):
            if (repo, branch) in released_keys:
                continue
            match = RELEASE_BRANCH_PATTERN.match(branch)
            if match is None:
                continue
            major, minor = int(match.group(1)), int(match.group(2))
            if not _is_newer_than_production(major, minor, production_by_repo.get(repo)):
                continue

            branch_package = _load_package(
                git.read_file_at_revision(repo_dir, f"origin/{branch}", "package.json"),
                f"{repo} {branch}",
            )
            if _ignores_maintenance(branch_package):
                continue
            supported = _phet_section(branch_package).get("supportedBrands") or []
            brands = ("phet", "phet-io") if "phet-io" in supported else ("phet",)
            unreleased.append(ReleaseBranch(repo, branch, brands, is_released=False))
    return unreleased


def discover_release_branches(
    git: Git, metadata: MetadataService, config: MaintenanceConfig
) -> list[ReleaseBranch]:
    """Every release branch that is a candidate for maintenance.

    Combines published phet branches, active+latest phet-io branches and
    unreleased local branches, merging brands for the same (repo, branch).
    """
    logger.info("loading phet brand ReleaseBranches")
    published = metadata.get_published_simulations()
    phet_branches = [
        ReleaseBranch(simulation.repo, simulation.branch, ("phet",), is_released=True)
        for simulation in published
    ]

    logger.info("loading phet-io brand ReleaseBranches")
    phetio_branches = [
        ReleaseBranch(simulation.name, simulation.branch, ("phet-io",), is_released=True)
        for simulation in metadata.get_phetio_simulations(active=True, latest=True)
        if simulation.active and simulation.latest
    ]

    logger.info("loading unreleased ReleaseBranches")
    unreleased_branches = discover_unreleased_branches(
        git, config, published, phet_branches + phetio_branches
    )

    return without_excluded(
        combine_release_branches([*phet_branches, *phetio_branches, *unreleased_branches])
    )
