"""HTTP metadata client using requests."""

import logging
from typing import Any

import requests

from mrelease.core.errors import MetadataError
from mrelease.core.manifest import Manifest
from mrelease.core.metadata.abc import MetadataService
from mrelease.core.metadata.types import PhetioSimulation, PublishedSimulation
from mrelease.core.time import RealTime, Time
from mrelease.core.version import SimVersion

logger = logging.getLogger(__name__)

SIMULATIONS_ENDPOINT = "/services/metadata/1.3/simulations"
PHETIO_ENDPOINT = "/services/metadata/phetio"
DEFAULT_PHETIO_SERVER = "https://phet-io.colorado.edu"


class RequestsMetadataService(MetadataService):
    """Production implementation querying the metadata endpoints over HTTP.

    Connection failures, timeouts and 5xx responses are retried with
    exponential backoff; any other non-200 response raises MetadataError.
    """

    def __init__(
        self,
        server: str,
        *,
        phetio_server: str = DEFAULT_PHETIO_SERVER,
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_backoff: float = 1.0,
        time: Time | None = None,
    ) -> None:
        self._server = server.rstrip("/")
        self._phetio_server = phetio_server.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._initial_backoff = initial_backoff
        self._time = time if time is not None else RealTime()

    def get_published_simulations(self, simulation: str | None = None) -> list[PublishedSimulation]:
        params: dict[str, str] = {
            "format": "json",
            "type": "html",
            "include-unpublished": "true",
            "summary": "",
        }
        if simulation is not None:
            params["simulation"] = simulation

        data = self._get_json(f"{self._server}{SIMULATIONS_ENDPOINT}", params)
        if not isinstance(data, dict) or "projects" not in data:
            raise MetadataError("Simulation metadata response has no 'projects'")

        simulations: list[PublishedSimulation] = []
        for project in data["projects"]:
            name: str = project["name"]
            version = project["version"]
            simulations.append(
                PublishedSimulation(
                    repo=name[name.index("/") + 1 :],
                    major=int(version["major"]),
                    minor=int(version["minor"]),
                    maintenance=int(version.get("maintenance", 0)),
                    dev=version.get("dev"),
                )
            )
        return simulations

    def get_phetio_simulations(
        self, *, active: bool | None = None, latest: bool | None = None
    ) -> list[PhetioSimulation]:
        params: dict[str, str] = {}
        if active is not None:
            params["active"] = str(active).lower()
        if latest is not None:
            params["latest"] = str(latest).lower()

        data = self._get_json(f"{self._server}{PHETIO_ENDPOINT}", params)
        if not isinstance(data, list):
            raise MetadataError("PhET-iO metadata response is not a list")

        return [
            PhetioSimulation(
                name=entry["name"],
                version_major=int(entry["versionMajor"]),
                version_minor=int(entry["versionMinor"]),
                version_maintenance=int(entry.get("versionMaintenance", 0)),
                version_suffix=entry.get("versionSuffix") or "",
                active=bool(entry.get("active")),
                latest=bool(entry.get("latest")),
            )
            for entry in data
        ]

    def get_deployed_dependencies(self, repo: str, version: SimVersion, brand: str) -> Manifest:
        if brand == "phet":
            url = f"{self._server}/sims/html/{repo}/{version}/dependencies.json"
        else:
            branch = f"{version.major}.{version.minor}"
            url = f"{self._phetio_server}/sims/{repo}/{branch}/dependencies.json"

        data = self._get_json(url, {})
        if not isinstance(data, dict) or not data:
            raise MetadataError(f"No dependencies published at {url}")
        return data

    def _get_json(self, url: str, params: dict[str, str]) -> Any:
        for attempt in range(self._max_retries):
            is_last = attempt == self._max_retries - 1
            wait_time = self._initial_backoff * (2**attempt)
            try:
                response = requests.get(url, params=params, timeout=self._timeout)
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if is_last:
                    raise MetadataError(f"Could not reach {url}: {e}") from e
                logger.warning("Retrying %s in %.1fs after %s", url, wait_time, e)
                self._time.sleep(wait_time)
                continue

            if 500 <= response.status_code < 600 and not is_last:
                logger.warning(
                    "Retrying %s in %.1fs after HTTP %s", url, wait_time, response.status_code
                )
                self._time.sleep(wait_time)
                continue

            if response.status_code != 200:
                raise MetadataError(
                    f"{url} returned HTTP {response.status_code}: {response.text[:200]}"
                )
            try:
                return response.json()
            except ValueError as e:
                raise MetadataError(f"{url} returned invalid JSON") from e

        raise MetadataError(f"No response from {url}")
