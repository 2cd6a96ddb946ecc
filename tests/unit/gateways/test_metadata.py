"""Tests for the requests-based metadata client."""

from unittest.mock import Mock, patch

import pytest
import requests

from mrelease.core.errors import MetadataError
from mrelease.core.metadata.real import (
    PHETIO_ENDPOINT,
    SIMULATIONS_ENDPOINT,
    RequestsMetadataService,
)
from mrelease.core.metadata.types import PhetioSimulation, PublishedSimulation
from mrelease.core.version import SimVersion
from tests.fakes.time import FakeTime

SERVER = "https://metadata.example"


def _response(status_code: int = 200, payload: object = None) -> Mock:
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = payload
    response.text = "" if payload is None else str(payload)
    return response


def test_published_simulations_strip_project_prefix() -> None:
    """Test that html/ project names become repo names."""
    payload = {
        "projects": [
            {"name": "html/sim-a", "version": {"major": 1, "minor": 2, "maintenance": 3}},
            {"name": "html/sim-b", "version": {"major": 2, "minor": 0, "dev": 4}},
        ]
    }
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.return_value = _response(payload=payload)

        simulations = RequestsMetadataService(SERVER + "/").get_published_simulations()

        assert simulations == [
            PublishedSimulation(repo="sim-a", major=1, minor=2, maintenance=3),
            PublishedSimulation(repo="sim-b", major=2, minor=0, maintenance=0, dev=4),
        ]
        assert simulations[0].branch == "1.2"
        url = mock_get.call_args.args[0]
        assert url == SERVER + SIMULATIONS_ENDPOINT
        assert mock_get.call_args.kwargs["params"]["type"] == "html"


def test_phetio_simulations_pass_flags() -> None:
    """Test that active/latest flags become lowercase query parameters."""
    payload = [
        {
            "name": "sim-a",
            "versionMajor": 1,
            "versionMinor": 2,
            "versionMaintenance": 1,
            "versionSuffix": "phetio",
            "active": True,
            "latest": True,
        }
    ]
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.return_value = _response(payload=payload)

        simulations = RequestsMetadataService(SERVER).get_phetio_simulations(
            active=True, latest=True
        )

        assert simulations == [
            PhetioSimulation(
                name="sim-a",
                version_major=1,
                version_minor=2,
                version_maintenance=1,
                version_suffix="phetio",
                active=True,
                latest=True,
            )
        ]
        assert simulations[0].branch == "1.2-phetio"
        assert mock_get.call_args.args[0] == SERVER + PHETIO_ENDPOINT
        assert mock_get.call_args.kwargs["params"] == {"active": "true", "latest": "true"}


def test_server_errors_are_retried_with_backoff() -> None:
    """Test that a 5xx response is retried after sleeping."""
    time = FakeTime()
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.side_effect = [_response(status_code=503), _response(payload=[])]

        simulations = RequestsMetadataService(SERVER, time=time).get_phetio_simulations()

        assert simulations == []
        assert time.sleep_calls == [1.0]


def test_connection_errors_give_up_after_max_retries() -> None:
    """Test that repeated connection failures raise MetadataError."""
    time = FakeTime()
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(MetadataError, match="Could not reach"):
            RequestsMetadataService(SERVER, time=time).get_published_simulations()

        assert mock_get.call_count == 3
        assert time.sleep_calls == [1.0, 2.0]


def test_client_errors_are_not_retried() -> None:
    """Test that a 4xx response fails immediately."""
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.return_value = _response(status_code=404)

        with pytest.raises(MetadataError, match="returned HTTP 404"):
            RequestsMetadataService(SERVER, time=FakeTime()).get_published_simulations()

        assert mock_get.call_count == 1


def test_missing_projects_is_an_error() -> None:
    """Test that an unexpected payload shape raises MetadataError."""
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.return_value = _response(payload={"error": "nope"})

        with pytest.raises(MetadataError, match="has no 'projects'"):
            RequestsMetadataService(SERVER).get_published_simulations()


def test_deployed_dependencies_urls_per_brand() -> None:
    """Test that phet manifests come from the full version and phet-io from major.minor."""
    manifest = {"sim-a": {"sha": "a3"}}
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.return_value = _response(payload=manifest)
        service = RequestsMetadataService(SERVER, phetio_server="https://phetio.example/")

        phet = service.get_deployed_dependencies("sim-a", SimVersion(1, 2, 3), "phet")
        phetio = service.get_deployed_dependencies("sim-a", SimVersion(1, 2, 3), "phet-io")

        assert phet == manifest
        assert phetio == manifest
        assert [call.args[0] for call in mock_get.call_args_list] == [
            SERVER + "/sims/html/sim-a/1.2.3/dependencies.json",
            "https://phetio.example/sims/sim-a/1.2/dependencies.json",
        ]


def test_empty_deployed_dependencies_is_an_error() -> None:
    """Test that an empty manifest is reported instead of redeployed."""
    with patch("mrelease.core.metadata.real.requests.get") as mock_get:
        mock_get.return_value = _response(payload={})

        with pytest.raises(MetadataError, match="No dependencies published at"):
            RequestsMetadataService(SERVER).get_deployed_dependencies(
                "sim-a", SimVersion(1, 2, 3), "phet"
            )
