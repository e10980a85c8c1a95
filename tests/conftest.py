"""
Pytest configuration and fixtures for dbpods tests.

Nothing here talks to a real Docker daemon or database server.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dbpods.core.retry import RetryPolicy  # noqa: E402
from dbpods.domain.models import Dialect, ProvisionedResource, get_spec  # noqa: E402
from dbpods.infra.docker_client import DockerProvider  # noqa: E402

OVERRIDE_VARS = ("TEST_DATABASE_POSTGRESQL", "TEST_DATABASE_MYSQL", "TEST_DATABASE_COCKROACHDB")

HOST_PORTS = {"5432/tcp": "54321", "3306/tcp": "33061", "26257/tcp": "26258"}


@pytest.fixture(autouse=True)
def no_overrides(monkeypatch):
    """Tests start without any TEST_DATABASE_* override set."""
    for name in OVERRIDE_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fast_policy():
    """Retry policy short enough for unit tests."""
    return RetryPolicy(interval=0.01, max_duration=0.05)


@pytest.fixture
def make_resource():
    """Factory for ProvisionedResource objects."""
    counter = {"n": 0}

    def _make(dialect=Dialect.POSTGRESQL, host="localhost"):
        counter["n"] += 1
        spec = get_spec(dialect)
        return ProvisionedResource(
            container_id=f"{counter['n']:064x}",
            name=f"dbpods-{spec.dialect.value}-{counter['n']:08x}",
            dialect=spec.dialect,
            image=spec.image,
            host=host,
            ports={spec.port: HOST_PORTS[spec.port]},
        )

    return _make


@pytest.fixture
def fake_provider(make_resource):
    """DockerProvider stand-in whose run() returns a fresh resource per call."""
    provider = MagicMock(spec=DockerProvider)
    provider.run.side_effect = lambda spec: make_resource(spec.dialect)
    provider.host = "localhost"
    return provider


@pytest.fixture
def mock_docker_client():
    """Mock Docker SDK client with the image present and one startable container."""
    client = MagicMock()
    client.ping.return_value = True

    container = MagicMock()
    container.id = "c0ffee" + "0" * 58
    container.ports = {"5432/tcp": [{"HostIp": "0.0.0.0", "HostPort": "54321"}]}
    client.containers.create.return_value = container
    client.containers.get.return_value = container

    return client
