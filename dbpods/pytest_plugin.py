# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# PYTEST PLUGIN
# -----------------------------------------------------------------------------
# Session fixtures that hand out database URLs. Pods are only started when a
# test asks for one, and every Pod started in the session is purged when the
# session ends.
# -----------------------------------------------------------------------------

import pytest

from dbpods.config import load_env_file
from dbpods.core.registry import ResourceRegistry
from dbpods.core.resolver import Provisioner
from dbpods.domain.models import Dialect
from dbpods.infra.docker_client import DockerProvider


def pytest_configure(config) -> None:
    load_env_file()


def purge_session(registry: ResourceRegistry, provider_factory=DockerProvider) -> None:
    """
    Purge the session's Pods; raise CleanupError if any refused.

    Raises:
        ContainerRuntimeError: Docker went away before cleanup.
        CleanupError: One or more Pods could not be removed.
    """
    if not len(registry):
        return
    registry.purge_all(provider_factory()).raise_for_failures()


@pytest.fixture(scope="session")
def dbpods_registry():
    """Registry of every Pod started during the session."""
    registry = ResourceRegistry()
    yield registry
    purge_session(registry)


@pytest.fixture(scope="session")
def dbpods_provisioner(dbpods_registry):
    return Provisioner(registry=dbpods_registry)


@pytest.fixture(scope="session")
def postgresql_url(dbpods_provisioner) -> str:
    return dbpods_provisioner.run_for_test(Dialect.POSTGRESQL)


@pytest.fixture(scope="session")
def mysql_url(dbpods_provisioner) -> str:
    return dbpods_provisioner.run_for_test(Dialect.MYSQL)


@pytest.fixture(scope="session")
def cockroachdb_url(dbpods_provisioner) -> str:
    return dbpods_provisioner.run_for_test(Dialect.COCKROACHDB)
