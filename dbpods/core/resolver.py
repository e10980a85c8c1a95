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
# DIALECT RESOLVER
# -----------------------------------------------------------------------------
# Responsibility: "Start or reuse" a database for a test run.
#
# Flow per dialect:
#   TEST_DATABASE_<DIALECT> set?  -> use it, no Docker
#   otherwise                     -> start Pod -> register -> URL
#
# The module-level run_*/run_test_*/connect_to_test_* functions share one
# lazily created Provisioner (and therefore one registry).
# -----------------------------------------------------------------------------

import threading
from collections.abc import Callable

import pytest
from rich.console import Console

from dbpods.config import get_override
from dbpods.core.connect import bootstrap, connect, connect_engine
from dbpods.core.registry import ResourceRegistry
from dbpods.core.retry import RetryPolicy
from dbpods.domain.models import Dialect, ProvisionedResource, get_spec
from dbpods.infra.docker_client import DockerProvider, DockerProviderError

console = Console()


class Provisioner:
    """
    Starts database Pods and hands out URLs or connections to them.

    Every Pod it starts is added to `registry` before its URL is returned.
    A fresh DockerProvider is created per start, so an unreachable daemon
    surfaces as ContainerRuntimeError at the call that needed it.
    """

    def __init__(
        self,
        registry: ResourceRegistry | None = None,
        provider_factory: Callable[[], DockerProvider] = DockerProvider,
        policy: RetryPolicy | None = None,
    ) -> None:
        self.registry = registry if registry is not None else ResourceRegistry()
        self._provider_factory = provider_factory
        self.policy = policy

    def start(self, dialect: Dialect | str) -> tuple[DockerProvider, ProvisionedResource]:
        """
        Start a Pod for `dialect` and register it.

        Raises:
            ContainerRuntimeError: Docker is unreachable.
            ContainerStartError: The image failed to start.
        """
        spec = get_spec(dialect)
        provider = self._provider_factory()
        resource = provider.run(spec)
        self.registry.add(resource)
        return provider, resource

    def run(self, dialect: Dialect | str) -> str:
        """Start a Pod and return its connection URL."""
        spec = get_spec(dialect)
        _, resource = self.start(spec.dialect)
        return spec.render_url(resource.host, resource.get_port(spec.port))

    def run_for_test(self, dialect: Dialect | str) -> str:
        """
        Return the override DSN if set, else start a Pod.

        Must be called from inside a test or fixture: a failed start fails
        the test.
        """
        spec = get_spec(dialect)
        dsn = get_override(spec.dialect)
        if dsn:
            console.print(
                f"[yellow][RESOLVER] Skipping Docker setup because environment variable "
                f"{spec.override_env} is set to: {dsn}[/yellow]"
            )
            return dsn

        try:
            return self.run(spec.dialect)
        except DockerProviderError as e:
            pytest.fail(f"Could not start {spec.dialect.value}: {e}")

    def connect_to_test(self, dialect: Dialect | str):
        """
        Return a live connection to a test database.

        With an override set this is connect() and may raise
        DatabaseConnectionError. Otherwise a Pod is started and bootstrapped;
        if it never comes up it is purged and the process halts.

        Raises:
            DockerProviderError: "Could not start resource".
        """
        spec = get_spec(dialect)
        dsn = get_override(spec.dialect)
        if dsn:
            console.print(
                f"[yellow][RESOLVER] Found {spec.dialect.value} test database config, "
                f"skipping Docker...[/yellow]"
            )
            return connect(spec.dialect, dsn, self.policy)

        try:
            provider, resource = self.start(spec.dialect)
        except DockerProviderError as e:
            raise type(e)(f"Could not start resource: {e}") from e

        return bootstrap(
            spec.url_template,
            spec.port,
            spec.dialect,
            provider,
            resource,
            policy=self.policy,
            registry=self.registry,
        )

    def connect_to_test_engine(self, dialect: Dialect | str):
        """run_for_test() and wrap the URL in a verified SQLAlchemy engine."""
        spec = get_spec(dialect)
        return connect_engine(spec.dialect, self.run_for_test(spec.dialect), self.policy)


# Default provisioner (initialized on first use)
_default: Provisioner | None = None
_default_lock = threading.Lock()


def get_provisioner() -> Provisioner:
    """Get or create the module-default Provisioner."""
    global _default

    with _default_lock:
        if _default is None:
            _default = Provisioner()
        return _default


def set_provisioner(provisioner: Provisioner | None) -> None:
    """Replace the module-default Provisioner (None resets it)."""
    global _default

    with _default_lock:
        _default = provisioner


# =============================================================================
# PER-DIALECT SHORTCUTS
# =============================================================================


def run_postgresql() -> str:
    """Start a PostgreSQL Pod and return its URL."""
    return get_provisioner().run(Dialect.POSTGRESQL)


def run_test_postgresql() -> str:
    """PostgreSQL URL for a test: TEST_DATABASE_POSTGRESQL or a new Pod."""
    return get_provisioner().run_for_test(Dialect.POSTGRESQL)


def connect_to_test_postgresql():
    return get_provisioner().connect_to_test(Dialect.POSTGRESQL)


def run_mysql() -> str:
    """Start a MySQL Pod and return its URL."""
    return get_provisioner().run(Dialect.MYSQL)


def run_test_mysql() -> str:
    """MySQL URL for a test: TEST_DATABASE_MYSQL or a new Pod."""
    return get_provisioner().run_for_test(Dialect.MYSQL)


def connect_to_test_mysql():
    return get_provisioner().connect_to_test(Dialect.MYSQL)


def run_cockroachdb() -> str:
    """Start a CockroachDB Pod and return its URL."""
    return get_provisioner().run(Dialect.COCKROACHDB)


def run_test_cockroachdb() -> str:
    """CockroachDB URL for a test: TEST_DATABASE_COCKROACHDB or a new Pod."""
    return get_provisioner().run_for_test(Dialect.COCKROACHDB)


def connect_to_test_cockroachdb():
    return get_provisioner().connect_to_test(Dialect.COCKROACHDB)
