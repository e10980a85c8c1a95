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
# CLEANUP REGISTRY
# -----------------------------------------------------------------------------
# Responsibility: Remember every database Pod we started so a test run can
# purge them all at the end, even when tests crash halfway.
#
# The registry is an explicit object handed to the Provisioner, not module
# state. Appends are guarded by a lock so parallel() provisioning is safe.
# -----------------------------------------------------------------------------

import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from rich.console import Console

from dbpods.core.exit_hooks import OnExit
from dbpods.core.halt import halt
from dbpods.domain.models import ProvisionedResource
from dbpods.infra.docker_client import DockerProvider, DockerProviderError

console = Console()


@dataclass
class PurgeReport:
    """Outcome of a purge: what went away and what refused to."""

    purged: list[ProvisionedResource] = field(default_factory=list)
    failures: list[tuple[ProvisionedResource, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise CleanupError listing every failure, if there were any."""
        if self.failures:
            raise CleanupError(self)


class CleanupError(Exception):
    """Raised when one or more Pods could not be purged."""

    def __init__(self, report: PurgeReport) -> None:
        lines = [f"{r.name} ({r.short_id}): {e}" for r, e in report.failures]
        super().__init__(f"Could not purge {len(lines)} resource(s): " + "; ".join(lines))
        self.report = report


class ResourceRegistry:
    """
    Thread-safe, append-only list of provisioned Pods.

    Entries leave the registry only through purge_all() (everything at once)
    or discard() (a Pod already purged by its own failure path).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._resources: list[ProvisionedResource] = []

    def add(self, resource: ProvisionedResource) -> None:
        with self._lock:
            self._resources.append(resource)
        console.print(f"[dim][REGISTRY] Tracking {resource.name} ({len(self)} total)[/dim]")

    def discard(self, resource: ProvisionedResource) -> None:
        with self._lock:
            if resource in self._resources:
                self._resources.remove(resource)

    @property
    def resources(self) -> list[ProvisionedResource]:
        """Snapshot of the tracked resources."""
        with self._lock:
            return list(self._resources)

    def __len__(self) -> int:
        with self._lock:
            return len(self._resources)

    def purge_all(self, provider: DockerProvider) -> PurgeReport:
        """
        Purge every tracked Pod.

        Attempts all of them even if some fail, then empties the registry.
        The caller decides whether failures are fatal.

        Args:
            provider: A live handle to the container runtime.

        Returns:
            PurgeReport with every success and every failure.
        """
        with self._lock:
            pending = list(self._resources)
            self._resources.clear()

        report = PurgeReport()
        for resource in pending:
            try:
                provider.purge(resource)
                report.purged.append(resource)
            except DockerProviderError as e:
                console.print(f"[red][REGISTRY] Could not purge {resource.name}: {e}[/red]")
                report.failures.append((resource, e))

        if pending:
            console.print(
                f"[cyan][REGISTRY] Purged {len(report.purged)}/{len(pending)} resource(s)[/cyan]"
            )
        return report


def kill_all_test_databases(
    registry: ResourceRegistry,
    provider_factory: Callable[[], DockerProvider] = DockerProvider,
) -> None:
    """
    Purge every tracked Pod through a fresh Docker connection.

    Any failure, including an unreachable daemon, halts the process.
    """
    if not len(registry):
        return

    try:
        provider = provider_factory()
    except DockerProviderError as e:
        halt(f"Could not connect to docker to purge test databases: {e}")

    report = registry.purge_all(provider)
    if not report.ok:
        halt(str(CleanupError(report)))


def register(registry: ResourceRegistry, install: bool = True) -> OnExit:
    """
    Wire kill_all_test_databases into an exit hook.

    Args:
        registry: The registry to purge on exit.
        install: Also hook atexit/SIGINT/SIGTERM (off for tests).
    """
    on_exit = OnExit().add(lambda: kill_all_test_databases(registry))
    if install:
        on_exit.install()
    return on_exit
