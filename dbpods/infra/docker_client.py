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
# DOCKER PROVIDER
# -----------------------------------------------------------------------------
# Responsibility: A thin wrapper around the Docker SDK that starts database
# Pods, reports their published ports and purges them again.
#
# This is part of the Infrastructure layer - the Provisioner and the cleanup
# registry talk to Docker only through this class.
# -----------------------------------------------------------------------------

import uuid
from urllib.parse import urlsplit

import docker
import requests
from docker import DockerClient
from docker.errors import APIError, DockerException, ImageNotFound, NotFound
from rich.console import Console

from dbpods.config import DOCKER_CONFIG
from dbpods.domain.models import DialectSpec, ProvisionedResource

console = Console()


class DockerProviderError(Exception):
    """Base class for container runtime failures."""

    pass


class ContainerRuntimeError(DockerProviderError):
    """Raised when the Docker daemon cannot be reached."""

    pass


class ContainerStartError(DockerProviderError):
    """Raised when a database Pod fails to start or publish its port."""

    pass


class DockerProvider:
    """
    Docker SDK wrapper for database Pods.

    Connects once on construction and fails fast with ContainerRuntimeError
    if the daemon does not answer a ping. Every container it starts is
    labelled so stray Pods can be identified with `docker ps --filter`.
    """

    def __init__(self, base_url: str | None = None) -> None:
        """
        Initialize the Docker provider.

        Args:
            base_url: Daemon endpoint; defaults to DOCKER_HOST, then the
                local socket via docker.from_env().
        """
        self._base_url = base_url or DOCKER_CONFIG["base_url"]
        self._client: DockerClient | None = None

        self._connect()

    def _connect(self) -> None:
        """
        Establish connection to Docker daemon.

        Raises:
            ContainerRuntimeError: If the daemon is unreachable.
        """
        try:
            if self._base_url:
                self._client = docker.DockerClient(base_url=self._base_url)
            else:
                self._client = docker.from_env()
            self._client.ping()
            console.print("[green][DOCKER] Connected to Docker Engine[/green]")
        except (DockerException, requests.exceptions.RequestException) as e:
            self._client = None
            console.print(f"[red][DOCKER] Could not connect to docker: {e}[/red]")
            raise ContainerRuntimeError(f"Could not connect to docker: {e}") from e

    def get_client(self) -> DockerClient:
        """
        Get the Docker client, verifying connection is still active.

        Raises:
            ContainerRuntimeError: If Docker connection is lost.
        """
        if self._client is None:
            raise ContainerRuntimeError("Docker client not initialized")

        try:
            self._client.ping()
            return self._client
        except (DockerException, requests.exceptions.RequestException) as e:
            console.print(f"[red][DOCKER] Connection lost: {e}[/red]")
            raise ContainerRuntimeError(f"Docker connection lost: {e}") from e

    def is_connected(self) -> bool:
        """True if Docker is currently reachable."""
        if self._client is None:
            return False
        try:
            self._client.ping()
            return True
        except (DockerException, requests.exceptions.RequestException):
            return False

    @property
    def host(self) -> str:
        """
        Hostname under which published ports are reachable.

        A tcp:// DOCKER_HOST publishes ports on that machine; a local socket
        publishes them on localhost.
        """
        if self._base_url and self._base_url.startswith("tcp://"):
            return urlsplit(self._base_url).hostname or "localhost"
        return "localhost"

    def run(self, spec: DialectSpec) -> ProvisionedResource:
        """
        Start a database Pod and wait for Docker to publish its port.

        Args:
            spec: The dialect's container recipe.

        Returns:
            ProvisionedResource for the running container.

        Raises:
            ContainerStartError: Image missing/unpullable, create or start
                rejected, daemon transport failure, or no host port published.
        """
        client = self.get_client()
        name = f"dbpods-{spec.dialect.value}-{uuid.uuid4().hex[:8]}"

        console.print(f"[cyan][DOCKER] Starting {spec.image} as {name}[/cyan]")
        try:
            self._ensure_image(client, spec)
            container = client.containers.create(
                image=spec.image,
                name=name,
                command=spec.command,
                environment=dict(spec.environment),
                ports={spec.port: None},
                labels={DOCKER_CONFIG["label"]: "true", "dbpods.dialect": spec.dialect.value},
                detach=True,
            )
        except (DockerException, requests.exceptions.RequestException) as e:
            console.print(f"[red][DOCKER] Could not start {spec.image}: {e}[/red]")
            raise ContainerStartError(f"Could not start {spec.image}: {e}") from e

        # From here on the container exists and must not outlive a failure
        try:
            container.start()
            container.reload()
        except (DockerException, requests.exceptions.RequestException) as e:
            console.print(f"[red][DOCKER] Could not start {spec.image}: {e}[/red]")
            self._discard(container, name)
            raise ContainerStartError(f"Could not start {spec.image}: {e}") from e

        ports = {}
        for key, bindings in (container.ports or {}).items():
            if bindings:
                ports[key] = str(bindings[0]["HostPort"])

        resource = ProvisionedResource(
            container_id=container.id,
            name=name,
            dialect=spec.dialect,
            image=spec.image,
            host=self.host,
            ports=ports,
        )

        if not resource.get_port(spec.port):
            # Unreachable Pod: remove it before reporting
            self.purge(resource)
            raise ContainerStartError(f"{spec.image} did not publish port {spec.port}")

        console.print(
            f"[green][DOCKER] {name} ({resource.short_id}) up, "
            f"{spec.port} -> {resource.host}:{resource.get_port(spec.port)}[/green]"
        )
        return resource

    def _ensure_image(self, client: DockerClient, spec: DialectSpec) -> None:
        """Pull the image unless it is already present locally."""
        try:
            client.images.get(spec.image)
        except ImageNotFound:
            console.print(f"[cyan][DOCKER] Pulling {spec.image}...[/cyan]")
            client.images.pull(spec.repository, tag=spec.tag)

    def _discard(self, container, name: str) -> None:
        """Force-remove a container that never became a usable Pod."""
        try:
            container.remove(force=True, v=True)
            console.print(f"[cyan][DOCKER] Removed half-started {name}[/cyan]")
        except NotFound:
            pass
        except (DockerException, requests.exceptions.RequestException) as e:
            console.print(f"[red][DOCKER] Could not remove half-started {name}: {e}[/red]")

    def purge(self, resource: ProvisionedResource) -> None:
        """
        Force-remove a Pod and its anonymous volumes.

        A container that is already gone counts as purged.

        Raises:
            DockerProviderError: If Docker refuses the removal.
        """
        client = self.get_client()
        try:
            container = client.containers.get(resource.container_id)
            container.remove(force=True, v=True)
            console.print(f"[cyan][DOCKER] Purged {resource.name} ({resource.short_id})[/cyan]")
        except NotFound:
            console.print(f"[dim][DOCKER] {resource.name} already gone[/dim]")
        except (APIError, requests.exceptions.RequestException) as e:
            raise DockerProviderError(f"Could not purge {resource.name}: {e}") from e
