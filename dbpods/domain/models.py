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
# DOMAIN MODELS - DATABASE POD RECIPES
# -----------------------------------------------------------------------------
# These models describe the disposable database Pods: which image to run,
# how to reach it once it is up, and what a parsed connection string holds.
#
# The recipes are fixed per dialect. The Provisioner reads them; the
# DockerProvider executes them blindly.
# -----------------------------------------------------------------------------

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field


class Dialect(str, Enum):
    """
    Supported database dialects.

    Each dialect maps to exactly one DialectSpec (image, port, URL template).
    CockroachDB speaks the PostgreSQL wire protocol and shares its driver.
    """

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    COCKROACHDB = "cockroachdb"


class DialectSpec(BaseModel):
    """
    Container recipe for one dialect.

    Fields:
    - repository/tag: The Docker image to run
    - environment: Startup variables (credentials, default database)
    - command: Optional command override (CockroachDB needs one)
    - port: The container port key probed for the published host port
    - url_template: Connection URL with {host} and {port} placeholders
    - override_env: Environment variable that skips provisioning entirely
    - liveness_query: Trivial statement proving the server accepts queries
    """

    dialect: Dialect
    repository: str = Field(..., min_length=1)
    tag: str = Field(..., min_length=1)
    environment: dict[str, str] = Field(default_factory=dict)
    command: list[str] | None = None
    port: str = Field(..., pattern=r"^\d+/(tcp|udp)$")
    url_template: str
    override_env: str
    liveness_query: str = "SELECT 1"

    class Config:
        """Recipes are constants."""

        frozen = True

    @property
    def image(self) -> str:
        return f"{self.repository}:{self.tag}"

    def render_url(self, host: str, port: str | int) -> str:
        """Fill the URL template with the discovered endpoint."""
        return self.url_template.format(host=host, port=port)


DIALECT_SPECS: dict[Dialect, DialectSpec] = {
    Dialect.POSTGRESQL: DialectSpec(
        dialect=Dialect.POSTGRESQL,
        repository="postgres",
        tag="16",
        environment={"POSTGRES_PASSWORD": "secret", "POSTGRES_DB": "postgres"},
        port="5432/tcp",
        url_template="postgres://postgres:secret@{host}:{port}/postgres?sslmode=disable",
        override_env="TEST_DATABASE_POSTGRESQL",
        liveness_query="SELECT version()",
    ),
    Dialect.MYSQL: DialectSpec(
        dialect=Dialect.MYSQL,
        repository="mysql",
        tag="8.0",
        environment={"MYSQL_ROOT_PASSWORD": "secret"},
        port="3306/tcp",
        url_template="mysql://root:secret@({host}:{port})/mysql?parseTime=true&multiStatements=true",
        override_env="TEST_DATABASE_MYSQL",
        liveness_query="SELECT VERSION()",
    ),
    Dialect.COCKROACHDB: DialectSpec(
        dialect=Dialect.COCKROACHDB,
        repository="cockroachdb/cockroach",
        tag="v23.1.11",
        command=["start-single-node", "--insecure"],
        port="26257/tcp",
        url_template="cockroach://root@{host}:{port}/defaultdb?sslmode=disable",
        override_env="TEST_DATABASE_COCKROACHDB",
        liveness_query="SELECT version()",
    ),
}


def get_spec(dialect: Dialect | str) -> DialectSpec:
    """Look up the recipe for a dialect (enum member or its string value)."""
    return DIALECT_SPECS[Dialect(dialect)]


@dataclass
class ProvisionedResource:
    """
    A running database Pod tracked for cleanup.

    Created by the DockerProvider only after the container started and
    published its ports, so every instance refers to a live container.
    """

    container_id: str
    name: str
    dialect: Dialect
    image: str
    host: str = "localhost"
    ports: dict[str, str] = field(default_factory=dict)

    def get_port(self, port: str) -> str:
        """
        Return the host port bound to a container port key (e.g. '5432/tcp').

        Returns an empty string when the port is not published, the same
        as an unbound lookup on the runtime side.
        """
        return self.ports.get(port, "")

    @property
    def short_id(self) -> str:
        return self.container_id[:12]


class ConnectionDescriptor(BaseModel):
    """
    Structured view of a DSN.

    Produced by dbpods.domain.dsn.parse_dsn so drivers can be called with
    keyword arguments instead of patched strings.
    """

    dialect: Dialect
    scheme: str
    user: str | None = None
    password: str | None = None
    host: str = "localhost"
    port: int
    database: str | None = None
    options: dict[str, str] = Field(default_factory=dict)

    class Config:
        """Descriptors are values."""

        frozen = True

    def option_enabled(self, name: str) -> bool:
        """True when a boolean query option is set to a truthy value."""
        return self.options.get(name, "").lower() in ("1", "true", "yes", "on")
