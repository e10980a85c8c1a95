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
# CONNECTION BOOTSTRAPPER
# -----------------------------------------------------------------------------
# Responsibility: Turn a DSN into a live, verified database connection.
#
# A container reporting "running" does not mean the server accepts
# connections yet, so every connect is: open -> liveness query -> retry.
#
# Two shapes:
# - connect():   raises DatabaseConnectionError for the caller to handle
# - bootstrap(): container path; on exhaustion purges the Pod and halts
# -----------------------------------------------------------------------------

import psycopg2
import pymysql
from pymysql.constants import CLIENT
from rich.console import Console
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine

from dbpods.core.halt import halt
from dbpods.core.registry import ResourceRegistry
from dbpods.core.retry import RetryExhaustedError, RetryPolicy
from dbpods.domain.dsn import normalize_dsn, parse_dsn
from dbpods.domain.models import ConnectionDescriptor, Dialect, ProvisionedResource, get_spec
from dbpods.infra.docker_client import DockerProvider, DockerProviderError

console = Console()

# Per-attempt driver timeout (seconds); the retry policy owns the overall deadline
CONNECT_TIMEOUT = 10

# MySQL DSN options understood by other drivers that PyMySQL has no use for
MYSQL_IGNORED_OPTIONS = ("parseTime", "multiStatements")

SQLALCHEMY_DRIVERS = {
    Dialect.POSTGRESQL: "postgresql+psycopg2",
    Dialect.MYSQL: "mysql+pymysql",
    Dialect.COCKROACHDB: "cockroachdb+psycopg2",
}


class DatabaseConnectionError(Exception):
    """Raised when a database stays unreachable for the whole retry budget."""

    def __init__(self, dialect: Dialect, dsn: str, cause: BaseException | None) -> None:
        super().__init__(f"Unable to connect to {dialect.value} ({dsn}): {cause}")
        self.dialect = dialect
        self.dsn = dsn
        self.cause = cause


def _mysql_kwargs(descriptor: ConnectionDescriptor) -> dict:
    kwargs = {
        "host": descriptor.host,
        "port": descriptor.port,
        "user": descriptor.user or "root",
        "password": descriptor.password or "",
        "connect_timeout": CONNECT_TIMEOUT,
    }
    if descriptor.database:
        kwargs["database"] = descriptor.database
    if descriptor.option_enabled("multiStatements"):
        kwargs["client_flag"] = CLIENT.MULTI_STATEMENTS
    return kwargs


def open_connection(dialect: Dialect | str, dsn: str):
    """
    Open a driver connection and run the dialect's liveness query once.

    No retries here; the connection is closed again if the probe fails.

    Returns:
        psycopg2 connection (PostgreSQL, CockroachDB) or pymysql connection.
    """
    dialect = Dialect(dialect)
    spec = get_spec(dialect)

    if dialect is Dialect.MYSQL:
        conn = pymysql.connect(**_mysql_kwargs(parse_dsn(dsn, dialect)))
    else:
        conn = psycopg2.connect(normalize_dsn(dsn), connect_timeout=CONNECT_TIMEOUT)

    try:
        cursor = conn.cursor()
        try:
            cursor.execute(spec.liveness_query)
            cursor.fetchone()
        finally:
            cursor.close()
    except Exception:
        conn.close()
        raise
    return conn


def connect(dialect: Dialect | str, dsn: str, policy: RetryPolicy | None = None):
    """
    Connect to a database, retrying until it answers the liveness query.

    Args:
        dialect: Which driver to use.
        dsn: Connection string; scheme mapping is applied first.
        policy: Retry policy (5s interval, 5min deadline by default).

    Returns:
        A live DB-API connection owned by the caller.

    Raises:
        InvalidDSNError: The MySQL DSN cannot be parsed.
        DatabaseConnectionError: The retry budget ran out.
    """
    dialect = Dialect(dialect)
    normalized = normalize_dsn(dsn)
    if dialect is Dialect.MYSQL:
        # Malformed DSNs are not retried
        parse_dsn(normalized, dialect)

    try:
        conn = (policy or RetryPolicy()).run(
            lambda: open_connection(dialect, normalized),
            label=f"Connecting to database {dialect.value}",
        )
    except RetryExhaustedError as e:
        console.print(f"[red][CONNECT] Giving up on {dialect.value}: {e}[/red]")
        raise DatabaseConnectionError(dialect, normalized, e.last_error) from e

    console.print(f"[green][CONNECT] Connected to database {dialect.value}[/green]")
    return conn


def bootstrap(
    url_template: str,
    port_key: str,
    dialect: Dialect | str,
    provider: DockerProvider,
    resource: ProvisionedResource,
    policy: RetryPolicy | None = None,
    registry: ResourceRegistry | None = None,
):
    """
    Connect to a freshly started Pod, or purge it and halt.

    The template is filled with the resource's host and the host port bound
    to `port_key` on every attempt.

    Args:
        url_template: URL with {host} and {port} placeholders.
        port_key: Container port key, e.g. '5432/tcp'.
        dialect: Which driver to use.
        provider: Runtime handle used to purge the Pod on failure.
        resource: The Pod just started.
        policy: Retry policy.
        registry: Registry the Pod was added to; it is dropped from it after
            a successful purge.

    Returns:
        A live DB-API connection owned by the caller.
    """
    dialect = Dialect(dialect)

    def attempt():
        url = url_template.format(host=resource.host, port=resource.get_port(port_key))
        return open_connection(dialect, url)

    try:
        conn = (policy or RetryPolicy()).run(
            attempt, label=f"Bootstrapping {dialect.value} ({resource.name})"
        )
    except RetryExhaustedError as e:
        try:
            provider.purge(resource)
        except DockerProviderError as purge_error:
            halt(f"Could not connect to docker and unable to remove image: {e} - {purge_error}")
        if registry is not None:
            registry.discard(resource)
        halt(f"Could not connect to docker: {e}")

    console.print(f"[green][CONNECT] Connected to database {dialect.value} ({resource.name})[/green]")
    return conn


def build_engine(dialect: Dialect | str, dsn: str) -> Engine:
    """
    Create a SQLAlchemy engine from a DSN without connecting.

    The DSN is parsed into a descriptor and rebuilt as a SQLAlchemy URL;
    options only meaningful to other drivers are dropped.
    """
    dialect = Dialect(dialect)
    descriptor = parse_dsn(dsn, dialect)

    query = dict(descriptor.options)
    connect_args = {"connect_timeout": CONNECT_TIMEOUT}
    if dialect is Dialect.MYSQL:
        for option in MYSQL_IGNORED_OPTIONS:
            query.pop(option, None)
        if descriptor.option_enabled("multiStatements"):
            connect_args["client_flag"] = CLIENT.MULTI_STATEMENTS

    url = URL.create(
        drivername=SQLALCHEMY_DRIVERS[dialect],
        username=descriptor.user,
        password=descriptor.password,
        host=descriptor.host,
        port=descriptor.port,
        database=descriptor.database,
        query=query,
    )
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def connect_engine(dialect: Dialect | str, dsn: str, policy: RetryPolicy | None = None) -> Engine:
    """
    Build a SQLAlchemy engine and retry until `select version()` succeeds.

    Raises:
        InvalidDSNError: The DSN cannot be parsed.
        DatabaseConnectionError: The retry budget ran out.
    """
    dialect = Dialect(dialect)
    engine = build_engine(dialect, dsn)

    def probe() -> None:
        with engine.connect() as conn:
            conn.execute(text("select version()"))

    try:
        (policy or RetryPolicy()).run(probe, label=f"Opening engine for {dialect.value}")
    except RetryExhaustedError as e:
        engine.dispose()
        raise DatabaseConnectionError(dialect, dsn, e.last_error) from e

    console.print(f"[green][CONNECT] Engine ready for {dialect.value}[/green]")
    return engine
