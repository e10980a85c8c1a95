"""
dbpods - disposable database Pods for test suites.

Start PostgreSQL, MySQL or CockroachDB in Docker, connect with retry, and
purge everything when the run ends. Set TEST_DATABASE_POSTGRESQL,
TEST_DATABASE_MYSQL or TEST_DATABASE_COCKROACHDB to use an existing
database instead.
"""

from dbpods.config import ConfigError
from dbpods.core import (
    CleanupError,
    DatabaseConnectionError,
    OnExit,
    Provisioner,
    PurgeReport,
    ResourceRegistry,
    RetryCancelledError,
    RetryExhaustedError,
    RetryPolicy,
    bootstrap,
    connect,
    connect_engine,
    get_provisioner,
    kill_all_test_databases,
    parallel,
    register,
    retry,
)
from dbpods.core.resolver import (
    connect_to_test_cockroachdb,
    connect_to_test_mysql,
    connect_to_test_postgresql,
    run_cockroachdb,
    run_mysql,
    run_postgresql,
    run_test_cockroachdb,
    run_test_mysql,
    run_test_postgresql,
)
from dbpods.domain import Dialect, InvalidDSNError, ProvisionedResource, normalize_dsn, parse_dsn
from dbpods.infra import ContainerRuntimeError, ContainerStartError, DockerProvider

__version__ = "0.1.0"

__all__ = [
    "CleanupError", "DatabaseConnectionError", "OnExit", "Provisioner", "PurgeReport",
    "ResourceRegistry", "RetryCancelledError", "RetryExhaustedError", "RetryPolicy",
    "bootstrap", "connect", "connect_engine", "get_provisioner", "kill_all_test_databases",
    "parallel", "register", "retry",
    "connect_to_test_cockroachdb", "connect_to_test_mysql", "connect_to_test_postgresql",
    "run_cockroachdb", "run_mysql", "run_postgresql",
    "run_test_cockroachdb", "run_test_mysql", "run_test_postgresql",
    "Dialect", "InvalidDSNError", "ProvisionedResource", "normalize_dsn", "parse_dsn",
    "ContainerRuntimeError", "ContainerStartError", "DockerProvider",
    "ConfigError",
]
