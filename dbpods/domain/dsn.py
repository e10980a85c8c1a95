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
# DSN NORMALIZATION
# -----------------------------------------------------------------------------
# Responsibility: Turn the URLs handed out by the Provisioner (or supplied
# through an override variable) into something a driver accepts.
#
# - mysql://...      -> bare DSN (user:pass@(host:port)/db?opts)
# - cockroach://...  -> postgres://... (PostgreSQL wire protocol)
# - postgres://...   -> unchanged
# -----------------------------------------------------------------------------

import re
from urllib.parse import parse_qsl, unquote, urlsplit

from dbpods.domain.models import ConnectionDescriptor, Dialect

DEFAULT_PORTS = {
    Dialect.POSTGRESQL: 5432,
    Dialect.MYSQL: 3306,
    Dialect.COCKROACHDB: 26257,
}

POSTGRES_SCHEMES = ("postgres", "postgresql")

# user:pass@(host:port)/db?opts, user:pass@tcp(host:port)/db, user@host:port/db
MYSQL_DSN_PATTERN = re.compile(
    r"^(?:(?P<userinfo>.*)@)?"
    r"(?:(?P<protocol>[a-z]*)\((?P<address>[^)]*)\)|(?P<plain>[^/()@]*))"
    r"/(?P<database>[^?]*)"
    r"(?:\?(?P<query>.*))?$"
)


class InvalidDSNError(Exception):
    """Raised when a connection string cannot be parsed for its dialect."""

    pass


def dsn_scheme(dsn: str) -> str:
    """Return the scheme prefix of a DSN, or '' for a bare DSN."""
    if "://" not in dsn:
        return ""
    return dsn.split("://", 1)[0]


def normalize_dsn(dsn: str) -> str:
    """
    Apply the scheme mapping a driver expects.

    The MySQL driver takes a bare DSN, so the mysql:// prefix is stripped.
    CockroachDB is reached through a PostgreSQL driver, so cockroach:// is
    rewritten to postgres://. Any other DSN is returned unchanged.
    """
    scheme = dsn_scheme(dsn)
    if scheme == "mysql":
        return dsn[len("mysql://") :]
    if scheme == "cockroach":
        return "postgres://" + dsn[len("cockroach://") :]
    return dsn


def _split_address(address: str, dsn: str, default_port: int) -> tuple[str, int]:
    if address.startswith("["):
        # IPv6 literal: [::1] or [::1]:3306
        host, bracket, rest = address[1:].partition("]")
        if not bracket or (rest and not rest.startswith(":")):
            raise InvalidDSNError(f"Invalid address '{address}' in DSN: {dsn}")
        port = rest[1:]
    else:
        host, sep, port = address.rpartition(":")
        if not sep:
            host, port = address, ""
    if port and not port.isdigit():
        raise InvalidDSNError(f"Invalid port '{port}' in DSN: {dsn}")
    return host or "localhost", int(port) if port else default_port


def _parse_mysql(dsn: str) -> ConnectionDescriptor:
    bare = normalize_dsn(dsn)
    if "://" in bare:
        raise InvalidDSNError(f"Unsupported scheme '{dsn_scheme(bare)}' for mysql: {dsn}")

    match = MYSQL_DSN_PATTERN.match(bare)
    if match is None:
        raise InvalidDSNError(f"Malformed mysql DSN: {dsn}")

    user = password = None
    if match.group("userinfo") is not None:
        user, sep, pwd = match.group("userinfo").partition(":")
        password = pwd if sep else None

    protocol = match.group("protocol")
    if protocol not in (None, "", "tcp"):
        raise InvalidDSNError(f"Unsupported mysql network '{protocol}': {dsn}")

    address = match.group("address")
    if address is None:
        address = match.group("plain") or ""
    host, port = _split_address(address, dsn, DEFAULT_PORTS[Dialect.MYSQL])

    return ConnectionDescriptor(
        dialect=Dialect.MYSQL,
        scheme="mysql",
        user=user or None,
        password=password,
        host=host,
        port=port,
        database=match.group("database") or None,
        options=dict(parse_qsl(match.group("query") or "")),
    )


def _parse_postgres(dsn: str, dialect: Dialect) -> ConnectionDescriptor:
    normalized = normalize_dsn(dsn)
    parts = urlsplit(normalized)
    if parts.scheme not in POSTGRES_SCHEMES:
        raise InvalidDSNError(f"Unsupported scheme '{parts.scheme}' for {dialect.value}: {dsn}")

    try:
        port = parts.port
    except ValueError as e:
        raise InvalidDSNError(f"Invalid port in DSN: {dsn}") from e

    database = parts.path.lstrip("/")
    return ConnectionDescriptor(
        dialect=dialect,
        scheme=parts.scheme,
        user=unquote(parts.username) if parts.username else None,
        password=unquote(parts.password) if parts.password is not None else None,
        host=parts.hostname or "localhost",
        port=port or DEFAULT_PORTS[dialect],
        database=unquote(database) if database else None,
        options=dict(parse_qsl(parts.query)),
    )


def parse_dsn(dsn: str, dialect: Dialect | str) -> ConnectionDescriptor:
    """
    Parse a DSN into a ConnectionDescriptor.

    Args:
        dsn: URL form (postgres://, cockroach://, mysql://) or bare MySQL DSN.
        dialect: Which dialect the DSN is meant for.

    Raises:
        InvalidDSNError: Empty, malformed, or wrong-scheme input.
    """
    dialect = Dialect(dialect)
    if not dsn or not dsn.strip():
        raise InvalidDSNError("DSN is empty")

    if dialect is Dialect.MYSQL:
        return _parse_mysql(dsn.strip())
    return _parse_postgres(dsn.strip(), dialect)
