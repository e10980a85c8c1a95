# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Pod recipes and connection-string handling. No Docker, no drivers.
# -----------------------------------------------------------------------------

from .dsn import InvalidDSNError, normalize_dsn, parse_dsn
from .models import (
    DIALECT_SPECS,
    ConnectionDescriptor,
    Dialect,
    DialectSpec,
    ProvisionedResource,
    get_spec,
)

__all__ = [
    "DIALECT_SPECS", "ConnectionDescriptor", "Dialect", "DialectSpec",
    "ProvisionedResource", "get_spec",
    "InvalidDSNError", "normalize_dsn", "parse_dsn",
]
