# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# Provisioning and teardown of test databases:
# - Provisioner: "start or reuse" per dialect
# - connect / bootstrap: retrying connection with liveness probe
# - ResourceRegistry: Pods to purge at the end of the run
# - parallel: fan-out/fan-in helper
# -----------------------------------------------------------------------------

from .connect import DatabaseConnectionError, bootstrap, connect, connect_engine
from .exit_hooks import OnExit
from .parallel import parallel
from .registry import CleanupError, PurgeReport, ResourceRegistry, kill_all_test_databases, register
from .resolver import Provisioner, get_provisioner
from .retry import RetryCancelledError, RetryExhaustedError, RetryPolicy, retry

__all__ = [
    "DatabaseConnectionError", "bootstrap", "connect", "connect_engine",
    "OnExit",
    "parallel",
    "CleanupError", "PurgeReport", "ResourceRegistry", "kill_all_test_databases", "register",
    "Provisioner", "get_provisioner",
    "RetryCancelledError", "RetryExhaustedError", "RetryPolicy", "retry",
]
