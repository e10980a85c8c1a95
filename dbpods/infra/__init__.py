# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Contains low-level infrastructure wrappers:
# - DockerProvider: Docker SDK wrapper that starts and purges database Pods
# -----------------------------------------------------------------------------

from .docker_client import (
    ContainerRuntimeError,
    ContainerStartError,
    DockerProvider,
    DockerProviderError,
)

__all__ = ["DockerProvider", "DockerProviderError", "ContainerRuntimeError", "ContainerStartError"]
