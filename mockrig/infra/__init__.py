"""Container management for mockrig."""

from mockrig.infra.base import ContainerManager
from mockrig.infra.docker import DockerContainerManager

__all__ = [
    "ContainerManager",
    "DockerContainerManager",
]
