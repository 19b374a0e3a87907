"""Container discovery."""

from ieddata.container.locator import docker_client, locate
from ieddata.container.watcher import ContainerHandle, WorkloadWatcher

__all__ = [
    "ContainerHandle",
    "WorkloadWatcher",
    "docker_client",
    "locate",
]
