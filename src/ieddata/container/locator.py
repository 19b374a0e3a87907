"""Locate the Industrial Edge runtime container and its init process PID."""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import docker
import structlog
from docker.errors import DockerException

from ieddata.config.constants import DEFAULT_DOCKER_HOST, EDGE_IOT_CORE_CONTAINER_NAME
from ieddata.container.watcher import WorkloadWatcher
from ieddata.core.errors import NotFoundError, UnavailableError

logger = structlog.get_logger()

ClientFactory = Callable[[str, float], Any]


def docker_client(host: str, timeout: float) -> docker.DockerClient:
    """Create a Docker API client for the given endpoint."""
    return docker.DockerClient(base_url=host, timeout=timeout)


def locate(
    name: str = EDGE_IOT_CORE_CONTAINER_NAME,
    *,
    docker_host: str = DEFAULT_DOCKER_HOST,
    timeout: float = 10.0,
    client_factory: ClientFactory = docker_client,
) -> int:
    """Return the PID of the running container with exactly this name.

    A transient watcher synchronizes with the current workload in a background
    thread. We block until it either reports ready or terminates, whichever
    happens first, then look the container up. The watcher thread is stopped
    and joined before returning, on every path.

    No timeout is applied to the wait itself; callers wanting one wrap locate.

    Raises:
        NotFoundError: no running container with this name (or it has no PID).
        UnavailableError: the container runtime cannot be reached.
    """
    try:
        client = client_factory(docker_host, timeout)
    except DockerException as err:
        raise UnavailableError.runtime(docker_host, str(err)) from err

    wakeup = threading.Event()
    watcher = WorkloadWatcher(client, on_ready=wakeup.set)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ieddata-watcher")
    try:
        watching: Future[None] = executor.submit(watcher.watch)
        watching.add_done_callback(lambda _: wakeup.set())
        wakeup.wait()

        if not watcher.ready.is_set():
            err = watching.exception()
            if err is not None:
                raise UnavailableError.runtime(docker_host, str(err)) from err
            logger.warning("watcher_terminated_prematurely", host=docker_host)

        handle = watcher.container(name)
        if handle is None:
            raise NotFoundError.container(name)
        logger.info("container_located", container=name, pid=handle.pid)
        return handle.pid
    finally:
        watcher.close()
        executor.shutdown(wait=True)
        client.close()
