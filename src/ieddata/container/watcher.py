"""Transient workload watcher for Docker containers.

Design:
- The container event stream is opened first, then the running containers
  are listed, so no life-cycle change between both steps is missed
- Readiness is signalled once that initial synchronization is done
- Afterwards, container events keep the portfolio current until the stream
  ends or the watcher is closed
- Only containers with a PID are part of the portfolio
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Protocol

import structlog
from docker.errors import NotFound

logger = structlog.get_logger()

# Events after which the container must be inspected again; a kill does not
# necessarily end the container.
_INSPECT_ACTIONS = frozenset({"start", "unpause", "restart", "kill"})
# Events after which the container has no process anymore.
_GONE_ACTIONS = frozenset({"die", "stop", "destroy"})


class EventStream(Protocol):
    """What watch() needs from docker-py's CancellableStream."""

    def __iter__(self) -> Iterator[dict[str, Any]]: ...

    def close(self) -> None: ...


@dataclass(frozen=True, slots=True)
class ContainerHandle:
    """A discovered container and the PID of its init process."""

    name: str
    pid: int
    id: str = ""


def _handle_from(container: Any) -> ContainerHandle | None:
    """Build a handle from a docker-py Container, if it has a process."""
    state = container.attrs.get("State") or {}
    pid = state.get("Pid") or 0
    if pid <= 0:
        return None
    return ContainerHandle(name=container.name, pid=pid, id=container.id)


class WorkloadWatcher:
    """Tracks the running containers of a Docker engine.

    watch() blocks and is meant to run in a background thread; ready is set
    once the initial synchronization has completed, and on_ready is called
    right after; close() stops watch() from any thread.
    """

    def __init__(self, client: Any, on_ready: Callable[[], None] | None = None) -> None:
        self._client = client
        self._on_ready = on_ready
        self._lock = threading.Lock()
        self._containers: dict[str, ContainerHandle] = {}
        self._stream: EventStream | None = None
        self._closed = False
        self.ready = threading.Event()

    def watch(self) -> None:
        """Synchronize and then follow container events until stopped."""
        stream: EventStream = self._client.events(filters={"type": "container"}, decode=True)
        with self._lock:
            if self._closed:
                stream.close()
                return
            self._stream = stream

        try:
            self._synchronize()
            self.ready.set()
            logger.debug("watcher_synchronized", containers=len(self.containers()))
            if self._on_ready is not None:
                self._on_ready()
            for event in stream:
                self._apply(event)
        except Exception:
            if self.closed:
                logger.debug("watcher_stream_closed")
                return
            raise
        logger.debug("watcher_stream_ended")

    def close(self) -> None:
        """Stop watching. Safe to call more than once and before watch()."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def container(self, name: str) -> ContainerHandle | None:
        """Return the container with exactly this name, if currently known."""
        with self._lock:
            for handle in self._containers.values():
                if handle.name == name:
                    return handle
        return None

    def containers(self) -> list[ContainerHandle]:
        with self._lock:
            return list(self._containers.values())

    def _synchronize(self) -> None:
        # containers exiting meanwhile must not fail the whole snapshot
        running = self._client.containers.list(filters={"status": "running"}, ignore_removed=True)
        with self._lock:
            self._containers.clear()
            for container in running:
                handle = _handle_from(container)
                if handle is not None:
                    self._containers[handle.id] = handle

    def _apply(self, event: dict[str, Any]) -> None:
        if event.get("Type") != "container":
            return
        action = event.get("Action") or ""
        actor = event.get("Actor") or {}
        container_id = actor.get("ID") or ""
        if not container_id:
            return

        if action in _INSPECT_ACTIONS:
            try:
                container = self._client.containers.get(container_id)
            except NotFound:
                # gone again before we could inspect it
                return
            handle = _handle_from(container)
            with self._lock:
                if handle is None:
                    self._containers.pop(container_id, None)
                else:
                    self._containers[container_id] = handle
        elif action in _GONE_ACTIONS:
            with self._lock:
                self._containers.pop(container_id, None)
        elif action == "rename":
            new_name = (actor.get("Attributes") or {}).get("name", "").lstrip("/")
            with self._lock:
                old = self._containers.get(container_id)
                if old is not None and new_name:
                    self._containers[container_id] = ContainerHandle(
                        name=new_name, pid=old.pid, id=old.id
                    )
        else:
            return
        logger.debug("container_event", action=action, container_id=container_id[:12])
