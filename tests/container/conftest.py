"""Fake Docker client pieces for container discovery tests."""

from __future__ import annotations

import queue
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import MagicMock

import pytest
from docker.errors import NotFound

_END = object()
_BROKEN = object()


@dataclass
class FakeContainer:
    """Just enough of docker-py's Container."""

    name: str
    pid: int
    id: str = ""
    attrs: dict[str, Any] = field(init=False)

    def __post_init__(self) -> None:
        if not self.id:
            self.id = f"{self.name}-id".ljust(64, "0")
        self.attrs = {"State": {"Pid": self.pid, "Running": self.pid > 0}}


class FakeEventStream:
    """Blocking event stream, like docker-py's CancellableStream."""

    def __init__(self, *, broken_on_close: bool = False) -> None:
        self._queue: queue.Queue[Any] = queue.Queue()
        self._broken_on_close = broken_on_close
        self.closed = False

    def __iter__(self) -> Iterator[dict[str, Any]]:
        while True:
            item = self._queue.get()
            if item is _END:
                return
            if item is _BROKEN:
                raise OSError("stream broken")
            yield item

    def push(self, action: str, container_id: str, **attributes: str) -> None:
        self._queue.put(
            {
                "Type": "container",
                "Action": action,
                "Actor": {"ID": container_id, "Attributes": attributes},
            }
        )

    def push_raw(self, event: dict[str, Any]) -> None:
        self._queue.put(event)

    def end(self) -> None:
        self._queue.put(_END)

    def break_(self) -> None:
        self._queue.put(_BROKEN)

    def close(self) -> None:
        self.closed = True
        self._queue.put(_BROKEN if self._broken_on_close else _END)


class FakeDockerClient:
    """A Docker engine with a fixed set of containers and a live event stream."""

    def __init__(self, *containers: FakeContainer, stream: FakeEventStream | None = None) -> None:
        self.stream = stream or FakeEventStream()
        self.engine: dict[str, FakeContainer] = {c.id: c for c in containers}
        # listed, but removed before list() gets to inspect them
        self.vanishing: set[str] = set()
        self.events = MagicMock(return_value=self.stream)
        self.containers = MagicMock()
        self.containers.list.side_effect = self._list
        self.containers.get.side_effect = self._get
        self.close = MagicMock()

    def _list(
        self, filters: dict[str, Any] | None = None, ignore_removed: bool = False
    ) -> list[FakeContainer]:
        if self.vanishing and not ignore_removed:
            gone = sorted(self.vanishing)[0]
            raise NotFound(f"No such container: {gone}")
        return [c for c in self.engine.values() if c.pid > 0]

    def _get(self, container_id: str) -> FakeContainer:
        try:
            return self.engine[container_id]
        except KeyError:
            raise NotFound(f"No such container: {container_id}") from None


@pytest.fixture
def core() -> FakeContainer:
    return FakeContainer(name="edge-iot-core", pid=4242)


@pytest.fixture
def client(core: FakeContainer) -> FakeDockerClient:
    return FakeDockerClient(core, FakeContainer(name="some-app", pid=5151))
