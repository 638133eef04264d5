"""Shared fixtures: an in-memory connection that records what it was sent."""

from __future__ import annotations

import itertools
from typing import Any, List, Tuple

import pytest

from xoroom.directory import RoomDirectory
from xoroom.router import EventRouter


class RecordingConnection:
    def __init__(self, conn_id: str) -> None:
        self.id = conn_id
        self.sent: List[Tuple[str, Any]] = []

    def send(self, event: str, data: Any) -> None:
        self.sent.append((event, data))

    def events(self, name: str) -> List[Any]:
        return [data for event, data in self.sent if event == name]

    def last(self, name: str) -> Any:
        return self.events(name)[-1]

    def names(self) -> List[str]:
        return [event for event, _ in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class BrokenConnection(RecordingConnection):
    def send(self, event: str, data: Any) -> None:
        raise RuntimeError("socket is gone")


@pytest.fixture
def connect():
    counter = itertools.count(1)

    def factory(broken: bool = False) -> RecordingConnection:
        cls = BrokenConnection if broken else RecordingConnection
        return cls(f"conn-{next(counter)}")

    return factory


@pytest.fixture
def directory() -> RoomDirectory:
    return RoomDirectory()


@pytest.fixture
def router(directory: RoomDirectory) -> EventRouter:
    return EventRouter(directory)
