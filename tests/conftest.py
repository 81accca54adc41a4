"""Shared fixtures: a fake clock and channels that record what they receive."""

from __future__ import annotations

from typing import Any

import pytest

from chatrelay.broadcast import Broadcaster
from chatrelay.registry import PresenceRegistry
from chatrelay.router import EventRouter


class Clock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class RecordingChannel:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def send_nowait(self, event: str, payload: Any) -> None:
        self.events.append((event, payload))

    def of(self, event: str) -> list[Any]:
        return [p for e, p in self.events if e == event]


@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def registry(clock: Clock) -> PresenceRegistry:
    return PresenceRegistry(clock=clock)


@pytest.fixture()
def broadcaster() -> Broadcaster:
    return Broadcaster()


@pytest.fixture()
def router(registry: PresenceRegistry, broadcaster: Broadcaster, clock: Clock) -> EventRouter:
    return EventRouter(registry, broadcaster, clock=clock)


@pytest.fixture()
def connect(router: EventRouter):
    """Open a connection on the router and return its recording channel."""

    def _connect(cid: str) -> RecordingChannel:
        ch = RecordingChannel()
        router.connect(cid, ch)
        return ch

    return _connect
