"""The relay service: one owned instance per server process."""

from __future__ import annotations

import logging
from collections.abc import Callable

from chatrelay.broadcast import Broadcaster, Channel
from chatrelay.config import RelayConfig
from chatrelay.core.types import ConnectionState, now_ms
from chatrelay.heartbeat import HeartbeatMonitor
from chatrelay.registry import PresenceRegistry
from chatrelay.router import EventRouter

log = logging.getLogger(__name__)


class Relay:
    """Presence registry, broadcaster, router and heartbeat monitor, wired together.

    >>> relay = Relay()
    >>> relay.connect("sid-1", channel)
    >>> relay.dispatch("sid-1", "join", {"username": "alice"})
    >>> relay.roster()
    [{'username': 'alice', 'country': '', 'connectionId': 'sid-1'}]

    ``start()``/``stop()`` run the heartbeat sweep on the current event loop.
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        *,
        clock: Callable[[], int] = now_ms,
    ):
        self._config = config or RelayConfig()
        self.registry = PresenceRegistry(clock=clock)
        self.broadcaster = Broadcaster()
        self.router = EventRouter(self.registry, self.broadcaster, clock=clock)
        self.monitor = HeartbeatMonitor(
            self.registry,
            self.broadcaster,
            interval=self._config.heartbeat_interval,
            ttl=self._config.session_ttl,
            clock=clock,
        )

    @property
    def config(self) -> RelayConfig:
        return self._config

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        self.monitor.start()
        log.info(
            "Relay started (heartbeat every %ss, ttl %ss)",
            self._config.heartbeat_interval,
            self._config.session_ttl,
        )

    async def stop(self) -> None:
        await self.monitor.stop()
        log.info("Relay stopped with %d session(s) online", len(self.registry))

    # ------------------------------------------------------------------
    # Transport-facing API
    # ------------------------------------------------------------------

    def connect(self, connection_id: str, channel: Channel) -> None:
        self.router.connect(connection_id, channel)

    def dispatch(self, connection_id: str, event: str, payload: object = None) -> bool:
        return self.router.dispatch(connection_id, event, payload)

    def disconnect(self, connection_id: str) -> None:
        self.router.disconnect(connection_id)

    def state(self, connection_id: str) -> ConnectionState:
        return self.router.state(connection_id)

    def roster(self) -> list[dict[str, str]]:
        return self.registry.snapshot()
