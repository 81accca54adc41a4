"""Heartbeat monitor that evicts sessions which stopped reporting in.

Backstop for connections that vanish without a ``leave`` and without the
transport noticing the disconnect. Runs alongside the router; removing a
session twice is harmless.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from chatrelay.broadcast import Broadcaster
from chatrelay.core.types import ServerEvent, Session, now_ms
from chatrelay.registry import PresenceRegistry

log = logging.getLogger(__name__)


class HeartbeatMonitor:
    """Periodic sweep of the presence registry.

    Usage::

        monitor = HeartbeatMonitor(registry, broadcaster, interval=30, ttl=90)
        monitor.start()   # inside a running event loop
        ...
        await monitor.stop()
    """

    def __init__(
        self,
        registry: PresenceRegistry,
        broadcaster: Broadcaster,
        *,
        interval: float = 30.0,
        ttl: float = 90.0,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._registry = registry
        self._broadcaster = broadcaster
        self._interval = interval
        self._ttl_ms = int(ttl * 1000)
        self._clock = clock
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self, now: int | None = None) -> list[Session]:
        """Evict stale sessions. Returns the evicted sessions.

        At most one roster broadcast is sent per sweep, however many
        sessions were evicted.
        """
        now = self._clock() if now is None else now
        evicted: list[Session] = []
        for session in self._registry.sessions():
            if now - session.last_seen_at > self._ttl_ms:
                if self._registry.remove(session.connection_id) is not None:
                    evicted.append(session)
                    log.info(
                        "Removing inactive user %s (%s)",
                        session.username,
                        session.connection_id,
                    )
        if evicted:
            self._broadcaster.broadcast_all(
                ServerEvent.online_users.value, self._registry.snapshot()
            )
        return evicted

    async def run(self) -> None:
        """Sweep every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(self._interval)
            self.sweep()

    def start(self) -> asyncio.Task[None]:
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
