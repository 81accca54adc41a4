"""Fan-out of server events to connected channels."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

log = logging.getLogger(__name__)

Emit = Callable[[str, Any], Awaitable[Any]]


@runtime_checkable
class Channel(Protocol):
    """Ordered outbound path to a single connection."""

    def send_nowait(self, event: str, payload: Any) -> None:
        """Enqueue *event* without blocking."""
        ...


class OutboundChannel:
    """FIFO queue of pending events for one connection.

    The transport runs :meth:`pump` as a task; everything enqueued with
    :meth:`send_nowait` reaches ``emit`` in enqueue order. Sends after
    :meth:`close` are dropped.
    """

    _CLOSED = object()

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    def send_nowait(self, event: str, payload: Any) -> None:
        if self._closed:
            return
        self._queue.put_nowait((event, payload))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(self._CLOSED)

    async def pump(self, emit: Emit) -> None:
        """Drain the queue into *emit* until the channel is closed."""
        while True:
            item = await self._queue.get()
            if item is self._CLOSED:
                return
            event, payload = item
            try:
                await emit(event, payload)
            except Exception:
                log.debug("Dropped %r: delivery failed", event, exc_info=True)


class Broadcaster:
    """Delivers events to every attached channel, best effort."""

    def __init__(self) -> None:
        self._channels: dict[str, Channel] = {}

    def attach(self, connection_id: str, channel: Channel) -> None:
        self._channels[connection_id] = channel

    def detach(self, connection_id: str) -> Channel | None:
        return self._channels.pop(connection_id, None)

    def broadcast_all(self, event: str, payload: Any) -> int:
        """Send *event* to every attached connection, sender included."""
        return self._fan_out(event, payload, skip=None)

    def broadcast_except(self, connection_id: str, event: str, payload: Any) -> int:
        """Send *event* to every attached connection but *connection_id*."""
        return self._fan_out(event, payload, skip=connection_id)

    def _fan_out(self, event: str, payload: Any, skip: str | None) -> int:
        sent = 0
        for cid, channel in list(self._channels.items()):
            if cid == skip:
                continue
            try:
                channel.send_nowait(event, payload)
            except Exception:
                log.debug("Channel %s rejected %r", cid, event, exc_info=True)
                continue
            sent += 1
        return sent
