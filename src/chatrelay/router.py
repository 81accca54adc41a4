"""Per-connection event routing.

Every inbound transport event lands in :meth:`EventRouter.dispatch`, which
looks the event up in a dispatch table, validates the payload, mutates the
registry and hands the resulting server event to the broadcaster.

Connection lifecycle::

    connected --join--> joined --leave / disconnect / eviction--> terminated

Malformed payloads are dropped without a reply.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from chatrelay.broadcast import Broadcaster, Channel
from chatrelay.core.types import (
    ChatMessage,
    ClientEvent,
    ConnectionState,
    JoinRequest,
    ServerEvent,
    Session,
    now_ms,
)
from chatrelay.registry import PresenceRegistry

log = logging.getLogger(__name__)

Handler = Callable[[str, Any], None]


class EventRouter:
    """Turns client events into registry changes and broadcasts."""

    def __init__(
        self,
        registry: PresenceRegistry,
        broadcaster: Broadcaster,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._registry = registry
        self._broadcaster = broadcaster
        self._clock = clock
        self._open: set[str] = set()
        self._has_joined: set[str] = set()
        self._handlers: dict[ClientEvent, Handler] = {
            ClientEvent.join: self._on_join,
            ClientEvent.heartbeat: self._on_heartbeat,
            ClientEvent.typing: self._on_typing,
            ClientEvent.chat_message: self._on_chat_message,
            ClientEvent.leave: self._on_leave,
        }

    # ------------------------------------------------------------------
    # Transport lifecycle
    # ------------------------------------------------------------------

    def connect(self, connection_id: str, channel: Channel) -> None:
        self._open.add(connection_id)
        self._broadcaster.attach(connection_id, channel)
        log.debug("Connection opened: %s", connection_id)

    def disconnect(self, connection_id: str) -> None:
        """Transport-side close. Same teardown as an explicit leave."""
        self._broadcaster.detach(connection_id)
        session = self._end_session(connection_id)
        if session is not None:
            log.info("User disconnected: %s (%s)", session.username, connection_id)
        else:
            log.debug("Connection closed: %s", connection_id)
        self._open.discard(connection_id)
        self._has_joined.discard(connection_id)

    def state(self, connection_id: str) -> ConnectionState:
        if connection_id in self._registry:
            return ConnectionState.joined
        if connection_id in self._open and connection_id not in self._has_joined:
            return ConnectionState.connected
        # Closed, or the session ended by leave or eviction.
        return ConnectionState.terminated

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, connection_id: str, event: str | ClientEvent, payload: Any = None) -> bool:
        """Route one inbound event. Returns ``False`` if it was unknown."""
        try:
            kind = ClientEvent(event)
        except ValueError:
            log.debug("Ignoring unknown event %r from %s", event, connection_id)
            return False
        self._handlers[kind](connection_id, payload)
        return True

    def _on_join(self, connection_id: str, payload: Any) -> None:
        try:
            req = JoinRequest.model_validate(payload)
        except ValidationError:
            log.debug("Rejected join from %s: %r", connection_id, payload)
            return
        session = self._registry.register(connection_id, req.username, req.country)
        self._has_joined.add(connection_id)
        self._broadcast_roster()
        log.info("User joined: %s (%s)", session.username, connection_id)

    def _on_heartbeat(self, connection_id: str, payload: Any) -> None:
        self._registry.touch(connection_id)

    def _on_typing(self, connection_id: str, payload: Any) -> None:
        if not isinstance(payload, str) or not payload:
            log.debug("Dropped typing from %s: %r", connection_id, payload)
            return
        self._broadcaster.broadcast_except(connection_id, ServerEvent.typing.value, payload)

    def _on_chat_message(self, connection_id: str, payload: Any) -> None:
        try:
            msg = ChatMessage.model_validate(payload)
        except ValidationError:
            log.debug("Dropped chat message from %s: %r", connection_id, payload)
            return
        out = msg.stamped(self._server_time(msg.client_time))
        self._broadcaster.broadcast_all(ServerEvent.chat_message.value, out)
        log.info(
            "msg %s %s %s",
            msg.id,
            msg.username,
            str(msg.text)[:50] if msg.text else "(no text)",
        )

    def _on_leave(self, connection_id: str, payload: Any) -> None:
        session = self._end_session(connection_id)
        if session is not None:
            log.info("User left: %s (%s)", session.username, connection_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _end_session(self, connection_id: str) -> Session | None:
        session = self._registry.remove(connection_id)
        if session is not None:
            self._broadcast_roster()
        return session

    def _broadcast_roster(self) -> None:
        self._broadcaster.broadcast_all(ServerEvent.online_users.value, self._registry.snapshot())

    def _server_time(self, client_time: Any) -> int:
        now = self._clock()
        if isinstance(client_time, (int, float)) and not isinstance(client_time, bool):
            # serverTime >= clientTime, even against a fast client clock.
            if math.isfinite(client_time) and client_time > now:
                return math.ceil(client_time)
        return now
