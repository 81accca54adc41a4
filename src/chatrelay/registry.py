"""Presence registry: who is connected right now."""

from __future__ import annotations

import logging
from collections.abc import Callable

from chatrelay.core.types import Session, now_ms

log = logging.getLogger(__name__)


class PresenceRegistry:
    """Maps connection ids to their :class:`Session`.

    Purely in-memory, process-lifetime state. All operations are plain
    synchronous calls so each one completes atomically on the event loop.
    Display names are not required to be unique across connections.
    """

    def __init__(self, *, clock: Callable[[], int] = now_ms) -> None:
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def register(self, connection_id: str, username: str, country: str | None = "") -> Session:
        """Insert or replace the session for *connection_id*.

        A repeat join on the same connection keeps its roster position.
        """
        session = Session(
            connection_id=connection_id,
            username=username,
            country=country or "",
            last_seen_at=self._clock(),
        )
        self._sessions[connection_id] = session
        return session

    def touch(self, connection_id: str) -> bool:
        """Refresh liveness. Returns ``False`` for unknown connections."""
        session = self._sessions.get(connection_id)
        if session is None:
            return False
        session.last_seen_at = self._clock()
        return True

    def remove(self, connection_id: str) -> Session | None:
        """Delete and return the session, or ``None`` if already gone."""
        return self._sessions.pop(connection_id, None)

    def get(self, connection_id: str) -> Session | None:
        return self._sessions.get(connection_id)

    def sessions(self) -> list[Session]:
        """Copy of the live sessions, safe to iterate while removing."""
        return list(self._sessions.values())

    def snapshot(self) -> list[dict[str, str]]:
        """Public roster in join order."""
        return [s.roster_entry() for s in self._sessions.values()]

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._sessions
