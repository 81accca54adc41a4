"""Core Pydantic models for chatrelay."""

from __future__ import annotations

import time
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class ClientEvent(str, Enum):
    """Events a client may send over its channel."""

    join = "join"
    heartbeat = "heartbeat"
    typing = "typing"
    chat_message = "chat message"
    leave = "leave"


class ServerEvent(str, Enum):
    """Events the relay pushes to clients."""

    online_users = "online users"
    chat_message = "chat message"
    typing = "typing"


class ConnectionState(str, Enum):
    connected = "connected"
    joined = "joined"
    terminated = "terminated"


class Session(BaseModel):
    """Registry record for one live connection."""

    connection_id: str
    username: str
    country: str = ""
    last_seen_at: int = Field(default_factory=now_ms)

    def roster_entry(self) -> dict[str, str]:
        """Public projection; ``last_seen_at`` stays internal."""
        return {
            "username": self.username,
            "country": self.country,
            "connectionId": self.connection_id,
        }


class JoinRequest(BaseModel):
    """Only a missing or empty username rejects a join."""

    username: str = Field(min_length=1)
    country: str | None = None

    @field_validator("username", mode="before")
    @classmethod
    def _username_text(cls, v: Any) -> Any:
        if v and not isinstance(v, str):
            return str(v)
        return v

    @field_validator("country", mode="before")
    @classmethod
    def _country_text(cls, v: Any) -> str | None:
        if not v:
            return None
        return v if isinstance(v, str) else str(v)


class ChatMessage(BaseModel):
    """Inbound chat message. Unknown fields are relayed untouched."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Any
    username: Any
    country: Any = None
    text: Any = None
    file: Any = None
    client_time: Any = Field(default=None, alias="clientTime")

    @field_validator("id", "username")
    @classmethod
    def _present(cls, v: Any) -> Any:
        if not v:
            raise ValueError("required field is empty")
        return v

    def stamped(self, server_time: int) -> dict[str, Any]:
        """Wire form of the message with ``serverTime`` attached."""
        out = self.model_dump(by_alias=True, exclude_unset=True)
        out["serverTime"] = server_time
        return out


class LoginRecord(BaseModel):
    """Durable login record, keyed by username."""

    username: str
    country: str = ""
    expires: datetime
