"""Chatrelay core types and utilities."""

from chatrelay.core.types import (
    ChatMessage,
    ClientEvent,
    ConnectionState,
    JoinRequest,
    LoginRecord,
    ServerEvent,
    Session,
    now_ms,
)

__all__ = [
    "ChatMessage",
    "ClientEvent",
    "ConnectionState",
    "JoinRequest",
    "LoginRecord",
    "ServerEvent",
    "Session",
    "now_ms",
]
