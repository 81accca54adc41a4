"""Chatrelay — realtime presence and chat relay."""

from chatrelay.config import RelayConfig
from chatrelay.core.types import ChatMessage, ClientEvent, ServerEvent, Session
from chatrelay.relay import Relay

__version__ = "0.1.0"
__all__ = ["Relay", "RelayConfig", "ChatMessage", "ClientEvent", "ServerEvent", "Session"]
