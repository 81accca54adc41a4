"""Chatrelay exceptions."""


class RelayError(Exception):
    """Base exception for all chatrelay errors."""


class ConfigError(RelayError, ValueError):
    """Raised on invalid configuration."""


class LoginNotFound(RelayError):
    """Raised when no live login record exists for a username."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"No login record for {username!r}")


class UploadError(RelayError):
    """Raised when an upload is missing or cannot be stored."""
