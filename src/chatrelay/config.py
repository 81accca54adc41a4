"""Chatrelay configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from chatrelay.exceptions import ConfigError


class RelayConfig(BaseModel):
    """Global configuration for a relay instance."""

    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".chatrelay",
    )
    upload_dir: Path | None = None
    port: int = Field(default=4000, ge=1, le=65535)
    heartbeat_interval: float = Field(default=30.0, gt=0)
    session_ttl: float = Field(default=90.0, gt=0)
    login_ttl_days: int = Field(default=7, ge=1)

    @model_validator(mode="after")
    def _check_ttl(self) -> RelayConfig:
        if self.session_ttl < self.heartbeat_interval:
            raise ConfigError(
                f"session_ttl ({self.session_ttl}s) is shorter than "
                f"heartbeat_interval ({self.heartbeat_interval}s)"
            )
        return self

    @property
    def login_db_path(self) -> Path:
        return self.data_dir / "logins.db"

    @property
    def uploads_path(self) -> Path:
        return self.upload_dir or self.data_dir / "uploads"
