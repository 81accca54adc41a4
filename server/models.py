"""Request/response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    country: str | None = None


class LoginResponse(BaseModel):
    username: str
    country: str
    expires: datetime


class UploadResponse(BaseModel):
    url: str
    filename: str


class RosterEntry(BaseModel):
    username: str
    country: str
    connectionId: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    online: int
