"""Small response envelopes shared across endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str
    db: bool
