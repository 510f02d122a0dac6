"""Pydantic models describing the health endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class EmailStatus(BaseModel):
    configured: bool


class HealthRead(BaseModel):
    """Readiness information for operators."""

    status: str
    subscribers: int
    email: EmailStatus
