"""Pydantic models describing the event ingest responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class EventAccepted(BaseModel):
    """Acknowledgement returned once an event went through the router."""

    notified: bool = Field(description="Whether a live notification was broadcast")
    notification_id: str | None = None
