"""Domain entity representing a live notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationKind(str, Enum):
    """Visual category of a notification shown to live subscribers."""

    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"


@dataclass(frozen=True)
class Notification:
    """Message pushed once to every connected subscriber."""

    id: str
    kind: NotificationKind
    message: str
    order_reference: str
    created_at: datetime


__all__ = ["Notification", "NotificationKind"]
