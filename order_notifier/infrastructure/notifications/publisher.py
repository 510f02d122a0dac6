"""Serialization of notifications for live subscribers."""

from __future__ import annotations

import json
from typing import Any

from order_notifier.domain.entities import Notification


def notification_payload(notification: Notification) -> dict[str, Any]:
    """Return the JSON-serializable representation pushed to subscribers."""

    return {
        "id": notification.id,
        "type": notification.kind.value,
        "message": notification.message,
        "orderId": notification.order_reference,
        "timestamp": notification.created_at.isoformat(),
    }


def serialize_notification(notification: Notification) -> str:
    """Encode ``notification`` once so every subscriber receives the same text."""

    return json.dumps(notification_payload(notification), ensure_ascii=False)


__all__ = ["notification_payload", "serialize_notification"]
