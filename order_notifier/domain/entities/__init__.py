"""Domain entities exposed by the application."""

from .delivery import (
    DeliveryOutcome,
    DeliveryRequest,
    DeliveryStatus,
    EmailBody,
)
from .notification import Notification, NotificationKind
from .order_event import (
    ORDER_CANCELLED,
    ORDER_CREATED,
    ORDER_PREPARING,
    ORDER_READY,
    ORDER_RECEIVED,
    OrderEvent,
    OrderItem,
)

__all__ = [
    "DeliveryOutcome",
    "DeliveryRequest",
    "DeliveryStatus",
    "EmailBody",
    "Notification",
    "NotificationKind",
    "ORDER_CANCELLED",
    "ORDER_CREATED",
    "ORDER_PREPARING",
    "ORDER_READY",
    "ORDER_RECEIVED",
    "OrderEvent",
    "OrderItem",
]
