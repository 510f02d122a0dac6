"""Order lifecycle events consumed from the message queue."""

from __future__ import annotations

from dataclasses import dataclass, field

ORDER_CREATED = "order.created"
ORDER_RECEIVED = "order.received"
ORDER_PREPARING = "order.preparing"
ORDER_READY = "order.ready"
ORDER_CANCELLED = "order.cancelled"


@dataclass(frozen=True)
class OrderItem:
    """Line of an order as described by the event payload."""

    name: str
    quantity: int = 1
    price: float | None = None


@dataclass(frozen=True)
class OrderEvent:
    """Decoded lifecycle event.

    Text fields are normalized to stripped strings; a missing value is ``""``
    so callers can test for presence without ``None`` checks.
    """

    event_type: str
    order_reference: str = ""
    customer_name: str = ""
    customer_email: str = ""
    items: tuple[OrderItem, ...] = field(default_factory=tuple)


__all__ = [
    "ORDER_CANCELLED",
    "ORDER_CREATED",
    "ORDER_PREPARING",
    "ORDER_READY",
    "ORDER_RECEIVED",
    "OrderEvent",
    "OrderItem",
]
