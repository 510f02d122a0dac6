"""Live notification helpers for the infrastructure layer."""

from .publisher import serialize_notification
from .registry import (
    BroadcastReport,
    CallbackSink,
    QueueSink,
    SubscriberClosedError,
    SubscriberHandle,
    SubscriberRegistry,
    SubscriberSink,
)

__all__ = [
    "BroadcastReport",
    "CallbackSink",
    "QueueSink",
    "SubscriberClosedError",
    "SubscriberHandle",
    "SubscriberRegistry",
    "SubscriberSink",
    "serialize_notification",
]
