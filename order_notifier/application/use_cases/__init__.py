"""Aggregate application use cases."""

from .deliveries import DeliveryAttemptEngine, MailTransport, is_valid_email
from .events import EventRouter, consume
from .notifications import build_notification

__all__ = [
    "DeliveryAttemptEngine",
    "EventRouter",
    "MailTransport",
    "build_notification",
    "consume",
    "is_valid_email",
]
