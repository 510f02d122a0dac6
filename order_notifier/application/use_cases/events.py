"""Route order lifecycle events to live subscribers and the email fallback."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Iterable, Mapping
from typing import Any

from order_notifier.application.use_cases.deliveries import DeliveryAttemptEngine
from order_notifier.application.use_cases.notifications import build_notification
from order_notifier.domain.entities import (
    ORDER_PREPARING,
    ORDER_READY,
    DeliveryRequest,
    Notification,
    OrderEvent,
)
from order_notifier.infrastructure.email_templates import render_order_email
from order_notifier.infrastructure.messaging import EventDecodeError, decode_order_event
from order_notifier.infrastructure.notifications import SubscriberRegistry
from order_notifier.infrastructure.tasks import BackgroundTaskRunner

logger = logging.getLogger(__name__)

DEFAULT_DELIVERY_EVENT_TYPES = (ORDER_READY, ORDER_PREPARING)

RawEvent = bytes | str | Mapping[str, Any]


class EventRouter:
    """Entry point for every event handed over by the consumption stream.

    ``handle`` broadcasts synchronously and only *starts* email deliveries;
    nothing raised below it reaches the caller.
    """

    def __init__(
        self,
        registry: SubscriberRegistry,
        engine: DeliveryAttemptEngine,
        task_runner: BackgroundTaskRunner,
        *,
        frontend_url: str,
        delivery_event_types: Iterable[str] = DEFAULT_DELIVERY_EVENT_TYPES,
    ) -> None:
        self._registry = registry
        self._engine = engine
        self._task_runner = task_runner
        self._frontend_url = frontend_url
        self._delivery_event_types = frozenset(delivery_event_types)

    def handle(self, raw_event: RawEvent) -> Notification | None:
        """Process ``raw_event`` and return the notification that was broadcast."""

        try:
            return self._handle(raw_event)
        except Exception:
            logger.exception("Unexpected error while handling an order event")
            return None

    def _handle(self, raw_event: RawEvent) -> Notification | None:
        try:
            event, data = decode_order_event(raw_event)
        except EventDecodeError as exc:
            logger.warning("Dropping malformed order event: %s", exc)
            return None

        notification = build_notification(event.event_type, data)
        if notification is None:
            logger.debug("Ignoring unrecognized event type %s", event.event_type)
            return None

        try:
            report = self._registry.broadcast(notification)
        except Exception:
            logger.exception(
                "Broadcast of %s for order %s failed",
                event.event_type,
                event.order_reference,
            )
        else:
            logger.info(
                "Broadcast %s for order %s to %s/%s subscriber(s)",
                event.event_type,
                event.order_reference or "?",
                report.delivered,
                report.attempted,
            )

        if event.event_type in self._delivery_event_types:
            self._start_delivery(event)
        return notification

    def _start_delivery(self, event: OrderEvent) -> None:
        missing = [
            field_name
            for field_name, value in (
                ("orderNumber", event.order_reference),
                ("customerName", event.customer_name),
                ("customerEmail", event.customer_email),
            )
            if not value
        ]
        if missing:
            logger.warning(
                "Skipping email for %s of order %s; missing fields: %s",
                event.event_type,
                event.order_reference or "?",
                ", ".join(missing),
            )
            return

        rendered = render_order_email(
            event.event_type,
            order_reference=event.order_reference,
            customer_name=event.customer_name,
            items=event.items,
            frontend_url=self._frontend_url,
        )
        request = DeliveryRequest(
            recipient_address=event.customer_email,
            subject=rendered.subject,
            body=rendered.body,
            order_reference=event.order_reference,
            customer_name=event.customer_name,
        )
        self._task_runner.spawn(
            self._engine.attempt_delivery,
            request,
            name=f"email:{event.event_type}:{event.order_reference}",
        )


async def consume(router: EventRouter, messages: AsyncIterable[RawEvent]) -> int:
    """Feed ``messages`` to ``router`` one at a time, in arrival order.

    Returns the number of messages handed to the router.
    """

    handled = 0
    async for message in messages:
        router.handle(message)
        handled += 1
    return handled


__all__ = ["DEFAULT_DELIVERY_EVENT_TYPES", "EventRouter", "RawEvent", "consume"]
