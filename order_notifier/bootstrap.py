"""Construction of the long-lived objects shared by the whole process."""

from __future__ import annotations

from dataclasses import dataclass

from order_notifier.application.use_cases import (
    DeliveryAttemptEngine,
    EventRouter,
    MailTransport,
)
from order_notifier.config import Settings, get_settings
from order_notifier.infrastructure.email import SendGridMailTransport
from order_notifier.infrastructure.notifications import SubscriberRegistry
from order_notifier.infrastructure.tasks import BackgroundTaskRunner


@dataclass
class NotificationServices:
    """One registry, engine, runner and router per process."""

    settings: Settings
    registry: SubscriberRegistry
    engine: DeliveryAttemptEngine
    task_runner: BackgroundTaskRunner
    router: EventRouter


def build_services(
    settings: Settings | None = None,
    *,
    transport: MailTransport | None = None,
    task_runner: BackgroundTaskRunner | None = None,
) -> NotificationServices:
    """Wire the dispatch components; ``transport`` defaults to SendGrid."""

    settings = settings or get_settings()
    transport = transport or SendGridMailTransport.from_settings(settings)
    registry = SubscriberRegistry(queue_size=settings.subscriber_queue_size)
    engine = DeliveryAttemptEngine(
        transport,
        max_attempts=settings.delivery_max_attempts,
        base_delay=settings.delivery_base_delay_seconds,
    )
    task_runner = task_runner or BackgroundTaskRunner()
    router = EventRouter(
        registry,
        engine,
        task_runner,
        frontend_url=settings.frontend_url,
    )
    return NotificationServices(
        settings=settings,
        registry=registry,
        engine=engine,
        task_runner=task_runner,
        router=router,
    )


__all__ = ["NotificationServices", "build_services"]
