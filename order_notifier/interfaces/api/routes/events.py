"""Endpoint that injects order events without going through the queue."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from order_notifier.bootstrap import NotificationServices
from order_notifier.interfaces.api.dependencies import get_services
from order_notifier.interfaces.api.schemas import EventAccepted

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", status_code=status.HTTP_202_ACCEPTED, response_model=EventAccepted)
async def ingest_event(
    request: Request,
    services: NotificationServices = Depends(get_services),
) -> EventAccepted:
    """Hand the raw request body to the event router.

    Malformed or unrecognized events are still acknowledged; they are logged
    and dropped the same way queue messages are.
    """

    body = await request.body()
    notification = services.router.handle(body)
    return EventAccepted(
        notified=notification is not None,
        notification_id=notification.id if notification else None,
    )
