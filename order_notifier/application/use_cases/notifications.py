"""Build live notifications out of order lifecycle events."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from order_notifier.domain.entities import (
    ORDER_CANCELLED,
    ORDER_CREATED,
    ORDER_PREPARING,
    ORDER_READY,
    ORDER_RECEIVED,
    Notification,
    NotificationKind,
)
from order_notifier.utils import now_in_app_timezone

MISSING_REFERENCE_PLACEHOLDER = "(sin número)"

_TEMPLATES: dict[str, tuple[NotificationKind, str]] = {
    ORDER_CREATED: (NotificationKind.INFO, "Pedido {reference} creado."),
    ORDER_RECEIVED: (NotificationKind.INFO, "Recibimos tu pedido {reference}."),
    ORDER_PREPARING: (
        NotificationKind.WARNING,
        "Tu pedido {reference} está en preparación.",
    ),
    ORDER_READY: (
        NotificationKind.SUCCESS,
        "¡Tu pedido {reference} está listo para recoger!",
    ),
    ORDER_CANCELLED: (NotificationKind.WARNING, "El pedido {reference} fue cancelado."),
}

RECOGNIZED_EVENT_TYPES = frozenset(_TEMPLATES)


def build_notification(
    event_type: str, payload: Mapping[str, Any] | None
) -> Notification | None:
    """Return the notification for ``event_type`` or ``None`` when it is unknown.

    ``payload`` is the event ``data`` object. A missing ``orderNumber`` still
    yields a notification, with a placeholder in place of the reference.
    """

    template = _TEMPLATES.get(event_type)
    if template is None:
        return None

    kind, message_template = template
    reference = _order_reference(payload)
    return Notification(
        id=uuid.uuid4().hex,
        kind=kind,
        message=message_template.format(
            reference=reference or MISSING_REFERENCE_PLACEHOLDER
        ),
        order_reference=reference,
        created_at=now_in_app_timezone(),
    )


def _order_reference(payload: Mapping[str, Any] | None) -> str:
    if not isinstance(payload, Mapping):
        return ""
    value = payload.get("orderNumber")
    if value is None:
        return ""
    return str(value).strip()


__all__ = [
    "MISSING_REFERENCE_PLACEHOLDER",
    "RECOGNIZED_EVENT_TYPES",
    "build_notification",
]
