"""Decoding of the order lifecycle messages delivered by the queue."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from order_notifier.domain.entities import OrderEvent, OrderItem

logger = logging.getLogger(__name__)


class EventDecodeError(ValueError):
    """Raised when a raw message cannot be turned into an :class:`OrderEvent`."""


class OrderItemMessage(BaseModel):
    """Line item as it travels in the event payload."""

    model_config = ConfigDict(extra="ignore")

    name: str
    quantity: int = Field(default=1, ge=0)
    price: float | None = None


class OrderEventData(BaseModel):
    """``data`` object of an order event."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    order_number: str = Field(default="", alias="orderNumber")
    customer_name: str = Field(default="", alias="customerName")
    customer_email: str = Field(default="", alias="customerEmail")
    items: list[OrderItemMessage] = Field(default_factory=list)

    @field_validator("order_number", "customer_name", "customer_email", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            raise ValueError("must be a string")
        return value.strip()

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_items(cls, value: Any) -> list[OrderItemMessage]:
        # Malformed items are skipped; the event itself stays valid.
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Ignoring order items that are not a list: %r", value)
            return []

        items: list[OrderItemMessage] = []
        for entry in value:
            try:
                items.append(OrderItemMessage.model_validate(entry))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed order item %r: %s", entry, exc.errors()[0]["msg"]
                )
        return items


class OrderEventMessage(BaseModel):
    """Envelope ``{type, data}`` published for every order transition."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1)
    data: OrderEventData = Field(default_factory=OrderEventData)

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_entity(self) -> OrderEvent:
        return OrderEvent(
            event_type=self.type.strip(),
            order_reference=self.data.order_number,
            customer_name=self.data.customer_name,
            customer_email=self.data.customer_email,
            items=tuple(
                OrderItem(name=item.name, quantity=item.quantity, price=item.price)
                for item in self.data.items
            ),
        )


def decode_order_event(raw: bytes | str | Mapping[str, Any]) -> tuple[OrderEvent, dict[str, Any]]:
    """Return the decoded event along with its raw ``data`` mapping.

    ``raw`` may be the message body (``bytes`` or ``str`` holding JSON) or an
    already parsed mapping. Raises :class:`EventDecodeError` for anything that
    does not describe an order event.
    """

    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EventDecodeError(f"message is not valid UTF-8: {exc}") from exc

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise EventDecodeError(f"message is not valid JSON: {exc}") from exc

    if not isinstance(raw, Mapping):
        raise EventDecodeError(f"message must be a JSON object, got {type(raw).__name__}")

    try:
        message = OrderEventMessage.model_validate(dict(raw))
    except ValidationError as exc:
        raise EventDecodeError(f"message does not describe an order event: {exc}") from exc

    data = raw.get("data")
    return message.to_entity(), dict(data) if isinstance(data, Mapping) else {}


__all__ = [
    "EventDecodeError",
    "OrderEventData",
    "OrderEventMessage",
    "OrderItemMessage",
    "decode_order_event",
]
