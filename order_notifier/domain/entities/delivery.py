"""Domain entities describing an email delivery attempt sequence."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class EmailBody:
    """Rendered email content in both HTML and plain text."""

    html: str
    text: str


@dataclass(frozen=True)
class DeliveryRequest:
    """Email that should reach a customer who may not be connected live."""

    recipient_address: str
    subject: str
    body: EmailBody
    order_reference: str
    customer_name: str
    sender: str | None = None

    def as_message(self, default_sender: str) -> dict[str, str]:
        """Return the ``{to, from, subject, html, text}`` payload for the transport."""

        return {
            "to": self.recipient_address,
            "from": self.sender or default_sender,
            "subject": self.subject,
            "html": self.body.html,
            "text": self.body.text,
        }


class DeliveryStatus(str, Enum):
    """Terminal states of a delivery attempt sequence."""

    DELIVERED = "delivered"
    EXHAUSTED_RETRIES = "exhausted_retries"
    REJECTED = "rejected"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of one delivery attempt sequence, used only for observation."""

    status: DeliveryStatus
    attempts_used: int
    last_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is DeliveryStatus.DELIVERED


__all__ = ["DeliveryOutcome", "DeliveryRequest", "DeliveryStatus", "EmailBody"]
