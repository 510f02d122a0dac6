"""Retrying email delivery for customers who are not connected live."""

from __future__ import annotations

import inspect
import logging
import re
from typing import Any, Awaitable, Callable, Final, Protocol

import anyio
import anyio.to_thread

from order_notifier.domain.entities import (
    DeliveryOutcome,
    DeliveryRequest,
    DeliveryStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS: Final[int] = 3
DEFAULT_BASE_DELAY_SECONDS: Final[float] = 2.0
EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class MailTransport(Protocol):
    """Capability able to attempt one email send."""

    def is_configured(self) -> bool:
        """Return whether the transport has what it needs to send."""

    def attempt_single_send(self, request: DeliveryRequest) -> Any:
        """Send ``request`` once, raising when the send fails."""


def is_valid_email(address: str | None) -> bool:
    """Return whether ``address`` has a ``local@domain.tld`` shape."""

    if not address or not isinstance(address, str):
        return False
    return EMAIL_PATTERN.match(address) is not None


def missing_delivery_fields(request: DeliveryRequest) -> list[str]:
    """Return the names of the required request fields that are empty."""

    required = {
        "recipient_address": request.recipient_address,
        "customer_name": request.customer_name,
        "order_reference": request.order_reference,
    }
    return [name for name, value in required.items() if not (value or "").strip()]


class DeliveryAttemptEngine:
    """Drive one delivery attempt sequence with exponential backoff.

    Attempt 1 fires immediately. After failed attempt ``n`` the engine waits
    ``base_delay * 2 ** (n - 1)`` seconds, so with the defaults the waits are
    2s and then 4s before the third and last attempt. Transport errors never
    leave :meth:`attempt_delivery`; they only shape the returned outcome.
    """

    def __init__(
        self,
        transport: MailTransport,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if base_delay < 0:
            raise ValueError("base_delay must not be negative")
        self._transport = transport
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep or anyio.sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def is_configured(self) -> bool:
        """Expose the transport configuration state for health checks."""

        try:
            return bool(self._transport.is_configured())
        except Exception:
            logger.exception("Could not determine the mail transport configuration")
            return False

    def backoff_delay(self, failed_attempt: int) -> float:
        """Return the wait before the attempt following ``failed_attempt``."""

        return self._base_delay * 2 ** (failed_attempt - 1)

    async def attempt_delivery(self, request: DeliveryRequest) -> DeliveryOutcome:
        """Deliver ``request`` and report how the attempt sequence ended."""

        rejection = self._rejection_reason(request)
        if rejection is not None:
            logger.warning(
                "Email for order %s rejected: %s", request.order_reference or "?", rejection
            )
            return DeliveryOutcome(
                status=DeliveryStatus.REJECTED, attempts_used=0, last_error=rejection
            )

        last_error: str | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                await self._send(request)
            except Exception as exc:
                last_error = str(exc) or exc.__class__.__name__
                logger.warning(
                    "Email attempt %s/%s for order %s failed: %s",
                    attempt,
                    self._max_attempts,
                    request.order_reference,
                    last_error,
                )
            else:
                logger.info(
                    "Email for order %s delivered to %s on attempt %s",
                    request.order_reference,
                    request.recipient_address,
                    attempt,
                )
                return DeliveryOutcome(
                    status=DeliveryStatus.DELIVERED, attempts_used=attempt
                )

            if attempt < self._max_attempts:
                await self._sleep(self.backoff_delay(attempt))

        logger.error(
            "Giving up on email for order %s after %s attempts: %s",
            request.order_reference,
            self._max_attempts,
            last_error,
        )
        return DeliveryOutcome(
            status=DeliveryStatus.EXHAUSTED_RETRIES,
            attempts_used=self._max_attempts,
            last_error=last_error,
        )

    def _rejection_reason(self, request: DeliveryRequest) -> str | None:
        missing = missing_delivery_fields(request)
        if missing:
            return f"missing required fields: {', '.join(missing)}"
        if not is_valid_email(request.recipient_address):
            return f"invalid recipient_address: {request.recipient_address!r}"
        if not self.is_configured():
            return "mail transport is not configured"
        return None

    async def _send(self, request: DeliveryRequest) -> None:
        send = self._transport.attempt_single_send
        if inspect.iscoroutinefunction(send):
            await send(request)
        else:
            await anyio.to_thread.run_sync(send, request)


__all__ = [
    "DEFAULT_BASE_DELAY_SECONDS",
    "DEFAULT_MAX_ATTEMPTS",
    "DeliveryAttemptEngine",
    "MailTransport",
    "is_valid_email",
    "missing_delivery_fields",
]
