"""SendGrid transport used to email customers about their orders."""

from __future__ import annotations

import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from order_notifier.config import Settings
from order_notifier.domain.entities import DeliveryRequest

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """Raised when a single send through SendGrid does not succeed."""


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages = [
                str(item["message"])
                for item in errors
                if isinstance(item, dict) and item.get("message")
            ]
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_failure(source: Any, default: str) -> str:
    status_code = getattr(source, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(source, "body", None))
    if status_code and details:
        return f"SendGrid responded with status {status_code}: {details}"
    if status_code:
        return f"SendGrid responded with status {status_code}"
    if details:
        return f"SendGrid request failed: {details}"
    return default


class SendGridMailTransport:
    """Send capability backed by the SendGrid REST API.

    ``attempt_single_send`` performs exactly one API call and raises
    :class:`EmailDeliveryError` when it fails; retrying is left to the caller.
    """

    def __init__(
        self,
        api_key: str | None,
        default_sender: str,
        *,
        client_factory: Any = None,
    ) -> None:
        self._api_key = api_key
        self._default_sender = default_sender
        self._client_factory = client_factory or SendGridAPIClient

        if self.is_configured():
            logger.info("SendGrid transport configured; sender is %s", default_sender)
        else:
            logger.warning(
                "SendGrid credentials are not configured; order emails will not be sent. "
                "Set SENDGRID_API_KEY and EMAIL_FROM to enable them."
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SendGridMailTransport":
        return cls(settings.sendgrid_api_key, settings.email_from)

    @property
    def default_sender(self) -> str:
        return self._default_sender

    def is_configured(self) -> bool:
        return bool(self._api_key and self._default_sender)

    def attempt_single_send(self, request: DeliveryRequest) -> None:
        """Send ``request`` once."""

        if not self.is_configured():
            raise EmailDeliveryError("SendGrid transport is not configured")

        payload = request.as_message(self._default_sender)
        message = Mail(
            from_email=payload["from"],
            to_emails=payload["to"],
            subject=payload["subject"],
            html_content=payload["html"],
            plain_text_content=payload["text"],
        )

        try:
            client = self._client_factory(self._api_key)
            response = client.send(message)
        except Exception as exc:
            raise EmailDeliveryError(
                _describe_failure(exc, f"Error sending email via SendGrid: {exc}")
            ) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            raise EmailDeliveryError(
                _describe_failure(response, "SendGrid returned an unexpected response")
            )

        logger.info(
            "Email for order %s accepted by SendGrid for %s",
            request.order_reference,
            request.recipient_address,
        )


__all__ = ["EmailDeliveryError", "SendGridMailTransport"]
