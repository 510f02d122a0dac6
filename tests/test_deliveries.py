"""Tests for the retrying email delivery engine."""

from __future__ import annotations

import pytest

from order_notifier.application.use_cases.deliveries import (
    DeliveryAttemptEngine,
    is_valid_email,
)
from order_notifier.domain.entities import DeliveryRequest, DeliveryStatus, EmailBody


def _request(**overrides) -> DeliveryRequest:
    values = {
        "recipient_address": "ana@example.com",
        "subject": "Tu pedido está listo",
        "body": EmailBody(html="<p>Listo</p>", text="Listo"),
        "order_reference": "ORD-1",
        "customer_name": "Ana",
    }
    values.update(overrides)
    return DeliveryRequest(**values)


@pytest.mark.anyio
async def test_invalid_address_is_rejected_without_sending(transport_factory, recording_sleep):
    transport = transport_factory()
    engine = DeliveryAttemptEngine(transport, sleep=recording_sleep)

    outcome = await engine.attempt_delivery(_request(recipient_address="not-an-email"))

    assert outcome.status is DeliveryStatus.REJECTED
    assert outcome.attempts_used == 0
    assert not outcome.succeeded
    assert "recipient_address" in outcome.last_error
    assert transport.calls == []
    assert recording_sleep.delays == []


@pytest.mark.parametrize("field_name", ["recipient_address", "customer_name", "order_reference"])
@pytest.mark.anyio
async def test_missing_fields_are_rejected(field_name, transport_factory, recording_sleep):
    transport = transport_factory()
    engine = DeliveryAttemptEngine(transport, sleep=recording_sleep)

    outcome = await engine.attempt_delivery(_request(**{field_name: ""}))

    assert outcome.status is DeliveryStatus.REJECTED
    assert field_name in outcome.last_error
    assert transport.calls == []


@pytest.mark.anyio
async def test_unconfigured_transport_is_rejected(transport_factory, recording_sleep):
    transport = transport_factory(configured=False)
    engine = DeliveryAttemptEngine(transport, sleep=recording_sleep)

    outcome = await engine.attempt_delivery(_request())

    assert outcome.status is DeliveryStatus.REJECTED
    assert outcome.attempts_used == 0
    assert transport.calls == []
    assert not engine.is_configured()


@pytest.mark.anyio
async def test_always_failing_transport_exhausts_retries(
    transport_factory, recording_sleep, caplog
):
    transport = transport_factory(failures=10)
    engine = DeliveryAttemptEngine(transport, sleep=recording_sleep)

    with caplog.at_level("WARNING"):
        outcome = await engine.attempt_delivery(_request())

    assert outcome.status is DeliveryStatus.EXHAUSTED_RETRIES
    assert outcome.attempts_used == 3
    assert outcome.last_error == "send 3 refused"
    assert len(transport.calls) == 3
    assert len(recording_sleep.delays) == 2
    assert recording_sleep.delays[0] >= 2
    assert recording_sleep.delays[1] >= 4
    assert "attempt 1/3" in caplog.text
    assert "attempt 3/3" in caplog.text


@pytest.mark.anyio
async def test_transport_failing_once_then_succeeding(transport_factory, recording_sleep):
    transport = transport_factory(failures=1)
    engine = DeliveryAttemptEngine(transport, sleep=recording_sleep)

    outcome = await engine.attempt_delivery(_request())

    assert outcome.status is DeliveryStatus.DELIVERED
    assert outcome.succeeded
    assert outcome.attempts_used == 2
    assert len(transport.calls) == 2
    assert recording_sleep.delays == [2.0]


@pytest.mark.anyio
async def test_first_attempt_success_does_not_wait(transport_factory, recording_sleep):
    transport = transport_factory()
    engine = DeliveryAttemptEngine(transport, sleep=recording_sleep)

    outcome = await engine.attempt_delivery(_request())

    assert outcome.attempts_used == 1
    assert recording_sleep.delays == []


@pytest.mark.anyio
async def test_coroutine_transports_are_awaited(recording_sleep):
    calls = []

    class AsyncTransport:
        def is_configured(self):
            return True

        async def attempt_single_send(self, request):
            calls.append(request.recipient_address)
            if len(calls) < 3:
                raise TimeoutError()

    engine = DeliveryAttemptEngine(AsyncTransport(), sleep=recording_sleep)

    outcome = await engine.attempt_delivery(_request())

    assert outcome.status is DeliveryStatus.DELIVERED
    assert outcome.attempts_used == 3
    assert calls == ["ana@example.com"] * 3
    assert recording_sleep.delays == [2.0, 4.0]


def test_backoff_doubles_from_base_delay(transport_factory):
    engine = DeliveryAttemptEngine(transport_factory(), base_delay=2.0)

    assert [engine.backoff_delay(attempt) for attempt in (1, 2, 3)] == [2.0, 4.0, 8.0]


def test_engine_rejects_invalid_policy(transport_factory):
    with pytest.raises(ValueError):
        DeliveryAttemptEngine(transport_factory(), max_attempts=0)


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        ("ana@example.com", True),
        ("a.b+c@sub.example.co", True),
        ("not-an-email", False),
        ("ana@localhost", False),
        ("ana @example.com", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_email(address, expected):
    assert is_valid_email(address) is expected
