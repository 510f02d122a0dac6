"""Tests for decoding queue messages and loading settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from order_notifier.config import DEFAULT_EMAIL_FROM, Settings, get_settings
from order_notifier.infrastructure.messaging import EventDecodeError, decode_order_event


def test_decode_normalizes_payload():
    event, data = decode_order_event(
        b'{"type": " order.ready ", "data": {"orderNumber": 1001, '
        b'"customerName": " Ana ", "customerEmail": null, '
        b'"items": [{"name": "Taco", "quantity": 2, "price": 3.5}], "extra": true}}'
    )

    assert event.event_type == "order.ready"
    assert event.order_reference == "1001"
    assert event.customer_name == "Ana"
    assert event.customer_email == ""
    assert event.items[0].name == "Taco"
    assert event.items[0].quantity == 2
    assert data["extra"] is True


def test_decode_accepts_missing_data():
    event, data = decode_order_event({"type": "order.created"})

    assert event.order_reference == ""
    assert event.items == ()
    assert data == {}


def test_decode_treats_null_data_as_empty():
    event, data = decode_order_event('{"type": "order.ready", "data": null}')

    assert event.event_type == "order.ready"
    assert event.order_reference == ""
    assert data == {}


@pytest.mark.parametrize("items", [3, "Taco", {"name": "Taco"}])
def test_decode_ignores_items_that_are_not_a_list(items, caplog):
    with caplog.at_level("WARNING"):
        event, _ = decode_order_event(
            {"type": "order.ready", "data": {"orderNumber": "ORD-1", "items": items}}
        )

    assert event.order_reference == "ORD-1"
    assert event.items == ()
    assert "not a list" in caplog.text


def test_decode_skips_malformed_items(caplog):
    with caplog.at_level("WARNING"):
        event, _ = decode_order_event(
            {
                "type": "order.ready",
                "data": {
                    "orderNumber": "ORD-1",
                    "items": [{"quantity": 2}, {"name": "Taco", "quantity": 2}, "x"],
                },
            }
        )

    assert [(item.name, item.quantity) for item in event.items] == [("Taco", 2)]
    assert caplog.text.count("Skipping malformed order item") == 2


@pytest.mark.parametrize("raw", ["", "null", '{"type": ""}', '{"type": "x", "data": [1]}'])
def test_decode_rejects_malformed_messages(raw):
    with pytest.raises(EventDecodeError):
        decode_order_event(raw)


def test_settings_defaults():
    settings = Settings(_env_file=None)

    assert settings.email_from == DEFAULT_EMAIL_FROM
    assert settings.email_configured is False
    assert settings.delivery_max_attempts == 3
    assert settings.delivery_base_delay_seconds == 2.0


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SENDGRID_API_KEY", "SG.fake")
    monkeypatch.setenv("FRONTEND_URL", "https://kitchen.example.com/")

    settings = get_settings()

    assert settings.email_configured is True
    assert settings.frontend_url == "https://kitchen.example.com"
    assert get_settings() is settings


def test_settings_reject_sender_without_address():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, email_from="Delicious Kitchen")
