"""Integration tests for the HTTP and websocket surface."""

from __future__ import annotations

import time

import pytest

from fastapi.testclient import TestClient

from main import create_app
from order_notifier.config import Settings


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture()
def transport(transport_factory):
    return transport_factory()


@pytest.fixture()
def client(settings, transport):
    app = create_app(settings, transport=transport)
    with TestClient(app) as test_client:
        yield test_client


def test_health_reports_email_configuration(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "subscribers": 0,
        "email": {"configured": True},
    }


def test_health_with_unconfigured_transport(settings, transport_factory) -> None:
    app = create_app(settings, transport=transport_factory(configured=False))
    with TestClient(app) as test_client:
        assert test_client.get("/health").json()["email"] == {"configured": False}


def test_malformed_events_are_acknowledged(client: TestClient) -> None:
    response = client.post("/events", content=b"{broken")

    assert response.status_code == 202
    assert response.json() == {"notified": False, "notification_id": None}


def test_websocket_receives_broadcast_and_email_is_sent(
    client: TestClient, transport, ready_event
) -> None:
    with client.websocket_connect("/notifications/ws") as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}
        assert client.get("/health").json()["subscribers"] == 1

        response = client.post("/events", json=ready_event)
        assert response.status_code == 202
        body = response.json()
        assert body["notified"] is True

        message = websocket.receive_json()
        assert message["id"] == body["notification_id"]
        assert message["type"] == "success"
        assert message["orderId"] == "ORD-1"
        assert "ORD-1" in message["message"]

    assert _wait_for(lambda: len(transport.calls) == 1)
    assert transport.calls[0].recipient_address == "ana@example.com"
    assert _wait_for(lambda: client.get("/health").json()["subscribers"] == 0)
