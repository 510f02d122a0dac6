"""Shared fixtures and test doubles for the order notifier tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from order_notifier.config import Settings, reset_settings_cache
from order_notifier.infrastructure.email import EmailDeliveryError
from order_notifier.utils.datetime import get_app_timezone


class RecordingTransport:
    """Mail transport that fails the first ``failures`` sends."""

    def __init__(self, failures: int = 0, *, configured: bool = True) -> None:
        self.failures = failures
        self.configured = configured
        self.calls = []

    def is_configured(self) -> bool:
        return self.configured

    def attempt_single_send(self, request) -> None:
        self.calls.append(request)
        if len(self.calls) <= self.failures:
            raise EmailDeliveryError(f"send {len(self.calls)} refused")


class RecordingSleep:
    """Stand-in for ``anyio.sleep`` that records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep the process environment from leaking into the settings."""

    for name in ("SENDGRID_API_KEY", "EMAIL_FROM", "FRONTEND_URL", "APP_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    get_app_timezone.cache_clear()
    yield
    reset_settings_cache()
    get_app_timezone.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        sendgrid_api_key="SG.fake",
        email_from="kitchen@example.com",
        frontend_url="https://kitchen.example.com/",
        delivery_base_delay_seconds=0,
    )


@pytest.fixture
def transport_factory():
    return RecordingTransport


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def ready_event() -> dict:
    return {
        "type": "order.ready",
        "data": {
            "orderNumber": "ORD-1",
            "customerName": "Ana",
            "customerEmail": "ana@example.com",
            "items": [{"name": "Taco", "quantity": 2}],
        },
    }
