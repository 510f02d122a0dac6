"""FastAPI dependencies exposing the process wide services."""

from __future__ import annotations

from fastapi import Request, WebSocket

from order_notifier.bootstrap import NotificationServices


def get_services(request: Request) -> NotificationServices:
    return request.app.state.services


def get_websocket_services(websocket: WebSocket) -> NotificationServices:
    return websocket.app.state.services
