"""Live notification stream endpoints (Server-Sent Events and websocket)."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncIterator

import anyio
from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import StreamingResponse

from order_notifier.bootstrap import NotificationServices
from order_notifier.infrastructure.notifications import (
    QueueSink,
    SubscriberHandle,
    SubscriberRegistry,
)
from order_notifier.interfaces.api.dependencies import (
    get_services,
    get_websocket_services,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

HEARTBEAT_SECONDS = 30.0


def _sse_message(data: str, event: str | None = None) -> str:
    lines = [f"event: {event}"] if event else []
    lines.extend(f"data: {line}" for line in data.splitlines() or [""])
    return "\n".join(lines) + "\n\n"


async def _stream_events(
    request: Request,
    registry: SubscriberRegistry,
    handle: SubscriberHandle,
    sink: QueueSink,
) -> AsyncIterator[str]:
    try:
        yield _sse_message(json.dumps({"subscriberId": handle.id}), event="connected")
        while True:
            try:
                payload = await asyncio.wait_for(sink.get(), timeout=HEARTBEAT_SECONDS)
            except asyncio.TimeoutError:
                if await request.is_disconnected():
                    break
                yield ": heartbeat\n\n"
                continue
            if payload is None:
                break
            yield _sse_message(payload)
    finally:
        registry.unregister(handle)


@router.get("/stream")
async def notifications_stream(
    request: Request,
    services: NotificationServices = Depends(get_services),
) -> StreamingResponse:
    """Server-Sent Events stream pushing every notification to this client."""

    registry = services.registry
    sink = QueueSink(maxsize=services.settings.subscriber_queue_size)
    handle = registry.register(sink)
    return StreamingResponse(
        _stream_events(request, registry, handle, sink),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


async def _forward(
    websocket: WebSocket, sink: QueueSink, cancel_scope: anyio.CancelScope
) -> None:
    try:
        while True:
            payload = await sink.get()
            if payload is None:
                # Pruned by the registry after a failed write.
                await websocket.close(code=1011)
                break
            await websocket.send_text(payload)
    except Exception as exc:
        logger.debug("Websocket forward loop stopped: %s", exc)
    cancel_scope.cancel()


async def _receive(websocket: WebSocket) -> None:
    while True:
        try:
            message = await websocket.receive_json()
        except (WebSocketDisconnect, RuntimeError):
            return
        except (ValueError, KeyError):
            continue

        if isinstance(message, dict) and message.get("type") == "ping":
            await websocket.send_json({"type": "pong"})


@router.websocket("/ws")
async def notifications_websocket(
    websocket: WebSocket,
    services: NotificationServices = Depends(get_websocket_services),
) -> None:
    """Websocket endpoint streaming notifications to the connected client."""

    await websocket.accept()
    registry = services.registry
    sink = QueueSink(maxsize=services.settings.subscriber_queue_size)
    handle = registry.register(sink)
    try:
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(_forward, websocket, sink, task_group.cancel_scope)
            await _receive(websocket)
            task_group.cancel_scope.cancel()
    finally:
        registry.unregister(handle)
        logger.debug("Websocket subscriber %s closed", handle.id)
