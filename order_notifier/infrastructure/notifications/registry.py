"""Registry of live subscribers connected to the notification stream."""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Protocol

from order_notifier.domain.entities import Notification

from .publisher import serialize_notification

logger = logging.getLogger(__name__)


class SubscriberClosedError(RuntimeError):
    """Raised when writing to a sink whose connection already went away."""


class SubscriberSink(Protocol):
    """Writable end of a subscriber connection."""

    def write(self, payload: str) -> None:
        """Hand ``payload`` to the connection or raise when it cannot accept it."""

    def close(self) -> None:
        """Signal the connection layer that no more payloads will arrive."""


class QueueSink:
    """Buffer payloads for a connection that drains them asynchronously.

    Writes never suspend: a full buffer means the subscriber is too slow and
    the write fails, which gets the subscriber pruned. The sink is bound to the
    event loop serving the connection; writes from any other thread are handed
    to that loop with ``call_soon_threadsafe``.
    """

    def __init__(
        self, maxsize: int = 100, *, loop: asyncio.AbstractEventLoop | None = None
    ) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._maxsize = maxsize
        self._loop = loop or _running_loop()
        self._lock = threading.Lock()
        self._buffered = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, payload: str) -> None:
        with self._lock:
            if self._closed:
                raise SubscriberClosedError("subscriber connection is closed")
            if self._buffered >= self._maxsize:
                raise asyncio.QueueFull("subscriber buffer is full")
            self._buffered += 1
        try:
            self._put(payload)
        except RuntimeError:
            with self._lock:
                self._buffered -= 1
            raise

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._put(None)
        except RuntimeError:
            # The serving loop is already gone; nobody is left to wake up.
            pass

    async def get(self) -> str | None:
        """Return the next payload, or ``None`` once the sink has been closed."""

        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        payload = await self._queue.get()
        if payload is not None:
            with self._lock:
                self._buffered -= 1
        return payload

    def _put(self, item: str | None) -> None:
        loop = self._loop
        if loop is None or _running_loop() is loop:
            self._queue.put_nowait(item)
        else:
            loop.call_soon_threadsafe(self._queue.put_nowait, item)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class CallbackSink:
    """Sink forwarding payloads to a plain callable."""

    def __init__(
        self,
        callback: Callable[[str], object],
        on_close: Callable[[], object] | None = None,
    ) -> None:
        self._callback = callback
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, payload: str) -> None:
        if self._closed:
            raise SubscriberClosedError("subscriber connection is closed")
        self._callback(payload)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()


@dataclass(eq=False)
class SubscriberHandle:
    """Registry-assigned identifier paired with a subscriber sink."""

    id: int
    sink: SubscriberSink

    def write(self, payload: str) -> None:
        self.sink.write(payload)


@dataclass(frozen=True)
class BroadcastReport:
    """Summary of a broadcast pass over the registered subscribers."""

    attempted: int
    delivered: int
    pruned: int


class SubscriberRegistry:
    """Track connected subscribers and fan notifications out to them."""

    def __init__(self, *, queue_size: int = 100) -> None:
        self._handles: dict[int, SubscriberHandle] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._queue_size = queue_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def __contains__(self, handle: object) -> bool:
        if not isinstance(handle, SubscriberHandle):
            return False
        with self._lock:
            return self._handles.get(handle.id) is handle

    def handles(self) -> list[SubscriberHandle]:
        """Return a snapshot of the registered handles."""

        with self._lock:
            return list(self._handles.values())

    def register(self, sink: SubscriberSink | None = None) -> SubscriberHandle:
        """Store a new handle for ``sink``; a :class:`QueueSink` is created when omitted."""

        if sink is None:
            sink = QueueSink(maxsize=self._queue_size)
        with self._lock:
            handle = SubscriberHandle(id=next(self._ids), sink=sink)
            self._handles[handle.id] = handle
        logger.debug("Subscriber %s connected", handle.id)
        return handle

    def unregister(self, handle: SubscriberHandle) -> bool:
        """Remove ``handle``; return ``False`` when it was already gone."""

        with self._lock:
            current = self._handles.get(handle.id)
            if current is not handle:
                return False
            del self._handles[handle.id]

        try:
            handle.sink.close()
        except Exception as exc:
            logger.debug("Error closing subscriber %s: %s", handle.id, exc)
        logger.debug("Subscriber %s disconnected", handle.id)
        return True

    def broadcast(self, notification: Notification) -> BroadcastReport:
        """Write ``notification`` to every subscriber, pruning the ones that fail."""

        payload = serialize_notification(notification)
        handles = self.handles()

        failed: list[SubscriberHandle] = []
        for handle in handles:
            try:
                handle.write(payload)
            except Exception as exc:
                logger.info(
                    "Dropping subscriber %s after failed write: %s", handle.id, exc
                )
                failed.append(handle)

        pruned = sum(1 for handle in failed if self.unregister(handle))
        return BroadcastReport(
            attempted=len(handles),
            delivered=len(handles) - len(failed),
            pruned=pruned,
        )


__all__ = [
    "BroadcastReport",
    "CallbackSink",
    "QueueSink",
    "SubscriberClosedError",
    "SubscriberHandle",
    "SubscriberRegistry",
    "SubscriberSink",
]
