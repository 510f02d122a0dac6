"""Detached background work that must never block the caller."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from contextlib import ExitStack
from typing import Any, Awaitable, Callable

from anyio.from_thread import BlockingPortal, start_blocking_portal

logger = logging.getLogger(__name__)

Observer = Callable[[str, Any], None]


def log_outcome(name: str, result: Any) -> None:
    """Default observer: record the result of a finished background task."""

    logger.info("Background task %s finished: %s", name, result)


class BackgroundTaskRunner:
    """Run coroutine functions without making the caller wait for them.

    Inside a running event loop the work becomes an ``asyncio`` task. Callers
    outside any loop (a queue consumer thread, for instance) get their work
    scheduled on a lazily started anyio blocking portal. Results are handed to
    ``observer``; exceptions are logged and never re-raised.
    """

    def __init__(self, observer: Observer | None = None) -> None:
        self._observer = observer or log_outcome
        self._tasks: set[asyncio.Task[Any]] = set()
        self._futures: set[concurrent.futures.Future[Any]] = set()
        self._lock = threading.Lock()
        self._exit_stack: ExitStack | None = None
        self._portal: BlockingPortal | None = None

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._tasks) + len(self._futures)

    def spawn(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        name: str | None = None,
    ) -> None:
        """Schedule ``func(*args)`` and return immediately."""

        name = name or getattr(func, "__qualname__", repr(func))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            future = self._get_portal().start_task_soon(self._run, func, args, name)
            with self._lock:
                self._futures.add(future)
            future.add_done_callback(self._forget_future)
        else:
            task = loop.create_task(self._run(func, args, name), name=name)
            with self._lock:
                self._tasks.add(task)
            task.add_done_callback(self._forget_task)

    async def drain(self) -> None:
        """Wait until every task spawned so far has finished."""

        while True:
            with self._lock:
                tasks = list(self._tasks)
                futures = list(self._futures)
            if not tasks and not futures:
                return
            waiting = [*tasks, *(asyncio.wrap_future(future) for future in futures)]
            await asyncio.gather(*waiting, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel unfinished work and wait for the cancellations to settle."""

        with self._lock:
            tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.close()

    def close(self) -> None:
        """Abandon work running on the portal and stop it."""

        with self._lock:
            futures = list(self._futures)
            tasks = list(self._tasks)
            exit_stack, self._exit_stack, self._portal = self._exit_stack, None, None
        if futures or tasks:
            logger.warning(
                "Abandoning %s in-flight background task(s)", len(futures) + len(tasks)
            )
        for task in tasks:
            task.cancel()
        for future in futures:
            future.cancel()
        if exit_stack is not None:
            exit_stack.close()

    async def _run(
        self, func: Callable[..., Awaitable[Any]], args: tuple[Any, ...], name: str
    ) -> Any:
        try:
            result = await func(*args)
        except Exception:
            logger.exception("Background task %s failed", name)
            return None

        try:
            self._observer(name, result)
        except Exception:
            logger.exception("Observer failed for background task %s", name)
        return result

    def _get_portal(self) -> BlockingPortal:
        with self._lock:
            if self._portal is None:
                exit_stack = ExitStack()
                self._portal = exit_stack.enter_context(start_blocking_portal())
                self._exit_stack = exit_stack
            return self._portal

    def _forget_task(self, task: asyncio.Task[Any]) -> None:
        with self._lock:
            self._tasks.discard(task)

    def _forget_future(self, future: concurrent.futures.Future[Any]) -> None:
        with self._lock:
            self._futures.discard(future)


__all__ = ["BackgroundTaskRunner", "Observer", "log_outcome"]
