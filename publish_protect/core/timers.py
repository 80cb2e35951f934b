"""
Timer primitives for the event-driven engine.

- Throttle: coalesces bursts of calls into one trailing-edge call.
- PeriodicTask: runs a coroutine on a fixed period until stopped.

Both run on the current asyncio event loop and must be created and
called from inside it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

AsyncCallback = Callable[[], Awaitable[None]]


class Throttle:
    """
    Trailing-edge throttle.

    The first call opens a window; every call inside the window only marks
    the pending slot. When the window expires the callback runs once.
    No leading-edge call is made.
    """

    def __init__(self, func: AsyncCallback, window_seconds: float) -> None:
        self._func = func
        self._window = window_seconds
        self._pending = False
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    def __call__(self) -> None:
        if self._closed:
            return
        self._pending = True
        if self._handle is None:
            loop = asyncio.get_running_loop()
            self._handle = loop.call_later(self._window, self._fire)

    @property
    def pending(self) -> bool:
        """True while a call is waiting for the window to expire."""
        return self._pending

    def _fire(self) -> None:
        self._handle = None
        if self._closed or not self._pending:
            return
        self._pending = False
        task = asyncio.ensure_future(self._func())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Throttled call failed", exc_info=exc)

    def cancel(self) -> None:
        """Drop the pending call and refuse further ones."""
        self._closed = True
        self._pending = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class PeriodicTask:
    """
    Background loop calling a coroutine every ``interval_seconds``.

    Errors raised by the callback are logged and the loop keeps running.
    """

    def __init__(
        self,
        func: AsyncCallback,
        interval_seconds: float,
        name: str = "periodic",
    ) -> None:
        self._func = func
        self._interval = interval_seconds
        self._name = name
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        """Start the loop. Calling start on a running task is a no-op."""
        if self._task is not None:
            return
        self._task = asyncio.ensure_future(self._loop())
        logger.info("%s started (interval: %.1fs)", self._name, self._interval)

    def stop(self) -> None:
        """Cancel the loop."""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info("%s stopped", self._name)

    @property
    def is_running(self) -> bool:
        return self._task is not None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._func()
            except Exception:
                logger.exception("Error in %s tick", self._name)
