"""UI dispatcher — single-consumer queue of state writes.

Fetch completions may arrive on any thread. They never touch screen state
directly; they post a write here, and the UI loop drains the queue in FIFO
order. Draining always happens on one thread, so renders never observe a
half-applied write.
"""

from __future__ import annotations

import asyncio
import logging
import queue
from typing import Callable

logger = logging.getLogger(__name__)


class UIDispatcher:
    """Thread-safe post, single-consumer drain.

    Usage::

        dispatcher = UIDispatcher()
        runner = asyncio.create_task(dispatcher.run())
        dispatcher.post(lambda: state.apply("step_count", 4200.0))
        ...
        dispatcher.close()
        await runner
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Callable[[], None]] = queue.SimpleQueue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wakeup: asyncio.Event | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def post(self, message: Callable[[], None]) -> bool:
        """Queue ``message`` for the UI loop. Safe to call from any thread.

        Returns False if the dispatcher is closed and the message was dropped.
        """
        if self._closed:
            logger.debug("Dispatcher closed; dropping UI message")
            return False
        self._queue.put(message)
        self._notify()
        return True

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self) -> int:
        """Run every queued message on the calling thread; return how many ran."""
        ran = 0
        while True:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                return ran
            message()
            ran += 1

    async def run(self) -> None:
        """Drain continuously on the running loop until ``close()``."""
        self._loop = asyncio.get_running_loop()
        self._wakeup = asyncio.Event()
        try:
            while not self._closed:
                self.drain()
                await self._wakeup.wait()
                self._wakeup.clear()
            self.drain()
        finally:
            self._loop = None
            self._wakeup = None

    def close(self) -> None:
        """Stop accepting messages and let ``run()`` finish its last drain."""
        self._closed = True
        self._notify()

    def _notify(self) -> None:
        loop, wakeup = self._loop, self._wakeup
        if loop is None or wakeup is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(wakeup.set)
