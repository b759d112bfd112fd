"""Serialise browser events from concurrent callbacks into one stream.

Browser drivers often deliver events from their own reader threads or from
several overlapping callbacks.  ``ConsoleFilter`` is not safe against
concurrent mutation, so producers only enqueue; a single consumer task
hands events to the :class:`TestSession` one at a time, in queue order.
"""

from __future__ import annotations

import asyncio
import logging

from wasmbrowsertest.log_setup import TRACE
from wasmbrowsertest.session import BrowserEvent, TestSession

logger = logging.getLogger(__name__)

_STOP = object()


class EventPump:
    """Single-consumer queue in front of one :class:`TestSession`.

    Usage::

        pump = EventPump(session)
        pump.start()
        driver.on_event(pump.submit_threadsafe)
        ...
        await pump.close()   # drains, then flushes the session
    """

    def __init__(self, session: TestSession) -> None:
        self._session = session
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        """Number of events waiting for the consumer."""
        return self._queue.qsize()

    def submit(self, event: BrowserEvent) -> None:
        """Enqueue an event from code running on the pump's event loop."""
        self._queue.put_nowait(event)

    def submit_threadsafe(self, event: BrowserEvent) -> None:
        """Enqueue an event from a thread other than the event loop's.

        Raises:
            RuntimeError: If the pump has not been started yet.
        """
        if self._loop is None:
            raise RuntimeError("EventPump is not running")
        self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    def start(self) -> asyncio.Task:
        """Start the consumer as a background task on the running loop."""
        self._loop = asyncio.get_running_loop()
        self._task = asyncio.create_task(self.run())
        return self._task

    async def run(self) -> None:
        """Dispatch events until :meth:`close` is requested.

        The session is closed (final flush) however the loop ends,
        including cancellation; events still queued at that point are
        dispatched first so no test output is lost.
        """
        self._loop = asyncio.get_running_loop()
        try:
            while True:
                event = await self._queue.get()
                if event is _STOP:
                    break
                logger.log(TRACE, "Dispatching %s", type(event).__name__)
                self._session.handle_event(event)
        finally:
            self._drain()
            self._session.close()

    async def close(self) -> None:
        """Stop the consumer after all already-submitted events."""
        if self._task is not None and self._task.done():
            return
        self._queue.put_nowait(_STOP)
        if self._task is not None:
            await self._task
        else:
            await self.run()

    def _drain(self) -> None:
        while True:
            try:
                event = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            if event is not _STOP:
                self._session.handle_event(event)
