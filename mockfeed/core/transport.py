from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional


logger = logging.getLogger(__name__)


class OutboundQueue:
    """Non-blocking `send` for synchronous generator ticks.

    Payloads are queued in call order and written by `drain()`, which runs as
    one task per connection. A failed write is logged and dropped.
    """

    def __init__(self, *, connection_id: str = "") -> None:
        self.connection_id = connection_id
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue()
        self._closed = False
        self.sent = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def send(self, payload: str) -> None:
        if self._closed:
            return
        self._queue.put_nowait(payload)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Sentinel: lets drain() finish after the already-queued payloads.
        self._queue.put_nowait(None)

    async def drain(self, write: Callable[[str], Awaitable[None]]) -> None:
        while True:
            payload = await self._queue.get()
            if payload is None:
                return
            try:
                await write(payload)
                self.sent += 1
            except Exception as e:
                self.failed += 1
                logger.warning(
                    "send_failed",
                    extra={"connection_id": self.connection_id, "error": str(e), "bytes": len(payload)},
                )
