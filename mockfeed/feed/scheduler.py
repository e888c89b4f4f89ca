from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol


logger = logging.getLogger(__name__)


class Timer(Protocol):
    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[..., Timer]


class RepeatingTimer:
    """Fixed-rate repeating callback on an asyncio loop.

    Callbacks are plain functions and run to completion; a failing tick is
    logged and the next one is still scheduled.
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], object],
        *,
        name: str = "timer",
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.interval_seconds = float(interval_seconds)
        self.callback = callback
        self.name = name
        self.ticks = 0
        self.overruns = 0
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._next_at = 0.0
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._handle is not None and not self._cancelled

    def start(self) -> None:
        if self._cancelled or self._handle is not None:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._next_at = self._loop.time() + self.interval_seconds
        self._handle = self._loop.call_at(self._next_at, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        try:
            self.callback()
        except Exception:
            logger.exception("timer_tick_failed", extra={"timer": self.name})
        self.ticks += 1
        if self._cancelled:
            return

        now = self._loop.time()
        self._next_at += self.interval_seconds
        # Slow tick: skip missed slots instead of firing a catch-up burst.
        if self._next_at <= now:
            skipped = int((now - self._next_at) // self.interval_seconds) + 1
            self.overruns += 1
            logger.warning(
                "timer_tick_overrun",
                extra={"timer": self.name, "skipped_slots": skipped, "interval_seconds": self.interval_seconds},
            )
            self._next_at = now + self.interval_seconds
        self._handle = self._loop.call_at(self._next_at, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
