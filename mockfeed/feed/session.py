"""Per-connection session.

Composition root for one client connection: one registry, one contract
lifecycle generator and one quote stream generator, each generator on its own
repeating timer. `start()` sends the bootstrap snapshot before any timer is
armed; `close()` cancels both timers and silences the session.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from mockfeed.core.ids import new_session_id
from mockfeed.core.models import ServerMsg
from mockfeed.core.settings import FeedSettings
from mockfeed.feed.draws import Draws
from mockfeed.feed.lifecycle import ContractLifecycleGenerator
from mockfeed.feed.quotes import QuoteStreamGenerator
from mockfeed.feed.registry import ContractRegistry
from mockfeed.feed.scheduler import RepeatingTimer, Timer, TimerFactory


logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        *,
        send: Callable[[str], None],
        settings: FeedSettings | None = None,
        draws: Draws | None = None,
        timer_factory: TimerFactory = RepeatingTimer,
        session_id: str | None = None,
    ):
        self.settings = settings or FeedSettings()
        self.session_id = session_id or new_session_id()
        self._send = send
        self._timer_factory = timer_factory
        self._timers: List[Timer] = []
        self._started = False
        self._closed = False

        draws = draws or Draws()
        self.registry = ContractRegistry()
        self.lifecycle = ContractLifecycleGenerator(
            self.registry,
            max_contracts=self.settings.max_contracts,
            draws=draws,
            policy=self.settings.policy,
            emit=self._emit,
        )
        self.quotes = QuoteStreamGenerator(
            self.registry,
            draws=draws,
            policy=self.settings.policy,
            emit=self._emit,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def timers(self) -> List[Timer]:
        return list(self._timers)

    def _emit(self, msg: ServerMsg) -> None:
        if self._closed:
            return
        self._send(msg.to_json())

    def bootstrap(self) -> ServerMsg:
        msg = ServerMsg()
        msg.contracts.extend(self.lifecycle.grow(self.settings.initial_contracts))
        return msg

    def start(self) -> None:
        if self._started or self._closed:
            return
        self._started = True

        # Sent even when empty: the client needs a snapshot to start from.
        self._emit(self.bootstrap())
        logger.info(
            "session_started",
            extra={"session_id": self.session_id, "initial_contracts": len(self.registry)},
        )

        self._timers = [
            self._timer_factory(
                self.settings.contract_update_interval_ms / 1000.0,
                self.lifecycle.tick,
                name=f"contracts:{self.session_id}",
            ),
            self._timer_factory(
                self.settings.quote_update_interval_ms / 1000.0,
                self.quotes.tick,
                name=f"quotes:{self.session_id}",
            ),
        ]
        for t in self._timers:
            t.start()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for t in self._timers:
            t.cancel()
        logger.info("session_closed", extra={"session_id": self.session_id, "contracts": len(self.registry)})

