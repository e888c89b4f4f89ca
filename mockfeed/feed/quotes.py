from __future__ import annotations

import math
from typing import Callable, List, Optional

from mockfeed.core.models import QuoteEntry, ServerMsg
from mockfeed.feed.draws import Draws
from mockfeed.feed.policy import DEFAULT_FEED_POLICY, FeedPolicy
from mockfeed.feed.registry import ContractRegistry


class QuoteStreamGenerator:
    """Emits price/volume ticks for live contracts.

    A pristine contract is picked rarely, but when picked it receives one large
    backlog burst and stops being pristine. Other contracts tick in small bursts.
    """

    def __init__(
        self,
        registry: ContractRegistry,
        *,
        draws: Draws,
        policy: FeedPolicy = DEFAULT_FEED_POLICY,
        emit: Optional[Callable[[ServerMsg], None]] = None,
    ):
        self.registry = registry
        self.draws = draws
        self.policy = policy
        self.emit = emit

    def backlog_size(self) -> int:
        return 1 + self.policy.backlog_base + self.draws.scaled(self.policy.backlog_span)

    def live_size(self) -> int:
        return 1 + self.policy.live_base + self.draws.scaled(self.policy.live_span)

    def quotes_for(self, contract_id: str, count: int) -> List[QuoteEntry]:
        """`count` wire-form quotes; rounding is half-up, as in `round_half_up`."""

        rnd = self.draws.rng.random
        floor = math.floor
        offset = self.policy.price_offset
        price_scale = self.policy.price_scale
        volume_scale = self.policy.volume_scale
        out: List[QuoteEntry] = []
        append = out.append
        for _ in range(count):
            price = floor((rnd() - offset) * price_scale + 0.5)
            volume = 1 + floor(rnd() * volume_scale + 0.5)
            append({"contractId": contract_id, "quote": {"price": price, "volume": volume}})
        return out

    def tick(self) -> Optional[ServerMsg]:
        msg = ServerMsg()
        p = self.policy
        if self.draws.chance(p.quote_tick_probability):
            rnd = self.draws.rng.random
            is_pristine = self.registry.is_pristine
            for contract_id in self.registry.ids():
                gate = p.pristine_quote_probability if is_pristine(contract_id) else p.live_quote_probability
                if rnd() >= gate:
                    continue
                if self.registry.consume_pristine(contract_id):
                    count = self.backlog_size()
                else:
                    count = self.live_size()
                msg.quotes.extend(self.quotes_for(contract_id, count))

        if not msg.quotes:
            return None
        if self.emit is not None:
            self.emit(msg)
        return msg
