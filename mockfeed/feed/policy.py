"""Feed policy: the probabilities and burst sizes driving both generators.

Defaults reproduce the reference feed: sparse, bursty contract churn and a
quote stream where never-quoted contracts receive a large backlog once.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping


_PROBABILITY_FIELDS = (
    "growth_probability",
    "sweep_probability",
    "rename_probability",
    "removal_probability",
    "quote_tick_probability",
    "pristine_quote_probability",
    "live_quote_probability",
)


@dataclass(frozen=True)
class FeedPolicy:
    # contract lifecycle
    growth_probability: float = 0.25
    growth_batch_divisor: float = 100.0
    sweep_probability: float = 0.25
    rename_probability: float = 0.10
    # drawn only when the rename draw misses
    removal_probability: float = 0.10

    # quote stream
    quote_tick_probability: float = 0.85
    pristine_quote_probability: float = 0.05
    live_quote_probability: float = 0.65
    backlog_base: int = 50
    backlog_span: int = 400
    live_base: int = 1
    live_span: int = 5

    # quote shape
    price_offset: float = 0.1
    price_scale: float = 1000.0
    volume_scale: float = 1000.0

    def __post_init__(self) -> None:
        for name in _PROBABILITY_FIELDS:
            p = getattr(self, name)
            if not (0.0 <= p <= 1.0):
                raise ValueError(f"{name} must be within [0, 1]")
        if self.growth_batch_divisor <= 0:
            raise ValueError("growth_batch_divisor must be > 0")
        for name in ("backlog_base", "backlog_span", "live_base", "live_span"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.price_scale <= 0 or self.volume_scale <= 0:
            raise ValueError("price_scale and volume_scale must be > 0")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "FeedPolicy":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        extra = set(data) - known
        if extra:
            raise ValueError(f"unknown policy keys: {sorted(extra)}")
        return cls(**data)


DEFAULT_FEED_POLICY = FeedPolicy()
