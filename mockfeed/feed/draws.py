from __future__ import annotations

import math
import random


def round_half_up(x: float) -> int:
    """Round to the nearest integer, ties toward +inf (-2.5 -> -2, 2.5 -> 3)."""

    return int(math.floor(x + 0.5))


class Draws:
    """Uniform draws used by the generators.

    Wraps a `random.Random` so tests can inject a seeded or scripted source.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def uniform(self) -> float:
        return self.rng.random()

    def chance(self, probability: float) -> bool:
        return self.rng.random() < probability

    def scaled(self, span: float) -> int:
        """round(u * span) for u in [0, 1)."""

        return round_half_up(self.rng.random() * span)
