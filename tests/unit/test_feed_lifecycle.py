from __future__ import annotations

import random

import pytest

from mockfeed.core.models import ServerMsg
from mockfeed.feed.draws import Draws
from mockfeed.feed.lifecycle import ContractLifecycleGenerator
from mockfeed.feed.policy import FeedPolicy
from mockfeed.feed.registry import ContractRegistry


class _ScriptedRandom(random.Random):
    """Returns queued values from random(), then a fixed fallback."""

    def __init__(self, values: list[float], fallback: float = 0.99) -> None:
        super().__init__(0)
        self._values = list(values)
        self._fallback = fallback

    def random(self) -> float:
        if self._values:
            return self._values.pop(0)
        return self._fallback


def _gen(registry: ContractRegistry, values: list[float], *, max_contracts: int, policy: FeedPolicy | None = None):
    emitted: list[ServerMsg] = []
    gen = ContractLifecycleGenerator(
        registry,
        max_contracts=max_contracts,
        draws=Draws(_ScriptedRandom(values)),
        policy=policy or FeedPolicy(),
        emit=emitted.append,
    )
    return gen, emitted


def test_growth_fills_to_cap_then_stops() -> None:
    reg = ContractRegistry()
    # divisor=1 lets a single batch reach the cap of 5: 1 + round(0.9 * 5) = 6 -> clamped to 5
    gen, emitted = _gen(reg, [0.0, 0.9, 0.99], max_contracts=5, policy=FeedPolicy(growth_batch_divisor=1))

    msg = gen.tick()
    assert msg is not None
    assert len(reg) == 5
    assert reg.pristine_count == 5
    assert len(emitted) == 1
    assert len(msg.contracts) == 5
    for c in msg.to_wire_dict()["contracts"]:
        assert set(c) == {"id", "name"}
    assert msg.quotes == []

    # At the cap: no growth draw is consumed, the sweep draw (0.99) misses.
    gen.draws = Draws(_ScriptedRandom([]))
    assert gen.tick() is None
    assert len(reg) == 5
    assert len(emitted) == 1


def test_grow_clamps_to_remaining_capacity() -> None:
    reg = ContractRegistry()
    gen, _ = _gen(reg, [], max_contracts=5)
    assert len(gen.grow(5)) == 5
    assert gen.grow(3) == []
    assert gen.remaining_capacity == 0


def test_batch_size_formula() -> None:
    reg = ContractRegistry()
    gen, _ = _gen(reg, [0.0, 0.99, 0.5], max_contracts=10000)
    assert gen.batch_size() == 1
    assert gen.batch_size() == 1 + 99
    assert gen.batch_size() == 1 + 50


def test_sweep_rename_short_circuits_removal() -> None:
    reg = ContractRegistry()
    a, b, c = reg.create(), reg.create(), reg.create()
    # at cap -> no growth draw; sweep hit; a: rename hit; b: rename miss, remove hit; c: both miss
    gen, emitted = _gen(reg, [0.0, 0.0, 0.5, 0.0, 0.5, 0.5], max_contracts=3)

    msg = gen.tick()
    assert msg is not None
    assert [d.id for d in msg.contracts] == [a.id, b.id]

    renamed, removed = msg.contracts
    assert renamed.name.startswith(f"Updated contract {a.id} - ")
    assert renamed.removed is None
    assert removed.to_wire_dict() == {"id": b.id, "removed": True}

    assert a.id in reg and reg.get(a.id).name == renamed.name
    assert b.id not in reg
    assert c.id in reg and reg.get(c.id).name == c.name
    assert len(emitted) == 1


def test_sweep_includes_contracts_grown_in_same_tick() -> None:
    reg = ContractRegistry()
    # growth hit, batch 1 (max 10 -> 1 + round(u * 0.1) = 1), sweep hit, new contract removed
    gen, _ = _gen(reg, [0.0, 0.0, 0.0, 0.5, 0.0], max_contracts=10)

    msg = gen.tick()
    assert msg is not None
    created, removed = msg.to_wire_dict()["contracts"]
    assert created["id"] == removed["id"]
    assert "name" in created
    assert removed == {"id": created["id"], "removed": True}
    assert len(reg) == 0


def test_tick_without_changes_emits_nothing() -> None:
    reg = ContractRegistry()
    reg.create()
    gen, emitted = _gen(reg, [0.9, 0.9], max_contracts=10)
    assert gen.tick() is None
    assert emitted == []


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_random_ticks_respect_cap_and_removal_finality(seed: int) -> None:
    reg = ContractRegistry()
    policy = FeedPolicy(growth_probability=0.6, sweep_probability=0.6, rename_probability=0.2, removal_probability=0.3)
    gen = ContractLifecycleGenerator(reg, max_contracts=60, draws=Draws(random.Random(seed)), policy=policy)
    gen.grow(20)

    removed: set[str] = set()
    for _ in range(300):
        msg = gen.tick()
        assert len(reg) <= 60
        if msg is None:
            continue
        renamed_now = {c.id for c in msg.contracts if c.name and c.name.startswith("Updated contract")}
        removed_now = {c.id for c in msg.contracts if c.removed}
        assert not (renamed_now & removed_now)
        for c in msg.contracts:
            assert c.id not in removed
        removed |= removed_now
        for cid in removed:
            assert cid not in reg
