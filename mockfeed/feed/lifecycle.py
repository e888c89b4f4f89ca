from __future__ import annotations

from typing import Callable, List, Optional

from mockfeed.core.ids import new_contract_id
from mockfeed.core.models import Contract, ServerMsg
from mockfeed.feed.draws import Draws
from mockfeed.feed.policy import DEFAULT_FEED_POLICY, FeedPolicy
from mockfeed.feed.registry import ContractRegistry


def updated_contract_name(contract_id: str) -> str:
    return f"Updated contract {contract_id} - {new_contract_id()}"


class ContractLifecycleGenerator:
    """Grows, renames and removes contracts; emits the contract deltas.

    Two independent gates per tick (growth, then a rename/removal sweep) keep
    churn sparse. Only messages with at least one contract delta are emitted.
    """

    def __init__(
        self,
        registry: ContractRegistry,
        *,
        max_contracts: int,
        draws: Draws,
        policy: FeedPolicy = DEFAULT_FEED_POLICY,
        emit: Optional[Callable[[ServerMsg], None]] = None,
    ):
        self.registry = registry
        self.max_contracts = max_contracts
        self.draws = draws
        self.policy = policy
        self.emit = emit

    @property
    def remaining_capacity(self) -> int:
        return max(0, self.max_contracts - len(self.registry))

    def batch_size(self) -> int:
        return min(
            self.remaining_capacity,
            1 + self.draws.scaled(self.max_contracts / self.policy.growth_batch_divisor),
        )

    def grow(self, count: int) -> List[Contract]:
        count = min(count, self.remaining_capacity)
        return [self.registry.create() for _ in range(count)]

    def sweep(self) -> List[Contract]:
        deltas: List[Contract] = []
        # Snapshot: removals below must not disturb the walk.
        for contract_id in self.registry.ids():
            if self.draws.chance(self.policy.rename_probability):
                updated = self.registry.mark_updated(contract_id, updated_contract_name(contract_id))
                if updated is not None:
                    deltas.append(updated)
            elif self.draws.chance(self.policy.removal_probability):
                removed = self.registry.remove(contract_id)
                if removed is not None:
                    deltas.append(removed)
        return deltas

    def tick(self) -> Optional[ServerMsg]:
        msg = ServerMsg()
        if len(self.registry) < self.max_contracts and self.draws.chance(self.policy.growth_probability):
            msg.contracts.extend(self.grow(self.batch_size()))
        if self.draws.chance(self.policy.sweep_probability):
            msg.contracts.extend(self.sweep())

        if not msg.contracts:
            return None
        if self.emit is not None:
            self.emit(msg)
        return msg
