"""Per-connection contract registry.

Owns the live contracts of one session and the subset that is still
"pristine" (created but never quoted). Nothing here is shared across
connections.

Returned contracts are copies: a delta placed into an outbound message is not
rewritten by later mutations of the stored contract.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from mockfeed.core.ids import new_contract_id
from mockfeed.core.models import Contract


def default_contract_name(contract_id: str) -> str:
    return f"Contract {contract_id}"


class ContractRegistry:
    def __init__(self) -> None:
        self._contracts_by_id: Dict[str, Contract] = {}
        self._pristine: Set[str] = set()

    def __len__(self) -> int:
        return len(self._contracts_by_id)

    def __contains__(self, contract_id: object) -> bool:
        return contract_id in self._contracts_by_id

    @property
    def pristine_count(self) -> int:
        return len(self._pristine)

    def get(self, contract_id: str) -> Optional[Contract]:
        c = self._contracts_by_id.get(contract_id)
        return c.snapshot() if c is not None else None

    def ids(self) -> List[str]:
        return list(self._contracts_by_id)

    def contracts(self) -> List[Contract]:
        return [c.snapshot() for c in self._contracts_by_id.values()]

    def is_pristine(self, contract_id: str) -> bool:
        return contract_id in self._pristine

    def create(self) -> Contract:
        contract_id = new_contract_id()
        contract = Contract(id=contract_id, name=default_contract_name(contract_id))
        self._contracts_by_id[contract_id] = contract
        self._pristine.add(contract_id)
        return contract.snapshot()

    def mark_updated(self, contract_id: str, new_name: str) -> Optional[Contract]:
        contract = self._contracts_by_id.get(contract_id)
        if contract is None:
            return None
        contract.name = new_name
        return contract.snapshot()

    def remove(self, contract_id: str) -> Optional[Contract]:
        contract = self._contracts_by_id.pop(contract_id, None)
        if contract is None:
            return None
        self._pristine.discard(contract_id)
        contract.removed = True
        contract.name = None
        return contract.snapshot()

    def consume_pristine(self, contract_id: str) -> bool:
        if contract_id in self._pristine:
            self._pristine.remove(contract_id)
            return True
        return False
