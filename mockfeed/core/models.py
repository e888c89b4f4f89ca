from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


@dataclass
class Contract:
    id: str
    name: Optional[str] = None
    removed: Optional[bool] = None

    def snapshot(self) -> "Contract":
        return replace(self)

    def to_wire_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id}
        if self.name is not None:
            d["name"] = self.name
        if self.removed:
            d["removed"] = True
        return d


# Wire-form quote entry: {"contractId": str, "quote": {"price": int, "volume": int}}.
# Quotes are built as plain dicts; there can be ~100k of them in one message.
QuoteEntry = Dict[str, Any]


@dataclass
class ServerMsg:
    """The single envelope pushed to clients (bootstrap snapshot and deltas)."""

    contracts: List[Contract] = field(default_factory=list)
    quotes: List[QuoteEntry] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.contracts and not self.quotes

    def to_wire_dict(self) -> Dict[str, Any]:
        return {
            "contracts": [c.to_wire_dict() for c in self.contracts],
            "quotes": self.quotes,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_wire_dict(), ensure_ascii=False, separators=(",", ":"))
