from __future__ import annotations

import json
from typing import Any, Iterable


MESSAGE_REQUIRED_KEYS = {"contracts", "quotes"}
CONTRACT_REQUIRED_KEYS = {"id"}
CONTRACT_OPTIONAL_KEYS = {"name", "removed"}
CONTRACT_QUOTE_REQUIRED_KEYS = {"contractId", "quote"}
QUOTE_REQUIRED_KEYS = {"price", "volume"}


def _require_exact_keys(obj: dict[str, Any], *, required: set[str], optional: set[str] | None = None) -> None:
    optional = optional or set()
    keys = set(obj.keys())
    missing = required - keys
    extra = keys - required - optional
    if missing:
        raise ValueError(f"missing keys: {sorted(missing)}")
    if extra:
        raise ValueError(f"extra keys not allowed: {sorted(extra)}")


def _require_object(v: Any, what: str) -> dict[str, Any]:
    if not isinstance(v, dict):
        raise ValueError(f"{what} must be object")
    return v


def _require_list(d: dict[str, Any], k: str) -> list[Any]:
    v = d.get(k)
    if not isinstance(v, list):
        raise ValueError(f"{k} must be array")
    return v


def _require_str(d: dict[str, Any], k: str) -> str:
    v = d.get(k)
    if not isinstance(v, str) or not v.strip():
        raise ValueError(f"{k} must be non-empty string")
    return v


def _require_int(d: dict[str, Any], k: str) -> int:
    v = d.get(k)
    # bool is an int subclass; JSON true must not pass as a number.
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError(f"{k} must be int")
    return v


def validate_contract_dict(contract: dict[str, Any]) -> None:
    _require_object(contract, "contract")
    _require_exact_keys(contract, required=CONTRACT_REQUIRED_KEYS, optional=CONTRACT_OPTIONAL_KEYS)
    _require_str(contract, "id")
    if "removed" in contract:
        if contract["removed"] is not True:
            raise ValueError("removed must be true when present")
        if "name" in contract:
            raise ValueError("removed contract must not carry a name")
        return
    _require_str(contract, "name")


def validate_contract_quote_dict(entry: dict[str, Any]) -> None:
    _require_object(entry, "quote entry")
    _require_exact_keys(entry, required=CONTRACT_QUOTE_REQUIRED_KEYS)
    _require_str(entry, "contractId")
    quote = _require_object(entry.get("quote"), "quote")
    _require_exact_keys(quote, required=QUOTE_REQUIRED_KEYS)
    _require_int(quote, "price")
    if _require_int(quote, "volume") < 1:
        raise ValueError("volume must be >= 1")


def validate_server_msg_dict(msg: dict[str, Any]) -> None:
    """Strict validation of one feed message.

    - no extra fields at any level
    - live contracts carry a name, removal deltas carry `removed: true` and no name
    - quote price/volume are integers, volume >= 1
    """

    _require_object(msg, "message")
    _require_exact_keys(msg, required=MESSAGE_REQUIRED_KEYS)
    for c in _require_list(msg, "contracts"):
        validate_contract_dict(c)
    for q in _require_list(msg, "quotes"):
        validate_contract_quote_dict(q)


def parse_server_msg(text: str | bytes) -> dict[str, Any]:
    try:
        msg = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"message is not valid JSON: {e}") from e
    validate_server_msg_dict(msg)
    return msg


class FeedStateChecker:
    """Replays feed messages in order and enforces cross-message consistency.

    Violations raise ValueError:
    - quote, rename or removal for an id that is not live
    - any appearance of an id after its removal
    """

    def __init__(self) -> None:
        self.live_ids: set[str] = set()
        self.removed_ids: set[str] = set()
        self.messages = 0
        self.quote_count = 0

    def apply(self, msg: dict[str, Any]) -> None:
        validate_server_msg_dict(msg)
        for c in msg["contracts"]:
            self._apply_contract(c)
        for q in msg["quotes"]:
            cid = q["contractId"]
            if cid in self.removed_ids:
                raise ValueError(f"quote for removed contract: {cid}")
            if cid not in self.live_ids:
                raise ValueError(f"quote for unknown contract: {cid}")
            self.quote_count += 1
        self.messages += 1

    def apply_all(self, msgs: Iterable[dict[str, Any]]) -> None:
        for m in msgs:
            self.apply(m)

    def _apply_contract(self, c: dict[str, Any]) -> None:
        cid = c["id"]
        if cid in self.removed_ids:
            raise ValueError(f"contract id reused after removal: {cid}")
        if c.get("removed"):
            if cid not in self.live_ids:
                raise ValueError(f"removal of unknown contract: {cid}")
            self.live_ids.discard(cid)
            self.removed_ids.add(cid)
            return
        # First sighting is a creation; later sightings are renames.
        self.live_ids.add(cid)
