from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import os

from mockfeed.feed.policy import DEFAULT_FEED_POLICY, FeedPolicy


@dataclass(frozen=True)
class FeedSettings:
    env: str = "dev"
    host: str = "0.0.0.0"
    port: int = 8080
    ws_path: str = "/"
    initial_contracts: int = 8000
    max_contracts: int = 10000
    contract_update_interval_ms: int = 500
    quote_update_interval_ms: int = 150
    log_level: str = "INFO"
    policy: FeedPolicy = field(default=DEFAULT_FEED_POLICY)

    def __post_init__(self) -> None:
        if self.initial_contracts < 0 or self.max_contracts < 0:
            raise ValueError("initial_contracts and max_contracts must be >= 0")
        if self.initial_contracts > self.max_contracts:
            raise ValueError("initial_contracts must not exceed max_contracts")
        if self.contract_update_interval_ms <= 0 or self.quote_update_interval_ms <= 0:
            raise ValueError("update intervals must be > 0")
        if not self.ws_path.startswith("/"):
            raise ValueError("ws_path must start with '/'")


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    # `server:` with nothing under it loads as None.
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{key} must be a mapping")
    return section


def load_settings(path: str | Path = "config/settings.yaml") -> FeedSettings:
    p = Path(path)

    data: Dict[str, Any] = {}
    if p.exists():
        # Keep imports optional at module import time (tests/tools may not need YAML).
        try:
            import yaml  # type: ignore
        except ModuleNotFoundError as e:  # pragma: no cover
            raise ModuleNotFoundError(
                "PyYAML is required to load config/settings.yaml. Install with: pip install pyyaml"
            ) from e
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{p} must contain a mapping")
    server = _section(data, "server")
    feed = _section(data, "feed")
    defaults = FeedSettings()

    # Env overrides (used for container/port isolation).
    env_port = os.getenv("MOCKFEED_PORT")
    env_initial = os.getenv("MOCKFEED_INITIAL_CONTRACTS")
    env_max = os.getenv("MOCKFEED_MAX_CONTRACTS")

    return FeedSettings(
        env=data.get("env", defaults.env),
        host=os.getenv("MOCKFEED_HOST") or server.get("host", defaults.host),
        port=int(env_port or server.get("port", defaults.port)),
        ws_path=server.get("ws_path", defaults.ws_path),
        initial_contracts=int(env_initial or feed.get("initial_contracts", defaults.initial_contracts)),
        max_contracts=int(env_max or feed.get("max_contracts", defaults.max_contracts)),
        contract_update_interval_ms=int(
            feed.get("contract_update_interval_ms", defaults.contract_update_interval_ms)
        ),
        quote_update_interval_ms=int(feed.get("quote_update_interval_ms", defaults.quote_update_interval_ms)),
        log_level=(os.getenv("MOCKFEED_LOG_LEVEL") or _section(data, "logging").get("level", defaults.log_level)).upper(),
        policy=FeedPolicy.from_mapping(_section(data, "policy")),
    )
