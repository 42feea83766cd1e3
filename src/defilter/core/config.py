from __future__ import annotations

from dataclasses import dataclass

DEFAULT_IDLE_TIMEOUT_S = 5 * 60


@dataclass(frozen=True)
class RPCConfig:
    """Configuration for the JSON-RPC transport."""

    url: str
    timeout_s: int = 20
    max_connections: int = 64
    http2: bool = True


@dataclass(frozen=True)
class FilterEngineConfig:
    """Configuration for the filter engine."""

    idle_timeout_s: float = DEFAULT_IDLE_TIMEOUT_S
    fetch_concurrency: int = 16  # parallel eth_getBlockByNumber calls per range scan
