"""Core data models for client-side filter emulation.

This module defines:
- `FilterKind`: the three filter flavours of the JSON-RPC filter subprotocol.
- `LogCriteria`: normalized, immutable query parameters of a log filter.
- `Filter`: one registry entry with its mutable delivery cursor.
- `Block` / `LogQuery`: records exchanged with the block and log sources.

Design notes
------------
- Heights are plain ints; the only non-numeric height is the `LATEST` tag,
  which is re-resolved against the chain head every time a query is built.
- Height 0 is an ordinary height. Nothing here tests heights for truthiness.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

FilterKind = Literal["log", "block", "pending_tx"]

LOG: FilterKind = "log"
BLOCK: FilterKind = "block"
PENDING_TX: FilterKind = "pending_tx"

LATEST: Literal["latest"] = "latest"

BlockTag = Union[int, Literal["latest"]]

# A topic slot: exact value, list of alternatives, or None (wildcard).
TopicSlot = Union[str, list[str], None]


@dataclass(slots=True, frozen=True)
class LogCriteria:
    """Normalized log filter parameters."""

    from_block: BlockTag = LATEST
    to_block: BlockTag = LATEST
    addresses: tuple[str, ...] | None = None  # None matches any address
    topics: tuple[TopicSlot, ...] = ()


@dataclass(slots=True)
class Filter:
    """A single installed filter.

    `cursor` is the last block height already delivered to the caller.
    It starts at the chain head at creation time and only moves forward.
    """

    id: int
    kind: FilterKind
    cursor: int
    criteria: LogCriteria | None = None


@dataclass(slots=True, frozen=True)
class Block:
    """Subset of an `eth_getBlockByNumber` result used by block filters."""

    number: int
    hash: str
    transactions: tuple[Any, ...] = ()


@dataclass(slots=True, frozen=True)
class LogQuery:
    """Concrete log query over an inclusive height range."""

    from_height: int
    to_height: int
    addresses: tuple[str, ...] | None = None
    topics: tuple[TopicSlot, ...] = field(default_factory=tuple)

    def to_rpc_params(self) -> dict[str, Any]:
        """Render as an `eth_getLogs` filter object."""
        params: dict[str, Any] = {
            "fromBlock": hex(self.from_height),
            "toBlock": hex(self.to_height),
            "topics": list(self.topics),
        }
        if self.addresses is not None:
            params["address"] = list(self.addresses)
        return params
