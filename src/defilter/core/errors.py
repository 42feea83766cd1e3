"""Error taxonomy for filter operations.

- `InvalidFilterParams`: malformed filter parameters; nothing is registered.
- `FilterNotFound`: unknown or expired filter id.
- `BlockFetchError` / `LogQueryError`: failures reported by the node or the
  transport. The filter cursor is left untouched so a retry re-scans the
  same range.
"""

from __future__ import annotations


class FilterError(Exception):
    """Base exception for defilter."""


class InvalidFilterParams(FilterError, ValueError):
    """Filter parameters could not be normalized."""


class FilterNotFound(FilterError):
    """No live filter with the given id."""

    def __init__(self, filter_id: int | str | None) -> None:
        self.filter_id = filter_id
        super().__init__(f"Filter not found: {filter_id}")


class RPCError(FilterError):
    """Error reported by the node or raised while talking to it."""

    def __init__(self, message: str, code: int | None = None) -> None:
        self.code = code
        self.message = message
        super().__init__(f"RPC error: {code} {message}" if code is not None else f"RPC error: {message}")


class BlockFetchError(RPCError):
    """The node could not serve a block height or the chain head."""


class LogQueryError(RPCError):
    """An `eth_getLogs` query failed."""
