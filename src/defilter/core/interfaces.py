from __future__ import annotations

from typing import Any, List, Protocol, runtime_checkable

from defilter.core.models import Block, LogQuery


# ---------------------------------------------------------------------------
# IBlockSource
# ---------------------------------------------------------------------------

@runtime_checkable
class IBlockSource(Protocol):
    """
    Read-only access to chain heights and block contents.

    Domain expectations:
    - Pure queries, no side effects; safe to call concurrently.
    - Failures surface as BlockFetchError.
    """

    async def current_height(self) -> int:
        """Return the current chain head height."""
        ...

    async def block_at(self, height: int) -> Block:
        """
        Return the block at `height`.

        Raises BlockFetchError if the node cannot serve that height.
        """
        ...


# ---------------------------------------------------------------------------
# ILogQuerySource
# ---------------------------------------------------------------------------

@runtime_checkable
class ILogQuerySource(Protocol):
    """
    Structured log queries over an inclusive block range.

    Topic slot semantics (alternatives, wildcards) are implemented by the
    source, never by the filter engine.
    """

    async def query_logs(self, query: LogQuery) -> List[dict[str, Any]]:
        """
        Return all log records matching `query`.

        Raises LogQueryError on transport or node failure.
        """
        ...
