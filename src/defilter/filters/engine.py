"""Filter engine: emulated `eth_newFilter` / `eth_getFilterChanges` on top of
plain request/response block and log queries.

The engine is the only mutator of the registry and the expiry timers. All
mutations happen between suspension points on one event loop, so register,
remove, advance and arm are atomic with respect to one another. A per-filter
`asyncio.Lock` makes each change scan (read cursor -> fetch -> advance) a
critical section; scans on different filters run independently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from defilter.core.config import FilterEngineConfig
from defilter.core.errors import FilterNotFound, InvalidFilterParams
from defilter.core.interfaces import IBlockSource, ILogQuerySource
from defilter.core.models import BLOCK, LATEST, LOG, PENDING_TX, Block, Filter, FilterKind, LogCriteria
from defilter.filters.expiry import ExpiryScheduler, TimerFactory, loop_timer_factory
from defilter.filters.normalize import criteria_to_query, normalize_filter, resolve_tag
from defilter.filters.ranges import block_delta
from defilter.filters.registry import FilterRegistry

logger = logging.getLogger(__name__)


class FilterEngine:
    """Registry, cursors and expiry for client-side filters.

    Parameters
    ----------
    blocks : IBlockSource
        Chain head and block contents.
    logs : ILogQuerySource
        Log queries over inclusive ranges.
    config : FilterEngineConfig
        Idle timeout and block-fetch concurrency.
    timer_factory : TimerFactory
        Source of expiry timers (virtual clocks in tests).
    """

    def __init__(
        self,
        blocks: IBlockSource,
        logs: ILogQuerySource,
        *,
        config: FilterEngineConfig | None = None,
        timer_factory: TimerFactory = loop_timer_factory,
    ) -> None:
        self._blocks = blocks
        self._logs = logs
        self._config = config or FilterEngineConfig()
        self._registry = FilterRegistry()
        self._expiry = ExpiryScheduler(self._expire, timer_factory=timer_factory)
        self._locks: dict[int, asyncio.Lock] = {}
        self._fetch_sem = asyncio.Semaphore(self._config.fetch_concurrency)

    # ── introspection ──

    @property
    def filter_count(self) -> int:
        return len(self._registry)

    @property
    def timer_count(self) -> int:
        return len(self._expiry)

    def get_filter(self, filter_id: int) -> Filter | None:
        return self._registry.get(filter_id)

    # ── creation ──

    async def create_log_filter(self, raw_params: dict[str, Any] | None) -> int:
        """Install a log filter; raises InvalidFilterParams before any I/O."""
        criteria = normalize_filter(raw_params)
        return await self._install(LOG, criteria)

    async def create_block_filter(self) -> int:
        return await self._install(BLOCK, None)

    async def create_pending_tx_filter(self) -> int:
        return await self._install(PENDING_TX, None)

    async def _install(self, kind: FilterKind, criteria: LogCriteria | None) -> int:
        head = await self._blocks.current_height()
        filter_id = self._registry.register(kind, criteria, cursor=head)
        self._expiry.arm(filter_id, self._config.idle_timeout_s)
        logger.info("installed %s filter %s at head %s", kind, filter_id, head)
        return filter_id

    # ── removal ──

    def uninstall(self, filter_id: int) -> bool:
        """Remove a filter and its timer. Returns whether it existed."""
        existed = self._registry.remove(filter_id)
        self._expiry.cancel(filter_id)
        self._locks.pop(filter_id, None)
        if existed:
            logger.info("uninstalled filter %s", filter_id)
        return existed

    def _expire(self, filter_id: int) -> None:
        # Removing an already-absent entry is a no-op.
        if self._registry.remove(filter_id):
            logger.info("filter %s expired after %.0fs idle", filter_id, self._config.idle_timeout_s)
        self._locks.pop(filter_id, None)

    def refresh(self, filter_id: int) -> bool:
        """Restart the idle window of a live filter without polling it."""
        if filter_id not in self._registry:
            return False
        self._expiry.arm(filter_id, self._config.idle_timeout_s)
        return True

    def close(self) -> None:
        """Uninstall every filter along with its expiry timer."""
        for filter_id in self._registry.ids():
            self.uninstall(filter_id)
        self._expiry.cancel_all()

    # ── polling ──

    def _require(self, filter_id: int) -> Filter:
        f = self._registry.get(filter_id)
        if f is None:
            raise FilterNotFound(filter_id)
        return f

    async def get_changes(self, filter_id: int) -> list[Any]:
        """Return what arrived since the previous poll and advance the cursor.

        On any source failure the cursor is left where it was.
        """
        f = self._require(filter_id)
        lock = self._locks.setdefault(filter_id, asyncio.Lock())
        async with lock:
            # The filter may have been removed (and its id reused) while
            # waiting for the lock.
            if self._registry.get(filter_id) is not f:
                raise FilterNotFound(filter_id)
            if f.kind == LOG:
                result = await self._log_changes(f)
            elif f.kind == BLOCK:
                result = [b.hash for b in await self._block_changes(f)]
            elif f.kind == PENDING_TX:
                result = [list(b.transactions) for b in await self._block_changes(f)]
            else:
                raise InvalidFilterParams(f"unsupported filter kind: {f.kind}")
            if self._registry.get(filter_id) is f:
                self.refresh(filter_id)
        return result

    async def _log_changes(self, f: Filter) -> list[Any]:
        assert f.criteria is not None
        head = await self._blocks.current_height()
        criteria = f.criteria
        to_height = resolve_tag(criteria.to_block, head)
        # The cursor block was already delivered.
        from_height = f.cursor + 1
        # A concrete fromBlock ahead of the cursor still bounds the scan.
        if criteria.from_block != LATEST:
            from_height = max(from_height, criteria.from_block)
        if from_height > to_height:
            return []
        query = criteria_to_query(criteria, head, from_height=from_height)
        logs = await self._logs.query_logs(query)
        self._advance(f, to_height)
        return logs

    async def _block_changes(self, f: Filter) -> list[Block]:
        head = await self._blocks.current_height()
        heights = block_delta(f.cursor, head)
        if not heights:
            return []
        logger.debug("filter %s scanning blocks %s..%s", f.id, heights[0], heights[-1])
        blocks = await self._fetch_blocks(heights)
        self._advance(f, head)
        return blocks

    async def _fetch_blocks(self, heights: list[int]) -> list[Block]:
        """Fetch heights concurrently; results come back in input order."""

        async def fetch(height: int) -> Block:
            async with self._fetch_sem:
                return await self._blocks.block_at(height)

        return list(await asyncio.gather(*(fetch(h) for h in heights)))

    async def get_logs(self, filter_id: int) -> list[Any]:
        """Replay the full stored criteria, independent of the cursor."""
        f = self._require(filter_id)
        if f.kind != LOG or f.criteria is None:
            raise InvalidFilterParams(f"filter {filter_id} is not a log filter")
        criteria = f.criteria
        head = 0
        if LATEST in (criteria.from_block, criteria.to_block):
            head = await self._blocks.current_height()
        query = criteria_to_query(criteria, head)
        if query.from_height > query.to_height:
            return []
        return await self._logs.query_logs(query)

    def _advance(self, f: Filter, height: int) -> None:
        # An id retired mid-scan may already belong to a new filter.
        if self._registry.get(f.id) is f:
            self._registry.advance_cursor(f.id, height)
