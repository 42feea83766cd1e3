from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from defilter.core.errors import BlockFetchError
from defilter.core.models import Block, LogQuery
from defilter.filters.engine import FilterEngine


class FakeTimer:
    def __init__(self, clock: "FakeTimers", due: float, callback: Callable[[], None]) -> None:
        self.clock = clock
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """Virtual clock for the expiry scheduler."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self, self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for timer in sorted(self.timers, key=lambda t: t.due):
            if timer.due <= self.now and not timer.cancelled and timer in self.timers:
                self.timers.remove(timer)
                timer.callback()
        self.timers = [t for t in self.timers if not t.cancelled]


class FakeChain:
    """In-memory block and log source."""

    def __init__(self, head: int = 0) -> None:
        self.head = head
        self.logs: list[dict[str, Any]] = []
        self.block_calls: list[int] = []
        self.queries: list[LogQuery] = []
        self.fail_heights: set[int] = set()

    def block_hash(self, height: int) -> str:
        return "0x" + format(height, "064x")

    async def current_height(self) -> int:
        return self.head

    async def block_at(self, height: int) -> Block:
        self.block_calls.append(height)
        if height in self.fail_heights or height > self.head:
            raise BlockFetchError(f"block {height} not available")
        return Block(number=height, hash=self.block_hash(height), transactions=(f"0xtx{height}",))

    async def query_logs(self, query: LogQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        return [
            log
            for log in self.logs
            if query.from_height <= log["block"] <= query.to_height
        ]


@pytest.fixture
def mock_rpc():
    rpc = AsyncMock()
    rpc.current_height = AsyncMock(return_value=100)
    rpc.block_at = AsyncMock()
    rpc.query_logs = AsyncMock(return_value=[])
    rpc.aclose = AsyncMock()
    return rpc


@pytest.fixture
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain(head=100)


@pytest.fixture
def engine(chain: FakeChain, timers: FakeTimers) -> FilterEngine:
    return FilterEngine(chain, chain, timer_factory=timers)
