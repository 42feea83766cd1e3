"""Idle-timeout expiry for installed filters.

One timer per filter id. Arming cancels the previous timer and starts a
new one; when a timer fires it calls the expiry callback once with the id.

Timers come from a `TimerFactory` so tests can drive a virtual clock. The
default factory schedules on the running asyncio loop with `call_later`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def loop_timer_factory(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Schedule `callback` on the running event loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass(slots=True)
class _Armed:
    generation: int
    handle: TimerHandle


class ExpiryScheduler:
    """Per-filter idle timers.

    Parameters
    ----------
    on_expire : Callable[[int], None]
        Called with the filter id when its timer fires.
    timer_factory : TimerFactory
        `(delay, callback) -> handle`; the handle must support `cancel()`.
    """

    def __init__(
        self,
        on_expire: Callable[[int], None],
        *,
        timer_factory: TimerFactory = loop_timer_factory,
    ) -> None:
        self._on_expire = on_expire
        self._timer_factory = timer_factory
        self._timers: dict[int, _Armed] = {}
        self._generation = 0

    def __len__(self) -> int:
        return len(self._timers)

    def __contains__(self, filter_id: object) -> bool:
        return filter_id in self._timers

    def arm(self, filter_id: int, duration: float) -> None:
        """(Re)start the idle timer for `filter_id`."""
        self.cancel(filter_id)
        self._generation += 1
        generation = self._generation
        handle = self._timer_factory(duration, lambda: self._fire(filter_id, generation))
        self._timers[filter_id] = _Armed(generation=generation, handle=handle)
        logger.debug("armed expiry for filter %s (%.1fs)", filter_id, duration)

    def cancel(self, filter_id: int) -> None:
        armed = self._timers.pop(filter_id, None)
        if armed is not None:
            armed.handle.cancel()

    def cancel_all(self) -> None:
        for filter_id in list(self._timers):
            self.cancel(filter_id)

    def _fire(self, filter_id: int, generation: int) -> None:
        armed = self._timers.get(filter_id)
        # A timer that lost the race against cancel/rearm is stale.
        if armed is None or armed.generation != generation:
            return
        del self._timers[filter_id]
        self._on_expire(filter_id)
