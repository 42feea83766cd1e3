from __future__ import annotations

import logging

from defilter.core.models import Filter, FilterKind, LogCriteria

logger = logging.getLogger(__name__)


class FilterRegistry:
    """In-memory set of installed filters.

    Ids are assigned as ``len(live) + 1``, skipping forward past any id that
    is still live. A retired id may be handed to a new filter; ids are only
    meaningful within one process.
    """

    def __init__(self) -> None:
        self._filters: dict[int, Filter] = {}

    def __len__(self) -> int:
        return len(self._filters)

    def __contains__(self, filter_id: object) -> bool:
        return filter_id in self._filters

    def ids(self) -> list[int]:
        return list(self._filters)

    def register(self, kind: FilterKind, criteria: LogCriteria | None, cursor: int) -> int:
        filter_id = len(self._filters) + 1
        while filter_id in self._filters:
            filter_id += 1
        self._filters[filter_id] = Filter(id=filter_id, kind=kind, cursor=cursor, criteria=criteria)
        return filter_id

    def get(self, filter_id: int) -> Filter | None:
        return self._filters.get(filter_id)

    def remove(self, filter_id: int) -> bool:
        return self._filters.pop(filter_id, None) is not None

    def advance_cursor(self, filter_id: int, height: int) -> None:
        """Move the cursor forward; unknown ids and backward moves are no-ops."""
        f = self._filters.get(filter_id)
        if f is None:
            logger.debug("cursor advance dropped for removed filter %s", filter_id)
            return
        if height > f.cursor:
            logger.debug("filter %s cursor %s -> %s", filter_id, f.cursor, height)
            f.cursor = height
