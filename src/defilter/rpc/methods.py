"""Wire boundary of the filter subprotocol.

Filter ids and block heights cross the wire as 0x-prefixed hex quantities
and are decoded to ints here, before reaching the engine.
"""

from __future__ import annotations

from typing import Any

from defilter.core.errors import FilterNotFound
from defilter.filters.engine import FilterEngine
from defilter.filters.ranges import hex_to_int, int_to_hex


def _decode_id(id_hex: Any) -> int:
    try:
        return hex_to_int(id_hex)
    except ValueError as e:
        raise FilterNotFound(id_hex) from e


class FilterMethods:
    """`eth_*` filter methods with JSON-RPC argument and result encoding."""

    def __init__(self, engine: FilterEngine) -> None:
        self.engine = engine

    async def newFilter(self, params: dict[str, Any] | None) -> str:
        return int_to_hex(await self.engine.create_log_filter(params))

    async def newBlockFilter(self) -> str:
        return int_to_hex(await self.engine.create_block_filter())

    async def newPendingTransactionFilter(self) -> str:
        return int_to_hex(await self.engine.create_pending_tx_filter())

    async def uninstallFilter(self, id_hex: str | None) -> bool:
        try:
            filter_id = hex_to_int(id_hex)
        except ValueError:
            return False
        return self.engine.uninstall(filter_id)

    async def getFilterChanges(self, id_hex: str) -> list[Any]:
        return await self.engine.get_changes(_decode_id(id_hex))

    async def getFilterLogs(self, id_hex: str) -> list[Any]:
        return await self.engine.get_logs(_decode_id(id_hex))
