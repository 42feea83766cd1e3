"""JSON-RPC request routing for a filter-emulating provider.

`FilterProvider.request` answers the six `eth_*` filter methods locally and
forwards every other method to the node. Responses always carry the
caller's original request id.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from defilter.clients.rpc import RPC
from defilter.core.errors import FilterError, FilterNotFound, InvalidFilterParams, RPCError
from defilter.rpc.methods import FilterMethods

logger = logging.getLogger(__name__)

INVALID_PARAMS = -32602
SERVER_ERROR = -32000
INTERNAL_ERROR = -32603

FILTER_METHODS = {
    "eth_newFilter": "newFilter",
    "eth_newBlockFilter": "newBlockFilter",
    "eth_newPendingTransactionFilter": "newPendingTransactionFilter",
    "eth_uninstallFilter": "uninstallFilter",
    "eth_getFilterChanges": "getFilterChanges",
    "eth_getFilterLogs": "getFilterLogs",
}


def error_envelope(request_id: Any, exc: Exception) -> dict[str, Any]:
    """Map an exception onto a JSON-RPC error response."""
    if isinstance(exc, InvalidFilterParams):
        code, message = INVALID_PARAMS, str(exc)
    elif isinstance(exc, FilterNotFound):
        code, message = SERVER_ERROR, "Filter not found"
    elif isinstance(exc, RPCError):
        code = exc.code if exc.code is not None else SERVER_ERROR
        message = exc.message
    else:
        code, message = INTERNAL_ERROR, str(exc)
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


class FilterProvider:
    """Route JSON-RPC payloads between local filter methods and the node."""

    def __init__(self, rpc: RPC, methods: FilterMethods) -> None:
        self.rpc = rpc
        self.methods = methods

    async def request(self, payload: dict[str, Any] | list[dict[str, Any]]) -> Any:
        """Answer one request, or a batch (list) of requests concurrently."""
        if isinstance(payload, list):
            return list(await asyncio.gather(*(self._request_one(p) for p in payload)))
        return await self._request_one(payload)

    async def _request_one(self, payload: dict[str, Any]) -> dict[str, Any]:
        request_id = payload.get("id")
        method = payload.get("method")
        params = list(payload.get("params") or [])
        try:
            handler_name = FILTER_METHODS.get(method)
            if handler_name is None:
                response = await self.rpc.call(dict(payload))
                return {"jsonrpc": "2.0", "id": request_id, "result": response.get("result")}
            result = await self._call_filter_method(handler_name, params)
        except (FilterError, httpx.HTTPError) as e:
            logger.debug("%s failed: %s", method, e)
            return error_envelope(request_id, e)
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    async def _call_filter_method(self, name: str, params: list[Any]) -> Any:
        handler = getattr(self.methods, name)
        if name in ("newBlockFilter", "newPendingTransactionFilter"):
            return await handler()
        if not params:
            if name in ("newFilter", "uninstallFilter"):
                return await handler(None)
            raise InvalidFilterParams(f"{name} requires a filter id")
        return await handler(params[0])
