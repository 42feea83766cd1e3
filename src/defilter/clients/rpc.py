"""Lightweight JSON-RPC client for Ethereum-compatible nodes.

This module provides:
- `RPC`: an async client with sane timeouts/connection limits that serves as
  both the block source and the log query source of the filter engine
- `call`: a raw pass-through for every other JSON-RPC method

Block failures raise `BlockFetchError`, log query failures `LogQueryError`.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

import httpx

from defilter.core.config import RPCConfig
from defilter.core.errors import BlockFetchError, LogQueryError, RPCError
from defilter.core.models import Block, LogQuery
from defilter.filters.ranges import hex_to_int, int_to_hex

logger = logging.getLogger(__name__)


class RPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    http2 : bool
        Negotiate HTTP/2 with the endpoint.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (e.g. `httpx.MockTransport`).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 64,
        http2: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._ids = itertools.count(1)
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=http2,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: RPCConfig, **kwargs: Any) -> RPC:
        return cls(
            config.url,
            timeout_s=config.timeout_s,
            max_connections=config.max_connections,
            http2=config.http2,
            **kwargs,
        )

    async def call(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one JSON-RPC request and return the raw response envelope.

        The caller's `id` is echoed back untouched; a fresh integer id is
        assigned when the payload has none.
        """
        body = {"jsonrpc": "2.0", **payload}
        if body.get("id") is None:
            body["id"] = next(self._ids)
        body.setdefault("params", [])
        r = await self.client.post(self.url, json=body)
        r.raise_for_status()
        data = r.json()
        if "error" in data and data.get("result") is None:
            e = data["error"]
            code = e.get("code") if isinstance(e, dict) else None
            msg = e.get("message") if isinstance(e, dict) else str(e)
            logger.warning("%s failed: %s %s", body.get("method"), code, msg)
            raise RPCError(msg or "rpc error", code=code)
        return data

    async def _result(self, method: str, params: list[Any], error_cls: type[RPCError]) -> Any:
        try:
            data = await self.call({"method": method, "params": params})
        except RPCError as e:
            raise error_cls(e.message, code=e.code) from e
        except (httpx.HTTPError, ValueError) as e:
            raise error_cls(f"{type(e).__name__}: {e}") from e
        return data.get("result")

    async def current_height(self) -> int:
        """Return the latest block number as an int."""
        result = await self._result("eth_blockNumber", [], BlockFetchError)
        try:
            return hex_to_int(result)
        except ValueError as e:
            raise BlockFetchError(f"malformed block number: {result!r}") from e

    async def block_at(self, height: int) -> Block:
        """Fetch the block at `height` (transaction hashes only)."""
        result = await self._result("eth_getBlockByNumber", [int_to_hex(height), False], BlockFetchError)
        if result is None:
            raise BlockFetchError(f"block {height} not available")
        return Block(
            number=height,
            hash=str(result.get("hash") or ""),
            transactions=tuple(result.get("transactions") or ()),
        )

    async def query_logs(self, query: LogQuery) -> list[dict[str, Any]]:
        """Run `eth_getLogs` over the query's inclusive range."""
        result = await self._result("eth_getLogs", [query.to_rpc_params()], LogQueryError)
        return list(result or [])

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
