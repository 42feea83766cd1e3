import json

import httpx
import pytest

from defilter.clients.rpc import RPC
from defilter.core.errors import BlockFetchError, LogQueryError, RPCError
from defilter.core.models import LogQuery


def make_rpc(handler) -> RPC:
    return RPC("http://node.test", http2=False, transport=httpx.MockTransport(handler))


def node(results: dict):
    """Answer each method with a canned result (or callable)."""
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        result = results[body["method"]]
        if callable(result):
            result = result(body)
        if isinstance(result, dict) and "error" in result:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **result})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return handler, seen


@pytest.mark.asyncio
async def test_current_height():
    handler, seen = node({"eth_blockNumber": "0x64"})
    rpc = make_rpc(handler)
    assert await rpc.current_height() == 100
    assert seen[0]["method"] == "eth_blockNumber"
    await rpc.aclose()


@pytest.mark.asyncio
async def test_block_at_encodes_height():
    handler, seen = node({"eth_getBlockByNumber": {"hash": "0xabc", "transactions": ["0x1", "0x2"]}})
    rpc = make_rpc(handler)
    block = await rpc.block_at(0)
    assert seen[0]["params"] == ["0x0", False]
    assert block.number == 0
    assert block.hash == "0xabc"
    assert block.transactions == ("0x1", "0x2")
    await rpc.aclose()


@pytest.mark.asyncio
async def test_missing_block_raises():
    handler, _ = node({"eth_getBlockByNumber": None})
    rpc = make_rpc(handler)
    with pytest.raises(BlockFetchError):
        await rpc.block_at(5)
    await rpc.aclose()


@pytest.mark.asyncio
async def test_query_logs_params():
    handler, seen = node({"eth_getLogs": [{"blockNumber": "0x1"}]})
    rpc = make_rpc(handler)
    logs = await rpc.query_logs(LogQuery(from_height=1, to_height=2, addresses=("0xabc",), topics=("0xt0", None)))
    assert logs == [{"blockNumber": "0x1"}]
    assert seen[0]["params"] == [
        {"fromBlock": "0x1", "toBlock": "0x2", "topics": ["0xt0", None], "address": ["0xabc"]}
    ]
    await rpc.aclose()


@pytest.mark.asyncio
async def test_node_error_maps_to_log_query_error():
    handler, _ = node({"eth_getLogs": {"error": {"code": -32005, "message": "query returned more than 10000 results"}}})
    rpc = make_rpc(handler)
    with pytest.raises(LogQueryError) as exc:
        await rpc.query_logs(LogQuery(from_height=0, to_height=10))
    assert exc.value.code == -32005
    await rpc.aclose()


@pytest.mark.asyncio
async def test_http_failure_maps_to_block_fetch_error():
    rpc = make_rpc(lambda request: httpx.Response(503))
    with pytest.raises(BlockFetchError):
        await rpc.current_height()
    await rpc.aclose()


@pytest.mark.asyncio
async def test_call_preserves_caller_id():
    handler, seen = node({"eth_chainId": "0x1"})
    rpc = make_rpc(handler)
    data = await rpc.call({"id": "abc", "method": "eth_chainId"})
    assert data["id"] == "abc"
    assert seen[0]["params"] == []

    await rpc.call({"method": "eth_chainId"})
    assert isinstance(seen[1]["id"], int)
    await rpc.aclose()


@pytest.mark.asyncio
async def test_call_raises_rpc_error():
    handler, _ = node({"eth_call": {"error": {"code": 3, "message": "execution reverted"}}})
    rpc = make_rpc(handler)
    with pytest.raises(RPCError) as exc:
        await rpc.call({"method": "eth_call", "params": [{}]})
    assert exc.value.message == "execution reverted"
    await rpc.aclose()
