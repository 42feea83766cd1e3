"""Poll a block filter and a log filter through the JSON-RPC provider.

Filters are emulated client-side, so this works against endpoints that do
not keep filter state (load-balanced or stateless RPC gateways).
"""

import asyncio

from defilter import RPC, FilterEngine, FilterMethods, FilterProvider
from defilter.logger import configure_logging

RPC_URL = "https://mainnet.base.org"
WETH = "0x4200000000000000000000000000000000000006"


async def main():
    configure_logging("INFO")
    rpc = RPC(RPC_URL)
    engine = FilterEngine(rpc, rpc)
    provider = FilterProvider(rpc, FilterMethods(engine))

    blocks = await provider.request({"id": 1, "method": "eth_newBlockFilter", "params": []})
    logs = await provider.request({"id": 2, "method": "eth_newFilter", "params": [{"address": WETH}]})

    try:
        for _ in range(5):
            await asyncio.sleep(4)
            new_blocks = await provider.request({"id": 3, "method": "eth_getFilterChanges", "params": [blocks["result"]]})
            new_logs = await provider.request({"id": 4, "method": "eth_getFilterChanges", "params": [logs["result"]]})
            print(f"{len(new_blocks['result'])} new blocks, {len(new_logs['result'])} WETH logs")
    finally:
        engine.close()
        await rpc.aclose()


if __name__ == "__main__":
    asyncio.run(main())
