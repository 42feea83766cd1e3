import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from defilter.clients.rpc import RPC
from defilter.core.config import FilterEngineConfig, RPCConfig
from defilter.core.errors import FilterError
from defilter.filters.engine import FilterEngine
from defilter.logger import configure_logging

console = Console()

rpc_option = click.option("--rpc", required=True, envvar="DEFILTER_RPC_URL", help="RPC endpoint URL")
timeout_option = click.option("--timeout", "timeout_s", type=int, default=20, show_default=True, help="RPC timeout (s)")


@click.group()
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level")
def cli(log_level: str) -> None:
    """DeFilter: eth_newFilter polling over plain JSON-RPC."""
    configure_logging(log_level)


@asynccontextmanager
async def _engine(rpc_config: RPCConfig, engine_config: FilterEngineConfig) -> AsyncIterator[FilterEngine]:
    rpc = RPC.from_config(rpc_config)
    engine = FilterEngine(rpc, rpc, config=engine_config)
    try:
        yield engine
    finally:
        engine.close()
        await rpc.aclose()


def _filter_params(
    addresses: tuple[str, ...],
    topics: tuple[str, ...],
    from_block: str | None,
    to_block: str | None,
) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if from_block is not None:
        params["fromBlock"] = from_block
    if to_block is not None:
        params["toBlock"] = to_block
    if addresses:
        params["address"] = list(addresses)
    if topics:
        # Repeated --topic values are alternatives for topic0.
        params["topics"] = [list(topics)]
    return params


def _run(coro: Any) -> None:
    try:
        asyncio.run(coro)
    except FilterError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        console.print("[yellow]interrupted[/]")


async def _poll(engine: FilterEngine, filter_id: int, interval: float, count: int, render: Any) -> None:
    polls = 0
    try:
        while count <= 0 or polls < count:
            await asyncio.sleep(interval)
            changes = await engine.get_changes(filter_id)
            polls += 1
            render(changes)
    finally:
        engine.uninstall(filter_id)


@cli.command("watch-blocks")
@rpc_option
@timeout_option
@click.option("--interval", type=float, default=2.0, show_default=True, help="Seconds between polls")
@click.option("--count", type=int, default=0, show_default=True, help="Stop after N polls (0 = forever)")
@click.option("--pending/--no-pending", default=False, show_default=True, help="Watch block transactions instead of hashes")
@click.option("--concurrency", type=int, default=16, show_default=True, help="Max parallel block fetches")
def watch_blocks_cmd(rpc: str, timeout_s: int, interval: float, count: int, pending: bool, concurrency: int) -> None:
    """Poll a block (or pending-transaction) filter and print new arrivals."""

    async def run() -> None:
        async with _engine(RPCConfig(url=rpc, timeout_s=timeout_s), FilterEngineConfig(fetch_concurrency=concurrency)) as engine:
            if pending:
                filter_id = await engine.create_pending_tx_filter()
            else:
                filter_id = await engine.create_block_filter()
            f = engine.get_filter(filter_id)
            console.print(f"[bold]filter[/] {hex(filter_id)} from head {f.cursor if f else '?'}")

            def render(changes: list[Any]) -> None:
                for item in changes:
                    if pending:
                        console.print(f"[cyan]{len(item)}[/] txs: " + ", ".join(str(t) for t in item[:5]))
                    else:
                        console.print(f"[green]block[/] {item}")

            await _poll(engine, filter_id, interval, count, render)

    _run(run())


@cli.command("watch-logs")
@rpc_option
@timeout_option
@click.option("--address", "addresses", multiple=True, help="Emitter address; repeat to OR")
@click.option("--topic", "topics", multiple=True, help="topic0; repeat to OR")
@click.option("--from-block", type=str, default=None, help="Hex height or tag (latest/earliest/pending)")
@click.option("--to-block", type=str, default=None, help="Hex height or tag (latest/earliest/pending)")
@click.option("--interval", type=float, default=2.0, show_default=True, help="Seconds between polls")
@click.option("--count", type=int, default=0, show_default=True, help="Stop after N polls (0 = forever)")
def watch_logs_cmd(
    rpc: str,
    timeout_s: int,
    addresses: tuple[str, ...],
    topics: tuple[str, ...],
    from_block: str | None,
    to_block: str | None,
    interval: float,
    count: int,
) -> None:
    """Poll a log filter and print logs as they arrive."""

    async def run() -> None:
        async with _engine(RPCConfig(url=rpc, timeout_s=timeout_s), FilterEngineConfig()) as engine:
            filter_id = await engine.create_log_filter(_filter_params(addresses, topics, from_block, to_block))
            console.print(f"[bold]filter[/] {hex(filter_id)}")

            def render(changes: list[Any]) -> None:
                for log in changes:
                    console.print(
                        f"[green]{log.get('blockNumber')}[/] {log.get('address')} "
                        f"tx={log.get('transactionHash')} idx={log.get('logIndex')}"
                    )

            await _poll(engine, filter_id, interval, count, render)

    _run(run())


@cli.command("get-logs")
@rpc_option
@timeout_option
@click.option("--address", "addresses", multiple=True, help="Emitter address; repeat to OR")
@click.option("--topic", "topics", multiple=True, help="topic0; repeat to OR")
@click.option("--from-block", type=str, default="earliest", show_default=True)
@click.option("--to-block", type=str, default="latest", show_default=True)
@click.option("--parquet-out", type=str, default="", help="Optional path to write the logs as Parquet")
def get_logs_cmd(
    rpc: str,
    timeout_s: int,
    addresses: tuple[str, ...],
    topics: tuple[str, ...],
    from_block: str,
    to_block: str,
    parquet_out: str,
) -> None:
    """Install a log filter and replay everything it matches."""

    async def run() -> None:
        t0 = time.time()
        async with _engine(RPCConfig(url=rpc, timeout_s=timeout_s), FilterEngineConfig()) as engine:
            filter_id = await engine.create_log_filter(_filter_params(addresses, topics, from_block, to_block))
            try:
                logs = await engine.get_logs(filter_id)
            finally:
                engine.uninstall(filter_id)

        table = Table("block", "address", "tx", "idx")
        for log in logs[:20]:
            table.add_row(
                str(log.get("blockNumber")),
                str(log.get("address")),
                str(log.get("transactionHash")),
                str(log.get("logIndex")),
            )
        console.print(table)

        if parquet_out and logs:
            import pandas as pd

            df = pd.DataFrame(logs)
            if "topics" in df.columns:
                df["topics"] = df["topics"].map(lambda ts: ",".join(ts or []))
            df.to_parquet(parquet_out, engine="pyarrow", index=False)
            console.print(f"[bold]wrote[/] {parquet_out}")

        console.print(f"[bold]done[/]: {len(logs)} logs • {time.time() - t0:.2f}s")

    _run(run())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
