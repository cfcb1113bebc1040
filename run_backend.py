#!/usr/bin/env python3
"""
run_backend.py - CLI entrypoint for querying a Nimiq node through the adapter.

Usage:
    python run_backend.py info
    python run_backend.py --config config/nimiq_testnet.yaml block --height 1
    python run_backend.py tx <txid>
    python run_backend.py mempool
    python run_backend.py send <hex>
"""

import asyncio
import json
import sys
from dataclasses import asdict, is_dataclass
from typing import Any, Awaitable, Callable

import click

from chains.nimiq import NimiqRPC
from config import DEFAULT_COIN, load_coin_config
from core.constants import VERSION
from core.exceptions import NimbookError
from core.logging import get_logger, set_global_context, setup_logging

logger = get_logger("nimbook.cli")


def _echo_json(value: Any) -> None:
    if is_dataclass(value):
        value = asdict(value)
    click.echo(json.dumps(value, indent=2, default=str))


async def _with_backend(
    config_source: str,
    action: Callable[[NimiqRPC], Awaitable[Any]],
    initialize: bool = False,
) -> Any:
    backend = NimiqRPC.create(load_coin_config(config_source))
    async with backend:
        if initialize:
            await backend.initialize()
        return await action(backend)


def _run(ctx: click.Context, action: Callable[[NimiqRPC], Awaitable[Any]], initialize: bool = False) -> Any:
    config_source = ctx.obj["config"]
    try:
        return asyncio.run(_with_backend(config_source, action, initialize))
    except (NimbookError, FileNotFoundError) as e:
        logger.error(
            f"Backend error: {e}",
            extra={"context": {"config": config_source, "error": str(e)}},
        )
        sys.exit(1)


@click.group()
@click.option(
    "--config",
    "-c",
    default=DEFAULT_COIN,
    help="Coin config: bundled name (nimiq) or path to a .json/.yaml file",
)
@click.option(
    "--log-level",
    "-l",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format",
)
@click.pass_context
def cli(ctx: click.Context, config: str, log_level: str, json_logs: bool) -> None:
    """Nimiq backend adapter."""
    setup_logging(level=log_level, json_format=json_logs)
    set_global_context(service="nimbook", version=VERSION)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Classify the network and show the chain tip."""

    async def action(backend: NimiqRPC) -> dict:
        height = await backend.get_best_block_height()
        best_hash = await backend.get_best_block_hash()
        return {
            "coin": backend.get_coin_name(),
            "network": backend.network,
            "testnet": backend.testnet,
            "best_height": height,
            "best_hash": best_hash,
            "rpc": backend.rpc.get_stats_summary(),
        }

    _echo_json(_run(ctx, action, initialize=True))


@cli.command()
@click.option("--hash", "block_hash", default="", help="Block hash (takes precedence)")
@click.option("--height", default=0, type=int, help="Block height")
@click.option("--summary", is_flag=True, help="Header and txids only")
@click.pass_context
def block(ctx: click.Context, block_hash: str, height: int, summary: bool) -> None:
    """Show a block by hash or height."""
    if summary and not block_hash:
        raise click.UsageError("--summary requires --hash")

    async def action(backend: NimiqRPC) -> Any:
        if summary:
            return await backend.get_block_info(block_hash)
        return await backend.get_block(block_hash, height)

    _echo_json(_run(ctx, action))


@cli.command()
@click.argument("txid")
@click.pass_context
def tx(ctx: click.Context, txid: str) -> None:
    """Show a transaction."""
    _echo_json(_run(ctx, lambda backend: backend.get_transaction(txid)))


@cli.command()
@click.pass_context
def mempool(ctx: click.Context) -> None:
    """List pending transaction hashes."""
    _echo_json(_run(ctx, lambda backend: backend.get_mempool()))


@cli.command()
@click.argument("payload")
@click.pass_context
def send(ctx: click.Context, payload: str) -> None:
    """Submit a hex-encoded raw transaction."""
    tx_hash = _run(ctx, lambda backend: backend.send_raw_transaction(payload))
    logger.info("Transaction submitted", extra={"context": {"hash": tx_hash}})
    click.echo(tx_hash)


if __name__ == "__main__":
    cli()
