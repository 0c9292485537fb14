"""
Send - sign a transfer with the local key, submit it and optionally follow
it to a stage.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click

from ..canon.types import drip_from_cfx
from ..errors import NomismaError
from ..pneuma.client import Client
from ..pneuma.rpc import DEFAULT_RPC_URL
from ..sigil import eth
from ..wallet import Account

STAGES = ("none", "mined", "executed", "confirmed")


async def _send(
    rpc_url: str,
    account: Account,
    options: dict,
    wait: str,
    timeout_ms: int,
) -> tuple[str, Optional[dict]]:
    async with Client(rpc_url) as client:
        if options.get("gasPrice") is None:
            options["gasPrice"] = await client.gas_price()
        pending = client.send_transaction({"from": account, **options})
        tx_hash = await pending
        if wait == "none":
            return tx_hash, None
        result = await getattr(pending, wait)(timeout_ms=timeout_ms)
        return tx_hash, result


@click.command()
@click.option("--to", "to", required=True, help="Recipient address (0x...)")
@click.option("--value", default="0", show_default=True, help="Amount in CFX")
@click.option("--gas", default=21000, show_default=True, type=int, help="Gas limit")
@click.option("--gas-price", type=int, help="Gas price in drip (default: node oracle)")
@click.option("--data", default="0x", show_default=True, help="Call data (hex)")
@click.option(
    "--wait",
    type=click.Choice(STAGES),
    default="none",
    show_default=True,
    help="Stage to wait for before returning",
)
@click.option("--timeout", "timeout_ms", default=30_000, show_default=True, type=int, help="Wait timeout in ms")
@click.option("--rpc-url", envvar="NOMISMA_RPC_URL", default=DEFAULT_RPC_URL, show_default=True, help="Node RPC URL")
def send(
    to: str,
    value: str,
    gas: int,
    gas_price: Optional[int],
    data: str,
    wait: str,
    timeout_ms: int,
    rpc_url: str,
) -> None:
    """Sign and submit a transfer from the local key."""
    try:
        account = Account(eth.load_private_key())
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    try:
        options = {
            "to": to,
            "value": drip_from_cfx(value),
            "gas": gas,
            "gasPrice": gas_price,
            "data": data,
        }
        tx_hash, result = asyncio.run(_send(rpc_url, account, options, wait, timeout_ms))
    except NomismaError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    click.echo(f"From:    {account.address}")
    click.echo(f"Tx hash: {tx_hash}")
    if result is not None:
        click.secho(f"Status:  {wait}", fg="green")
        block_hash = result.get("blockHash")
        if block_hash:
            click.echo(f"Block:   {block_hash}")
