"""
Divine - report how far a transaction has progressed.

Stages: unknown -> pending -> mined -> executed / failed -> confirmed
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any

import click

from ..errors import NomismaError
from ..pneuma.client import Client
from ..pneuma.pending import DEFAULT_THRESHOLD
from ..pneuma.rpc import DEFAULT_RPC_URL


async def _divine(rpc_url: str, tx_hash: str, threshold: float) -> dict[str, Any]:
    async with Client(rpc_url) as client:
        tx = await client.get_transaction_by_hash(tx_hash)
        if tx is None:
            return {"stage": "unknown"}
        if not tx.get("blockHash"):
            return {"stage": "pending", "transaction": tx}

        receipt = await client.get_transaction_receipt(tx_hash)
        if receipt is None:
            return {"stage": "mined", "transaction": tx}
        if receipt.get("outcomeStatus") != 0:
            return {"stage": "failed", "transaction": tx, "receipt": receipt}

        risk = await client.get_risk_coefficient(receipt["blockHash"])
        stage = "confirmed" if risk is not None and risk < threshold else "executed"
        return {"stage": stage, "transaction": tx, "receipt": receipt, "risk": risk}


_COLORS = {
    "unknown": "yellow",
    "pending": "yellow",
    "mined": "cyan",
    "executed": "cyan",
    "failed": "red",
    "confirmed": "green",
}


@click.command()
@click.argument("tx_hash")
@click.option("--threshold", default=DEFAULT_THRESHOLD, show_default=True, type=float, help="Risk bound for 'confirmed'")
@click.option("--rpc-url", envvar="NOMISMA_RPC_URL", default=DEFAULT_RPC_URL, show_default=True, help="Node RPC URL")
def divine(tx_hash: str, threshold: float, rpc_url: str) -> None:
    """Show the stage TX_HASH has reached."""
    try:
        status = asyncio.run(_divine(rpc_url, tx_hash, threshold))
    except NomismaError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    stage = status["stage"]
    click.echo(click.style("Stage:   ", dim=True) + click.style(stage, fg=_COLORS[stage], bold=True))

    tx = status.get("transaction")
    if tx:
        click.echo(click.style("From:    ", dim=True) + str(tx.get("from")))
        click.echo(click.style("To:      ", dim=True) + str(tx.get("to")))
        click.echo(click.style("Value:   ", dim=True) + f"{tx.get('value')} drip")
        if tx.get("blockHash"):
            click.echo(click.style("Block:   ", dim=True) + tx["blockHash"])

    receipt = status.get("receipt")
    if receipt:
        click.echo(click.style("Outcome: ", dim=True) + str(receipt.get("outcomeStatus")))
        if receipt.get("contractCreated"):
            click.echo(click.style("Created: ", dim=True) + receipt["contractCreated"])
    if status.get("risk") is not None:
        click.echo(click.style("Risk:    ", dim=True) + f"{status['risk']:.6g}")

    if stage == "failed":
        sys.exit(1)
