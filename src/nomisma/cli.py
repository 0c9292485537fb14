"""
nomisma CLI

Command-line interface for building, signing and following transactions.

Commands:
  genesis   - Create a local signing key
  whoami    - Show the address of the local key
  seal      - Export the local key as an encrypted keystore file
  unseal    - Decrypt a keystore file
  send      - Sign and submit a transfer
  divine    - Show the stage a transaction has reached
"""

from __future__ import annotations

import logging
import sys

import click

from . import __version__
from .sigil import eth


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        N O M I S M A", fg="bright_white", bold=True)
        + click.style(f"          v{__version__}", dim=True)
    )
    click.secho("        ─── Transactions, signed and followed ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="nomisma")
@click.option("-v", "--verbose", is_flag=True, help="Log RPC traffic (DEBUG)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """nomisma - sign, submit and follow ledger transactions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    eth.load_env()
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.genesis import genesis
from .theurgy.keystore import seal, unseal
from .theurgy.send import send
from .theurgy.divine import divine

cli.add_command(genesis)
cli.add_command(seal)
cli.add_command(unseal)
cli.add_command(send)
cli.add_command(divine)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show current wallet identity."""
    try:
        pk = eth.load_private_key()
        address = eth.get_address(pk)
        click.echo(f"Address: {address}")
    except (ValueError, FileNotFoundError):
        click.echo("No wallet found.")
        click.echo("Run 'nomisma genesis' to create one.")
        sys.exit(1)


# ============ Entry Points ============


def main() -> None:
    """nomisma CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()
